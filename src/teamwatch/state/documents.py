"""JSON document reading and typed accessors.

Documents written by the coordination process are kept as plain dicts and
passed through untouched. Only the handful of fields teamwatch inspects get
accessors here.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from teamwatch.errors import DocumentParseError, DocumentReadError

Document = dict[str, Any]

# Keys added to inbox messages; everything else is the file's own content
FILE_ID_KEY = "_file_id"
SOURCE_FILE_KEY = "_source_file"
FILE_INDEX_KEY = "_file_index"

_SENDER_KEYS = ("from", "sender", "author")


def read_json(path: Path) -> Any:
    """Read and decode a JSON file.

    Raises:
        DocumentReadError: The file could not be read.
        DocumentParseError: The content is not valid JSON.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(path, str(e)) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise DocumentParseError(path, f"invalid JSON: {e}") from e


def read_json_document(path: Path) -> Document:
    """Read a JSON file whose top level must be an object."""
    data = read_json(path)
    if not isinstance(data, dict):
        raise DocumentParseError(path, f"expected a JSON object, got {type(data).__name__}")
    return data


def read_message_list(path: Path) -> list[Document]:
    """Read an inbox file holding one message object or a list of them."""
    data = read_json(path)
    messages = data if isinstance(data, list) else [data]
    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            raise DocumentParseError(
                path, f"message {index} is a {type(message).__name__}, not an object"
            )
    return messages


def parse_timestamp(value: Any) -> float:
    """Convert a timestamp field into epoch seconds.

    Accepts ISO-8601 strings (a trailing ``Z`` means UTC) and numbers, where
    numbers above 1e11 are taken as milliseconds. Anything else, including
    NaN, infinities and integers too large for a float, is 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            seconds = value / 1000.0 if abs(value) > 1e11 else float(value)
        except OverflowError:
            return 0.0
        return seconds if math.isfinite(seconds) else 0.0
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.timestamp()
        except (ValueError, OverflowError):
            return 0.0
    return 0.0


def message_timestamp(message: Document) -> float:
    return parse_timestamp(message.get("timestamp"))


def message_sender(message: Document) -> str | None:
    """Return the sender identifier, whichever key the writer used."""
    for key in _SENDER_KEYS:
        value = message.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def message_origin(message: Document) -> str | None:
    return message.get(SOURCE_FILE_KEY)


def tag_message(message: Document, path: Path, index: int) -> Document:
    """Copy a parsed message and attach its derived id and origin."""
    tagged = dict(message)
    tagged[FILE_ID_KEY] = f"{path.stem}_{index}"
    tagged[SOURCE_FILE_KEY] = str(path)
    tagged[FILE_INDEX_KEY] = index
    return tagged


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

"""Layering of raw config dictionaries.

A teamwatch config is assembled from the system file, the user file, an
explicit ``--config`` file and TEAMWATCH_* environment variables, each
layer overriding the one before it. A layer only needs to name the keys it
changes: sections merge key by key, and a key left empty (``None``) in
YAML keeps the value from below.
"""

from __future__ import annotations

from functools import reduce
from typing import Any

RawConfig = dict[str, Any]


def deep_merge(lower: RawConfig, upper: RawConfig) -> RawConfig:
    """Lay ``upper`` over ``lower`` without modifying either.

    Mappings present on both sides merge recursively. Anything else in
    ``upper`` (lists included) replaces the lower value outright, except
    ``None``, which is skipped.
    """
    merged = dict(lower)
    for key, value in upper.items():
        if value is None:
            continue
        below = merged.get(key)
        merged[key] = (
            deep_merge(below, value)
            if isinstance(below, dict) and isinstance(value, dict)
            else value
        )
    return merged


def merge_configs(*layers: RawConfig) -> RawConfig:
    """Merge layers lowest priority first; empty layers are ignored."""
    return reduce(deep_merge, (layer for layer in layers if layer), {})

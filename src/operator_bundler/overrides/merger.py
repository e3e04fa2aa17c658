"""Dot-notation override merging into nested value trees.

A value tree is the Helm-style structure of string-keyed dicts, lists,
and scalars loaded from a recipe.  Overrides arrive as a flat mapping of
``"a.b.c" -> "value"`` strings and are applied in place, one leaf at a
time.  Paths that are not addressed by an override are never touched.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from operator_bundler.errors import OverrideMergeError, OverridePathError

logger = logging.getLogger(__name__)

ValueTree = MutableMapping[str, Any]

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def split_path(path: str) -> list[str]:
    """Split a dot-notation path into segments.

    Raises
    ------
    ValueError
        If the path is empty or contains an empty segment.
    """
    segments = path.split(".")
    if not path or any(not s for s in segments):
        raise ValueError("path must be non-empty dot-separated segments")
    return segments


def coerce_value(raw: str, existing: Any) -> Any:
    """Convert *raw* to the type of *existing* where possible.

    Booleans, integers, and floats are converted; if conversion fails or
    there is no existing scalar, the raw string is returned unchanged.
    """
    # bool before int: bool is an int subclass.
    if isinstance(existing, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return raw
    if isinstance(existing, int):
        try:
            return int(raw.strip())
        except ValueError:
            return raw
    if isinstance(existing, float):
        try:
            return float(raw.strip())
        except ValueError:
            return raw
    return raw


def set_path(tree: ValueTree, path: str, value: Any) -> None:
    """Set *value* at *path*, creating intermediate dicts as needed.

    Raises
    ------
    ValueError
        If the path is malformed or an intermediate segment already holds
        a non-mapping value.
    """
    segments = split_path(path)
    node: MutableMapping[str, Any] = tree
    for depth, segment in enumerate(segments[:-1]):
        child = node.get(segment)
        if child is None:
            child = {}
            node[segment] = child
        elif not isinstance(child, MutableMapping):
            walked = ".".join(segments[: depth + 1])
            raise ValueError(
                f"cannot descend into {walked!r}: existing value is "
                f"{type(child).__name__}, not a mapping"
            )
        node = child
    leaf = segments[-1]
    node[leaf] = coerce_value(value, node.get(leaf)) if isinstance(value, str) else value


def get_path(tree: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Return the value at *path*, or *default* if any segment is missing."""
    node: Any = tree
    for segment in split_path(path):
        if not isinstance(node, Mapping) or segment not in node:
            return default
        node = node[segment]
    return node


def apply_map_overrides(tree: ValueTree, overrides: Mapping[str, str] | None) -> None:
    """Apply every override in *overrides* to *tree* in place.

    Overrides are applied in the mapping's iteration order; when two
    entries resolve to the same leaf the later one wins.  An override
    whose path is malformed or collides with a non-mapping intermediate
    value is skipped while the remaining overrides still apply.

    Parameters
    ----------
    tree:
        The value tree to mutate.
    overrides:
        Flat mapping of dot-notation path to string value.

    Raises
    ------
    OverrideMergeError
        After all valid overrides have been applied, if any were skipped.
    """
    if not overrides:
        return

    failures: list[OverridePathError] = []
    for path, value in overrides.items():
        try:
            set_path(tree, path, value)
        except ValueError as exc:
            failures.append(OverridePathError(path=path, reason=str(exc)))
            continue
        logger.debug("applied value override %s=%s", path, value)

    if failures:
        raise OverrideMergeError(failures)


__all__ = [
    "ValueTree",
    "apply_map_overrides",
    "coerce_value",
    "get_path",
    "set_path",
    "split_path",
]

"""Node-selector and toleration injection into value trees.

Placement policy is authoritative once supplied: the selector map or
toleration list is written as a complete object at each target path,
replacing whatever was there.  Nothing is merged key-by-key.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from operator_bundler.config.settings import Toleration
from operator_bundler.overrides.merger import ValueTree, split_path

logger = logging.getLogger(__name__)


def _replace_at(tree: ValueTree, path: str, value: Any) -> None:
    """Write *value* at *path*, overwriting incompatible intermediates."""
    segments = split_path(path)
    node: MutableMapping[str, Any] = tree
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, MutableMapping):
            if child is not None:
                logger.debug(
                    "replacing non-mapping value at %r while injecting %s", segment, path
                )
            child = {}
            node[segment] = child
        node = child
    node[segments[-1]] = value


def apply_node_selector_overrides(
    tree: ValueTree, node_selector: Mapping[str, str] | None, *paths: str
) -> None:
    """Write *node_selector* as a flat map at every path in *paths*.

    An empty selector is a no-op.
    """
    if not node_selector:
        return
    for path in paths:
        _replace_at(tree, path, dict(node_selector))
        logger.debug("applied node selector at %s", path)


def apply_tolerations_overrides(
    tree: ValueTree, tolerations: Iterable[Toleration] | None, *paths: str
) -> None:
    """Write *tolerations* as a list of pod-spec dicts at every path.

    An empty toleration list is a no-op.
    """
    specs = tolerations_to_pod_spec(tolerations)
    if not specs:
        return
    for path in paths:
        _replace_at(tree, path, [dict(s) for s in specs])
        logger.debug("applied %d toleration(s) at %s", len(specs), path)


def tolerations_to_pod_spec(tolerations: Iterable[Toleration] | None) -> list[dict[str, Any]]:
    """Convert tolerations to pod-spec dicts, omitting empty fields."""
    return [t.to_pod_spec() for t in tolerations or ()]


def node_selector_to_match_expressions(
    node_selector: Mapping[str, str] | None,
) -> list[dict[str, Any]] | None:
    """Render a selector as affinity-style match expressions.

    Each ``key: value`` becomes ``{"key": key, "operator": "In",
    "values": [value]}``, sorted by key.  Returns ``None`` for an empty
    selector.  The result is meant for template contexts only and is
    never written into a value tree.
    """
    if not node_selector:
        return None
    return [
        {"key": key, "operator": "In", "values": [node_selector[key]]}
        for key in sorted(node_selector)
    ]


__all__ = [
    "apply_node_selector_overrides",
    "apply_tolerations_overrides",
    "node_selector_to_match_expressions",
    "tolerations_to_pod_spec",
]

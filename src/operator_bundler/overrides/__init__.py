"""Value-tree override merging and placement-policy injection."""
from __future__ import annotations

from operator_bundler.overrides.merger import (
    apply_map_overrides,
    coerce_value,
    get_path,
    set_path,
)
from operator_bundler.overrides.placement import (
    apply_node_selector_overrides,
    apply_tolerations_overrides,
    node_selector_to_match_expressions,
    tolerations_to_pod_spec,
)

__all__ = [
    "apply_map_overrides",
    "apply_node_selector_overrides",
    "apply_tolerations_overrides",
    "coerce_value",
    "get_path",
    "node_selector_to_match_expressions",
    "set_path",
    "tolerations_to_pod_spec",
]

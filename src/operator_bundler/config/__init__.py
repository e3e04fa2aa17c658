"""Bundler configuration and flag parsing."""
from __future__ import annotations

from operator_bundler.config.settings import (
    DEFAULT_VERSION,
    BundlerConfig,
    Toleration,
    parse_node_selectors,
    parse_tolerations,
    parse_value_overrides,
)

__all__ = [
    "DEFAULT_VERSION",
    "BundlerConfig",
    "Toleration",
    "parse_node_selectors",
    "parse_tolerations",
    "parse_value_overrides",
]

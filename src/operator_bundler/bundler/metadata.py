"""Bundle metadata for template rendering.

The orchestrator first builds a flat *config map* of strings (namespace,
chart coordinates, versions, accelerator) and then turns it into a
metadata record.  By default that record is a :class:`BundleMetadata`;
a component may instead supply a metadata producer returning any
structure its templates expect.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from operator_bundler.config.settings import DEFAULT_VERSION

# Config-map keys shared by the orchestrator and component hooks.
KEY_NAMESPACE = "namespace"
KEY_HELM_REPOSITORY = "helm_repository"
KEY_HELM_CHART = "helm_chart"
KEY_HELM_CHART_VERSION = "helm_chart_version"
KEY_BUNDLER_VERSION = "bundler_version"
KEY_RECIPE_VERSION = "recipe_version"
KEY_ACCELERATOR = "accelerator"


def get_config_value(config: Mapping[str, str], key: str, default: str = "") -> str:
    """Return ``config[key]`` unless it is missing or empty."""
    value = config.get(key)
    return value if value else default


def get_bundler_version(config: Mapping[str, str]) -> str:
    return get_config_value(config, KEY_BUNDLER_VERSION, DEFAULT_VERSION)


def get_recipe_version(config: Mapping[str, str]) -> str:
    return get_config_value(config, KEY_RECIPE_VERSION, "")


@dataclass(frozen=True)
class BundleMetadata:
    """Default metadata record exposed to README templates.

    Attributes
    ----------
    namespace:
        Kubernetes namespace the component installs into.
    helm_repository:
        Chart repository URL.
    helm_chart:
        Chart reference (e.g. ``"jetstack/cert-manager"``).
    helm_chart_version:
        Chart version, possibly empty.
    version:
        Bundler version.
    recipe_version:
        Version of the recipe the bundle was built from.
    extensions:
        Component-specific extra fields.
    """

    namespace: str
    helm_repository: str
    helm_chart: str
    helm_chart_version: str
    version: str
    recipe_version: str
    extensions: dict[str, Any] = field(default_factory=dict)


def generate_default_bundle_metadata(
    config: Mapping[str, str],
    name: str,
    default_helm_repository: str,
    default_helm_chart: str,
    default_helm_chart_version: str = "",
    extensions: Mapping[str, Any] | None = None,
) -> BundleMetadata:
    """Build a :class:`BundleMetadata` from a flat config map.

    Each field falls back to the supplied default when the config map has
    no (or an empty) entry.  *extensions* are copied into the record's
    extension set.
    """
    return BundleMetadata(
        namespace=get_config_value(config, KEY_NAMESPACE, name),
        helm_repository=get_config_value(config, KEY_HELM_REPOSITORY, default_helm_repository),
        helm_chart=get_config_value(config, KEY_HELM_CHART, default_helm_chart),
        helm_chart_version=get_config_value(
            config, KEY_HELM_CHART_VERSION, default_helm_chart_version
        ),
        version=get_bundler_version(config),
        recipe_version=get_recipe_version(config),
        extensions=dict(extensions or {}),
    )


__all__ = [
    "KEY_ACCELERATOR",
    "KEY_BUNDLER_VERSION",
    "KEY_HELM_CHART",
    "KEY_HELM_CHART_VERSION",
    "KEY_HELM_REPOSITORY",
    "KEY_NAMESPACE",
    "KEY_RECIPE_VERSION",
    "BundleMetadata",
    "generate_default_bundle_metadata",
    "get_bundler_version",
    "get_config_value",
    "get_recipe_version",
]

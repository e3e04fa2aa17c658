"""NVSentinel component.

NVSentinel installs from an OCI chart registry and is addressed by a
release name, so it replaces the default metadata record with its own.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from operator_bundler.bundler.descriptor import ComponentDescriptor, MetadataProducer
from operator_bundler.bundler.metadata import (
    KEY_HELM_CHART_VERSION,
    KEY_HELM_REPOSITORY,
    KEY_NAMESPACE,
    get_bundler_version,
    get_config_value,
    get_recipe_version,
)
from operator_bundler.bundler.templates import standard_templates

NAME = "nvsentinel"

DEFAULT_CHART_REPO = "oci://ghcr.io/nvidia/nvsentinel"
DEFAULT_RELEASE_NAME = "nvsentinel"
DEFAULT_VERSION = "v0.6.0"

KEY_HELM_RELEASE_NAME = "helm_release_name"


@dataclass(frozen=True)
class NVSentinelMetadata:
    """Metadata record used by the NVSentinel README."""

    namespace: str
    helm_chart_repo: str
    helm_release_name: str
    nvsentinel_version: str
    version: str
    recipe_version: str


class NVSentinelMetadataProducer(MetadataProducer):
    def generate_metadata(self, config_map: Mapping[str, str]) -> NVSentinelMetadata:
        return NVSentinelMetadata(
            namespace=get_config_value(config_map, KEY_NAMESPACE, NAME),
            helm_chart_repo=get_config_value(config_map, KEY_HELM_REPOSITORY, DEFAULT_CHART_REPO),
            helm_release_name=get_config_value(
                config_map, KEY_HELM_RELEASE_NAME, DEFAULT_RELEASE_NAME
            ),
            nvsentinel_version=get_config_value(
                config_map, KEY_HELM_CHART_VERSION, DEFAULT_VERSION
            ),
            version=get_bundler_version(config_map),
            recipe_version=get_recipe_version(config_map),
        )


README_TEMPLATE = """\
# NVSentinel

GPU health monitoring bundle, generated by operator-bundler {{ metadata.version }}.
{% if metadata.recipe_version %}
Recipe version: {{ metadata.recipe_version }}
{% endif %}

## Install

```shell
helm upgrade --install {{ metadata.helm_release_name }} {{ metadata.helm_chart_repo }} \\
  --version {{ metadata.nvsentinel_version }} \\
  --namespace {{ metadata.namespace }} --create-namespace \\
  --values values.yaml
```

## Uninstall

```shell
helm uninstall {{ metadata.helm_release_name }} --namespace {{ metadata.namespace }}
```
"""

DESCRIPTOR = ComponentDescriptor(
    name=NAME,
    display_name="NVSentinel",
    value_override_keys=("nvsentinel",),
    default_helm_repository=DEFAULT_CHART_REPO,
    default_helm_chart=NAME,
    default_helm_chart_version=DEFAULT_VERSION,
    system_node_selector_paths=("global.systemNodeSelector",),
    system_toleration_paths=("global.systemNodeTolerations",),
    accelerated_node_selector_paths=("global.nodeSelector",),
    accelerated_toleration_paths=("global.tolerations",),
    template_getter=standard_templates(README_TEMPLATE),
    metadata_producer=NVSentinelMetadataProducer(),
)

__all__ = [
    "DESCRIPTOR",
    "NAME",
    "NVSentinelMetadata",
    "NVSentinelMetadataProducer",
]

"""Skyhook operator component.

Besides the chart values, a skyhook bundle can carry one customization
resource.  The customization is chosen by the ``customization`` key of
the component's values and rendered into ``manifests/<name>.yaml``.
Accelerator placement policy from the configuration is exposed to the
customization template as ``tolerations`` and, in affinity form, as
``node_selector_expressions``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from operator_bundler.bundler.base import MANIFESTS_DIR
from operator_bundler.bundler.descriptor import (
    ComponentDescriptor,
    ManifestProducer,
    MetadataProducer,
)
from operator_bundler.bundler.metadata import (
    KEY_ACCELERATOR,
    KEY_HELM_CHART,
    KEY_HELM_CHART_VERSION,
    KEY_HELM_REPOSITORY,
    KEY_NAMESPACE,
    get_bundler_version,
    get_config_value,
    get_recipe_version,
)
from operator_bundler.bundler.templates import build_context, new_template_getter
from operator_bundler.errors import InvalidRequestError
from operator_bundler.overrides.placement import (
    node_selector_to_match_expressions,
    tolerations_to_pod_spec,
)

if TYPE_CHECKING:
    from operator_bundler.bundler.base import BaseBundler
    from operator_bundler.cancellation import CancellationToken

logger = logging.getLogger(__name__)

NAME = "skyhook-operator"

DEFAULT_HELM_REPOSITORY = "https://helm.ngc.nvidia.com/nvidia"
DEFAULT_HELM_CHART = "nvidia/skyhook-operator"

CUSTOMIZATION_KEY = "customization"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_CUSTOMIZATION_HEADER = """\
apiVersion: skyhook.nvidia.com/v1alpha1
kind: Skyhook
metadata:
  name: {{ name }}
  namespace: {{ metadata.namespace }}
  labels:
    app.kubernetes.io/managed-by: operator-bundler
    app.kubernetes.io/version: "{{ metadata.version }}"
spec:
{% if node_selector_expressions is defined %}
  nodeSelectors:
    matchExpressions:
{{ node_selector_expressions | to_yaml | indent(6, first=True) }}
{% endif %}
{% if tolerations is defined %}
  additionalTolerations:
{{ tolerations | to_yaml | indent(4, first=True) }}
{% endif %}
"""

TUNING_TEMPLATE = _CUSTOMIZATION_HEADER + """\
  runtimeRequired: true
  interruptionBudget:
    count: 1
  packages:
    tuning:
      version: "{{ values.get("tuningVersion", "1.1.0") }}"
      image: nvcr.io/nvidia/skyhook-packages/tuning
      interrupt:
        type: reboot
"""

NVIDIA_TUNED_TEMPLATE = _CUSTOMIZATION_HEADER + """\
  runtimeRequired: true
  packages:
    nvidia-tuned:
      version: "{{ values.get("tunedVersion", "0.2.0") }}"
      image: nvcr.io/nvidia/skyhook-packages/nvidia-tuned
      configMap:
        intent: "{{ metadata.accelerator }}"
"""

CUSTOMIZATION_TEMPLATES: dict[str, str] = {
    "tuning": TUNING_TEMPLATE,
    "nvidia-tuned": NVIDIA_TUNED_TEMPLATE,
}

README_TEMPLATE = """\
# Skyhook Operator

Deployment bundle for the Skyhook operator, generated by operator-bundler {{ metadata.version }}.

- Repository: {{ metadata.helm_repository }}
- Chart: {{ metadata.helm_chart }}
- Version: {{ metadata.helm_chart_version or "latest" }}
- Namespace: {{ metadata.namespace }}
{% if values.customization is defined and values.customization %}
- Customization: {{ values.customization }} (see `manifests/{{ values.customization }}.yaml`)
{% endif %}

```shell
helm upgrade --install skyhook-operator {{ metadata.helm_chart }} \\
  --repo {{ metadata.helm_repository }} \\
  --namespace {{ metadata.namespace }} --create-namespace \\
  --values values.yaml
{% if values.customization is defined and values.customization %}
kubectl apply -f manifests/{{ values.customization }}.yaml
{% endif %}
```
"""

get_template = new_template_getter({"README.md": README_TEMPLATE})
get_customization_template = new_template_getter(CUSTOMIZATION_TEMPLATES)


def list_customizations() -> list[str]:
    return sorted(CUSTOMIZATION_TEMPLATES)


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SkyhookMetadata:
    namespace: str
    helm_repository: str
    helm_chart: str
    helm_chart_version: str
    accelerator: str
    version: str
    recipe_version: str


class SkyhookMetadataProducer(MetadataProducer):
    def generate_metadata(self, config_map: Mapping[str, str]) -> SkyhookMetadata:
        return SkyhookMetadata(
            namespace=get_config_value(config_map, KEY_NAMESPACE, NAME),
            helm_repository=get_config_value(
                config_map, KEY_HELM_REPOSITORY, DEFAULT_HELM_REPOSITORY
            ),
            helm_chart=get_config_value(config_map, KEY_HELM_CHART, DEFAULT_HELM_CHART),
            helm_chart_version=get_config_value(config_map, KEY_HELM_CHART_VERSION),
            accelerator=get_config_value(config_map, KEY_ACCELERATOR, "any"),
            version=get_bundler_version(config_map),
            recipe_version=get_recipe_version(config_map),
        )


class SkyhookCustomizationProducer(ManifestProducer):
    """Renders the customization named in the values into ``manifests/``."""

    def __init__(self, metadata_producer: MetadataProducer) -> None:
        self._metadata_producer = metadata_producer

    def generate_manifests(
        self,
        bundler: BaseBundler,
        values: dict[str, Any],
        config_map: Mapping[str, str],
        bundle_dir: Path,
        cancel: CancellationToken,
    ) -> list[Path]:
        customization = values.get(CUSTOMIZATION_KEY)
        if not isinstance(customization, str) or not customization:
            return []

        logger.debug("generating skyhook customization manifest %s", customization)
        if get_customization_template(customization) is None:
            available = ", ".join(list_customizations()) or "(none available)"
            raise InvalidRequestError(
                f"unknown Skyhook customization {customization!r}; "
                f"available customizations: {available}"
            )

        extra: dict[str, Any] = {"name": customization}
        tolerations = tolerations_to_pod_spec(bundler.config.accelerated_node_tolerations)
        if tolerations:
            extra["tolerations"] = tolerations
        expressions = node_selector_to_match_expressions(
            bundler.config.get_accelerated_node_selector()
        )
        if expressions:
            extra["node_selector_expressions"] = expressions

        context = build_context(
            values, self._metadata_producer.generate_metadata(config_map), **extra
        )
        path = Path(bundle_dir) / MANIFESTS_DIR / f"{customization}.yaml"
        bundler.generate_file_from_template(
            cancel, get_customization_template, customization, path, context
        )
        return [path]


_METADATA = SkyhookMetadataProducer()

DESCRIPTOR = ComponentDescriptor(
    name=NAME,
    display_name="skyhook",
    value_override_keys=("skyhook",),
    default_helm_repository=DEFAULT_HELM_REPOSITORY,
    default_helm_chart=DEFAULT_HELM_CHART,
    accelerated_node_selector_paths=("controllerManager.selectors",),
    accelerated_toleration_paths=("controllerManager.tolerations",),
    template_getter=get_template,
    manifest_producer=SkyhookCustomizationProducer(_METADATA),
    metadata_producer=_METADATA,
)

__all__ = [
    "CUSTOMIZATION_TEMPLATES",
    "DESCRIPTOR",
    "NAME",
    "SkyhookCustomizationProducer",
    "SkyhookMetadata",
    "SkyhookMetadataProducer",
    "list_customizations",
]

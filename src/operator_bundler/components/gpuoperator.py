"""NVIDIA GPU Operator component.

The operator and its node-feature-discovery master run on system nodes;
the per-node daemonsets and the NFD worker run on accelerator nodes.
"""
from __future__ import annotations

from operator_bundler.bundler.descriptor import ComponentDescriptor
from operator_bundler.bundler.templates import standard_templates

NAME = "gpu-operator"

README_TEMPLATE = """\
# GPU Operator

Deployment bundle for the NVIDIA GPU Operator, generated by operator-bundler {{ metadata.version }}.
{% if metadata.recipe_version %}
Recipe version: {{ metadata.recipe_version }}
{% endif %}

## Chart

- Repository: {{ metadata.helm_repository }}
- Chart: {{ metadata.helm_chart }}
- Version: {{ metadata.helm_chart_version or "latest" }}
- Namespace: {{ metadata.namespace }}

{% if values.driver is defined and values.driver.version is defined %}
Driver version: {{ values.driver.version }}

{% endif %}
## Install

```shell
helm upgrade --install gpu-operator {{ metadata.helm_chart }} \\
  --repo {{ metadata.helm_repository }} \\
{% if metadata.helm_chart_version %}
  --version {{ metadata.helm_chart_version }} \\
{% endif %}
  --namespace {{ metadata.namespace }} --create-namespace \\
  --values values.yaml
```

## Verify

```shell
sha256sum -c checksums.txt
kubectl -n {{ metadata.namespace }} get clusterpolicy
```
"""

DESCRIPTOR = ComponentDescriptor(
    name=NAME,
    display_name="GPU Operator",
    value_override_keys=("gpuoperator",),
    default_helm_repository="https://helm.ngc.nvidia.com/nvidia",
    default_helm_chart="nvidia/gpu-operator",
    system_node_selector_paths=(
        "operator.nodeSelector",
        "node-feature-discovery.master.nodeSelector",
        "node-feature-discovery.gc.nodeSelector",
    ),
    system_toleration_paths=(
        "operator.tolerations",
        "node-feature-discovery.master.tolerations",
        "node-feature-discovery.gc.tolerations",
    ),
    accelerated_node_selector_paths=(
        "daemonsets.nodeSelector",
        "node-feature-discovery.worker.nodeSelector",
    ),
    accelerated_toleration_paths=(
        "daemonsets.tolerations",
        "node-feature-discovery.worker.tolerations",
    ),
    template_getter=standard_templates(README_TEMPLATE),
)

__all__ = ["DESCRIPTOR", "NAME", "README_TEMPLATE"]

"""NVIDIA Network Operator component."""
from __future__ import annotations

from operator_bundler.bundler.descriptor import ComponentDescriptor
from operator_bundler.bundler.templates import standard_templates

NAME = "network-operator"

README_TEMPLATE = """\
# Network Operator

Deployment bundle for the NVIDIA Network Operator, generated by operator-bundler {{ metadata.version }}.

- Repository: {{ metadata.helm_repository }}
- Chart: {{ metadata.helm_chart }}
- Version: {{ metadata.helm_chart_version or "latest" }}
- Namespace: {{ metadata.namespace }}

```shell
helm upgrade --install network-operator {{ metadata.helm_chart }} \\
  --repo {{ metadata.helm_repository }} \\
{% if metadata.helm_chart_version %}
  --version {{ metadata.helm_chart_version }} \\
{% endif %}
  --namespace {{ metadata.namespace }} --create-namespace \\
  --values values.yaml
```
"""

DESCRIPTOR = ComponentDescriptor(
    name=NAME,
    display_name="Network Operator",
    value_override_keys=("networkoperator",),
    default_helm_repository="https://helm.ngc.nvidia.com/nvidia",
    default_helm_chart="nvidia/network-operator",
    system_node_selector_paths=("operator.nodeSelector",),
    system_toleration_paths=("operator.tolerations",),
    accelerated_node_selector_paths=("node-feature-discovery.worker.nodeSelector",),
    accelerated_toleration_paths=("node-feature-discovery.worker.tolerations",),
    template_getter=standard_templates(README_TEMPLATE),
)

__all__ = ["DESCRIPTOR", "NAME", "README_TEMPLATE"]

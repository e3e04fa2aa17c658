"""cert-manager component."""
from __future__ import annotations

from operator_bundler.bundler.descriptor import ComponentDescriptor
from operator_bundler.bundler.templates import standard_templates

NAME = "cert-manager"

README_TEMPLATE = """\
# cert-manager

Deployment bundle for cert-manager, generated by operator-bundler {{ metadata.version }}.
{% if metadata.recipe_version %}
Recipe version: {{ metadata.recipe_version }}
{% endif %}

## Chart

| Field      | Value |
|------------|-------|
| Repository | {{ metadata.helm_repository }} |
| Chart      | {{ metadata.helm_chart }} |
| Version    | {{ metadata.helm_chart_version or "latest" }} |
| Namespace  | {{ metadata.namespace }} |

## Install

```shell
helm upgrade --install cert-manager {{ metadata.helm_chart }} \\
  --repo {{ metadata.helm_repository }} \\
{% if metadata.helm_chart_version %}
  --version {{ metadata.helm_chart_version }} \\
{% endif %}
  --namespace {{ metadata.namespace }} --create-namespace \\
{% if metadata.extensions.InstallCRDs %}
  --set crds.enabled=true \\
{% endif %}
  --values values.yaml
```

## Verify

```shell
sha256sum -c checksums.txt
kubectl -n {{ metadata.namespace }} get pods
```
"""

DESCRIPTOR = ComponentDescriptor(
    name=NAME,
    display_name="cert-manager",
    value_override_keys=("certmanager",),
    default_helm_repository="https://charts.jetstack.io",
    default_helm_chart="jetstack/cert-manager",
    default_helm_chart_version="v1.17.2",
    system_node_selector_paths=(
        "nodeSelector",
        "webhook.nodeSelector",
        "cainjector.nodeSelector",
        "startupapicheck.nodeSelector",
    ),
    system_toleration_paths=(
        "tolerations",
        "webhook.tolerations",
        "cainjector.tolerations",
        "startupapicheck.tolerations",
    ),
    template_getter=standard_templates(README_TEMPLATE),
    metadata_extensions={"InstallCRDs": True},
)

__all__ = ["DESCRIPTOR", "NAME", "README_TEMPLATE"]

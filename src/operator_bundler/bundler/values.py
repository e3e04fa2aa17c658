"""Serialisation of merged value trees to ``values.yaml``."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import yaml


@dataclass(frozen=True)
class ValuesHeader:
    """Comment block written above the serialised values."""

    component_name: str
    bundler_version: str
    recipe_version: str

    def render(self) -> str:
        lines = [
            f"# {self.component_name} Helm values",
            f"# Generated by operator-bundler {self.bundler_version}",
        ]
        if self.recipe_version:
            lines.append(f"# Recipe version: {self.recipe_version}")
        return "\n".join(lines) + "\n\n"


def marshal_yaml(values: Mapping[str, Any]) -> str:
    """Dump *values* as block-style YAML with sorted keys."""
    return yaml.safe_dump(
        dict(values),
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )


def marshal_yaml_with_header(values: Mapping[str, Any], header: ValuesHeader) -> str:
    """Serialise *values* preceded by *header*.

    Raises
    ------
    yaml.YAMLError
        If the tree holds a value PyYAML cannot represent safely.
    """
    body = marshal_yaml(values) if values else "{}\n"
    return header.render() + body


__all__ = [
    "ValuesHeader",
    "marshal_yaml",
    "marshal_yaml_with_header",
]

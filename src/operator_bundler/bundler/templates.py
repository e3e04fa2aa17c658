"""Template resolution and rendering.

Each component supplies a :data:`TemplateGetter`, a pure function from a
template name to its text (or ``None`` when unknown).  Rendering uses
Jinja2 with strict undefined handling, so a reference to a missing field
fails the render instead of producing empty output.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError

from operator_bundler.errors import InternalError

TemplateGetter = Callable[[str], Optional[str]]

#: Context key under which the merged value tree is exposed to templates.
VALUES_KEY = "values"
#: Context key under which the bundle metadata is exposed to templates.
METADATA_KEY = "metadata"


def to_yaml(value: Any) -> str:
    """Jinja2 filter: block-style YAML without the trailing newline."""
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=True).rstrip("\n")


def new_template_getter(templates: Mapping[str, str]) -> TemplateGetter:
    """Build a getter over a fixed name -> text table."""
    table = dict(templates)

    def getter(name: str) -> str | None:
        return table.get(name)

    return getter


def standard_templates(readme_template: str) -> TemplateGetter:
    """Getter for components whose only template is ``README.md``."""
    return new_template_getter({"README.md": readme_template})


def build_context(values: Mapping[str, Any], metadata: Any, **extra: Any) -> dict[str, Any]:
    """Return the render context: values and metadata under fixed keys."""
    context: dict[str, Any] = {VALUES_KEY: values, METADATA_KEY: metadata}
    context.update(extra)
    return context


class TemplateRenderer:
    """Renders named templates resolved through a :data:`TemplateGetter`.

    Parameters
    ----------
    getter:
        Resolver used to look up template text by name.
    """

    def __init__(self, getter: TemplateGetter) -> None:
        self._getter = getter
        self._env = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )
        self._env.filters["to_yaml"] = to_yaml

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render template *name* against *context*.

        Raises
        ------
        InternalError
            If the template is unknown, malformed, or references a
            missing field.
        """
        text = self._getter(name)
        if text is None:
            raise InternalError(f"template {name!r} not found")
        return self.render_string(text, name, context)

    def render_string(self, text: str, name: str, context: Mapping[str, Any]) -> str:
        """Render raw template *text*; *name* is used in error messages."""
        try:
            template = self._env.from_string(text)
            return template.render(**context)
        except (TemplateError, yaml.YAMLError) as exc:
            raise InternalError(f"failed to render template {name!r}", cause=exc) from exc


__all__ = [
    "METADATA_KEY",
    "VALUES_KEY",
    "TemplateGetter",
    "TemplateRenderer",
    "build_context",
    "new_template_getter",
    "standard_templates",
    "to_yaml",
]

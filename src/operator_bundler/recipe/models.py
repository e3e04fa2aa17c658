"""Recipe models consumed by the bundlers.

Only the interface boundary lives here: a :class:`RecipeInput` protocol
that the orchestrator depends on, and :class:`RecipeResult`, a pydantic
model of a generated recipe that implements it.
"""
from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, ConfigDict, Field


class Criteria(BaseModel):
    """Deployment criteria the recipe was generated for."""

    model_config = ConfigDict(frozen=True)

    service: str = "any"
    accelerator: str = "any"
    intent: str = "any"
    os: str = "any"


class ComponentRef(BaseModel):
    """A single component instance inside a recipe.

    Attributes
    ----------
    name:
        Component identifier (e.g. ``"gpu-operator"``).
    source:
        Chart repository URL.
    version:
        Chart version.
    chart:
        Optional chart name override.
    values:
        Inline Helm values for the component.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    source: str = ""
    version: str = ""
    chart: str = ""
    values: dict[str, Any] = Field(default_factory=dict)


class RecipeMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str = ""


@runtime_checkable
class RecipeInput(Protocol):
    """What a bundler needs from a recipe."""

    def get_component_ref(self, name: str) -> ComponentRef | None: ...

    def get_values_for_component(self, name: str) -> dict[str, Any]: ...

    def get_criteria(self) -> Criteria | None: ...

    def get_recipe_version(self) -> str: ...


class RecipeResult(BaseModel):
    """A generated recipe: criteria plus component references."""

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(default="", alias="apiVersion")
    kind: str = "Recipe"
    metadata: RecipeMetadata = Field(default_factory=RecipeMetadata)
    criteria: Criteria | None = None
    component_refs: list[ComponentRef] = Field(default_factory=list, alias="componentRefs")

    def get_component_ref(self, name: str) -> ComponentRef | None:
        for ref in self.component_refs:
            if ref.name == name:
                return ref
        return None

    def get_values_for_component(self, name: str) -> dict[str, Any]:
        """Return a private deep copy of the component's values.

        Raises
        ------
        KeyError
            If the component is not referenced by this recipe.
        """
        ref = self.get_component_ref(name)
        if ref is None:
            raise KeyError(f"component {name!r} not found in recipe")
        return copy.deepcopy(ref.values)

    def get_criteria(self) -> Criteria | None:
        return self.criteria

    def get_recipe_version(self) -> str:
        return self.metadata.version

    def component_names(self) -> list[str]:
        return [ref.name for ref in self.component_refs]


def load_recipe(path: Path) -> RecipeResult:
    """Load and validate a recipe from a YAML or JSON file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the document is not a mapping or fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Recipe file does not exist: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Recipe {path} must contain a mapping at the top level")
    return RecipeResult.model_validate(raw)


__all__ = [
    "ComponentRef",
    "Criteria",
    "RecipeInput",
    "RecipeMetadata",
    "RecipeResult",
    "load_recipe",
]

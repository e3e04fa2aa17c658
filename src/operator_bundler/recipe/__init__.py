"""Recipe interface boundary."""
from __future__ import annotations

from operator_bundler.recipe.models import (
    ComponentRef,
    Criteria,
    RecipeInput,
    RecipeMetadata,
    RecipeResult,
    load_recipe,
)

__all__ = [
    "ComponentRef",
    "Criteria",
    "RecipeInput",
    "RecipeMetadata",
    "RecipeResult",
    "load_recipe",
]

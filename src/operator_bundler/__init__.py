"""operator-bundler: Helm deployment bundles for Kubernetes operator components.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import operator_bundler
>>> operator_bundler.__version__
'0.1.0'

Building one bundle
-------------------
>>> from operator_bundler import BundlerConfig, RecipeResult, build_default_registry
>>> registry = build_default_registry()
>>> recipe = RecipeResult.model_validate(
...     {"componentRefs": [{"name": "cert-manager", "version": "v1.17.2"}]}
... )
>>> bundler = registry.create("cert-manager", BundlerConfig())
>>> result = bundler.make(recipe, Path("./bundles"))  # doctest: +SKIP

Overrides
---------
>>> from operator_bundler import apply_map_overrides
>>> values = {"driver": {"enabled": True}}
>>> apply_map_overrides(values, {"driver.enabled": "false"})
>>> values
{'driver': {'enabled': False}}
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Errors and cancellation
# ---------------------------------------------------------------------------
from operator_bundler.cancellation import CancellationToken
from operator_bundler.errors import (
    BundleError,
    BundleTimeoutError,
    ErrorCode,
    InternalError,
    InvalidRequestError,
    OverrideMergeError,
)

# ---------------------------------------------------------------------------
# Configuration and recipes
# ---------------------------------------------------------------------------
from operator_bundler.config.settings import BundlerConfig, Toleration
from operator_bundler.recipe.models import (
    ComponentRef,
    Criteria,
    RecipeInput,
    RecipeResult,
    load_recipe,
)

# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------
from operator_bundler.overrides.merger import apply_map_overrides
from operator_bundler.overrides.placement import (
    apply_node_selector_overrides,
    apply_tolerations_overrides,
    node_selector_to_match_expressions,
)

# ---------------------------------------------------------------------------
# Bundling
# ---------------------------------------------------------------------------
from operator_bundler.bundler.descriptor import (
    ComponentDescriptor,
    ManifestProducer,
    MetadataProducer,
)
from operator_bundler.bundler.generic import Bundler, ComponentBundler, make_bundle
from operator_bundler.bundler.metadata import BundleMetadata
from operator_bundler.bundler.result import Result
from operator_bundler.bundler.runner import BuildOutput, make_all

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
from operator_bundler.registry import ComponentRegistry, build_default_registry

__all__ = [
    "__version__",
    # errors
    "BundleError",
    "BundleTimeoutError",
    "CancellationToken",
    "ErrorCode",
    "InternalError",
    "InvalidRequestError",
    "OverrideMergeError",
    # config / recipe
    "BundlerConfig",
    "ComponentRef",
    "Criteria",
    "RecipeInput",
    "RecipeResult",
    "Toleration",
    "load_recipe",
    # overrides
    "apply_map_overrides",
    "apply_node_selector_overrides",
    "apply_tolerations_overrides",
    "node_selector_to_match_expressions",
    # bundling
    "BuildOutput",
    "BundleMetadata",
    "Bundler",
    "ComponentBundler",
    "ComponentDescriptor",
    "ManifestProducer",
    "MetadataProducer",
    "Result",
    "make_all",
    "make_bundle",
    # registry
    "ComponentRegistry",
    "build_default_registry",
]

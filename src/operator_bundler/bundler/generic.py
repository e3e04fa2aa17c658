"""Generic bundle assembly pipeline.

:func:`make_bundle` turns one component of a recipe into an on-disk
bundle in a fixed sequence of steps:

1. fail fast if already cancelled
2. resolve the component reference (missing -> invalid request)
3. fetch the component's values from the recipe
4. merge overrides, then system and accelerator placement policy
5. create the bundle directory
6. build the flat config map used for metadata
7. write ``values.yaml``
8. run the component's manifest producer, if any
9. build metadata and render ``README.md`` (if enabled)
10. write ``checksums.txt`` (if enabled)
11. finalize the result

The first failing step aborts the build.  Files written by earlier steps
are left on disk.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from operator_bundler.bundler.base import BaseBundler
from operator_bundler.bundler.descriptor import ComponentDescriptor
from operator_bundler.bundler.metadata import (
    KEY_ACCELERATOR,
    KEY_HELM_CHART,
    KEY_HELM_CHART_VERSION,
    KEY_HELM_REPOSITORY,
    KEY_NAMESPACE,
    generate_default_bundle_metadata,
    get_bundler_version,
    get_recipe_version,
)
from operator_bundler.bundler.result import Result
from operator_bundler.bundler.templates import build_context
from operator_bundler.bundler.values import ValuesHeader, marshal_yaml_with_header
from operator_bundler.cancellation import CancellationToken
from operator_bundler.config.settings import BundlerConfig
from operator_bundler.errors import (
    BundleError,
    ErrorCode,
    InternalError,
    InvalidRequestError,
    OverrideMergeError,
    wrap,
)
from operator_bundler.overrides.merger import apply_map_overrides
from operator_bundler.overrides.placement import (
    apply_node_selector_overrides,
    apply_tolerations_overrides,
)
from operator_bundler.recipe.models import RecipeInput

logger = logging.getLogger(__name__)

VALUES_FILE = "values.yaml"
README_FILE = "README.md"


# ---------------------------------------------------------------------------
# Bundler interface
# ---------------------------------------------------------------------------


class Bundler(ABC):
    """Anything that can build a bundle for one component."""

    @abstractmethod
    def make(
        self,
        recipe: RecipeInput,
        output_dir: Path,
        cancel: CancellationToken | None = None,
    ) -> Result:
        """Build the bundle under *output_dir* and return its result."""


class ComponentBundler(Bundler):
    """Runs the generic pipeline for a single descriptor.

    Each :meth:`make` call gets its own :class:`BaseBundler`, so one
    instance can serve concurrent builds.

    Parameters
    ----------
    descriptor:
        The component to build.
    config:
        Shared read-only configuration.
    """

    def __init__(self, descriptor: ComponentDescriptor, config: BundlerConfig | None = None) -> None:
        self.descriptor = descriptor
        self.config = config if config is not None else BundlerConfig()

    def make(
        self,
        recipe: RecipeInput,
        output_dir: Path,
        cancel: CancellationToken | None = None,
    ) -> Result:
        base = BaseBundler(self.config, self.descriptor.name)
        return make_bundle(base, recipe, Path(output_dir), self.descriptor, cancel)

    def __repr__(self) -> str:
        return f"ComponentBundler({self.descriptor.name!r})"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def get_value_overrides_for_component(
    config: BundlerConfig, descriptor: ComponentDescriptor
) -> dict[str, str]:
    """Return the component's override set, checking alternate keys in order."""
    return config.overrides_for(descriptor.name, descriptor.value_override_keys)


def apply_overrides(
    bundler: BaseBundler, values: dict[str, Any], descriptor: ComponentDescriptor
) -> None:
    """Apply overrides then placement policy in fixed precedence order.

    Order: component overrides, system node selector, system tolerations,
    accelerator node selector, accelerator tolerations.  A later step
    overwrites an earlier one only where their target paths coincide.
    """
    config = bundler.config
    overrides = get_value_overrides_for_component(config, descriptor)
    if overrides:
        try:
            apply_map_overrides(values, overrides)
        except OverrideMergeError as exc:
            logger.warning(
                "failed to apply some value overrides for %s: %s", descriptor.name, exc
            )
            bundler.add_error(exc)

    apply_node_selector_overrides(
        values, config.get_system_node_selector(), *descriptor.system_node_selector_paths
    )
    apply_tolerations_overrides(
        values, config.system_node_tolerations, *descriptor.system_toleration_paths
    )
    apply_node_selector_overrides(
        values,
        config.get_accelerated_node_selector(),
        *descriptor.accelerated_node_selector_paths,
    )
    apply_tolerations_overrides(
        values, config.accelerated_node_tolerations, *descriptor.accelerated_toleration_paths
    )


def build_metadata(descriptor: ComponentDescriptor, config_map: Mapping[str, str]) -> Any:
    """Return the component's metadata record for *config_map*."""
    if descriptor.metadata_producer is not None:
        return descriptor.metadata_producer.generate_metadata(config_map)
    return generate_default_bundle_metadata(
        config_map,
        descriptor.name,
        descriptor.default_helm_repository,
        descriptor.default_helm_chart,
        descriptor.default_helm_chart_version,
        extensions=descriptor.metadata_extensions,
    )


def make_bundle(
    bundler: BaseBundler,
    recipe: RecipeInput,
    output_dir: Path,
    descriptor: ComponentDescriptor,
    cancel: CancellationToken | None = None,
) -> Result:
    """Build one component bundle.

    Parameters
    ----------
    bundler:
        Per-build state and helpers.
    recipe:
        Source of the component reference and values.
    output_dir:
        Parent directory; the bundle is written to
        ``<output_dir>/<descriptor.name>``.
    descriptor:
        Static description of the component.
    cancel:
        Optional cancellation signal.

    Returns
    -------
    Result
        The finalized result.

    Raises
    ------
    BundleTimeoutError
        If cancelled.
    InvalidRequestError
        If the recipe does not reference the component, or a manifest
        producer rejects the request.
    InternalError
        On extraction, I/O, serialisation, or rendering failures.
    """
    cancel = cancel if cancel is not None else CancellationToken()
    name = descriptor.name
    bundler.check_cancelled(cancel)

    start = time.monotonic()
    logger.debug("generating bundle component=%s output_dir=%s", name, output_dir)

    component_ref = recipe.get_component_ref(name)
    if component_ref is None:
        raise InvalidRequestError(f"{name} component not found in recipe")

    try:
        values = recipe.get_values_for_component(name)
    except Exception as exc:
        raise wrap(ErrorCode.INTERNAL, f"failed to get values for {name}", exc) from exc

    apply_overrides(bundler, values, descriptor)

    dirs = bundler.create_bundle_dir(output_dir, name)

    config_map = bundler.build_config_map_from_input(recipe)
    config_map[KEY_NAMESPACE] = name
    config_map[KEY_HELM_REPOSITORY] = component_ref.source
    config_map[KEY_HELM_CHART_VERSION] = component_ref.version
    if component_ref.chart:
        config_map[KEY_HELM_CHART] = component_ref.chart
    criteria = recipe.get_criteria()
    if criteria is not None and criteria.accelerator:
        config_map[KEY_ACCELERATOR] = criteria.accelerator

    header = ValuesHeader(
        component_name=descriptor.display_name,
        bundler_version=get_bundler_version(config_map),
        recipe_version=get_recipe_version(config_map),
    )
    try:
        values_yaml = marshal_yaml_with_header(values, header)
    except yaml.YAMLError as exc:
        raise InternalError("failed to serialize values to YAML", cause=exc) from exc
    bundler.write_file(dirs.root / VALUES_FILE, values_yaml)

    if descriptor.manifest_producer is not None:
        bundler.check_cancelled(cancel)
        try:
            generated = descriptor.manifest_producer.generate_manifests(
                bundler, values, config_map, dirs.root, cancel
            )
        except BundleError:
            raise
        except Exception as exc:
            raise wrap(
                ErrorCode.INTERNAL, f"failed to generate custom manifests for {name}", exc
            ) from exc
        logger.debug("custom manifests generated component=%s count=%d", name, len(generated))

    metadata = build_metadata(descriptor, config_map)

    if bundler.config.include_readme and descriptor.template_getter is not None:
        bundler.generate_file_from_template(
            cancel,
            descriptor.template_getter,
            README_FILE,
            dirs.root / README_FILE,
            build_context(values, metadata),
        )

    if bundler.config.include_checksums:
        bundler.generate_checksums(cancel, dirs.root)

    result = bundler.finalize(start)
    logger.debug(
        "bundle generated component=%s files=%d size_bytes=%d duration=%.3fs",
        name,
        len(result.files),
        result.size,
        result.duration,
    )
    return result


__all__ = [
    "README_FILE",
    "VALUES_FILE",
    "Bundler",
    "ComponentBundler",
    "apply_overrides",
    "build_metadata",
    "get_value_overrides_for_component",
    "make_bundle",
]

"""Static per-component descriptors and their optional capabilities.

A :class:`ComponentDescriptor` captures everything the generic pipeline
needs to know about a component: identity, override lookup keys,
placement paths, chart defaults, and how to find its templates.
Components that need more than the shared pipeline implement one of two
capabilities and attach an instance to their descriptor:

- :class:`ManifestProducer` writes extra manifests into the bundle.
- :class:`MetadataProducer` replaces the default metadata record.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from operator_bundler.bundler.templates import TemplateGetter

if TYPE_CHECKING:
    from operator_bundler.bundler.base import BaseBundler
    from operator_bundler.cancellation import CancellationToken


class ManifestProducer(ABC):
    """Capability: generate component-specific manifests."""

    @abstractmethod
    def generate_manifests(
        self,
        bundler: BaseBundler,
        values: dict[str, Any],
        config_map: Mapping[str, str],
        bundle_dir: Path,
        cancel: CancellationToken,
    ) -> list[Path]:
        """Write extra manifests and return their paths.

        Implementations write through ``bundler.write_file`` or
        ``bundler.generate_file_from_template`` so the files are recorded
        in the build's result.  Raising any :class:`BundleError` fails
        the whole build.
        """


class MetadataProducer(ABC):
    """Capability: build the metadata record handed to templates."""

    @abstractmethod
    def generate_metadata(self, config_map: Mapping[str, str]) -> Any:
        """Return the metadata record for the given config map."""


@dataclass(frozen=True)
class ComponentDescriptor:
    """Immutable description of one deployable component.

    Attributes
    ----------
    name:
        Component identifier used in recipes (e.g. ``"gpu-operator"``).
    display_name:
        Human-readable name used in headers and documentation.
    value_override_keys:
        Alternate keys checked, in order, when the identifier has no
        override set.
    system_node_selector_paths / system_toleration_paths:
        Value-tree paths receiving system-tier placement policy.
    accelerated_node_selector_paths / accelerated_toleration_paths:
        Value-tree paths receiving accelerator-tier placement policy.
    default_helm_repository / default_helm_chart / default_helm_chart_version:
        Chart coordinates used when the recipe does not supply them.
    template_getter:
        Resolves template text by name.
    manifest_producer:
        Optional custom-manifest capability.
    metadata_producer:
        Optional metadata capability; replaces the default record.
    metadata_extensions:
        Extra key/value pairs merged into the default record's
        ``extensions``.  Ignored when ``metadata_producer`` is set.
    """

    name: str
    display_name: str
    template_getter: TemplateGetter | None = None
    value_override_keys: tuple[str, ...] = ()
    system_node_selector_paths: tuple[str, ...] = ()
    system_toleration_paths: tuple[str, ...] = ()
    accelerated_node_selector_paths: tuple[str, ...] = ()
    accelerated_toleration_paths: tuple[str, ...] = ()
    default_helm_repository: str = ""
    default_helm_chart: str = ""
    default_helm_chart_version: str = ""
    manifest_producer: ManifestProducer | None = None
    metadata_producer: MetadataProducer | None = None
    metadata_extensions: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ComponentDescriptor.name must not be empty.")
        if not self.display_name:
            raise ValueError("ComponentDescriptor.display_name must not be empty.")
        for attr in (
            "value_override_keys",
            "system_node_selector_paths",
            "system_toleration_paths",
            "accelerated_node_selector_paths",
            "accelerated_toleration_paths",
        ):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))
        object.__setattr__(
            self, "metadata_extensions", MappingProxyType(dict(self.metadata_extensions))
        )


__all__ = [
    "ComponentDescriptor",
    "ManifestProducer",
    "MetadataProducer",
]

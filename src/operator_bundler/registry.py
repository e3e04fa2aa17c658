"""Component registry: identifier -> bundler factory.

The registry is an explicit table built once at program start, frozen,
and then passed by reference to whatever dispatches builds.  Writes after
:meth:`ComponentRegistry.freeze` raise :class:`RegistryFrozenError`.

Third-party components can be contributed through ``importlib.metadata``
entry points under the ``operator_bundler.components`` group.  Each entry
point must resolve to a :class:`ComponentDescriptor` or to a factory
callable taking a :class:`BundlerConfig` and returning a :class:`Bundler`.

Example
-------
::

    registry = ComponentRegistry("default")

    @registry.register("my-operator")
    def make_my_operator(config: BundlerConfig) -> Bundler:
        return ComponentBundler(MY_DESCRIPTOR, config)

    registry.freeze()
    bundler = registry.create("my-operator", BundlerConfig())
"""
from __future__ import annotations

import importlib.metadata
import logging
import threading
from collections.abc import Callable

from operator_bundler.bundler.descriptor import ComponentDescriptor
from operator_bundler.bundler.generic import Bundler, ComponentBundler
from operator_bundler.config.settings import BundlerConfig

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "operator_bundler.components"

BundlerFactory = Callable[[BundlerConfig], Bundler]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ComponentNotFoundError(KeyError):
    """Raised when a component identifier is not in the registry."""

    def __init__(self, component_name: str, registry_name: str) -> None:
        self.component_name = component_name
        self.registry_name = registry_name
        super().__init__(
            f"Component {component_name!r} is not registered in {registry_name!r}."
        )


class ComponentAlreadyRegisteredError(ValueError):
    """Raised when a component identifier is registered twice."""

    def __init__(self, component_name: str, registry_name: str) -> None:
        self.component_name = component_name
        self.registry_name = registry_name
        super().__init__(
            f"Component {component_name!r} is already registered in {registry_name!r}."
        )


class RegistryFrozenError(RuntimeError):
    """Raised when a frozen registry is modified."""

    def __init__(self, registry_name: str) -> None:
        self.registry_name = registry_name
        super().__init__(f"Registry {registry_name!r} is frozen and cannot be modified.")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def descriptor_factory(descriptor: ComponentDescriptor) -> BundlerFactory:
    """Return a factory that builds a :class:`ComponentBundler` for *descriptor*."""

    def factory(config: BundlerConfig) -> Bundler:
        return ComponentBundler(descriptor, config)

    factory.descriptor = descriptor  # type: ignore[attr-defined]
    return factory


class ComponentRegistry:
    """Write-once table of component bundler factories.

    Parameters
    ----------
    name:
        Human-readable name used in error messages.
    """

    def __init__(self, name: str = "components") -> None:
        self._name = name
        self._factories: dict[str, BundlerFactory] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, component_name: str) -> Callable[[BundlerFactory], BundlerFactory]:
        """Decorator registering a factory under *component_name*.

        Returns the factory unchanged.
        """

        def decorator(factory: BundlerFactory) -> BundlerFactory:
            self.register_factory(component_name, factory)
            return factory

        return decorator

    def register_factory(self, component_name: str, factory: BundlerFactory) -> None:
        """Register *factory* under *component_name*.

        Raises
        ------
        TypeError
            If *factory* is not callable.
        ComponentAlreadyRegisteredError
            If the identifier is already taken.
        RegistryFrozenError
            If the registry has been frozen.
        """
        if not callable(factory):
            raise TypeError(
                f"Factory for {component_name!r} must be callable, got {type(factory).__name__}."
            )
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(self._name)
            if component_name in self._factories:
                raise ComponentAlreadyRegisteredError(component_name, self._name)
            self._factories[component_name] = factory
        logger.debug("registered component %s in %s", component_name, self._name)

    def register_descriptor(self, descriptor: ComponentDescriptor) -> None:
        """Register the generic bundler for *descriptor* under its name."""
        self.register_factory(descriptor.name, descriptor_factory(descriptor))

    def deregister(self, component_name: str) -> None:
        """Remove a component.

        Raises
        ------
        ComponentNotFoundError
            If the identifier is not registered.
        RegistryFrozenError
            If the registry has been frozen.
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(self._name)
            if component_name not in self._factories:
                raise ComponentNotFoundError(component_name, self._name)
            del self._factories[component_name]

    def freeze(self) -> ComponentRegistry:
        """Make the registry read-only and return it."""
        with self._lock:
            self._frozen = True
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, component_name: str) -> BundlerFactory:
        """Return the factory for *component_name*.

        Raises
        ------
        ComponentNotFoundError
            If the identifier is not registered.
        """
        try:
            return self._factories[component_name]
        except KeyError:
            raise ComponentNotFoundError(component_name, self._name) from None

    def create(self, component_name: str, config: BundlerConfig) -> Bundler:
        """Instantiate the bundler for *component_name* with *config*."""
        return self.get(component_name)(config)

    def list_components(self) -> list[str]:
        """Return all registered identifiers, sorted."""
        return sorted(self._factories)

    def descriptor(self, component_name: str) -> ComponentDescriptor | None:
        """Return the descriptor behind a descriptor-based factory, if any."""
        return getattr(self.get(component_name), "descriptor", None)

    # ------------------------------------------------------------------
    # Entry-point discovery
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Register components advertised under the entry-point *group*.

        Identifiers that are already registered are skipped without
        loading.  Entry points that fail to import or resolve to an
        unsupported object are logged and skipped.
        """
        for entry_point in importlib.metadata.entry_points(group=group):
            if entry_point.name in self._factories:
                logger.debug(
                    "component %s already registered in %s, skipping entry point",
                    entry_point.name,
                    self._name,
                )
                continue
            try:
                loaded = entry_point.load()
            except Exception:
                logger.error(
                    "failed to load component entry point %s from group %s",
                    entry_point.name,
                    group,
                    exc_info=True,
                )
                continue
            try:
                if isinstance(loaded, ComponentDescriptor):
                    self.register_factory(entry_point.name, descriptor_factory(loaded))
                else:
                    self.register_factory(entry_point.name, loaded)
            except (TypeError, ComponentAlreadyRegisteredError, RegistryFrozenError) as exc:
                logger.warning(
                    "component entry point %s rejected: %s", entry_point.name, exc
                )

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __contains__(self, component_name: object) -> bool:
        return component_name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        return (
            f"ComponentRegistry(name={self._name!r}, frozen={self._frozen}, "
            f"components={self.list_components()})"
        )


def build_default_registry(load_plugins: bool = False) -> ComponentRegistry:
    """Build and freeze the registry of built-in components.

    Parameters
    ----------
    load_plugins:
        Also register components from the ``operator_bundler.components``
        entry-point group.
    """
    from operator_bundler.components import BUILTIN_DESCRIPTORS

    registry = ComponentRegistry("default")
    for descriptor in BUILTIN_DESCRIPTORS:
        registry.register_descriptor(descriptor)
    if load_plugins:
        registry.load_entrypoints(ENTRYPOINT_GROUP)
    return registry.freeze()


__all__ = [
    "ENTRYPOINT_GROUP",
    "BundlerFactory",
    "ComponentAlreadyRegisteredError",
    "ComponentNotFoundError",
    "ComponentRegistry",
    "RegistryFrozenError",
    "build_default_registry",
    "descriptor_factory",
]

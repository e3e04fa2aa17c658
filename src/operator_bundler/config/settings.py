"""Static bundler configuration.

The :class:`BundlerConfig` is built once per invocation (normally from
CLI flags) and then shared read-only by every concurrent build.  Mapping
inputs are copied into read-only views on construction and accessors hand
out plain copies, so no build can mutate state another build observes.

Classes
-------
- Toleration      Pydantic model of a Kubernetes pod toleration.
- BundlerConfig   Frozen dataclass of feature toggles and placement policy.

Functions
---------
- parse_value_overrides   Parse ``component:path=value`` flags.
- parse_node_selectors    Parse ``key=value`` flags.
- parse_tolerations       Parse ``key=value:Effect`` flags.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_VERSION = "dev"

_VALID_EFFECTS: frozenset[str] = frozenset(
    {"", "NoSchedule", "PreferNoSchedule", "NoExecute"}
)


# ---------------------------------------------------------------------------
# Toleration
# ---------------------------------------------------------------------------


class Toleration(BaseModel):
    """A pod toleration, the minimal shape the placement injector writes.

    Attributes
    ----------
    key:
        Taint key the toleration matches.  Empty with ``Exists`` matches
        every taint.
    operator:
        ``"Equal"`` or ``"Exists"``.
    value:
        Taint value; must be empty when operator is ``Exists``.
    effect:
        Taint effect, or empty to match all effects.
    toleration_seconds:
        Optional eviction grace period for ``NoExecute`` taints.
    """

    model_config = ConfigDict(frozen=True)

    key: str = ""
    operator: Literal["Equal", "Exists"] = "Equal"
    value: str = ""
    effect: str = ""
    toleration_seconds: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "Toleration":
        if self.effect not in _VALID_EFFECTS:
            raise ValueError(
                f"invalid toleration effect {self.effect!r}; "
                f"must be one of {sorted(e for e in _VALID_EFFECTS if e)}"
            )
        if self.operator == "Exists" and self.value:
            raise ValueError("toleration value must be empty when operator is Exists")
        if self.operator == "Equal" and not self.key:
            raise ValueError("toleration key is required when operator is Equal")
        return self

    def to_pod_spec(self) -> dict[str, object]:
        """Return the pod-spec dictionary form, omitting empty fields."""
        spec: dict[str, object] = {}
        if self.key:
            spec["key"] = self.key
        if self.operator:
            spec["operator"] = self.operator
        if self.value:
            spec["value"] = self.value
        if self.effect:
            spec["effect"] = self.effect
        if self.toleration_seconds is not None:
            spec["tolerationSeconds"] = self.toleration_seconds
        return spec


# ---------------------------------------------------------------------------
# Configuration value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BundlerConfig:
    """Configuration shared by every component bundler.

    Attributes
    ----------
    include_readme:
        Render ``README.md`` for each bundle.
    include_checksums:
        Write ``checksums.txt`` for each bundle.
    version:
        Bundler version string recorded in generated artifacts.
    value_overrides:
        Per-component override sets, keyed by component identifier or one
        of its alternate keys; each maps a dot-notation path to a string.
    system_node_selector:
        Node selector for system (control-plane style) workloads.
    system_node_tolerations:
        Tolerations for system workloads.
    accelerated_node_selector:
        Node selector for accelerator (GPU) workloads.
    accelerated_node_tolerations:
        Tolerations for accelerator workloads.
    verbose:
        Enable debug-level output.
    """

    include_readme: bool = True
    include_checksums: bool = True
    version: str = DEFAULT_VERSION
    value_overrides: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    system_node_selector: Mapping[str, str] = field(default_factory=dict)
    system_node_tolerations: tuple[Toleration, ...] = ()
    accelerated_node_selector: Mapping[str, str] = field(default_factory=dict)
    accelerated_node_tolerations: tuple[Toleration, ...] = ()
    verbose: bool = False

    def __post_init__(self) -> None:
        # Detach from caller-owned containers and expose read-only views.
        object.__setattr__(
            self,
            "value_overrides",
            MappingProxyType(
                {k: MappingProxyType(dict(v)) for k, v in (self.value_overrides or {}).items()}
            ),
        )
        object.__setattr__(
            self, "system_node_selector", MappingProxyType(dict(self.system_node_selector or {}))
        )
        object.__setattr__(
            self,
            "accelerated_node_selector",
            MappingProxyType(dict(self.accelerated_node_selector or {})),
        )
        object.__setattr__(
            self, "system_node_tolerations", tuple(self.system_node_tolerations or ())
        )
        object.__setattr__(
            self, "accelerated_node_tolerations", tuple(self.accelerated_node_tolerations or ())
        )
        if not self.version:
            object.__setattr__(self, "version", DEFAULT_VERSION)

    # ------------------------------------------------------------------
    # Accessors returning copies
    # ------------------------------------------------------------------

    def get_value_overrides(self) -> dict[str, dict[str, str]]:
        """Return a deep copy of every component's override set."""
        return {key: dict(overrides) for key, overrides in self.value_overrides.items()}

    def overrides_for(self, name: str, alternate_keys: Iterable[str] = ()) -> dict[str, str]:
        """Return the override set for a component.

        The component identifier is checked first, then each alternate
        key in order.  The first match wins; an empty dict is returned if
        none match.
        """
        for key in (name, *alternate_keys):
            if key in self.value_overrides:
                return dict(self.value_overrides[key])
        return {}

    def get_system_node_selector(self) -> dict[str, str]:
        return dict(self.system_node_selector)

    def get_accelerated_node_selector(self) -> dict[str, str]:
        return dict(self.accelerated_node_selector)


# ---------------------------------------------------------------------------
# Flag parsers
# ---------------------------------------------------------------------------


def parse_value_overrides(entries: Iterable[str]) -> dict[str, dict[str, str]]:
    """Parse ``component:path.to.field=value`` strings.

    Parameters
    ----------
    entries:
        Raw flag values.

    Returns
    -------
    dict[str, dict[str, str]]
        Override sets keyed by component key.

    Raises
    ------
    ValueError
        If an entry is missing the component prefix, the path, or ``=``.
    """
    result: dict[str, dict[str, str]] = {}
    for entry in entries:
        component, sep, assignment = entry.partition(":")
        if not sep or not component.strip():
            raise ValueError(
                f"invalid override {entry!r}: expected format component:path=value"
            )
        path, eq, value = assignment.partition("=")
        if not eq or not path.strip():
            raise ValueError(
                f"invalid override {entry!r}: expected format component:path=value"
            )
        result.setdefault(component.strip(), {})[path.strip()] = value
    return result


def parse_node_selectors(entries: Iterable[str]) -> dict[str, str]:
    """Parse ``key=value`` strings into a node-selector mapping.

    Raises
    ------
    ValueError
        If an entry has no ``=`` or an empty key.
    """
    selectors: dict[str, str] = {}
    for entry in entries:
        key, eq, value = entry.partition("=")
        if not eq or not key.strip():
            raise ValueError(f"invalid node selector {entry!r}: expected format key=value")
        selectors[key.strip()] = value.strip()
    return selectors


def parse_tolerations(entries: Iterable[str]) -> list[Toleration]:
    """Parse toleration flags.

    Accepted forms::

        key=value:Effect   -> Equal
        key=value          -> Equal, all effects
        key:Effect         -> Exists
        key                -> Exists, all effects

    Raises
    ------
    ValueError
        If the effect is unknown or the key is empty.
    """
    tolerations: list[Toleration] = []
    for entry in entries:
        body, colon, effect = entry.rpartition(":")
        if not colon:
            body, effect = entry, ""
        key, eq, value = body.partition("=")
        key = key.strip()
        if not key:
            raise ValueError(f"invalid toleration {entry!r}: key must not be empty")
        try:
            tolerations.append(
                Toleration(
                    key=key,
                    operator="Equal" if eq else "Exists",
                    value=value.strip(),
                    effect=effect.strip(),
                )
            )
        except ValueError as exc:
            raise ValueError(f"invalid toleration {entry!r}: {exc}") from exc
    return tolerations


__all__ = [
    "DEFAULT_VERSION",
    "BundlerConfig",
    "Toleration",
    "parse_node_selectors",
    "parse_tolerations",
    "parse_value_overrides",
]

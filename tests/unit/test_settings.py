"""Tests for operator_bundler.config.settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from operator_bundler.config.settings import (
    DEFAULT_VERSION,
    BundlerConfig,
    Toleration,
    parse_node_selectors,
    parse_tolerations,
    parse_value_overrides,
)


# ---------------------------------------------------------------------------
# Toleration
# ---------------------------------------------------------------------------


class TestToleration:
    def test_defaults_to_equal(self) -> None:
        tol = Toleration(key="k", value="v")
        assert tol.operator == "Equal"

    def test_invalid_effect_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Toleration(key="k", effect="Sometimes")

    def test_exists_with_value_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Toleration(key="k", operator="Exists", value="v")

    def test_equal_without_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Toleration(value="v")

    def test_negative_seconds_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Toleration(key="k", toleration_seconds=-1)

    def test_frozen(self) -> None:
        tol = Toleration(key="k")
        with pytest.raises(ValidationError):
            tol.key = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# BundlerConfig
# ---------------------------------------------------------------------------


class TestBundlerConfig:
    def test_defaults(self) -> None:
        config = BundlerConfig()
        assert config.include_readme is True
        assert config.include_checksums is True
        assert config.version == DEFAULT_VERSION
        assert config.value_overrides == {}
        assert config.system_node_tolerations == ()

    def test_empty_version_falls_back(self) -> None:
        assert BundlerConfig(version="").version == DEFAULT_VERSION

    def test_inputs_are_copied(self) -> None:
        overrides = {"gpu-operator": {"driver.version": "1"}}
        selector = {"zone": "us"}
        config = BundlerConfig(value_overrides=overrides, system_node_selector=selector)
        overrides["gpu-operator"]["driver.version"] = "2"
        selector["zone"] = "eu"
        assert config.overrides_for("gpu-operator") == {"driver.version": "1"}
        assert config.get_system_node_selector() == {"zone": "us"}

    def test_accessors_return_copies(self) -> None:
        config = BundlerConfig(
            value_overrides={"a": {"x": "1"}}, accelerated_node_selector={"k": "v"}
        )
        config.get_value_overrides()["a"]["x"] = "changed"
        config.get_accelerated_node_selector()["k"] = "changed"
        assert config.overrides_for("a") == {"x": "1"}
        assert config.get_accelerated_node_selector() == {"k": "v"}

    def test_frozen(self) -> None:
        config = BundlerConfig()
        with pytest.raises(AttributeError):
            config.include_readme = False  # type: ignore[misc]

    def test_mappings_reject_in_place_mutation(self) -> None:
        config = BundlerConfig(
            value_overrides={"a": {"x": "1"}},
            system_node_selector={"zone": "us"},
            accelerated_node_selector={"gpu": "true"},
        )
        with pytest.raises(TypeError):
            config.value_overrides["b"] = {"y": "2"}  # type: ignore[index]
        with pytest.raises(TypeError):
            config.value_overrides["a"]["x"] = "changed"  # type: ignore[index]
        with pytest.raises(TypeError):
            config.system_node_selector["zone"] = "late"  # type: ignore[index]
        with pytest.raises(TypeError):
            config.accelerated_node_selector["gpu"] = "false"  # type: ignore[index]
        assert config.overrides_for("a") == {"x": "1"}
        assert config.overrides_for("b") == {}
        assert config.get_system_node_selector() == {"zone": "us"}
        assert config.get_accelerated_node_selector() == {"gpu": "true"}

    def test_overrides_for_prefers_name(self) -> None:
        config = BundlerConfig(
            value_overrides={"gpu-operator": {"a": "1"}, "gpuoperator": {"a": "2"}}
        )
        assert config.overrides_for("gpu-operator", ["gpuoperator"]) == {"a": "1"}

    def test_overrides_for_falls_back_to_alternate_keys(self) -> None:
        config = BundlerConfig(
            value_overrides={"alt2": {"a": "2"}, "alt1": {"a": "1"}}
        )
        assert config.overrides_for("gpu-operator", ["alt1", "alt2"]) == {"a": "1"}

    def test_overrides_for_no_match(self) -> None:
        assert BundlerConfig().overrides_for("x", ["y"]) == {}


# ---------------------------------------------------------------------------
# Flag parsers
# ---------------------------------------------------------------------------


class TestParseValueOverrides:
    def test_groups_by_component(self) -> None:
        parsed = parse_value_overrides(
            [
                "gpuoperator:driver.version=570.86.16",
                "gpuoperator:driver.enabled=false",
                "certmanager:installCRDs=true",
            ]
        )
        assert parsed == {
            "gpuoperator": {"driver.version": "570.86.16", "driver.enabled": "false"},
            "certmanager": {"installCRDs": "true"},
        }

    def test_value_may_contain_equals(self) -> None:
        parsed = parse_value_overrides(["c:args=--flag=1"])
        assert parsed == {"c": {"args": "--flag=1"}}

    def test_empty_value_allowed(self) -> None:
        assert parse_value_overrides(["c:path="]) == {"c": {"path": ""}}

    @pytest.mark.parametrize("entry", ["no-colon=1", ":path=1", "c:path", "c:=1"])
    def test_invalid(self, entry: str) -> None:
        with pytest.raises(ValueError):
            parse_value_overrides([entry])


class TestParseNodeSelectors:
    def test_parses(self) -> None:
        assert parse_node_selectors(["zone=us", "role=system"]) == {
            "zone": "us",
            "role": "system",
        }

    @pytest.mark.parametrize("entry", ["zone", "=us"])
    def test_invalid(self, entry: str) -> None:
        with pytest.raises(ValueError):
            parse_node_selectors([entry])


class TestParseTolerations:
    def test_key_value_effect(self) -> None:
        (tol,) = parse_tolerations(["nvidia.com/gpu=present:NoSchedule"])
        assert tol == Toleration(
            key="nvidia.com/gpu", operator="Equal", value="present", effect="NoSchedule"
        )

    def test_key_value_without_effect(self) -> None:
        (tol,) = parse_tolerations(["dedicated=system"])
        assert (tol.operator, tol.value, tol.effect) == ("Equal", "system", "")

    def test_key_effect_is_exists(self) -> None:
        (tol,) = parse_tolerations(["node-role.kubernetes.io/control-plane:NoSchedule"])
        assert tol.operator == "Exists"
        assert tol.key == "node-role.kubernetes.io/control-plane"
        assert tol.effect == "NoSchedule"

    def test_bare_key_is_exists(self) -> None:
        (tol,) = parse_tolerations(["dedicated"])
        assert (tol.key, tol.operator, tol.effect) == ("dedicated", "Exists", "")

    def test_unknown_effect_raises(self) -> None:
        with pytest.raises(ValueError, match="invalid toleration"):
            parse_tolerations(["k=v:Whenever"])

    def test_empty_key_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_tolerations(["=v:NoSchedule"])

"""Tests for the built-in components in operator_bundler.components."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from operator_bundler.bundler.checksums import verify_checksums
from operator_bundler.components import BUILTIN_DESCRIPTORS, certmanager, nvsentinel, skyhook
from operator_bundler.config.settings import BundlerConfig, Toleration
from operator_bundler.errors import InvalidRequestError
from operator_bundler.recipe.models import RecipeResult
from operator_bundler.registry import build_default_registry


def _make_recipe(name: str, values: dict[str, Any] | None = None, **ref: Any) -> RecipeResult:
    return RecipeResult.model_validate(
        {
            "metadata": {"version": "v0.9"},
            "criteria": {"accelerator": "h100"},
            "componentRefs": [{"name": name, "values": values or {}, **ref}],
        }
    )


def _build(tmp_path: Path, name: str, config: BundlerConfig | None = None, **recipe: Any):
    registry = build_default_registry()
    bundler = registry.create(name, config or BundlerConfig(version="1.0.0"))
    return bundler.make(_make_recipe(name, **recipe), tmp_path)


def _values(tmp_path: Path, name: str) -> dict[str, Any]:
    return yaml.safe_load((tmp_path / name / "values.yaml").read_text(encoding="utf-8"))


def _readme(tmp_path: Path, name: str) -> str:
    return (tmp_path / name / "README.md").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# All built-ins
# ---------------------------------------------------------------------------


class TestBuiltins:
    def test_unique_names(self) -> None:
        names = [d.name for d in BUILTIN_DESCRIPTORS]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize("descriptor", BUILTIN_DESCRIPTORS, ids=lambda d: d.name)
    def test_each_builds_full_bundle(self, tmp_path: Path, descriptor) -> None:
        result = _build(tmp_path, descriptor.name)
        root = tmp_path / descriptor.name
        assert result.success is True
        assert (root / "values.yaml").is_file()
        assert (root / "README.md").is_file()
        assert all(ok for _, ok in verify_checksums(root))

    @pytest.mark.parametrize("descriptor", BUILTIN_DESCRIPTORS, ids=lambda d: d.name)
    def test_each_readme_renders_with_full_placement(self, tmp_path: Path, descriptor) -> None:
        config = BundlerConfig(
            system_node_selector={"role": "system"},
            system_node_tolerations=(Toleration(key="dedicated", operator="Exists"),),
            accelerated_node_selector={"nvidia.com/gpu.present": "true"},
            accelerated_node_tolerations=(
                Toleration(key="nvidia.com/gpu", value="present", effect="NoSchedule"),
            ),
        )
        result = _build(tmp_path, descriptor.name, config=config)
        assert result.success is True


# ---------------------------------------------------------------------------
# cert-manager
# ---------------------------------------------------------------------------


class TestCertManager:
    def test_system_placement_on_all_deployments(self, tmp_path: Path) -> None:
        config = BundlerConfig(system_node_selector={"role": "system"})
        _build(tmp_path, certmanager.NAME, config=config)
        values = _values(tmp_path, certmanager.NAME)
        assert values["nodeSelector"] == {"role": "system"}
        for sub in ("webhook", "cainjector", "startupapicheck"):
            assert values[sub]["nodeSelector"] == {"role": "system"}

    def test_readme_defaults_and_crds(self, tmp_path: Path) -> None:
        _build(tmp_path, certmanager.NAME)
        readme = _readme(tmp_path, certmanager.NAME)
        assert "https://charts.jetstack.io" in readme
        assert "--version v1.17.2" in readme
        assert "--set crds.enabled=true" in readme

    def test_override_via_alternate_key(self, tmp_path: Path) -> None:
        config = BundlerConfig(value_overrides={"certmanager": {"replicaCount": "2"}})
        _build(tmp_path, certmanager.NAME, config=config)
        assert _values(tmp_path, certmanager.NAME)["replicaCount"] == "2"


# ---------------------------------------------------------------------------
# gpu-operator
# ---------------------------------------------------------------------------


class TestGPUOperator:
    def test_system_and_accelerated_paths(self, tmp_path: Path) -> None:
        config = BundlerConfig(
            system_node_selector={"role": "system"},
            accelerated_node_selector={"nvidia.com/gpu.present": "true"},
        )
        _build(tmp_path, "gpu-operator", config=config, values={"driver": {"version": "570"}})
        values = _values(tmp_path, "gpu-operator")
        assert values["operator"]["nodeSelector"] == {"role": "system"}
        assert values["daemonsets"]["nodeSelector"] == {"nvidia.com/gpu.present": "true"}
        assert values["node-feature-discovery"]["worker"]["nodeSelector"] == {
            "nvidia.com/gpu.present": "true"
        }
        assert values["node-feature-discovery"]["master"]["nodeSelector"] == {"role": "system"}
        assert "Driver version: 570" in _readme(tmp_path, "gpu-operator")


# ---------------------------------------------------------------------------
# nvsentinel
# ---------------------------------------------------------------------------


class TestNVSentinel:
    def test_metadata_defaults(self) -> None:
        meta = nvsentinel.NVSentinelMetadataProducer().generate_metadata({})
        assert meta.helm_chart_repo == "oci://ghcr.io/nvidia/nvsentinel"
        assert meta.helm_release_name == "nvsentinel"
        assert meta.nvsentinel_version == "v0.6.0"
        assert meta.namespace == "nvsentinel"

    def test_readme_uses_custom_metadata(self, tmp_path: Path) -> None:
        _build(tmp_path, nvsentinel.NAME, version="v0.7.0")
        readme = _readme(tmp_path, nvsentinel.NAME)
        assert "helm upgrade --install nvsentinel oci://ghcr.io/nvidia/nvsentinel" in readme
        assert "--version v0.7.0" in readme


# ---------------------------------------------------------------------------
# skyhook-operator
# ---------------------------------------------------------------------------


class TestSkyhook:
    def test_no_customization_no_manifest(self, tmp_path: Path) -> None:
        _build(tmp_path, skyhook.NAME)
        assert list((tmp_path / skyhook.NAME / "manifests").iterdir()) == []

    def test_customization_rendered(self, tmp_path: Path) -> None:
        config = BundlerConfig(
            version="1.0.0",
            accelerated_node_selector={"nvidia.com/gpu.present": "true"},
            accelerated_node_tolerations=(
                Toleration(key="nvidia.com/gpu", value="present", effect="NoSchedule"),
            ),
        )
        result = _build(
            tmp_path, skyhook.NAME, config=config, values={"customization": "tuning"}
        )
        manifest_path = tmp_path / skyhook.NAME / "manifests" / "tuning.yaml"
        assert str(manifest_path) in result.files
        manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
        assert manifest["kind"] == "Skyhook"
        assert manifest["metadata"]["name"] == "tuning"
        assert manifest["metadata"]["namespace"] == skyhook.NAME
        assert manifest["spec"]["nodeSelectors"]["matchExpressions"] == [
            {"key": "nvidia.com/gpu.present", "operator": "In", "values": ["true"]}
        ]
        assert manifest["spec"]["additionalTolerations"] == [
            {
                "key": "nvidia.com/gpu",
                "operator": "Equal",
                "value": "present",
                "effect": "NoSchedule",
            }
        ]
        assert manifest["spec"]["packages"]["tuning"]["version"] == "1.1.0"
        values = _values(tmp_path, skyhook.NAME)
        assert values["controllerManager"]["selectors"] == {"nvidia.com/gpu.present": "true"}
        paths = {p for p, _ in verify_checksums(tmp_path / skyhook.NAME)}
        assert "manifests/tuning.yaml" in paths

    def test_customization_without_placement(self, tmp_path: Path) -> None:
        _build(tmp_path, skyhook.NAME, values={"customization": "nvidia-tuned"})
        manifest = yaml.safe_load(
            (tmp_path / skyhook.NAME / "manifests" / "nvidia-tuned.yaml").read_text(
                encoding="utf-8"
            )
        )
        assert "nodeSelectors" not in manifest["spec"]
        assert manifest["spec"]["packages"]["nvidia-tuned"]["configMap"]["intent"] == "h100"

    def test_customization_from_override(self, tmp_path: Path) -> None:
        config = BundlerConfig(value_overrides={"skyhook": {"customization": "tuning"}})
        _build(tmp_path, skyhook.NAME, config=config)
        assert (tmp_path / skyhook.NAME / "manifests" / "tuning.yaml").is_file()

    def test_unknown_customization_is_invalid_request(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidRequestError, match="nvidia-tuned, tuning"):
            _build(tmp_path, skyhook.NAME, values={"customization": "missing"})

    def test_list_customizations(self) -> None:
        assert skyhook.list_customizations() == ["nvidia-tuned", "tuning"]

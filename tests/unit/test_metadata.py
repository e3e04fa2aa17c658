"""Tests for operator_bundler.bundler.metadata and bundler.values."""
from __future__ import annotations

import yaml

from operator_bundler.bundler.metadata import (
    KEY_BUNDLER_VERSION,
    KEY_HELM_CHART_VERSION,
    KEY_HELM_REPOSITORY,
    KEY_NAMESPACE,
    KEY_RECIPE_VERSION,
    BundleMetadata,
    generate_default_bundle_metadata,
    get_bundler_version,
    get_config_value,
)
from operator_bundler.bundler.values import ValuesHeader, marshal_yaml, marshal_yaml_with_header


# ---------------------------------------------------------------------------
# Config-map lookups
# ---------------------------------------------------------------------------


class TestConfigLookups:
    def test_present(self) -> None:
        assert get_config_value({"k": "v"}, "k", "d") == "v"

    def test_missing_and_empty_use_default(self) -> None:
        assert get_config_value({}, "k", "d") == "d"
        assert get_config_value({"k": ""}, "k", "d") == "d"

    def test_bundler_version_default(self) -> None:
        assert get_bundler_version({}) == "dev"


# ---------------------------------------------------------------------------
# Default metadata
# ---------------------------------------------------------------------------


class TestGenerateDefaultBundleMetadata:
    def test_uses_config_map(self) -> None:
        meta = generate_default_bundle_metadata(
            {
                KEY_NAMESPACE: "gpu-operator",
                KEY_HELM_REPOSITORY: "https://example.com/charts",
                KEY_HELM_CHART_VERSION: "v25.3.0",
                KEY_BUNDLER_VERSION: "1.2.3",
                KEY_RECIPE_VERSION: "v0.9",
            },
            "gpu-operator",
            "https://helm.ngc.nvidia.com/nvidia",
            "nvidia/gpu-operator",
        )
        assert meta == BundleMetadata(
            namespace="gpu-operator",
            helm_repository="https://example.com/charts",
            helm_chart="nvidia/gpu-operator",
            helm_chart_version="v25.3.0",
            version="1.2.3",
            recipe_version="v0.9",
        )

    def test_falls_back_to_defaults(self) -> None:
        meta = generate_default_bundle_metadata(
            {KEY_HELM_REPOSITORY: ""},
            "cert-manager",
            "https://charts.jetstack.io",
            "jetstack/cert-manager",
            "v1.17.2",
        )
        assert meta.namespace == "cert-manager"
        assert meta.helm_repository == "https://charts.jetstack.io"
        assert meta.helm_chart_version == "v1.17.2"
        assert meta.version == "dev"
        assert meta.recipe_version == ""

    def test_extensions_copied(self) -> None:
        extensions = {"InstallCRDs": True}
        meta = generate_default_bundle_metadata({}, "c", "", "", extensions=extensions)
        extensions["InstallCRDs"] = False
        assert meta.extensions == {"InstallCRDs": True}


# ---------------------------------------------------------------------------
# values.yaml serialisation
# ---------------------------------------------------------------------------


class TestValuesSerialisation:
    def test_header(self) -> None:
        header = ValuesHeader("GPU Operator", "1.0.0", "v0.9")
        assert header.render() == (
            "# GPU Operator Helm values\n"
            "# Generated by operator-bundler 1.0.0\n"
            "# Recipe version: v0.9\n"
            "\n"
        )

    def test_header_without_recipe_version(self) -> None:
        assert "Recipe version" not in ValuesHeader("x", "dev", "").render()

    def test_sorted_keys_round_trip(self) -> None:
        text = marshal_yaml({"b": {"y": 1, "x": [1, 2]}, "a": True})
        assert text.index("a:") < text.index("b:")
        assert yaml.safe_load(text) == {"b": {"y": 1, "x": [1, 2]}, "a": True}

    def test_empty_values(self) -> None:
        out = marshal_yaml_with_header({}, ValuesHeader("x", "dev", ""))
        assert out.endswith("\n{}\n")

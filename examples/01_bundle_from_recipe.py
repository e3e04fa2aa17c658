#!/usr/bin/env python3
"""Example: Bundles From a Recipe

Builds cert-manager and skyhook-operator bundles from an inline recipe,
with a value override and GPU placement policy, then verifies the
checksum manifests.

Usage:
    python examples/01_bundle_from_recipe.py [OUTPUT_DIR]

Requirements:
    pip install operator-bundler
"""
from __future__ import annotations

import sys
from pathlib import Path

import operator_bundler
from operator_bundler import (
    BundlerConfig,
    RecipeResult,
    Toleration,
    build_default_registry,
    make_all,
)
from operator_bundler.bundler.checksums import verify_checksums


def main() -> None:
    print(f"operator-bundler version: {operator_bundler.__version__}")
    output_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "./bundles")

    # Step 1: Describe what to deploy
    recipe = RecipeResult.model_validate(
        {
            "metadata": {"version": "v0.9"},
            "criteria": {"service": "eks", "accelerator": "h100"},
            "componentRefs": [
                {"name": "cert-manager", "version": "v1.17.2"},
                {"name": "skyhook-operator", "values": {"customization": "tuning"}},
            ],
        }
    )

    # Step 2: Placement policy and overrides, as the CLI flags would set them
    config = BundlerConfig(
        version=operator_bundler.__version__,
        value_overrides={"certmanager": {"replicaCount": "2"}},
        system_node_selector={"nodeGroup": "system"},
        accelerated_node_selector={"nvidia.com/gpu.present": "true"},
        accelerated_node_tolerations=(
            Toleration(key="nvidia.com/gpu", value="present", effect="NoSchedule"),
        ),
    )

    # Step 3: Build both bundles concurrently
    registry = build_default_registry()
    output = make_all(registry, config, recipe, output_dir, recipe.component_names())
    for name, result in sorted(output.results.items()):
        print(f"\n{name}: {len(result.files)} file(s), {result.size} bytes")
        for path in result.files:
            print(f"  {path}")
    for name, error in output.errors.items():
        print(f"\n{name} failed: {error}")

    # Step 4: Verify what was written
    for name in output.results:
        checks = verify_checksums(output_dir / name)
        ok = sum(1 for _, valid in checks if valid)
        print(f"\n{name}: {ok}/{len(checks)} checksums valid")


if __name__ == "__main__":
    main()

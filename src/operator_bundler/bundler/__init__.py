"""Bundle assembly: orchestrator, helpers, and artifact generators.

Modules
-------
- generic     The fixed-order assembly pipeline and ComponentBundler.
- base        Per-build state and file/template/checksum helpers.
- descriptor  ComponentDescriptor plus manifest and metadata capabilities.
- metadata    Config-map keys and the default BundleMetadata record.
- templates   Template getters and the Jinja2 renderer.
- checksums   SHA-256 manifest generation and verification.
- values      values.yaml serialisation.
- result      The per-bundle Result record.
- runner      Concurrent multi-component builds.
"""
from __future__ import annotations

from operator_bundler.bundler.base import MANIFESTS_DIR, BaseBundler, BundleDirs
from operator_bundler.bundler.checksums import (
    CHECKSUMS_FILE,
    ChecksumGenerator,
    compute_checksum,
    verify_checksums,
)
from operator_bundler.bundler.descriptor import (
    ComponentDescriptor,
    ManifestProducer,
    MetadataProducer,
)
from operator_bundler.bundler.generic import (
    README_FILE,
    VALUES_FILE,
    Bundler,
    ComponentBundler,
    make_bundle,
)
from operator_bundler.bundler.metadata import (
    BundleMetadata,
    generate_default_bundle_metadata,
)
from operator_bundler.bundler.result import Result, ResultFinalizedError
from operator_bundler.bundler.runner import BuildOutput, make_all
from operator_bundler.bundler.templates import (
    TemplateGetter,
    TemplateRenderer,
    new_template_getter,
    standard_templates,
)

__all__ = [
    "CHECKSUMS_FILE",
    "MANIFESTS_DIR",
    "README_FILE",
    "VALUES_FILE",
    "BaseBundler",
    "BuildOutput",
    "BundleDirs",
    "BundleMetadata",
    "Bundler",
    "ChecksumGenerator",
    "ComponentBundler",
    "ComponentDescriptor",
    "ManifestProducer",
    "MetadataProducer",
    "Result",
    "ResultFinalizedError",
    "TemplateGetter",
    "TemplateRenderer",
    "compute_checksum",
    "generate_default_bundle_metadata",
    "make_all",
    "make_bundle",
    "new_template_getter",
    "standard_templates",
    "verify_checksums",
]

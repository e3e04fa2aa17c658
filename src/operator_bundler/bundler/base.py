"""Shared helpers for component bundlers.

:class:`BaseBundler` owns one build's mutable state, the
:class:`Result`, and exposes the file, template, checksum, and
cancellation helpers every pipeline step and component hook uses.
A ``BaseBundler`` is created per build and never shared between
concurrent builds.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from operator_bundler.bundler.checksums import ChecksumGenerator
from operator_bundler.bundler.metadata import KEY_BUNDLER_VERSION, KEY_RECIPE_VERSION
from operator_bundler.bundler.result import Result
from operator_bundler.bundler.templates import TemplateGetter, TemplateRenderer
from operator_bundler.cancellation import CancellationToken
from operator_bundler.config.settings import BundlerConfig
from operator_bundler.errors import ErrorCode, InternalError, wrap
from operator_bundler.recipe.models import RecipeInput

logger = logging.getLogger(__name__)

MANIFESTS_DIR = "manifests"

_FILE_MODE = 0o644


@dataclass(frozen=True)
class BundleDirs:
    """Directory layout of one component bundle."""

    root: Path
    manifests: Path


class BaseBundler:
    """Per-build state plus helpers used by the generic pipeline.

    Parameters
    ----------
    config:
        Shared read-only configuration.  A default config is used when
        ``None``.
    component:
        Identifier of the component being built.
    """

    def __init__(self, config: BundlerConfig | None, component: str) -> None:
        self.config = config if config is not None else BundlerConfig()
        self.component = component
        self.result = Result(component=component)

    # ------------------------------------------------------------------
    # Directories and files
    # ------------------------------------------------------------------

    def create_bundle_dir(self, output_dir: Path, name: str) -> BundleDirs:
        """Create ``<output_dir>/<name>`` and its ``manifests/`` subdirectory.

        Raises
        ------
        InternalError
            If a directory cannot be created.
        """
        root = Path(output_dir) / name
        dirs = BundleDirs(root=root, manifests=root / MANIFESTS_DIR)
        try:
            for directory in (dirs.root, dirs.manifests):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InternalError(f"failed to create bundle directory {root}", cause=exc) from exc
        return dirs

    def write_file(self, path: Path, content: str | bytes, mode: int = _FILE_MODE) -> Path:
        """Write *content* to *path*, creating parents, and record it.

        Raises
        ------
        InternalError
            If the file cannot be written.
        """
        data = content.encode("utf-8") if isinstance(content, str) else content
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            path.chmod(mode)
        except OSError as exc:
            raise InternalError(f"failed to write file {path}", cause=exc) from exc

        self.result.add_file(str(path), len(data))
        logger.debug("file written path=%s size_bytes=%d", path, len(data))
        return path

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def render_template(self, getter: TemplateGetter, name: str, context: Mapping[str, Any]) -> str:
        """Render template *name* resolved through *getter*."""
        return TemplateRenderer(getter).render(name, context)

    def generate_file_from_template(
        self,
        cancel: CancellationToken,
        getter: TemplateGetter,
        name: str,
        output_path: Path,
        context: Mapping[str, Any],
        mode: int = _FILE_MODE,
    ) -> Path:
        """Render *name* and write it to *output_path* in one step."""
        self.check_cancelled(cancel)
        content = self.render_template(getter, name, context)
        return self.write_file(output_path, content, mode)

    # ------------------------------------------------------------------
    # Checksums
    # ------------------------------------------------------------------

    def generate_checksums(self, cancel: CancellationToken, bundle_dir: Path) -> Path:
        """Write ``checksums.txt`` for every file under *bundle_dir*.

        Raises
        ------
        BundleTimeoutError
            If cancellation is observed while hashing.
        InternalError
            If a file cannot be read or the manifest cannot be written.
        """
        self.check_cancelled(cancel)
        generator = ChecksumGenerator(Path(bundle_dir))
        try:
            content = generator.render(cancel)
        except OSError as exc:
            raise wrap(ErrorCode.INTERNAL, "failed to compute checksums", exc) from exc
        return self.write_file(generator.manifest_path, content)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def check_cancelled(self, cancel: CancellationToken | None) -> None:
        """Raise :class:`BundleTimeoutError` if *cancel* is signalled."""
        if cancel is not None:
            cancel.raise_if_cancelled(f"{self.component}: context cancelled")

    def add_error(self, error: BaseException | str | None) -> None:
        self.result.add_error(error)

    def finalize(self, start: float) -> Result:
        """Record duration and mark the result successful and read-only."""
        self.result.finalize(start)
        return self.result

    def build_config_map_from_input(self, recipe: RecipeInput) -> dict[str, str]:
        """Return the baseline config map: bundler and recipe versions."""
        return {
            KEY_BUNDLER_VERSION: self.config.version,
            KEY_RECIPE_VERSION: recipe.get_recipe_version() or "",
        }


__all__ = [
    "MANIFESTS_DIR",
    "BaseBundler",
    "BundleDirs",
]

"""Concurrent builds of several components.

Each component is built by its own bundler instance on a worker thread.
The configuration and registry are shared read-only; value trees,
results, and bundle directories are never shared between builds.
"""
from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from operator_bundler.bundler.result import Result
from operator_bundler.cancellation import CancellationToken
from operator_bundler.config.settings import BundlerConfig
from operator_bundler.errors import BundleError, ErrorCode, wrap
from operator_bundler.recipe.models import RecipeInput

if TYPE_CHECKING:
    from operator_bundler.registry import ComponentRegistry

logger = logging.getLogger(__name__)


@dataclass
class BuildOutput:
    """Per-component outcome of :func:`make_all`.

    Attributes
    ----------
    results:
        Finalized results keyed by component identifier.
    errors:
        Classified failures keyed by component identifier.
    """

    results: dict[str, Result] = field(default_factory=dict)
    errors: dict[str, BundleError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total_files(self) -> int:
        return sum(len(r.files) for r in self.results.values())

    @property
    def total_size(self) -> int:
        return sum(r.size for r in self.results.values())


def make_all(
    registry: ComponentRegistry,
    config: BundlerConfig,
    recipe: RecipeInput,
    output_dir: Path,
    names: Iterable[str],
    cancel: CancellationToken | None = None,
    max_workers: int | None = None,
) -> BuildOutput:
    """Build every component in *names* concurrently.

    A failing component does not stop the others; its error is recorded
    in :attr:`BuildOutput.errors`.  Unknown identifiers are reported as
    invalid requests.

    Parameters
    ----------
    registry:
        Frozen component registry.
    config:
        Shared configuration.
    recipe:
        Recipe to build from.
    output_dir:
        Parent directory of the per-component bundle directories.
    names:
        Component identifiers to build.
    cancel:
        Shared cancellation signal observed by every build.
    max_workers:
        Thread pool size; defaults to the number of components.
    """
    output = BuildOutput()
    cancel = cancel if cancel is not None else CancellationToken()
    wanted = list(dict.fromkeys(names))
    if not wanted:
        return output

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=max_workers or len(wanted)
    ) as executor:
        futures: dict[concurrent.futures.Future[Result], str] = {}
        for name in wanted:
            if name not in registry:
                output.errors[name] = wrap(
                    ErrorCode.INVALID_REQUEST,
                    f"unknown component {name!r}",
                    KeyError(name),
                )
                continue
            try:
                bundler = registry.create(name, config)
            except Exception as exc:
                logger.error("could not create bundler for %s: %s", name, exc)
                output.errors[name] = wrap(
                    ErrorCode.INTERNAL, f"could not create bundler for {name}", exc
                )
                continue
            futures[executor.submit(bundler.make, recipe, Path(output_dir), cancel)] = name

        for future in concurrent.futures.as_completed(futures):
            name = futures[future]
            try:
                output.results[name] = future.result()
            except BundleError as exc:
                logger.error("bundle for %s failed: %s", name, exc)
                output.errors[name] = exc
            except Exception as exc:
                logger.error("bundle for %s failed unexpectedly: %s", name, exc)
                output.errors[name] = wrap(ErrorCode.INTERNAL, f"bundle for {name} failed", exc)

    return output


__all__ = [
    "BuildOutput",
    "make_all",
]

"""Per-bundle result record.

A :class:`Result` accumulates generated files and their byte sizes while
a build runs, is finalized exactly once, and is read-only afterwards.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field


class ResultFinalizedError(RuntimeError):
    """Raised when a finalized :class:`Result` is mutated."""


@dataclass
class Result:
    """Outcome of one component bundle build.

    Attributes
    ----------
    component:
        Identifier of the component the bundle was built for.
    files:
        Absolute paths of every file written, in write order.  Becomes a
        tuple once the result is finalized, as does ``errors``.
    size:
        Total bytes written across ``files``.
    duration:
        Elapsed build time in seconds; set by :meth:`finalize`.
    errors:
        Non-fatal error messages recorded during the build.
    success:
        True once the build finished every step.
    """

    component: str
    files: list[str] = field(default_factory=list)
    size: int = 0
    duration: float = 0.0
    errors: list[str] = field(default_factory=list)
    success: bool = False
    _finalized: bool = field(default=False, repr=False, compare=False)

    def _ensure_open(self) -> None:
        if self._finalized:
            raise ResultFinalizedError(
                f"result for {self.component!r} is finalized and cannot be modified"
            )

    def add_file(self, path: str, size: int) -> None:
        """Record a written file and add its size to the total."""
        self._ensure_open()
        self.files.append(path)
        self.size += size

    def add_error(self, error: BaseException | str | None) -> None:
        """Record a non-fatal error message.  ``None`` is ignored."""
        if error is None:
            return
        self._ensure_open()
        self.errors.append(str(error))

    def finalize(self, start: float) -> None:
        """Record the elapsed time since *start* and freeze the result.

        Parameters
        ----------
        start:
            A :func:`time.monotonic` reading taken when the build began.
        """
        self._ensure_open()
        self.duration = time.monotonic() - start
        self.success = True
        self.files = tuple(self.files)  # type: ignore[assignment]
        self.errors = tuple(self.errors)  # type: ignore[assignment]
        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized

    def __setattr__(self, name: str, value: object) -> None:
        if name != "_finalized" and getattr(self, "_finalized", False):
            raise ResultFinalizedError(
                f"result for {self.component!r} is finalized and cannot be modified"
            )
        super().__setattr__(name, value)

    def to_dict(self) -> dict[str, object]:
        """Return a plain-dict summary suitable for JSON output."""
        return {
            "component": self.component,
            "files": list(self.files),
            "size_bytes": self.size,
            "duration_seconds": round(self.duration, 6),
            "errors": list(self.errors),
            "success": self.success,
        }


__all__ = [
    "Result",
    "ResultFinalizedError",
]

"""Error taxonomy for bundle generation.

Every failure that aborts a component build is surfaced as a
:class:`BundleError` carrying a classification code.  The orchestrator
never retries; callers decide whether to retry the whole build.

Classes
-------
- ErrorCode              Classification enum (invalid request, internal, timeout).
- BundleError            Base exception carrying code, message, and cause.
- InvalidRequestError    Non-retryable caller error.
- InternalError          I/O, serialisation, or rendering failure.
- BundleTimeoutError     Cancellation or deadline observed.
- OverridePathError      A single override that could not be applied.
- OverrideMergeError     Aggregate of per-path override failures.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Classification attached to every :class:`BundleError`."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL = "INTERNAL"
    TIMEOUT = "TIMEOUT"


class BundleError(Exception):
    """Base error raised by the bundle assembly pipeline.

    Parameters
    ----------
    code:
        Classification of the failure.
    message:
        Human-readable context for the failure.
    cause:
        Optional underlying exception.
    """

    default_code: ErrorCode = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        self.code = code if code is not None else self.default_code
        self.message = message
        self.cause = cause
        detail = f"{message}: {cause}" if cause is not None else message
        super().__init__(f"[{self.code.value}] {detail}")

    @property
    def retryable(self) -> bool:
        """Return True when retrying the whole build may succeed."""
        return self.code is ErrorCode.TIMEOUT


class InvalidRequestError(BundleError):
    """The request cannot succeed as given (e.g. component missing from recipe)."""

    default_code = ErrorCode.INVALID_REQUEST


class InternalError(BundleError):
    """An internal step failed (I/O, serialisation, template rendering)."""

    default_code = ErrorCode.INTERNAL


class BundleTimeoutError(BundleError):
    """Cancellation was observed before the build completed."""

    default_code = ErrorCode.TIMEOUT


_CODE_TO_CLASS: dict[ErrorCode, type[BundleError]] = {
    ErrorCode.INVALID_REQUEST: InvalidRequestError,
    ErrorCode.INTERNAL: InternalError,
    ErrorCode.TIMEOUT: BundleTimeoutError,
}


def new_error(code: ErrorCode, message: str) -> BundleError:
    """Build a classified error without an underlying cause."""
    return _CODE_TO_CLASS[code](message)


def wrap(code: ErrorCode, message: str, exc: BaseException) -> BundleError:
    """Wrap *exc* in a classified error.

    An exception that is already a :class:`BundleError` is returned as-is
    so that the innermost classification wins.
    """
    if isinstance(exc, BundleError):
        return exc
    return _CODE_TO_CLASS[code](message, cause=exc)


# ---------------------------------------------------------------------------
# Override merge failures (non-fatal)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OverridePathError:
    """A single dot-notation override that was skipped.

    Attributes
    ----------
    path:
        The override path as supplied.
    reason:
        Why the path could not be applied.
    """

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class OverrideMergeError(ValueError):
    """Raised after a merge in which one or more overrides were skipped.

    All valid overrides have already been applied when this is raised;
    callers are expected to log it and continue.
    """

    def __init__(self, failures: list[OverridePathError]) -> None:
        self.failures = list(failures)
        joined = "; ".join(str(f) for f in self.failures)
        super().__init__(
            f"{len(self.failures)} override(s) could not be applied: {joined}"
        )


__all__ = [
    "BundleError",
    "BundleTimeoutError",
    "ErrorCode",
    "InternalError",
    "InvalidRequestError",
    "OverrideMergeError",
    "OverridePathError",
    "new_error",
    "wrap",
]

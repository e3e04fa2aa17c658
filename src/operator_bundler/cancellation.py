"""Cooperative cancellation signal for bundle builds.

A :class:`CancellationToken` is shared between a caller and one or more
builds.  The pipeline checks it at the start of a build and between
units of work in long-running steps (custom manifests, checksums).
Files written before cancellation is observed stay on disk.
"""
from __future__ import annotations

import threading
import time

from operator_bundler.errors import BundleTimeoutError


class CancellationToken:
    """Thread-safe cancellation flag with an optional deadline.

    Parameters
    ----------
    timeout:
        Optional number of seconds after which the token reports itself
        as cancelled.  ``None`` means no deadline.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Signal cancellation to every holder of this token."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return True once cancelled or past the deadline."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self, message: str = "context cancelled") -> None:
        """Raise :class:`BundleTimeoutError` if the token is cancelled."""
        if self.cancelled:
            raise BundleTimeoutError(message)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


__all__ = [
    "CancellationToken",
]

"""SHA-256 checksum manifest for a finished bundle directory."""
from __future__ import annotations

import hashlib
from pathlib import Path

from operator_bundler.cancellation import CancellationToken

CHECKSUMS_FILE = "checksums.txt"

_CHUNK_SIZE = 65_536


def compute_checksum(content: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of *content*."""
    return hashlib.sha256(content).hexdigest()


def sha256_file(file_path: Path) -> str:
    """Compute the SHA-256 hex digest of a file, reading in 64 KiB chunks."""
    hasher = hashlib.sha256()
    with file_path.open("rb") as fh:
        while True:
            chunk = fh.read(_CHUNK_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


class ChecksumGenerator:
    """Builds a deterministic checksum manifest for a bundle root.

    Every regular file under the root is listed as ``<relative-path>
    <hex-digest>``, one per line, sorted by POSIX relative path.  The
    manifest file itself is excluded, so regenerating it over an existing
    bundle yields the same bytes.

    Parameters
    ----------
    root:
        The bundle root directory.
    manifest_name:
        File name of the manifest at the root.
    """

    def __init__(self, root: Path, manifest_name: str = CHECKSUMS_FILE) -> None:
        self._root = root
        self._manifest_name = manifest_name

    def collect(self, cancel: CancellationToken | None = None) -> list[tuple[str, str]]:
        """Return sorted ``(relative_path, digest)`` pairs.

        Raises
        ------
        BundleTimeoutError
            If *cancel* is signalled between files.
        OSError
            If a file cannot be read.
        """
        entries: list[tuple[str, str]] = []
        for file_path in self._root.rglob("*"):
            if not file_path.is_file() or file_path.is_symlink():
                continue
            relative = file_path.relative_to(self._root).as_posix()
            if relative == self._manifest_name:
                continue
            if cancel is not None:
                cancel.raise_if_cancelled("checksum generation cancelled")
            entries.append((relative, sha256_file(file_path)))
        entries.sort(key=lambda e: e[0])
        return entries

    def render(self, cancel: CancellationToken | None = None) -> str:
        """Return the manifest text."""
        return "".join(f"{path} {digest}\n" for path, digest in self.collect(cancel))

    @property
    def manifest_path(self) -> Path:
        return self._root / self._manifest_name


def verify_checksums(root: Path, manifest_name: str = CHECKSUMS_FILE) -> list[tuple[str, bool]]:
    """Check every manifest entry against the files on disk.

    Returns
    -------
    list[tuple[str, bool]]
        ``(relative_path, is_valid)`` per manifest line.  A missing file
        is reported as invalid.
    """
    results: list[tuple[str, bool]] = []
    manifest = root / manifest_name
    for line in manifest.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        relative, _, digest = line.rpartition(" ")
        target = root / relative
        if not target.is_file():
            results.append((relative, False))
            continue
        results.append((relative, sha256_file(target) == digest))
    return results


__all__ = [
    "CHECKSUMS_FILE",
    "ChecksumGenerator",
    "compute_checksum",
    "sha256_file",
    "verify_checksums",
]

"""
Digest helpers for verifying source packages.
"""

from pathlib import Path

from cryptography.hazmat.primitives import hashes

from .exceptions import ChecksumMismatchError, SourceError

_CHUNK_SIZE = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Returns the hex SHA-256 digest of a file's contents."""
    digest = hashes.Hash(hashes.SHA256())
    with path.open("rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.finalize().hex()


def verify_sha256(path: Path, expected: str) -> str:
    """Raises ChecksumMismatchError unless `path` hashes to `expected`."""
    try:
        actual = sha256_file(path)
    except OSError as e:
        raise SourceError(f"Cannot read {path} for hashing: {e}") from e
    wanted = expected.strip().lower()
    if actual != wanted:
        raise ChecksumMismatchError(
            f"SHA-256 mismatch for {path.name}: expected {wanted}, got {actual}"
        )
    return actual

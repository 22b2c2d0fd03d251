# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SHA-256 helpers for rankr artifacts.

Persisted indexes carry a sidecar `.sha256` file. Loading an index recomputes
the digest and refuses to continue on mismatch: scoring against a silently
truncated postings file gives plausible-looking but wrong rankings, which is
much worse than an error.
"""

import hashlib
from pathlib import Path

HASH_BUFFER_SIZE = 65536  # 64 KiB
CHECKSUM_SUFFIX = ".sha256"


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA-256 hex digest of a file, reading it in 64 KiB chunks.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def compute_sha256_bytes(data: bytes) -> str:
    """SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def checksum_path(artifact_path: Path) -> Path:
    """Where the sidecar checksum for `artifact_path` lives."""
    return artifact_path.with_name(artifact_path.name + CHECKSUM_SUFFIX)


def verify_checksum(file_path: Path, expected_hash: str) -> bool:
    """True when the file's SHA-256 matches `expected_hash` (case-insensitive)."""
    return compute_sha256(file_path) == expected_hash.strip().lower()

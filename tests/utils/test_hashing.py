# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for SHA-256 helpers and checksum sidecars."""

import hashlib
from pathlib import Path

from rankr.utils.hashing import checksum_path, compute_sha256, compute_sha256_bytes, verify_checksum


class TestHashing:
    def test_file_digest_matches_hashlib(self, tmp_path: Path) -> None:
        path = tmp_path / "index.json"
        data = b"x" * 200_000
        path.write_bytes(data)
        assert compute_sha256(path) == hashlib.sha256(data).hexdigest()

    def test_bytes_digest(self) -> None:
        assert compute_sha256_bytes(b"") == hashlib.sha256(b"").hexdigest()

    def test_sidecar_path(self) -> None:
        assert checksum_path(Path("indexes/index.json")) == Path("indexes/index.json.sha256")

    def test_verify_is_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"abc")
        digest = compute_sha256(path)
        assert verify_checksum(path, digest.upper() + "\n")
        assert not verify_checksum(path, "0" * 64)

"""Unit tests for fingerprint strategies."""

import hashlib
import os
import re
import tempfile

import pytest

from proof_engine import (
    FULL_HASH_TAG,
    SAMPLED_TAG,
    AlgorithmMismatch,
    FullHashFingerprint,
    SampledFingerprint,
    get_fingerprint_strategy,
)


@pytest.fixture
def temp_file() -> str:
    """Create a temporary file with known content."""
    with tempfile.NamedTemporaryFile(mode="wb", delete=False, suffix=".bin") as f:
        f.write(b"test content for hashing")
        temp_path = f.name
    yield temp_path
    os.unlink(temp_path)


class TestFullHashFingerprint:
    """Tests for the full SHA-256 strategy."""

    def test_format(self) -> None:
        """Fingerprint is 'sha256:' followed by 64 lowercase hex characters."""
        fingerprint = FullHashFingerprint().fingerprint(b"abc")
        assert re.match(r"^sha256:[a-f0-9]{64}$", fingerprint)

    def test_matches_hashlib(self) -> None:
        data = os.urandom(50_000)
        expected = f"sha256:{hashlib.sha256(data).hexdigest()}"
        assert FullHashFingerprint().fingerprint(data) == expected

    def test_chunk_size_does_not_change_result(self) -> None:
        data = os.urandom(20_000)
        assert FullHashFingerprint(chunk_size=7).fingerprint(data) == (
            FullHashFingerprint().fingerprint(data)
        )

    def test_empty_buffer(self) -> None:
        assert FullHashFingerprint().fingerprint(b"") == f"sha256:{hashlib.sha256().hexdigest()}"

    def test_single_byte_change_detected(self) -> None:
        data = bytearray(os.urandom(10_000))
        before = FullHashFingerprint().fingerprint(bytes(data))
        data[5_000] ^= 0x01
        assert FullHashFingerprint().fingerprint(bytes(data)) != before

    def test_file_matches_buffer(self, temp_file: str) -> None:
        strategy = FullHashFingerprint()
        assert strategy.fingerprint_file(temp_file) == strategy.fingerprint(
            b"test content for hashing"
        )

    def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            FullHashFingerprint().fingerprint_file("/nonexistent/path/file.jpg")

    def test_tag(self) -> None:
        assert FullHashFingerprint().algorithm_tag == FULL_HASH_TAG


class TestSampledFingerprint:
    """Tests for the sampled strategy."""

    def test_format(self) -> None:
        fingerprint = SampledFingerprint().fingerprint(os.urandom(100_000))
        assert re.match(r"^sampled-sha256:[a-f0-9]{64}$", fingerprint)

    def test_deterministic(self) -> None:
        data = os.urandom(100_000)
        assert SampledFingerprint().fingerprint(data) == SampledFingerprint().fingerprint(data)

    def test_small_buffer_hashes_everything(self) -> None:
        """Buffers no longer than head + tail are hashed in full."""
        data = bytearray(os.urandom(6_000))
        before = SampledFingerprint().fingerprint(bytes(data))
        data[3_000] ^= 0xFF
        assert SampledFingerprint().fingerprint(bytes(data)) != before

    def test_head_and_tail_changes_detected(self) -> None:
        data = bytearray(os.urandom(200_000))
        before = SampledFingerprint().fingerprint(bytes(data))

        head = bytearray(data)
        head[10] ^= 0xFF
        tail = bytearray(data)
        tail[-10] ^= 0xFF

        assert SampledFingerprint().fingerprint(bytes(head)) != before
        assert SampledFingerprint().fingerprint(bytes(tail)) != before

    def test_length_change_detected(self) -> None:
        data = os.urandom(200_000)
        assert SampledFingerprint().fingerprint(data) != SampledFingerprint().fingerprint(
            data + b"\x00"
        )

    def test_unsampled_interior_change_is_not_detected(self) -> None:
        """Documented weakness: bytes between sample points are not covered."""
        strategy = SampledFingerprint(head_size=4, tail_size=4, sample_points=2)
        data = bytearray(100)
        before = strategy.fingerprint(bytes(data))
        # Interior is 92 bytes; samples sit at interior offsets 0 and 46.
        data[4 + 10] = 0xFF
        assert strategy.fingerprint(bytes(data)) == before

    def test_differs_from_full_hash(self) -> None:
        data = os.urandom(1_000)
        assert SampledFingerprint().fingerprint(data) != FullHashFingerprint().fingerprint(data)

    def test_tag(self) -> None:
        assert SampledFingerprint().algorithm_tag == SAMPLED_TAG


class TestGetFingerprintStrategy:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("full", FullHashFingerprint),
            (FULL_HASH_TAG, FullHashFingerprint),
            ("sampled", SampledFingerprint),
            (SAMPLED_TAG, SampledFingerprint),
        ],
    )
    def test_resolves_names_and_tags(self, name: str, expected: type) -> None:
        assert isinstance(get_fingerprint_strategy(name), expected)

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(AlgorithmMismatch):
            get_fingerprint_strategy("MD5-HMAC")

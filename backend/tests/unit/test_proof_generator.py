"""Unit tests for ProofGenerator class."""

import os
import re
import tempfile
from datetime import datetime, timezone

import pytest

from proof_engine import (
    Brightness,
    CommitmentBuilder,
    Crop,
    FullHashFingerprint,
    ProofGenerator,
    ProofInput,
    Rotate,
)


@pytest.fixture
def generator(signing_key: bytes) -> ProofGenerator:
    """Create a ProofGenerator instance."""
    return ProofGenerator(CommitmentBuilder(signing_key), FullHashFingerprint())


@pytest.fixture
def temp_output_file() -> str:
    """Create a temporary output file simulating an edited JPEG."""
    with tempfile.NamedTemporaryFile(mode="wb", delete=False, suffix=".jpg") as f:
        f.write(b"\xff\xd8\xff" + os.urandom(1024))
        temp_path = f.name
    yield temp_path
    os.unlink(temp_path)


class TestFingerprintFile:
    def test_file_fingerprint_matches_buffer(
        self, generator: ProofGenerator, temp_output_file: str
    ) -> None:
        with open(temp_output_file, "rb") as f:
            data = f.read()
        assert generator.fingerprint_file(temp_output_file) == generator.compute_fingerprint(data)

    def test_missing_file(self, generator: ProofGenerator) -> None:
        with pytest.raises(FileNotFoundError):
            generator.fingerprint_file("/nonexistent/path/edited.jpg")


class TestGenerateProof:
    """Tests for generate_proof method."""

    def test_generate_proof_fields(self, generator: ProofGenerator) -> None:
        proof = generator.generate_proof(b"original", b"edited", [Crop(x=0, y=0, width=1, height=1)])

        assert proof.version == 1
        assert proof.algorithm_tag == "FULLHASH-HMAC"
        assert proof.transformation_count == 1
        assert re.match(r"^[a-f0-9]{64}$", proof.transformation_commitment)
        assert re.match(r"^[a-f0-9]{64}$", proof.binding_commitment)
        assert re.match(r"^[a-f0-9]{32}$", proof.nonce)

    def test_created_at_defaults_to_utc_now(self, generator: ProofGenerator) -> None:
        before = datetime.now(timezone.utc)
        proof = generator.generate_proof(b"a", b"b", [])
        after = datetime.now(timezone.utc)
        assert before <= proof.created_at <= after

    def test_explicit_timestamp_and_nonce(self, generator: ProofGenerator) -> None:
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        proof = generator.generate_proof(b"a", b"b", [], created_at=created, nonce=bytes(16))
        assert proof.created_at == created
        assert proof.nonce == "0" * 32

    def test_nonce_length_enforced(self, generator: ProofGenerator) -> None:
        with pytest.raises(ValueError):
            generator.generate_proof(b"a", b"b", [], nonce=b"short")

    def test_images_are_not_embedded(self, generator: ProofGenerator) -> None:
        marker = b"UNIQUE-ORIGINAL-MARKER"
        proof = generator.generate_proof(marker, b"edited", [])
        assert marker.decode() not in proof.model_dump_json()

    def test_from_fingerprints_matches_from_bytes(self, generator: ProofGenerator) -> None:
        chain = [Rotate(angle=90)]
        from_bytes = generator.generate_proof(b"a", b"b", chain)
        from_fps = generator.generate_proof_from_fingerprints(
            generator.compute_fingerprint(b"a"), generator.compute_fingerprint(b"b"), chain
        )
        assert from_bytes.binding_commitment == from_fps.binding_commitment


class TestGenerateProofsBatch:
    def test_batch_preserves_order(self, generator: ProofGenerator) -> None:
        items = [
            ProofInput(f"original-{i}".encode(), f"edited-{i}".encode(), [Brightness(offset=i)])
            for i in range(8)
        ]
        proofs = generator.generate_proofs_batch(items, max_workers=4)

        assert len(proofs) == 8
        for item, proof in zip(items, proofs):
            single = generator.generate_proof(*item)
            assert proof.original_fingerprint == generator.compute_fingerprint(item.original_image)
            assert proof.binding_commitment == single.binding_commitment

    def test_batch_items_are_independent(self, generator: ProofGenerator) -> None:
        items = [ProofInput(b"same", b"same", []), ProofInput(b"same", b"same", [])]
        first, second = generator.generate_proofs_batch(items)
        assert first.binding_commitment == second.binding_commitment
        assert first.nonce != second.nonce

    def test_empty_batch(self, generator: ProofGenerator) -> None:
        assert generator.generate_proofs_batch([]) == []

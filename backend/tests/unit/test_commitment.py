"""Unit tests for transformation and binding commitments."""

import hashlib
import hmac

import pytest

from proof_engine import (
    EMPTY_CHAIN_COMMITMENT,
    Brightness,
    CommitmentBuilder,
    Contrast,
    Crop,
    RedactRegion,
    Rotate,
    SigningKeyError,
)

KEY = b"commitment-test-key"


@pytest.fixture
def builder() -> CommitmentBuilder:
    return CommitmentBuilder(KEY)


class TestTransformationCommitment:
    """Tests for the sequential SHA-256 chain."""

    def test_empty_chain_is_zero_sentinel(self, builder: CommitmentBuilder) -> None:
        assert builder.transformation_commitment([]) == bytes(32)
        assert EMPTY_CHAIN_COMMITMENT == bytes(32)

    def test_single_transformation_is_hash_of_encoding(self, builder: CommitmentBuilder) -> None:
        crop = Crop(x=0, y=0, width=10, height=10)
        expected = hashlib.sha256(crop.canonical_encoding()).digest()
        assert builder.transformation_commitment([crop]) == expected

    def test_chain_folds_previous_accumulator(self, builder: CommitmentBuilder) -> None:
        first, second = Rotate(angle=90), Brightness(offset=10)
        acc0 = hashlib.sha256(first.canonical_encoding()).digest()
        expected = hashlib.sha256(
            acc0 + hashlib.sha256(second.canonical_encoding()).digest()
        ).digest()
        assert builder.transformation_commitment([first, second]) == expected

    def test_order_sensitive(self, builder: CommitmentBuilder) -> None:
        a, b = Brightness(offset=20), Contrast(factor=1.2)
        assert builder.transformation_commitment([a, b]) != builder.transformation_commitment(
            [b, a]
        )

    def test_insertion_and_deletion_detected(self, builder: CommitmentBuilder) -> None:
        chain = [Crop(x=0, y=0, width=5, height=5), Rotate(angle=45)]
        base = builder.transformation_commitment(chain)
        assert builder.transformation_commitment(chain[:1]) != base
        assert builder.transformation_commitment(chain + [Rotate(angle=0)]) != base

    def test_parameter_change_detected(self, builder: CommitmentBuilder) -> None:
        assert builder.transformation_commitment(
            [RedactRegion(x=0, y=0, width=5, height=5)]
        ) != builder.transformation_commitment([RedactRegion(x=0, y=0, width=5, height=6)])

    def test_independent_of_key(self) -> None:
        chain = [Rotate(angle=90)]
        assert CommitmentBuilder(b"one").transformation_commitment(chain) == CommitmentBuilder(
            b"two"
        ).transformation_commitment(chain)


class TestBindingCommitment:
    """Tests for the keyed binding commitment."""

    def test_matches_framed_hmac(self, builder: CommitmentBuilder) -> None:
        tc = bytes(32)
        message = (
            (9).to_bytes(4, "big")
            + b"sha256:aa"
            + (9).to_bytes(4, "big")
            + b"sha256:bb"
            + (32).to_bytes(4, "big")
            + tc
        )
        expected = hmac.new(KEY, message, hashlib.sha256).digest()
        assert builder.binding_commitment("sha256:aa", "sha256:bb", tc) == expected

    def test_key_dependent(self) -> None:
        args = ("sha256:aa", "sha256:bb", bytes(32))
        assert CommitmentBuilder(b"k1").binding_commitment(*args) != CommitmentBuilder(
            b"k2"
        ).binding_commitment(*args)

    def test_field_boundaries_are_unambiguous(self, builder: CommitmentBuilder) -> None:
        """Moving bytes between adjacent fields changes the binding."""
        tc = bytes(32)
        assert builder.binding_commitment("ab", "c", tc) != builder.binding_commitment(
            "a", "bc", tc
        )

    def test_swapped_fingerprints_differ(self, builder: CommitmentBuilder) -> None:
        tc = bytes(32)
        assert builder.binding_commitment("x", "y", tc) != builder.binding_commitment("y", "x", tc)

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(SigningKeyError):
            CommitmentBuilder(b"")

    def test_key_is_copied(self) -> None:
        key = bytearray(b"mutable-key")
        builder = CommitmentBuilder(key)
        before = builder.binding_commitment("a", "b", bytes(32))
        key[0] = 0
        assert builder.binding_commitment("a", "b", bytes(32)) == before

"""Transformation and binding commitments.

The transformation commitment is a sequential SHA-256 chain over the
canonical encodings of the edit chain::

    acc_0 = H(enc(t_0))
    acc_i = H(acc_{i-1} || H(enc(t_i)))

so reordering, inserting, deleting or altering any step changes the result.
An empty chain commits to 32 zero bytes.

The binding commitment is HMAC-SHA256, keyed by the producer's secret, over
the original fingerprint, the edited fingerprint and the transformation
commitment. Each field is framed with a 4-byte big-endian length.

Holding the key is what makes a proof: anyone with the key can mint proofs
for arbitrary inputs, and without it no proof can be produced or checked.
"""

import hashlib
import hmac
from typing import Sequence

from .exceptions import SigningKeyError
from .transformations import BaseTransformation

DIGEST_SIZE = hashlib.sha256().digest_size
EMPTY_CHAIN_COMMITMENT = bytes(DIGEST_SIZE)


def _frame(field: bytes) -> bytes:
    return len(field).to_bytes(4, "big") + field


class CommitmentBuilder:
    """Builds commitments with an explicitly injected MAC key."""

    def __init__(self, key: bytes) -> None:
        if not key:
            raise SigningKeyError("A non-empty MAC key is required to build commitments")
        # Private immutable copy: the key cannot change under a running batch.
        self._key = bytes(key)

    @staticmethod
    def hash_transformation(transformation: BaseTransformation) -> bytes:
        return hashlib.sha256(transformation.canonical_encoding()).digest()

    def transformation_commitment(self, transformations: Sequence[BaseTransformation]) -> bytes:
        """Fold the ordered edit chain into a single 32-byte commitment."""
        if not transformations:
            return EMPTY_CHAIN_COMMITMENT

        accumulator = self.hash_transformation(transformations[0])
        for transformation in transformations[1:]:
            accumulator = hashlib.sha256(
                accumulator + self.hash_transformation(transformation)
            ).digest()
        return accumulator

    def binding_commitment(
        self,
        original_fingerprint: str,
        edited_fingerprint: str,
        transformation_commitment: bytes,
    ) -> bytes:
        """HMAC-SHA256 over both fingerprints and the transformation commitment."""
        message = b"".join(
            (
                _frame(original_fingerprint.encode("utf-8")),
                _frame(edited_fingerprint.encode("utf-8")),
                _frame(transformation_commitment),
            )
        )
        return hmac.new(self._key, message, hashlib.sha256).digest()

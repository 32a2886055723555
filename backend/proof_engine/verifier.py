"""Proof verification."""

import hmac
import logging
from typing import Sequence

from .commitment import CommitmentBuilder
from .exceptions import AlgorithmMismatch
from .fingerprint import FingerprintStrategy
from .models import ProofRecord
from .transformations import BaseTransformation

logger = logging.getLogger(__name__)


class ProofVerifier:
    """Recomputes commitments from claimed inputs and compares them to a proof."""

    def __init__(self, builder: CommitmentBuilder, strategy: FingerprintStrategy) -> None:
        self.builder = builder
        self.strategy = strategy

    def verify(
        self,
        proof: ProofRecord,
        original_fingerprint: str,
        edited_fingerprint: str,
        transformations: Sequence[BaseTransformation],
    ) -> bool:
        """Check a decoded proof against fingerprints and an edit chain.

        Returns:
            True only if fingerprints, transformation count, transformation
            commitment and binding commitment all match. Any mismatch is a
            plain False.

        Raises:
            AlgorithmMismatch: The proof was produced with a different
                fingerprint strategy (or an unknown one).
        """
        if proof.algorithm_tag != self.strategy.algorithm_tag:
            raise AlgorithmMismatch(
                f"Proof uses '{proof.algorithm_tag}', verifier is configured "
                f"for '{self.strategy.algorithm_tag}'"
            )

        if proof.original_fingerprint != original_fingerprint:
            logger.info("Verification failed: original fingerprint mismatch")
            return False
        if proof.edited_fingerprint != edited_fingerprint:
            logger.info("Verification failed: edited fingerprint mismatch")
            return False

        # Fail closed before any hashing when the chain length disagrees.
        if proof.transformation_count != len(transformations):
            logger.info(
                f"Verification failed: proof covers {proof.transformation_count} "
                f"transformations, {len(transformations)} supplied"
            )
            return False

        transformation_commitment = self.builder.transformation_commitment(transformations)
        if transformation_commitment != proof.transformation_commitment_bytes:
            logger.info("Verification failed: transformation commitment mismatch")
            return False

        expected_binding = self.builder.binding_commitment(
            original_fingerprint, edited_fingerprint, transformation_commitment
        )
        if not hmac.compare_digest(expected_binding, proof.binding_commitment_bytes):
            logger.info("Verification failed: binding commitment mismatch")
            return False

        return True

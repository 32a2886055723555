"""Proof generation for edited images."""

import logging
import secrets
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import NamedTuple, Sequence

from .commitment import CommitmentBuilder
from .fingerprint import FingerprintStrategy
from .models import NONCE_SIZE, PROOF_VERSION, ProofRecord
from .transformations import BaseTransformation

logger = logging.getLogger(__name__)


class ProofInput(NamedTuple):
    """One independent item of a batch."""

    original_image: bytes
    edited_image: bytes
    transformations: Sequence[BaseTransformation]


class ProofGenerator:
    """Generates proof records binding an original, an edit chain and its result."""

    def __init__(self, builder: CommitmentBuilder, strategy: FingerprintStrategy) -> None:
        """Initialize the ProofGenerator.

        Args:
            builder: Commitment builder holding the producer's MAC key.
            strategy: Fingerprint strategy; its tag is written into every proof.
        """
        self.builder = builder
        self.strategy = strategy

    @property
    def algorithm_tag(self) -> str:
        return self.strategy.algorithm_tag

    def compute_fingerprint(self, data: bytes) -> str:
        """Fingerprint an image buffer with the configured strategy."""
        return self.strategy.fingerprint(data)

    def fingerprint_file(self, file_path: str) -> str:
        """Fingerprint a file on disk.

        Raises:
            FileNotFoundError: If the file does not exist.
            FileHashError: If there's an error reading the file.
        """
        return self.strategy.fingerprint_file(file_path)

    def generate_proof(
        self,
        original_image: bytes,
        edited_image: bytes,
        transformations: Sequence[BaseTransformation],
        created_at: datetime | None = None,
        nonce: bytes | None = None,
    ) -> ProofRecord:
        """Generate a proof record for an edit.

        The image buffers are only fingerprinted; they are never decoded and
        never embedded in the record.

        Args:
            original_image: Bytes of the source image.
            edited_image: Bytes of the published, edited image.
            transformations: Ordered edit chain that produced ``edited_image``.
            created_at: Timestamp to record (defaults to now, UTC).
            nonce: 16 random bytes (generated when omitted).

        Returns:
            The immutable :class:`ProofRecord`.
        """
        return self.generate_proof_from_fingerprints(
            self.compute_fingerprint(original_image),
            self.compute_fingerprint(edited_image),
            transformations,
            created_at=created_at,
            nonce=nonce,
        )

    def generate_proof_from_fingerprints(
        self,
        original_fingerprint: str,
        edited_fingerprint: str,
        transformations: Sequence[BaseTransformation],
        created_at: datetime | None = None,
        nonce: bytes | None = None,
    ) -> ProofRecord:
        if nonce is None:
            nonce = secrets.token_bytes(NONCE_SIZE)
        elif len(nonce) != NONCE_SIZE:
            raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")

        transformation_commitment = self.builder.transformation_commitment(transformations)
        binding_commitment = self.builder.binding_commitment(
            original_fingerprint, edited_fingerprint, transformation_commitment
        )

        proof = ProofRecord(
            version=PROOF_VERSION,
            algorithm_tag=self.algorithm_tag,
            original_fingerprint=original_fingerprint,
            edited_fingerprint=edited_fingerprint,
            transformation_commitment=transformation_commitment.hex(),
            binding_commitment=binding_commitment.hex(),
            transformation_count=len(transformations),
            created_at=created_at or datetime.now(timezone.utc),
            nonce=nonce.hex(),
        )

        logger.info(
            f"Generated {self.algorithm_tag} proof over {len(transformations)} transformation(s)"
        )
        return proof

    def generate_proofs_batch(
        self, items: Sequence[ProofInput], max_workers: int | None = None
    ) -> list[ProofRecord]:
        """Generate independent proofs in parallel, preserving input order.

        All items share this generator's key and strategy; nothing else is
        shared between them.
        """
        if not items:
            return []
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(
                pool.map(
                    lambda item: self.generate_proof(
                        item.original_image, item.edited_image, item.transformations
                    ),
                    items,
                )
            )

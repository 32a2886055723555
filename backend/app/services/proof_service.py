"""
Image Proof Service

Orchestrates editing, proving, storing and re-verifying images on top of
the proof protocol and the proof store.
"""

import logging
import time
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from proof_engine import (
    BaseTransformation,
    ImageInfo,
    ProofEngineError,
    ProofInput,
    ProofProtocol,
    ProofRecord,
    decode_proof,
    decode_proof_token,
    encode_proof,
)

from app.middleware.error_handler import (
    ProofImportError,
    ProofNotFoundError,
    StorageWriteError,
)
from app.models import ProofMetadata, ProofStatistics, StoredProof, VerificationStatus

from .proof_store import ProofStore, is_valid_proof_id

logger = logging.getLogger(__name__)


def _rate(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive bounds are taken as UTC so they compare with stored timestamps.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ImageProofService:
    """Business logic for image proofs."""

    def __init__(
        self,
        protocol: ProofProtocol,
        store: ProofStore,
        batch_max_workers: Optional[int] = None,
    ):
        self.protocol = protocol
        self.store = store
        self.batch_max_workers = batch_max_workers

    def create_proof(
        self,
        original_image: bytes,
        transformations: Sequence[BaseTransformation],
        signer_id: Optional[str] = None,
    ) -> Tuple[StoredProof, bytes]:
        """
        Apply an edit chain, prove it and store the result.

        Returns:
            (stored proof with status "pending", edited image bytes)

        Raises:
            UnsupportedFormat, SizeExceeded, InvalidTransformation: From the engine
            StorageWriteError: If the store cannot persist the proof
        """
        start = time.perf_counter()

        info = self.protocol.engine.inspect(original_image)
        edited_image = self.protocol.apply_transformations(original_image, transformations)
        record = self.protocol.generate_proof(original_image, edited_image, transformations)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        stored = self._store(record, transformations, info, edited_image, signer_id, elapsed_ms)
        logger.info(
            f"Created proof {stored.id}: {len(transformations)} transformation(s) "
            f"in {elapsed_ms}ms"
        )
        return stored, edited_image

    def create_proofs_batch(
        self,
        original_images: Sequence[bytes],
        transformations: Sequence[BaseTransformation],
        signer_id: Optional[str] = None,
    ) -> List[StoredProof]:
        """
        Apply one edit chain to several images and prove them in parallel.

        All images are edited before any proof is generated, so an engine
        error on one image stores nothing.

        Returns:
            Stored proofs in input order
        """
        start = time.perf_counter()

        infos = [self.protocol.engine.inspect(image) for image in original_images]
        edited_images = [
            self.protocol.apply_transformations(image, transformations)
            for image in original_images
        ]
        records = self.protocol.generator.generate_proofs_batch(
            [
                ProofInput(original, edited, transformations)
                for original, edited in zip(original_images, edited_images)
            ],
            max_workers=self.batch_max_workers,
        )
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        stored_proofs = [
            self._store(record, transformations, info, edited, signer_id, elapsed_ms)
            for record, info, edited in zip(records, infos, edited_images)
        ]
        logger.info(f"Created {len(stored_proofs)} proofs in batch in {elapsed_ms}ms")
        return stored_proofs

    def _store(
        self,
        record: ProofRecord,
        transformations: Sequence[BaseTransformation],
        info: ImageInfo,
        edited_image: bytes,
        signer_id: Optional[str],
        elapsed_ms: int,
    ) -> StoredProof:
        encoding = self.protocol.engine.encoding
        stored = StoredProof(
            id=str(uuid.uuid4()),
            record=record,
            transformations=list(transformations),
            signer_id=signer_id,
            proof_size=len(encode_proof(record)),
            created_at=record.created_at,
            metadata=ProofMetadata(
                width=info.width,
                height=info.height,
                megapixels=info.megapixels,
                generation_time_ms=elapsed_ms,
                output_format=encoding.format,
            ),
        )

        try:
            self.store.save(stored, edited_image, extension=encoding.extension)
        except OSError as e:
            raise StorageWriteError(str(e)) from e
        return stored

    def verify_stored(self, proof_id: str) -> Tuple[StoredProof, bool]:
        """
        Re-verify a stored proof against its stored edited image.

        Expired proofs are never re-verified. Engine errors, including an
        unreadable edited image, mark the proof as failed and are re-raised.

        Raises:
            ProofNotFoundError: If the proof does not exist
        """
        stored = self.get(proof_id)
        if stored.status == VerificationStatus.EXPIRED:
            logger.info(f"Skipping verification of expired proof {proof_id}")
            return stored, False

        edited_fingerprint = stored.record.edited_fingerprint
        image_path = self.store.get_edited_image_path(proof_id)

        try:
            if image_path is not None:
                edited_fingerprint = self.protocol.generator.fingerprint_file(str(image_path))
            valid = self.protocol.verify_proof(
                stored.record,
                stored.record.original_fingerprint,
                edited_fingerprint,
                stored.transformations,
            )
        except (ProofEngineError, FileNotFoundError):
            self.store.update_status(proof_id, VerificationStatus.FAILED)
            raise

        status = VerificationStatus.VERIFIED if valid else VerificationStatus.FAILED
        updated = self.store.update_status(proof_id, status, datetime.now(timezone.utc))
        logger.info(f"Verified stored proof {proof_id}: {status.value}")
        return updated or stored.with_status(status), valid

    def verify_document(
        self,
        proof: Union[str, Mapping[str, Any]],
        original_fingerprint: str,
        edited_fingerprint: str,
        transformations: Sequence[BaseTransformation],
    ) -> Tuple[ProofRecord, bool]:
        """
        Verify a caller-supplied proof document (JSON object, JSON text or token).

        Raises:
            MalformedProof: If the document cannot be decoded
            AlgorithmMismatch: If the proof uses a different fingerprint strategy
        """
        if isinstance(proof, str) and not proof.lstrip().startswith("{"):
            record = decode_proof_token(proof)
        else:
            record = decode_proof(proof)

        valid = self.protocol.verify_proof(
            record, original_fingerprint, edited_fingerprint, transformations
        )
        return record, valid

    def get(self, proof_id: str) -> StoredProof:
        stored = self.store.get(proof_id)
        if stored is None:
            raise ProofNotFoundError(proof_id)
        return stored

    def list(
        self,
        status: Optional[VerificationStatus] = None,
        signer_id: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[StoredProof]:
        """List proofs newest first, filtered and paged."""
        return self.store.list(
            status=status,
            signer_id=signer_id,
            created_after=_as_utc(created_after),
            created_before=_as_utc(created_before),
            limit=limit,
            offset=offset,
        )

    def delete(self, proof_id: str) -> None:
        if not self.store.delete(proof_id):
            raise ProofNotFoundError(proof_id)

    def delete_many(self, proof_ids: Sequence[str]) -> Tuple[List[str], List[str]]:
        """
        Delete several proofs.

        Returns:
            (deleted IDs, IDs that were invalid or not stored)
        """
        deleted, missing = [], []
        for proof_id in dict.fromkeys(proof_ids):
            if self.store.delete(proof_id):
                deleted.append(proof_id)
            else:
                missing.append(proof_id)
        logger.info(f"Bulk delete removed {len(deleted)} proof(s), {len(missing)} not found")
        return deleted, missing

    def export_proofs(self) -> List[StoredProof]:
        """All stored proof envelopes, newest first. Edited images are not included."""
        proofs = self.store.list()
        logger.info(f"Exported {len(proofs)} proof(s)")
        return proofs

    def import_proofs(self, proofs: Sequence[StoredProof]) -> int:
        """
        Restore proof envelopes from an export, replacing proofs with the same ID.

        Nothing is written if any proof has an invalid ID.

        Raises:
            ProofImportError: If any proof ID is not a UUID
            StorageWriteError: If the store cannot persist a proof
        """
        invalid = [p.id for p in proofs if not is_valid_proof_id(p.id)]
        if invalid:
            raise ProofImportError(invalid)

        for stored in proofs:
            try:
                self.store.save(stored)
            except OSError as e:
                raise StorageWriteError(str(e)) from e
        logger.info(f"Imported {len(proofs)} proof(s)")
        return len(proofs)

    def statistics(self) -> ProofStatistics:
        """Aggregate counts and rates over all stored proofs."""
        proofs = self.store.list()
        total = len(proofs)
        by_status = Counter(p.status for p in proofs)
        anonymous = sum(1 for p in proofs if p.is_anonymous_signer)
        total_size = sum(p.proof_size for p in proofs)

        return ProofStatistics(
            totalProofs=total,
            verifiedProofs=by_status[VerificationStatus.VERIFIED],
            failedProofs=by_status[VerificationStatus.FAILED],
            expiredProofs=by_status[VerificationStatus.EXPIRED],
            anonymousProofs=anonymous,
            averageProofSize=total_size / total if total > 0 else 0.0,
            algorithmCounts=dict(Counter(p.record.algorithm_tag for p in proofs)),
            verificationRate=_rate(by_status[VerificationStatus.VERIFIED], total),
            failureRate=_rate(by_status[VerificationStatus.FAILED], total),
            anonymityRate=_rate(anonymous, total),
        )

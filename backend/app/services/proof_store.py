"""
Proof Store Service

Filesystem-backed key-value store for proofs and their edited images.
Layout: {base_path}/proofs/{proof_id}/proof.json (+ edited.{ext})
"""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError

from app.models.stored_proof import StoredProof, VerificationStatus

logger = logging.getLogger(__name__)

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_proof_id(proof_id: str) -> bool:
    """
    Validate that proof_id is a UUID to prevent path traversal.

    Args:
        proof_id: The proof ID to validate

    Returns:
        bool: True if valid UUID format, False otherwise
    """
    try:
        UUID(proof_id)
    except (ValueError, AttributeError, TypeError):
        return False
    return bool(_UUID_PATTERN.match(proof_id))


class ProofStore:
    """
    Stores proof envelopes as JSON documents on the filesystem.

    The protocol treats this as an opaque store: save, get, delete, list.
    """

    def __init__(self, base_path: str):
        """
        Initialize ProofStore with base storage path.

        Args:
            base_path: Base directory for all storage operations
        """
        self.base_path = Path(base_path)
        self.proofs_path = self.base_path / "proofs"

    def _proof_dir(self, proof_id: str) -> Path:
        if not is_valid_proof_id(proof_id):
            raise ValueError(f"Invalid proof ID: {proof_id!r}")
        return self.proofs_path / proof_id

    def save(
        self,
        stored: StoredProof,
        edited_image: Optional[bytes] = None,
        extension: str = "jpg",
    ) -> str:
        """
        Save a proof envelope, replacing any existing one with the same ID.

        Args:
            stored: Proof envelope to persist
            edited_image: Optional edited image bytes stored beside the proof
            extension: File extension for the edited image

        Returns:
            str: Full path to the saved proof.json

        Raises:
            ValueError: If the proof ID is not a UUID
            OSError: If directory creation or file write fails
        """
        proof_dir = self._proof_dir(stored.id)
        proof_path = proof_dir / "proof.json"

        try:
            proof_dir.mkdir(parents=True, exist_ok=True)
            proof_path.write_text(stored.model_dump_json(by_alias=True, indent=2))
            proof_path.chmod(0o644)

            if edited_image is not None:
                image_path = proof_dir / f"edited.{extension}"
                image_path.write_bytes(edited_image)
                image_path.chmod(0o644)

            logger.info(f"Saved proof {stored.id} to {proof_path}")
            return str(proof_path)

        except OSError as e:
            logger.error(f"Failed to save proof {stored.id}: {str(e)}")
            raise OSError(f"Failed to save proof: {str(e)}") from e

    def get(self, proof_id: str) -> Optional[StoredProof]:
        """
        Load a proof envelope.

        Returns:
            StoredProof if it exists and parses, None otherwise
        """
        if not is_valid_proof_id(proof_id):
            logger.warning(f"Rejected invalid proof ID: {proof_id!r}")
            return None

        proof_path = self.proofs_path / proof_id / "proof.json"
        if not proof_path.exists():
            logger.warning(f"Proof not found: {proof_id}")
            return None

        try:
            return StoredProof.model_validate_json(proof_path.read_text())
        except ValidationError as e:
            logger.error(f"Failed to parse proof {proof_id}: {str(e)}")
            return None
        except OSError as e:
            logger.error(f"Failed to read proof {proof_id}: {str(e)}")
            return None

    def delete(self, proof_id: str) -> bool:
        """
        Delete a proof and its edited image.

        Returns:
            bool: True if something was deleted
        """
        if not is_valid_proof_id(proof_id):
            return False

        proof_dir = self.proofs_path / proof_id
        if not proof_dir.exists():
            return False

        shutil.rmtree(proof_dir)
        logger.info(f"Deleted proof {proof_id}")
        return True

    def list(
        self,
        status: Optional[VerificationStatus] = None,
        signer_id: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[StoredProof]:
        """
        List stored proofs matching all given filters, newest first.

        Date bounds are exclusive. ``offset`` and ``limit`` page through the
        filtered, sorted result.
        """
        if not self.proofs_path.exists():
            return []

        proofs = []
        for proof_dir in self.proofs_path.iterdir():
            if not proof_dir.is_dir():
                continue
            stored = self.get(proof_dir.name)
            if stored is None:
                continue
            if status is not None and stored.status != status:
                continue
            if signer_id is not None and stored.signer_id != signer_id:
                continue
            if created_after is not None and stored.created_at <= created_after:
                continue
            if created_before is not None and stored.created_at >= created_before:
                continue
            proofs.append(stored)

        proofs.sort(key=lambda p: p.created_at, reverse=True)
        end = None if limit is None else offset + limit
        return proofs[offset:end]

    def update_status(
        self,
        proof_id: str,
        status: VerificationStatus,
        verified_at: Optional[datetime] = None,
    ) -> Optional[StoredProof]:
        """
        Replace the verification status of a stored proof.

        Returns:
            The updated StoredProof, or None if the proof does not exist
        """
        stored = self.get(proof_id)
        if stored is None:
            return None

        updated = stored.with_status(status, verified_at)
        self.save(updated)
        logger.info(f"Proof {proof_id} status -> {status.value}")
        return updated

    def get_edited_image_path(self, proof_id: str) -> Optional[Path]:
        """Return the path of the stored edited image, if any."""
        if not is_valid_proof_id(proof_id):
            return None

        proof_dir = self.proofs_path / proof_id
        if not proof_dir.exists():
            return None
        for candidate in sorted(proof_dir.glob("edited.*")):
            return candidate
        return None

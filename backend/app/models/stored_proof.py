"""Pydantic models for stored proofs and their verification bookkeeping."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from proof_engine import ProofRecord, Transformation


class VerificationStatus(str, Enum):
    """Verification state attached by the store; never part of the proof itself."""

    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"
    EXPIRED = "expired"


class ProofMetadata(BaseModel):
    """Metadata about the proof generation."""

    width: int
    height: int
    megapixels: int
    generation_time_ms: int = Field(..., alias="generationTimeMs")
    output_format: str = Field(..., alias="outputFormat")

    model_config = {"populate_by_name": True}


class StoredProof(BaseModel):
    """Envelope persisted by the proof store."""

    id: str = Field(..., description="UUID v4 identifier")
    record: ProofRecord
    transformations: List[Transformation]
    status: VerificationStatus = VerificationStatus.PENDING
    signer_id: Optional[str] = Field(None, alias="signerId")
    proof_size: int = Field(..., alias="proofSize", description="Encoded proof size in bytes")
    created_at: datetime = Field(..., alias="createdAt")
    verified_at: Optional[datetime] = Field(None, alias="verifiedAt")
    metadata: ProofMetadata

    model_config = {"populate_by_name": True}

    @property
    def is_anonymous_signer(self) -> bool:
        return self.signer_id is None

    def with_status(
        self, status: VerificationStatus, verified_at: Optional[datetime] = None
    ) -> "StoredProof":
        return self.model_copy(update={"status": status, "verified_at": verified_at})

"""Pydantic models for API request/response schemas."""

from .proof_responses import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    FingerprintResponse,
    ImportResponse,
    ProofErrorResponse,
    ProofStatistics,
    VerifyRequest,
    VerifyResponse,
)
from .stored_proof import ProofMetadata, StoredProof, VerificationStatus

__all__ = [
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "FingerprintResponse",
    "ImportResponse",
    "ProofErrorResponse",
    "ProofStatistics",
    "VerifyRequest",
    "VerifyResponse",
    "ProofMetadata",
    "StoredProof",
    "VerificationStatus",
]

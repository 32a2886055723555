"""
Request and response schemas for the proof API.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from proof_engine import ProofRecord, Transformation

from .stored_proof import VerificationStatus


class FingerprintResponse(BaseModel):
    """Response body for POST /api/fingerprint."""

    fingerprint: str = Field(..., description="Image fingerprint '<scheme>:<hex>'")
    algorithmTag: str = Field(..., description="Proof algorithm tag of the configured strategy")
    size: int = Field(..., description="Image size in bytes")


class VerifyRequest(BaseModel):
    """
    Request body for POST /api/verify.

    The proof may be supplied as the JSON document or as a base64url token.
    """

    proof: Union[Dict[str, Any], str] = Field(..., description="Proof document or token")
    originalFingerprint: str
    editedFingerprint: str
    transformations: List[Transformation]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "proof": "eyJ2ZXJzaW9uIjoxLC4uLn0",
                    "originalFingerprint": "sha256:9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                    "editedFingerprint": "sha256:60303ae22b998861bce3b28f33eec1be758a213c86c93c076dbe9f558c11c752",
                    "transformations": [
                        {"op": "crop", "x": 0, "y": 0, "width": 640, "height": 480},
                        {"op": "redact_region", "x": 10, "y": 10, "width": 64, "height": 32},
                    ],
                }
            ]
        }
    }


class VerifyResponse(BaseModel):
    """Verification result plus the decoded proof for display."""

    valid: bool
    proof: ProofRecord
    proofId: Optional[str] = None
    status: Optional[VerificationStatus] = None


class ProofStatistics(BaseModel):
    """Aggregate statistics over stored proofs."""

    totalProofs: int
    verifiedProofs: int
    failedProofs: int
    expiredProofs: int
    anonymousProofs: int
    averageProofSize: float
    algorithmCounts: Dict[str, int]
    verificationRate: float
    failureRate: float
    anonymityRate: float


class BulkDeleteRequest(BaseModel):
    """Request body for POST /api/proofs/bulk-delete."""

    proofIds: List[str] = Field(..., min_length=1, description="Proof IDs to delete")


class BulkDeleteResponse(BaseModel):
    deleted: List[str]
    notFound: List[str]


class ImportResponse(BaseModel):
    """Response body for POST /api/proofs/import."""

    imported: int = Field(..., description="Number of proofs written to the store")


class ProofErrorResponse(BaseModel):
    """Error response for proof lookups."""

    error: str = Field(..., description="Error type identifier")
    proofId: str = Field(..., description="Proof ID that was requested")
    message: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "not_found",
                    "proofId": "550e8400-e29b-41d4-a716-446655440000",
                    "message": "Proof not found",
                },
                {
                    "error": "invalid_proof_id",
                    "proofId": "../etc/passwd",
                    "message": "Invalid proof ID format. Must be a valid UUID.",
                },
            ]
        }
    }

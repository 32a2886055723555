"""Pydantic model for the published proof record."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

PROOF_VERSION = 1
SUPPORTED_VERSIONS = frozenset({PROOF_VERSION})
NONCE_SIZE = 16

HexDigest = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{64}$")]
HexNonce = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{32}$")]


class ProofRecord(BaseModel):
    """Immutable proof artifact binding two fingerprints to an edit chain.

    ``created_at`` and ``nonce`` are informational; neither takes part in any
    commitment.
    """

    version: int = Field(..., strict=True)
    algorithm_tag: str = Field(..., alias="algorithmTag", min_length=1)
    original_fingerprint: str = Field(..., alias="originalFingerprint", min_length=1)
    edited_fingerprint: str = Field(..., alias="editedFingerprint", min_length=1)
    transformation_commitment: HexDigest = Field(..., alias="transformationCommitment")
    binding_commitment: HexDigest = Field(..., alias="bindingCommitment")
    transformation_count: int = Field(..., alias="transformationCount", ge=0, strict=True)
    created_at: datetime = Field(..., alias="createdAt")
    nonce: HexNonce

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def transformation_commitment_bytes(self) -> bytes:
        return bytes.fromhex(self.transformation_commitment)

    @property
    def binding_commitment_bytes(self) -> bytes:
        return bytes.fromhex(self.binding_commitment)

"""
Verification endpoint for third parties holding a proof document.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from app.models import VerifyRequest, VerifyResponse
from app.services import ImageProofService, get_proof_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify Proof",
    description="""
Verify a proof document against the claimed fingerprints and transformation list.

A mismatch is a normal `{"valid": false}` response. Malformed proofs return
400 and proofs produced with a different fingerprint strategy return 422.
""",
    responses={
        400: {"description": "Malformed proof document"},
        422: {"description": "Algorithm mismatch or invalid request body"},
    },
)
async def verify_proof(
    request: VerifyRequest,
    service: ImageProofService = Depends(get_proof_service),
) -> VerifyResponse:
    record, valid = await run_in_threadpool(
        service.verify_document,
        request.proof,
        request.originalFingerprint,
        request.editedFingerprint,
        request.transformations,
    )
    logger.info(f"Verified submitted proof: valid={valid}")
    return VerifyResponse(valid=valid, proof=record)

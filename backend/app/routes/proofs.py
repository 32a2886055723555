"""
Proof endpoints.

Create, list, fetch, download, delete and re-verify stored proofs, plus
bulk delete and JSON export/import.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse, Response

from app.middleware.file_size_validator import validate_batch_sizes, validate_image_size
from app.models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ImportResponse,
    ProofErrorResponse,
    ProofStatistics,
    StoredProof,
    VerificationStatus,
    VerifyResponse,
)
from app.services import ImageProofService, get_proof_service, is_valid_proof_id
from app.services.rate_limiter import check_batch_rate_limit, check_proof_rate_limit
from proof_engine import encode_proof, parse_transformations

logger = logging.getLogger(__name__)

router = APIRouter()


def _invalid_id_response(proof_id: str) -> JSONResponse:
    logger.warning(f"Invalid proofId format: {proof_id}")
    return JSONResponse(
        status_code=404,
        content=ProofErrorResponse(
            error="invalid_proof_id",
            proofId=proof_id,
            message="Invalid proof ID format. Must be a valid UUID.",
        ).model_dump(),
    )


@router.post(
    "/proofs",
    response_model=StoredProof,
    status_code=201,
    summary="Create Proof",
    description="""
Apply transformations to an uploaded image, generate a proof binding the
original, the transformation list and the edited image, and store it.

**Form fields:**
- `image`: original image
- `transformations`: JSON array of transformations
- `signerId` (optional): omitted for anonymous signers

The original image is never stored; only its fingerprint is.
""",
    responses={
        400: {"description": "Undecodable image or invalid transformation"},
        413: {"description": "Image too large"},
        429: {"description": "Rate limit exceeded"},
        503: {"description": "Signing key not configured"},
    },
)
async def create_proof(
    image: UploadFile = File(...),
    transformations: str = Form(..., description="JSON array of transformations"),
    signerId: Optional[str] = Form(None),
    image_size: int = Depends(validate_image_size),
    rate_limit: None = Depends(check_proof_rate_limit),
    service: ImageProofService = Depends(get_proof_service),
) -> StoredProof:
    chain = parse_transformations(transformations)
    data = await image.read()

    stored, _ = await run_in_threadpool(service.create_proof, data, chain, signerId)
    return stored


@router.post(
    "/proofs/batch",
    response_model=List[StoredProof],
    status_code=201,
    summary="Create Proofs in Batch",
    description="""
Apply the same transformation list to several images and prove each one.

**Form fields:**
- `images`: original images (repeat the field)
- `transformations`: JSON array of transformations
- `signerId` (optional)

Proofs are independent and returned in upload order. If any image fails to
decode or edit, nothing is stored.
""",
    responses={
        400: {"description": "Undecodable image or invalid transformation"},
        413: {"description": "Image too large"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def create_proofs_batch(
    images: List[UploadFile] = File(...),
    transformations: str = Form(..., description="JSON array of transformations"),
    signerId: Optional[str] = Form(None),
    image_sizes: List[int] = Depends(validate_batch_sizes),
    rate_limit: None = Depends(check_batch_rate_limit),
    service: ImageProofService = Depends(get_proof_service),
) -> List[StoredProof]:
    chain = parse_transformations(transformations)
    data = [await image.read() for image in images]

    return await run_in_threadpool(service.create_proofs_batch, data, chain, signerId)


@router.get(
    "/proofs",
    response_model=List[StoredProof],
    summary="List Proofs",
    description="""
List stored proofs, newest first.

**Query Parameters:**
- `status`, `signerId`: exact-match filters
- `createdAfter`, `createdBefore`: exclusive ISO-8601 bounds (naive values are UTC)
- `limit`, `offset`: page through the filtered result
""",
)
async def list_proofs(
    status: Optional[VerificationStatus] = Query(None),
    signerId: Optional[str] = Query(None),
    createdAfter: Optional[datetime] = Query(None),
    createdBefore: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: ImageProofService = Depends(get_proof_service),
) -> List[StoredProof]:
    return service.list(
        status=status,
        signer_id=signerId,
        created_after=createdAfter,
        created_before=createdBefore,
        limit=limit,
        offset=offset,
    )


@router.post(
    "/proofs/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete Several Proofs",
    description="Delete the listed proofs. Unknown or invalid IDs are reported in `notFound`.",
)
async def bulk_delete_proofs(
    body: BulkDeleteRequest,
    service: ImageProofService = Depends(get_proof_service),
) -> BulkDeleteResponse:
    deleted, missing = service.delete_many(body.proofIds)
    return BulkDeleteResponse(deleted=deleted, notFound=missing)


@router.get(
    "/proofs/export",
    response_model=List[StoredProof],
    summary="Export Proofs",
    description="""
Download every stored proof envelope as a JSON backup, newest first.
Edited images are not included.
""",
)
async def export_proofs(
    response: Response,
    service: ImageProofService = Depends(get_proof_service),
) -> List[StoredProof]:
    response.headers["Content-Disposition"] = 'attachment; filename="proofs_export.json"'
    return service.export_proofs()


@router.post(
    "/proofs/import",
    response_model=ImportResponse,
    summary="Import Proofs",
    description="Restore proofs from an export. Proofs with an existing ID are replaced.",
    responses={400: {"description": "A proof ID is not a valid UUID"}},
)
async def import_proofs(
    proofs: List[StoredProof] = Body(...),
    service: ImageProofService = Depends(get_proof_service),
) -> ImportResponse:
    return ImportResponse(imported=service.import_proofs(proofs))


@router.get("/proofs/stats", response_model=ProofStatistics, summary="Proof Statistics")
async def proof_statistics(
    service: ImageProofService = Depends(get_proof_service),
) -> ProofStatistics:
    return service.statistics()


@router.get(
    "/proofs/{proofId}",
    response_model=StoredProof,
    summary="Get Proof",
    responses={404: {"model": ProofErrorResponse}},
)
async def get_proof(
    proofId: str,
    service: ImageProofService = Depends(get_proof_service),
):
    if not is_valid_proof_id(proofId):
        return _invalid_id_response(proofId)
    return service.get(proofId)


@router.get(
    "/proofs/{proofId}/download",
    summary="Download Proof or Edited Image",
    description="""
Download the proof document or the edited image.

**Query Parameters:**
- `file`: `proof` (default) for the JSON proof artifact, `image` for the edited image
""",
    responses={404: {"model": ProofErrorResponse}},
)
async def download_proof(
    proofId: str,
    file: str = Query(default="proof", pattern="^(proof|image)$"),
    service: ImageProofService = Depends(get_proof_service),
):
    if not is_valid_proof_id(proofId):
        return _invalid_id_response(proofId)

    stored = service.get(proofId)

    if file == "proof":
        filename = f"{proofId}_proof.json"
        return Response(
            content=encode_proof(stored.record),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    image_path = service.store.get_edited_image_path(proofId)
    if image_path is None:
        logger.error(f"Edited image missing for proof {proofId}")
        return JSONResponse(
            status_code=404,
            content=ProofErrorResponse(
                error="file_not_found",
                proofId=proofId,
                message="Edited image not found for this proof.",
            ).model_dump(),
        )

    filename = f"{proofId}_{image_path.name}"
    media_type = "image/png" if image_path.suffix == ".png" else "image/jpeg"
    return FileResponse(
        path=str(image_path),
        media_type=media_type,
        filename=filename,
    )


@router.delete("/proofs/{proofId}", status_code=204, summary="Delete Proof")
async def delete_proof(
    proofId: str,
    service: ImageProofService = Depends(get_proof_service),
):
    if not is_valid_proof_id(proofId):
        return _invalid_id_response(proofId)
    service.delete(proofId)
    return Response(status_code=204)


@router.post(
    "/proofs/{proofId}/verify",
    response_model=VerifyResponse,
    summary="Re-verify Stored Proof",
    description="""
Re-verify a stored proof against its stored edited image and record the
outcome (`verified` or `failed`). Expired proofs are reported invalid and
keep their `expired` status.
""",
    responses={404: {"model": ProofErrorResponse}},
)
async def verify_stored_proof(
    proofId: str,
    service: ImageProofService = Depends(get_proof_service),
):
    if not is_valid_proof_id(proofId):
        return _invalid_id_response(proofId)

    stored, valid = await run_in_threadpool(service.verify_stored, proofId)
    return VerifyResponse(valid=valid, proof=stored.record, proofId=stored.id, status=stored.status)

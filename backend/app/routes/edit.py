"""
Editing endpoints.

Provides POST /api/fingerprint and POST /api/transform. Neither needs the
signing key.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from app.config import settings
from app.middleware.file_size_validator import validate_image_size
from app.models import FingerprintResponse
from app.services import build_engine
from proof_engine import get_fingerprint_strategy, parse_transformations

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/fingerprint",
    response_model=FingerprintResponse,
    summary="Fingerprint Image",
    description="""
Compute the fingerprint of an image with the configured strategy.

Use this on the published image (and, privately, on the original) to obtain
the fingerprints a verifier needs.
""",
)
async def fingerprint_image(
    image: UploadFile = File(...),
    image_size: int = Depends(validate_image_size),
) -> FingerprintResponse:
    data = await image.read()
    strategy = get_fingerprint_strategy(settings.FINGERPRINT_STRATEGY)
    fingerprint = await run_in_threadpool(strategy.fingerprint, data)

    return FingerprintResponse(
        fingerprint=fingerprint,
        algorithmTag=strategy.algorithm_tag,
        size=image_size,
    )


@router.post(
    "/transform",
    summary="Apply Transformations",
    description="""
Apply an ordered transformation list to an image and return the edited image.

**Form fields:**
- `image`: source image (JPEG, PNG, WebP, ...)
- `transformations`: JSON array, e.g.
  `[{"op": "crop", "x": 0, "y": 0, "width": 640, "height": 480}]`

The response carries the edited image's fingerprint in `X-Image-Fingerprint`.
""",
    responses={
        200: {"content": {"image/jpeg": {}, "image/png": {}}},
        400: {"description": "Undecodable image or invalid transformation"},
        413: {"description": "Image too large"},
    },
)
async def transform_image(
    image: UploadFile = File(...),
    transformations: str = Form(..., description="JSON array of transformations"),
    image_size: int = Depends(validate_image_size),
) -> Response:
    chain = parse_transformations(transformations)
    data = await image.read()

    engine = build_engine()
    edited = await run_in_threadpool(engine.apply, data, chain)
    fingerprint = get_fingerprint_strategy(settings.FINGERPRINT_STRATEGY).fingerprint(edited)

    logger.info(f"Transformed {image_size} byte image with {len(chain)} transformation(s)")
    return Response(
        content=edited,
        media_type=engine.encoding.mime_type,
        headers={"X-Image-Fingerprint": fingerprint},
    )

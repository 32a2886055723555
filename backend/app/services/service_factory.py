"""
Service factory for the proof protocol and proof store.

Builds singletons from application settings; everything below this module
receives its key, strategy and paths through constructor arguments.
"""

import logging

from proof_engine import OutputEncoding, ProofProtocol, TransformationEngine

from app.config import settings

from .proof_service import ImageProofService
from .proof_store import ProofStore

logger = logging.getLogger(__name__)

# Singleton instances
_store_instance: ProofStore | None = None
_service_instance: ImageProofService | None = None


def get_proof_store() -> ProofStore:
    """Get the configured proof store instance."""
    global _store_instance

    if _store_instance is None:
        _store_instance = ProofStore(base_path=settings.STORAGE_PATH)
        logger.info(f"Initialized ProofStore at {settings.STORAGE_PATH}")
    return _store_instance


def build_engine() -> TransformationEngine:
    """Build a TransformationEngine from settings (no signing key needed)."""
    return TransformationEngine(
        encoding=OutputEncoding(format=settings.OUTPUT_FORMAT, quality=settings.JPEG_QUALITY),
        max_input_bytes=settings.MAX_IMAGE_SIZE,
        max_width=settings.MAX_IMAGE_WIDTH,
        max_height=settings.MAX_IMAGE_HEIGHT,
    )


def build_protocol() -> ProofProtocol:
    """
    Build a ProofProtocol from settings.

    Raises:
        SigningKeyError: If PROOF_SIGNING_KEY is not configured
    """
    return ProofProtocol(
        key=settings.signing_key_bytes(),
        strategy=settings.FINGERPRINT_STRATEGY,
        engine=build_engine(),
    )


def get_proof_service() -> ImageProofService:
    """
    Get the configured proof service instance.

    Uses singleton pattern so the signing key is read once per process.

    Raises:
        SigningKeyError: If PROOF_SIGNING_KEY is not configured
    """
    global _service_instance

    if _service_instance is not None:
        return _service_instance

    protocol = build_protocol()
    _service_instance = ImageProofService(
        protocol=protocol,
        store=get_proof_store(),
        batch_max_workers=settings.BATCH_MAX_WORKERS,
    )
    logger.info(
        f"Initialized ImageProofService ({protocol.algorithm_tag}, "
        f"{settings.OUTPUT_FORMAT} output)"
    )
    return _service_instance


def reset_services() -> None:
    """Reset singletons (for testing or configuration changes)."""
    global _store_instance, _service_instance
    _store_instance = None
    _service_instance = None

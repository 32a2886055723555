"""Service layer for business logic and storage."""

from .proof_service import ImageProofService
from .proof_store import ProofStore, is_valid_proof_id
from .service_factory import build_engine, build_protocol, get_proof_service, get_proof_store, reset_services

__all__ = [
    "ImageProofService",
    "ProofStore",
    "is_valid_proof_id",
    "build_engine",
    "build_protocol",
    "get_proof_service",
    "get_proof_store",
    "reset_services",
]

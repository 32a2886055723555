"""
Centralized error handling middleware for FastAPI.

Provides consistent error responses and logging for all API routes.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from proof_engine import (
    AlgorithmMismatch,
    InvalidTransformation,
    MalformedProof,
    ProofEngineError,
    SigningKeyError,
    SizeExceeded,
    UnsupportedFormat,
)

logger = logging.getLogger(__name__)

# Engine errors surfaced to API clients, most specific first.
ENGINE_ERROR_STATUS: list[tuple[type[ProofEngineError], int, str]] = [
    (UnsupportedFormat, 400, "unsupported_format"),
    (InvalidTransformation, 400, "invalid_transformation"),
    (MalformedProof, 400, "malformed_proof"),
    (SizeExceeded, 413, "size_exceeded"),
    (AlgorithmMismatch, 422, "algorithm_mismatch"),
    (SigningKeyError, 503, "signing_unavailable"),
]


class ProofServiceError(Exception):
    """Base exception for proof service errors."""

    def __init__(self, message: str, status_code: int = 500, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ProofNotFoundError(ProofServiceError):
    """Raised when a proof ID is not in the store."""

    def __init__(self, proof_id: str):
        super().__init__(
            message=f"Proof not found: {proof_id}",
            status_code=404,
            details={"proof_id": proof_id},
        )


class ProofImportError(ProofServiceError):
    """Raised when an imported backup contains unusable proofs."""

    def __init__(self, invalid_ids: list[str]):
        super().__init__(
            message=f"Cannot import {len(invalid_ids)} proof(s) with invalid IDs",
            status_code=400,
            details={"invalid_ids": invalid_ids},
        )


class StorageWriteError(ProofServiceError):
    """Raised when the proof store cannot persist a proof."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Failed to store proof: {reason}",
            status_code=500,
            details={"reason": reason},
        )


def engine_error_status(error: ProofEngineError) -> tuple[int, str]:
    """Map a proof engine error to (HTTP status, error identifier)."""
    for error_type, status_code, identifier in ENGINE_ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code, identifier
    return 500, "proof_engine_error"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response

        except ProofServiceError as e:
            logger.error(
                f"ProofServiceError: {e.message}",
                extra={"status_code": e.status_code, "details": e.details},
            )
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": e.message,
                    "details": e.details,
                },
            )

        except ProofEngineError as e:
            status_code, identifier = engine_error_status(e)
            logger.warning(f"{type(e).__name__}: {e}", extra={"status_code": status_code})
            return JSONResponse(
                status_code=status_code,
                content={
                    "error": str(e),
                    "details": {"type": identifier},
                },
            )

        except Exception as e:
            # Log full stack trace for unexpected errors
            logger.exception(f"Unhandled exception: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if logger.isEnabledFor(logging.DEBUG) else None,
                },
            )

"""FastAPI middleware for request/response processing."""

from .error_handler import (
    ErrorHandlerMiddleware,
    ProofNotFoundError,
    ProofServiceError,
    StorageWriteError,
    engine_error_status,
)

__all__ = [
    "ErrorHandlerMiddleware",
    "ProofNotFoundError",
    "ProofServiceError",
    "StorageWriteError",
    "engine_error_status",
]

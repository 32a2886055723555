"""
Image Edit Proof API

Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware import ErrorHandlerMiddleware
from app.routes import edit, proofs, verify
from app.services.cleanup_scheduler import (
    get_scheduler_status,
    start_cleanup_scheduler,
    stop_cleanup_scheduler,
)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    start_cleanup_scheduler()
    yield
    stop_cleanup_scheduler()


app = FastAPI(
    title="Image Edit Proof API",
    description="Deterministic image edits with verifiable transformation commitments",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Image-Fingerprint"],
)

# Error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Register routers
app.include_router(edit.router, prefix="/api", tags=["Editing"])
app.include_router(proofs.router, prefix="/api", tags=["Proofs"])
app.include_router(verify.router, prefix="/api", tags=["Verification"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "Image Edit Proof API",
        "version": API_VERSION,
    }


@app.get("/health")
async def health_check():
    """
    Detailed health check endpoint.

    Reports whether proofs can be signed and the state of the expiry scheduler.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "fingerprintStrategy": settings.FINGERPRINT_STRATEGY,
        "signingConfigured": bool(settings.PROOF_SIGNING_KEY),
        "scheduler": get_scheduler_status(),
    }

"""
Application configuration using Pydantic Settings.

All environment variables are accessed through this config object.
Never use os.getenv() directly in business logic.
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Signing Configuration
    PROOF_SIGNING_KEY: str = Field(
        default="",
        description="HMAC key for binding commitments (hex, or plain text if not hex)",
    )
    FINGERPRINT_STRATEGY: Literal["full", "sampled"] = Field(
        default="full",
        description="Image fingerprint strategy: full SHA-256 or bounded sampling",
    )

    # Image Engine Configuration
    MAX_IMAGE_SIZE: int = Field(
        default=104857600,
        description="Maximum image size in bytes (100MB)",
    )
    MAX_IMAGE_WIDTH: int = Field(
        default=7680,
        description="Maximum decoded image width in pixels",
    )
    MAX_IMAGE_HEIGHT: int = Field(
        default=4320,
        description="Maximum decoded image height in pixels",
    )
    OUTPUT_FORMAT: Literal["JPEG", "PNG"] = Field(
        default="JPEG",
        description="Encoder used for edited images",
    )
    JPEG_QUALITY: int = Field(
        default=95,
        ge=1,
        le=100,
        description="JPEG quality for edited images",
    )
    BATCH_MAX_WORKERS: int = Field(
        default=4,
        description="Worker threads for batch proof generation",
    )

    # Application Configuration
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:5173"],
        description="CORS allowed origins",
    )
    RATE_LIMIT_REQUESTS: int = Field(
        default=30,
        description="Number of proof requests allowed per window",
    )
    RATE_LIMIT_WINDOW: int = Field(
        default=3600,
        description="Rate limit time window in seconds",
    )

    # Storage Configuration
    STORAGE_PATH: str = Field(
        default="/tmp/image-proofs",
        description="Path for proof storage",
    )
    PROOF_TTL_HOURS: int = Field(
        default=720,
        description="Age in hours after which stored proofs are marked expired",
    )
    CLEANUP_INTERVAL_HOURS: int = Field(
        default=1,
        description="Interval in hours between expiry sweeps",
    )

    def signing_key_bytes(self) -> bytes:
        """Return the signing key as bytes (hex-decoded when possible)."""
        try:
            return bytes.fromhex(self.PROOF_SIGNING_KEY)
        except ValueError:
            return self.PROOF_SIGNING_KEY.encode("utf-8")


# Global settings instance
settings = Settings()

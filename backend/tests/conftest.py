"""
Pytest configuration and fixtures
"""

import io
import os

# Settings are read at import time; configure signing before importing the app.
os.environ.setdefault("PROOF_SIGNING_KEY", "0f1e2d3c4b5a69788796a5b4c3d2e1f00f1e2d3c4b5a69788796a5b4c3d2e1f0")

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config import settings
from app.main import app
from app.services import reset_services
from app.services.rate_limiter import proof_rate_limiter
from proof_engine import ProofProtocol

TEST_KEY = bytes.fromhex("0f1e2d3c4b5a69788796a5b4c3d2e1f00f1e2d3c4b5a69788796a5b4c3d2e1f0")


def make_image_array(width: int = 64, height: int = 48) -> np.ndarray:
    """Deterministic RGB gradient for test stability."""
    x = np.linspace(0, 1, width, dtype=np.float64)[None, :]
    y = np.linspace(0, 1, height, dtype=np.float64)[:, None]
    base = np.clip(0.6 * x + 0.4 * y, 0, 1)
    rgb = np.stack([base, base**0.5, base**2], axis=-1) * 255
    return rgb.astype(np.uint8)


def make_png(width: int = 64, height: int = 48) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(make_image_array(width, height)).save(buffer, format="PNG")
    return buffer.getvalue()


def decode(image_bytes: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


@pytest.fixture
def png_bytes() -> bytes:
    """64x48 PNG gradient."""
    return make_png()


@pytest.fixture
def image_factory():
    """Build deterministic PNG bytes of a given size."""
    return make_png


@pytest.fixture
def decode_image():
    """Decode image bytes into a loaded PIL image."""
    return decode


@pytest.fixture
def signing_key() -> bytes:
    """MAC key the app is configured with during tests."""
    return TEST_KEY


@pytest.fixture
def protocol(signing_key: bytes) -> ProofProtocol:
    """Protocol with the test key, full-hash fingerprints and default JPEG output."""
    return ProofProtocol(key=signing_key)


@pytest.fixture
def isolated_storage(tmp_path, monkeypatch):
    """Point the app's proof store at a temporary directory."""
    monkeypatch.setattr(settings, "STORAGE_PATH", str(tmp_path))
    reset_services()
    proof_rate_limiter.requests.clear()
    yield tmp_path
    reset_services()
    proof_rate_limiter.requests.clear()


@pytest.fixture
def client(isolated_storage):
    """FastAPI test client fixture"""
    return TestClient(app)

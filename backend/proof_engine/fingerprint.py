"""Image fingerprint strategies.

Two strategies exist and each maps to its own proof algorithm tag, so a
verifier always applies the same function the prover used:

* ``full``    - SHA-256 over every byte (tag ``FULLHASH-HMAC``).
* ``sampled`` - SHA-256 over length, head, tail and evenly spaced interior
  samples (tag ``SAMPLED-HMAC``). Faster on very large buffers, weaker
  collision resistance: a change confined to unsampled interior bytes is not
  detected.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np

from .exceptions import AlgorithmMismatch, FileHashError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192

FULL_HASH_TAG = "FULLHASH-HMAC"
SAMPLED_TAG = "SAMPLED-HMAC"

HEAD_SIZE = 4096
TAIL_SIZE = 4096
SAMPLE_POINTS = 4096


class FingerprintStrategy(ABC):
    """Deterministic digest of a byte buffer, formatted as ``<scheme>:<hex>``."""

    name: str
    scheme: str
    algorithm_tag: str

    @abstractmethod
    def fingerprint(self, data: bytes) -> str:
        """Fingerprint an in-memory buffer."""

    def fingerprint_file(self, file_path: str) -> str:
        """Fingerprint a file's contents.

        Raises:
            FileNotFoundError: If the file does not exist.
            FileHashError: If the file cannot be read.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        try:
            return self.fingerprint(path.read_bytes())
        except OSError as e:
            logger.error(f"Error reading file {file_path}: {e}")
            raise FileHashError(f"Error reading file: {file_path}") from e

    def _format(self, sha: "hashlib._Hash") -> str:
        return f"{self.scheme}:{sha.hexdigest()}"


class FullHashFingerprint(FingerprintStrategy):
    name = "full"
    scheme = "sha256"
    algorithm_tag = FULL_HASH_TAG

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    def fingerprint(self, data: bytes) -> str:
        sha = hashlib.sha256()
        view = memoryview(data)
        for start in range(0, len(view), self.chunk_size):
            sha.update(view[start : start + self.chunk_size])
        return self._format(sha)

    def fingerprint_file(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            sha = hashlib.sha256()
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b""):
                    sha.update(chunk)
            return self._format(sha)
        except PermissionError as e:
            logger.error(f"Permission denied reading file: {file_path}")
            raise FileHashError(f"Permission denied reading file: {file_path}") from e
        except IOError as e:
            logger.error(f"IO error reading file {file_path}: {e}")
            raise FileHashError(f"Error reading file: {file_path}") from e


class SampledFingerprint(FingerprintStrategy):
    name = "sampled"
    scheme = "sampled-sha256"
    algorithm_tag = SAMPLED_TAG

    def __init__(
        self,
        head_size: int = HEAD_SIZE,
        tail_size: int = TAIL_SIZE,
        sample_points: int = SAMPLE_POINTS,
    ) -> None:
        self.head_size = head_size
        self.tail_size = tail_size
        self.sample_points = sample_points

    def fingerprint(self, data: bytes) -> str:
        length = len(data)
        sha = hashlib.sha256()
        sha.update(length.to_bytes(8, "big"))

        if length <= self.head_size + self.tail_size:
            sha.update(data)
            return self._format(sha)

        sha.update(data[: self.head_size])
        sha.update(data[length - self.tail_size :])

        interior = np.frombuffer(
            data,
            dtype=np.uint8,
            count=length - self.head_size - self.tail_size,
            offset=self.head_size,
        )
        count = min(self.sample_points, interior.size)
        # Integer offsets keep the sample positions platform independent.
        offsets = (np.arange(count, dtype=np.int64) * interior.size) // count
        sha.update(interior[offsets].tobytes())
        return self._format(sha)


_STRATEGIES = {
    "full": FullHashFingerprint,
    FULL_HASH_TAG: FullHashFingerprint,
    "sampled": SampledFingerprint,
    SAMPLED_TAG: SampledFingerprint,
}


def get_fingerprint_strategy(name: str) -> FingerprintStrategy:
    """Resolve a strategy by short name (``full``/``sampled``) or algorithm tag.

    Raises:
        AlgorithmMismatch: If the name is not a known strategy.
    """
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise AlgorithmMismatch(f"Unknown fingerprint strategy or algorithm tag: {name}") from None

"""Proof record encoding and decoding.

The canonical artifact is a compact UTF-8 JSON document with camelCase keys.
A base64url "token" form wraps the same bytes for pasting into URLs or
messages.
"""

import base64
import binascii
import json
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import MalformedProof
from .models import SUPPORTED_VERSIONS, ProofRecord


def record_to_dict(record: ProofRecord) -> dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


def encode_proof(record: ProofRecord) -> bytes:
    """Serialize a proof record to JSON bytes."""
    return json.dumps(record_to_dict(record), separators=(",", ":")).encode("utf-8")


def decode_proof(data: bytes | str | Mapping[str, Any]) -> ProofRecord:
    """Parse a proof document.

    Args:
        data: JSON bytes/str, or an already parsed mapping.

    Returns:
        The validated :class:`ProofRecord`.

    Raises:
        MalformedProof: Invalid JSON, missing or mistyped fields, or an
            unsupported ``version``.
    """
    if isinstance(data, Mapping):
        document = dict(data)
    else:
        try:
            document = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise MalformedProof(f"Proof is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedProof("Proof document must be a JSON object")

    version = document.get("version")
    if type(version) is not int or version not in SUPPORTED_VERSIONS:
        raise MalformedProof(f"Unsupported proof version: {version!r}")

    try:
        return ProofRecord.model_validate(document)
    except ValidationError as e:
        raise MalformedProof(f"Invalid proof document: {e}") from e


def encode_proof_token(record: ProofRecord) -> str:
    """Encode a proof record as an unpadded base64url string."""
    return base64.urlsafe_b64encode(encode_proof(record)).rstrip(b"=").decode("ascii")


def decode_proof_token(token: str) -> ProofRecord:
    """Decode a token produced by :func:`encode_proof_token`.

    Raises:
        MalformedProof: Not valid base64url, or the payload is not a valid proof.
    """
    try:
        raw = token.strip().encode("ascii")
        payload = base64.urlsafe_b64decode(raw + b"=" * (-len(raw) % 4))
    except (UnicodeEncodeError, binascii.Error, ValueError) as e:
        raise MalformedProof(f"Proof token is not valid base64url: {e}") from e
    return decode_proof(payload)

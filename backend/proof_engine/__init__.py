"""Transformation-commitment proofs for edited images."""

from .codec import (
    decode_proof,
    decode_proof_token,
    encode_proof,
    encode_proof_token,
    record_to_dict,
)
from .commitment import EMPTY_CHAIN_COMMITMENT, CommitmentBuilder
from .exceptions import (
    AlgorithmMismatch,
    FileHashError,
    InvalidTransformation,
    MalformedProof,
    OutOfBounds,
    ProofEngineError,
    SigningKeyError,
    SizeExceeded,
    UnsupportedFormat,
)
from .fingerprint import (
    FULL_HASH_TAG,
    SAMPLED_TAG,
    FingerprintStrategy,
    FullHashFingerprint,
    SampledFingerprint,
    get_fingerprint_strategy,
)
from .image_engine import ImageInfo, OutputEncoding, TransformationEngine
from .models import PROOF_VERSION, ProofRecord
from .proof_generator import ProofGenerator, ProofInput
from .protocol import ProofProtocol
from .transformations import (
    BaseTransformation,
    BlurRegion,
    Brightness,
    ColorAdjust,
    Contrast,
    Crop,
    PixelateRegion,
    RedactRegion,
    Resize,
    Rotate,
    Transformation,
    dump_transformations,
    parse_transformations,
)
from .verifier import ProofVerifier

__all__ = [
    "ProofProtocol",
    "ProofGenerator",
    "ProofInput",
    "ProofVerifier",
    "CommitmentBuilder",
    "EMPTY_CHAIN_COMMITMENT",
    "TransformationEngine",
    "OutputEncoding",
    "ImageInfo",
    "ProofRecord",
    "PROOF_VERSION",
    "encode_proof",
    "decode_proof",
    "encode_proof_token",
    "decode_proof_token",
    "record_to_dict",
    "FingerprintStrategy",
    "FullHashFingerprint",
    "SampledFingerprint",
    "get_fingerprint_strategy",
    "FULL_HASH_TAG",
    "SAMPLED_TAG",
    "BaseTransformation",
    "Transformation",
    "Crop",
    "Resize",
    "Rotate",
    "BlurRegion",
    "RedactRegion",
    "PixelateRegion",
    "ColorAdjust",
    "Brightness",
    "Contrast",
    "parse_transformations",
    "dump_transformations",
    "ProofEngineError",
    "UnsupportedFormat",
    "InvalidTransformation",
    "OutOfBounds",
    "SizeExceeded",
    "MalformedProof",
    "AlgorithmMismatch",
    "SigningKeyError",
    "FileHashError",
]

"""Custom exceptions for the image proof engine."""


class ProofEngineError(Exception):
    """Base exception for proof engine errors."""

    pass


class UnsupportedFormat(ProofEngineError):
    """Image buffer cannot be decoded."""

    pass


class InvalidTransformation(ProofEngineError):
    """Transformation geometry or parameters are out of bounds."""

    pass


class OutOfBounds(InvalidTransformation):
    """Crop region is empty after clamping to the image bounds."""

    pass


class SizeExceeded(ProofEngineError):
    """Input is larger than the configured ceiling."""

    pass


class MalformedProof(ProofEngineError):
    """Proof document cannot be parsed or has an unrecognized version."""

    pass


class AlgorithmMismatch(ProofEngineError):
    """Proof algorithm tag does not match the verifier's strategy."""

    pass


class SigningKeyError(ProofEngineError):
    """No usable MAC key was supplied."""

    pass


class FileHashError(ProofEngineError):
    """Error reading a file while fingerprinting it."""

    pass

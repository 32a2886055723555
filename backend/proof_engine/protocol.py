"""Facade exposing the four operations of the transformation-commitment protocol."""

from typing import Any, Mapping, Sequence

from .codec import decode_proof
from .commitment import CommitmentBuilder
from .fingerprint import FingerprintStrategy, get_fingerprint_strategy
from .image_engine import TransformationEngine
from .models import ProofRecord
from .proof_generator import ProofGenerator
from .verifier import ProofVerifier
from .transformations import BaseTransformation


class ProofProtocol:
    """Wires engine, generator and verifier around one key and one strategy.

    Args:
        key: Secret MAC key of the producer's signing context.
        strategy: Fingerprint strategy instance, short name or algorithm tag.
        engine: Transformation engine (defaults to JPEG q95 output).
    """

    def __init__(
        self,
        key: bytes,
        strategy: str | FingerprintStrategy = "full",
        engine: TransformationEngine | None = None,
    ) -> None:
        if isinstance(strategy, str):
            strategy = get_fingerprint_strategy(strategy)
        self.strategy = strategy
        self.engine = engine or TransformationEngine()
        builder = CommitmentBuilder(key)
        self.generator = ProofGenerator(builder, strategy)
        self.verifier = ProofVerifier(builder, strategy)

    @property
    def algorithm_tag(self) -> str:
        return self.strategy.algorithm_tag

    def apply_transformations(
        self, image_bytes: bytes, transformations: Sequence[BaseTransformation]
    ) -> bytes:
        return self.engine.apply(image_bytes, list(transformations))

    def generate_proof(
        self,
        original_image: bytes,
        edited_image: bytes,
        transformations: Sequence[BaseTransformation],
    ) -> ProofRecord:
        return self.generator.generate_proof(original_image, edited_image, transformations)

    def verify_proof(
        self,
        proof: ProofRecord | bytes | str | Mapping[str, Any],
        original_fingerprint: str,
        edited_fingerprint: str,
        transformations: Sequence[BaseTransformation],
    ) -> bool:
        """Verify a proof given as a record or an encoded document.

        Raises:
            MalformedProof: The encoded document cannot be decoded.
            AlgorithmMismatch: The proof uses a different fingerprint strategy.
        """
        if not isinstance(proof, ProofRecord):
            proof = decode_proof(proof)
        return self.verifier.verify(proof, original_fingerprint, edited_fingerprint, transformations)

    def compute_fingerprint(self, data: bytes) -> str:
        return self.generator.compute_fingerprint(data)

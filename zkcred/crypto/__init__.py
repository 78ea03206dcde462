"""
Cryptographic protocol engine: groups, commitments and sigma protocols.

⚠️ DRAFT — requires crypto review before production use
"""

from .exceptions import (
    ConfigurationError,
    DomainError,
    ProofGenerationError,
    ProofVerificationError,
    ProtocolStateError,
    RecordNotFoundError,
    RecordStoreError,
    SecurityError,
    SetupError,
    ZKCredError,
)
from .security import RandomnessSource
from .types import RepresentationProof, VerificationResult

__all__ = [
    "ZKCredError",
    "ProofGenerationError",
    "ProofVerificationError",
    "ConfigurationError",
    "SecurityError",
    "DomainError",
    "SetupError",
    "ProtocolStateError",
    "RecordStoreError",
    "RecordNotFoundError",
    "RandomnessSource",
    "RepresentationProof",
    "VerificationResult",
]

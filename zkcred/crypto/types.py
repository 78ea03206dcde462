"""
⚠️ DRAFT — requires crypto review before production use

Common types for zero-knowledge proofs.

This module provides:
1. RepresentationProof - transcript of a non-interactive sigma protocol
2. VerificationResult - explicit outcome of a protocol-level check
3. Wire helpers for unsigned and signed integers
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import PROOF_VERSION
from .security import bytes_to_int, int_to_bytes


# ============================================================================
# REPRESENTATION PROOF
# ============================================================================


@dataclass
class RepresentationProof:
    """
    Non-interactive proof of knowledge of a representation.

    Attributes:
        proof_random_data: Prover commitment ``t = Π base_i^r_i``
        challenge: Fiat-Shamir challenge
        proof_data: Responses ``z_i = r_i + challenge * secret_i``
    """

    proof_random_data: Any
    challenge: int
    proof_data: List[int] = field(default_factory=list)
    version: int = PROOF_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Dictionary form for CBOR storage (integer groups only)."""
        if not isinstance(self.proof_random_data, int):
            raise TypeError("only integer-group proofs serialize to dicts")
        return {
            "version": self.version,
            "t": self.proof_random_data,
            "c": self.challenge,
            "z": list(self.proof_data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepresentationProof":
        return cls(
            proof_random_data=int(data["t"]),
            challenge=int(data["c"]),
            proof_data=[int(z) for z in data["z"]],
            version=int(data.get("version", PROOF_VERSION)),
        )


# ============================================================================
# VERIFICATION RESULT
# ============================================================================


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of a protocol-level verification.

    A failed check is a value, not an exception: the caller decides whether
    to reject the session. I/O and setup problems raise instead.

    Example:
        >>> result = org.verify_credential_request(request)
        >>> if not result:
        ...     print(result.reason)
    """

    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(True)

    @classmethod
    def failure(cls, reason: str) -> "VerificationResult":
        return cls(False, reason)


# ============================================================================
# WIRE INTEGERS
# ============================================================================


def encode_unsigned(value: int) -> bytes:
    return int_to_bytes(value)


def decode_unsigned(data: Any) -> int:
    if not isinstance(data, (bytes, bytearray)) or not data:
        raise ValueError("unsigned integer must be non-empty bytes")
    return bytes_to_int(bytes(data))


def encode_signed(value: int) -> List[Any]:
    """``[negative, magnitude]`` with the magnitude as big-endian bytes."""
    return [value < 0, int_to_bytes(abs(value))]


def decode_signed(data: Any) -> int:
    if not isinstance(data, (list, tuple)) or len(data) != 2 or not isinstance(data[0], bool):
        raise ValueError("signed integer must be [negative, magnitude]")
    magnitude = decode_unsigned(data[1])
    return -magnitude if data[0] else magnitude

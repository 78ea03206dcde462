"""
⚠️ DRAFT — requires crypto review before production use

CL credential data structures.

- Cred: (A, e, v11) with A^e = Z / (S^(v1+v11) · Π R^attr) mod N
- CredRequest: what the holder sends to obtain a credential
- CredResult: what the issuer hands back (plus the record it stores)
- ReceiverRecord: issuer-side state for later updates, keyed by nym
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..crypto.exceptions import DomainError
from ..crypto.types import RepresentationProof


@dataclass(frozen=True)
class Cred:
    a: int
    e: int
    v11: int


@dataclass
class CredRequest:
    """
    Credential request.

    All proofs share one Fiat-Shamir challenge computed over the context,
    U, nym, the issuer nonce, the attribute commitments and every proof's
    commitment t.
    """

    nym: int
    known_attrs: List[int]
    commitments_of_attrs: List[int]
    nym_proof: RepresentationProof
    u: int
    u_proof: RepresentationProof
    commitments_of_attrs_proofs: List[RepresentationProof]
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nym": self.nym,
            "known_attrs": list(self.known_attrs),
            "commitments_of_attrs": list(self.commitments_of_attrs),
            "nym_proof": self.nym_proof.to_dict(),
            "u": self.u,
            "u_proof": self.u_proof.to_dict(),
            "commitments_of_attrs_proofs": [p.to_dict() for p in self.commitments_of_attrs_proofs],
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredRequest":
        try:
            return cls(
                nym=int(data["nym"]),
                known_attrs=[int(a) for a in data["known_attrs"]],
                commitments_of_attrs=[int(c) for c in data["commitments_of_attrs"]],
                nym_proof=RepresentationProof.from_dict(data["nym_proof"]),
                u=int(data["u"]),
                u_proof=RepresentationProof.from_dict(data["u_proof"]),
                commitments_of_attrs_proofs=[
                    RepresentationProof.from_dict(p) for p in data["commitments_of_attrs_proofs"]
                ],
                nonce=int(data["nonce"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainError(f"malformed credential request: {exc}") from exc


@dataclass(frozen=True)
class ReceiverRecord:
    """Issuer-side state of one issued credential."""

    known_attrs: List[int]
    commitments_of_attrs: List[int]
    q: int
    v11: int
    context: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "known_attrs": list(self.known_attrs),
            "commitments_of_attrs": list(self.commitments_of_attrs),
            "q": self.q,
            "v11": self.v11,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReceiverRecord":
        try:
            return cls(
                known_attrs=[int(a) for a in data["known_attrs"]],
                commitments_of_attrs=[int(c) for c in data["commitments_of_attrs"]],
                q=int(data["q"]),
                v11=int(data["v11"]),
                context=int(data["context"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainError(f"malformed receiver record: {exc}") from exc


@dataclass(frozen=True)
class CredResult:
    cred: Cred
    a_proof: RepresentationProof
    record: ReceiverRecord = field(repr=False)

"""
⚠️ DRAFT — requires crypto review before production use

Pedersen commitments in a known prime-order group.

Formula: C = g^x · h^r, with r uniform in [0, q).

Security Properties:
- Perfectly hiding: C reveals nothing about x
- Computationally binding: opening to two values breaks discrete log
  between g and h
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..config import GENERATOR_H_SEED
from ..exceptions import DomainError, ProtocolStateError
from ..groups.base import Group
from ..groups.ec import ECGroup
from ..security import RandomnessSource, default_randomness


# ============================================================================
# PARAMETERS
# ============================================================================


@dataclass(frozen=True)
class PedersenParams:
    """
    Public Pedersen parameters.

    Attributes:
        group: Prime-order group (Schnorr or EC)
        g: First generator
        h: Second generator, log_g(h) unknown to committers
    """

    group: Group
    g: Any
    h: Any

    @property
    def q(self) -> int:
        return self.group.order

    @classmethod
    def generate(
        cls, group: Group, rng: Optional[RandomnessSource] = None
    ) -> "PedersenParams":
        """
        Receiver-side setup: h = g^a for a random trapdoor a.

        The trapdoor is discarded; a receiver that keeps it could equivocate.
        """
        if group.order is None:
            raise DomainError("Pedersen commitments need a known-order group")
        rng = rng or default_randomness()
        g = _generator_of(group)
        a = rng.get_random_scalar(group.order - 1) + 1
        return cls(group, g, group.exponentiate(g, a))

    @classmethod
    def for_curve(
        cls, group: ECGroup, seed: bytes = GENERATOR_H_SEED
    ) -> "PedersenParams":
        """Curve parameters with a hash-derived h (nobody knows log_g(h))."""
        return cls(group, group.generator, group.hash_to_element(seed))


def _generator_of(group: Group) -> Any:
    generator = getattr(group, "generator", None)
    if generator is None:
        raise DomainError("group does not expose a generator")
    return generator


# ============================================================================
# COMMITTER / RECEIVER
# ============================================================================


class PedersenCommitter:
    """
    Commits to a single value and remembers the opening.

    Example:
        >>> committer = PedersenCommitter(params)
        >>> c = committer.commit(42)
        >>> x, r = committer.decommit()
        >>> PedersenReceiver(params, c).check_decommitment(x, r)
        True
    """

    def __init__(self, params: PedersenParams, rng: Optional[RandomnessSource] = None):
        self.params = params
        self.rng = rng or default_randomness()
        self.commitment: Any = None
        self._value: Optional[int] = None
        self._blinding: Optional[int] = None

    def compute_commit(self, x: int, r: int) -> Any:
        group = self.params.group
        return group.multiply(
            group.exponentiate(self.params.g, x), group.exponentiate(self.params.h, r)
        )

    def commit(self, x: int) -> Any:
        """
        Commit to x in [0, q).

        Raises:
            DomainError: If x is outside [0, q)
        """
        if not 0 <= x < self.params.q:
            raise DomainError("committed value must lie in [0, q)")
        r = self.rng.get_random_scalar(self.params.q)
        self.commitment = self.compute_commit(x, r)
        self._value, self._blinding = x, r
        return self.commitment

    def decommit(self) -> Tuple[int, int]:
        """Return (x, r) of the last commitment."""
        if self._value is None:
            raise ProtocolStateError("nothing has been committed yet")
        return self._value, self._blinding

    def restore(self, x: int, r: int) -> Any:
        """Reload a saved opening; returns the matching commitment."""
        self.commitment = self.compute_commit(x, r)
        self._value, self._blinding = x, r
        return self.commitment


class PedersenReceiver:
    """Holds a received commitment and checks openings against it."""

    def __init__(self, params: PedersenParams, commitment: Any = None):
        self.params = params
        self.commitment = commitment

    def set_commitment(self, commitment: Any) -> None:
        self.commitment = commitment

    def check_decommitment(self, x: int, r: int) -> bool:
        if self.commitment is None:
            raise ProtocolStateError("no commitment received")
        group = self.params.group
        expected = group.multiply(
            group.exponentiate(self.params.g, x), group.exponentiate(self.params.h, r)
        )
        return expected == self.commitment

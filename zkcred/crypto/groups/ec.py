"""
⚠️ DRAFT — requires crypto review before production use

Elliptic-curve group over petlib (secp256k1 by default).

Points are written additively by petlib; this wrapper exposes them through
the multiplicative ``Group`` interface: multiply is point addition,
exponentiate is scalar multiplication.
"""

from typing import Optional

from petlib.ec import EcGroup, EcPt

from ..config import CURVE_NID, DOMAIN_SEPARATOR_PREFIX
from ..exceptions import DomainError
from ..primes import to_bn
from ..security import RandomnessSource, default_randomness
from .base import Group


class ECGroup(Group):
    """
    Prime-order elliptic-curve group.

    Example:
        >>> group = ECGroup()
        >>> a = group.exponentiate(group.generator, 5)
        >>> group.multiply(a, group.invert(a)) == group.identity()
        True
    """

    def __init__(self, nid: int = CURVE_NID, rng: Optional[RandomnessSource] = None):
        self.nid = nid
        self.curve = EcGroup(nid)
        self.generator: EcPt = self.curve.generator()
        self._order = int(self.curve.order())
        self.rng = rng or default_randomness()

    @property
    def order(self) -> int:
        return self._order

    @property
    def modulus_bit_length(self) -> int:
        return self._order.bit_length()

    def identity(self) -> EcPt:
        return self.curve.infinite()

    def multiply(self, a: EcPt, b: EcPt) -> EcPt:
        return a + b

    def exponentiate(self, base: EcPt, exponent: int) -> EcPt:
        scalar = exponent % self._order
        if scalar == 0:
            return self.curve.infinite()
        return base.pt_mul(to_bn(scalar))

    def invert(self, a: EcPt) -> EcPt:
        return a.pt_neg()

    def random_element(self) -> EcPt:
        scalar = self.rng.get_random_scalar(self._order - 1) + 1
        return self.generator.pt_mul(to_bn(scalar))

    def is_member(self, a: EcPt) -> bool:
        return isinstance(a, EcPt) and self.curve.check_point(a)

    def element_to_bytes(self, a: EcPt) -> bytes:
        return a.export()

    def element_from_bytes(self, data: bytes) -> EcPt:
        try:
            return EcPt.from_binary(data, self.curve)
        except Exception as exc:
            raise DomainError(f"invalid point encoding: {exc}") from exc

    def hash_to_element(self, seed: bytes) -> EcPt:
        """
        Nothing-up-my-sleeve point from a public seed.

        petlib's hash_to_point is hash-and-increment, not RFC 9380.
        """
        if not seed:
            raise ValueError("seed cannot be empty")
        return self.curve.hash_to_point(DOMAIN_SEPARATOR_PREFIX + b"||" + seed)

    def __eq__(self, other) -> bool:
        return isinstance(other, ECGroup) and self.nid == other.nid

    def __hash__(self) -> int:
        return hash(("ec", self.nid))

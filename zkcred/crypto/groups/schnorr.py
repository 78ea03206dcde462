"""
⚠️ DRAFT — requires crypto review before production use

Prime-order Schnorr group: the order-q subgroup of Z_p^* with p = r*q + 1.

Used for Pedersen commitments to the holder's master secret (nyms).
"""

import logging
from typing import Optional

from ..config import MAX_GENERATOR_ATTEMPTS, MAX_PRIME_SEARCH_ATTEMPTS
from ..exceptions import DomainError, SetupError
from ..primes import get_prime, is_probable_prime
from ..security import RandomnessSource, default_randomness
from .base import Group

logger = logging.getLogger(__name__)


class SchnorrGroup(Group):
    """
    Subgroup of order q in Z_p^*, generated by g.

    Attributes:
        p: Modulus (prime)
        q: Subgroup order (prime, q | p - 1)
        g: Generator of the order-q subgroup

    Example:
        >>> group = SchnorrGroup.generate(q_bits=256, p_bits=1024)
        >>> x = group.exponentiate(group.g, 42)
        >>> group.is_member(x)
        True
    """

    def __init__(self, p: int, q: int, g: int, rng: Optional[RandomnessSource] = None):
        if (p - 1) % q != 0:
            raise DomainError("q must divide p - 1")
        if g <= 1 or g >= p or pow(g, q, p) != 1:
            raise DomainError("g does not generate the order-q subgroup")
        self.p = p
        self.q = q
        self.g = g
        self.rng = rng or default_randomness()

    @classmethod
    def generate(
        cls,
        q_bits: int,
        p_bits: int,
        rng: Optional[RandomnessSource] = None,
        max_attempts: int = MAX_PRIME_SEARCH_ATTEMPTS,
    ) -> "SchnorrGroup":
        """
        Generate a fresh Schnorr group.

        Searches for an even cofactor r such that p = r*q + 1 is a prime of
        exactly ``p_bits`` bits, then lifts a random element to a generator.

        Raises:
            SetupError: If no suitable p is found
        """
        if p_bits <= q_bits + 1:
            raise SetupError("p must be longer than q")
        rng = rng or default_randomness()
        q = get_prime(q_bits)
        r_bits = p_bits - q_bits
        for _ in range(max_attempts):
            r = rng.get_random_int_of_length(r_bits)
            r -= r % 2
            p = r * q + 1
            if p.bit_length() != p_bits or not is_probable_prime(p):
                continue
            for _ in range(MAX_GENERATOR_ATTEMPTS):
                h = rng.get_random_scalar(p - 3) + 2
                g = pow(h, r, p)
                if g != 1:
                    logger.debug("generated Schnorr group p=%d bits q=%d bits", p_bits, q_bits)
                    return cls(p, q, g, rng=rng)
        raise SetupError(f"Schnorr group search exhausted after {max_attempts} candidates")

    @property
    def order(self) -> int:
        return self.q

    @property
    def modulus_bit_length(self) -> int:
        return self.p.bit_length()

    @property
    def generator(self) -> int:
        return self.g

    def identity(self) -> int:
        return 1

    def multiply(self, a: int, b: int) -> int:
        return a * b % self.p

    def exponentiate(self, base: int, exponent: int) -> int:
        return pow(base, exponent % self.q, self.p)

    def invert(self, a: int) -> int:
        return pow(a, -1, self.p)

    def random_element(self) -> int:
        return pow(self.g, self.rng.get_random_scalar(self.q), self.p)

    def is_member(self, a: int) -> bool:
        return isinstance(a, int) and 0 < a < self.p and pow(a, self.q, self.p) == 1

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, SchnorrGroup)
            and (self.p, self.q, self.g) == (other.p, other.q, other.g)
        )

    def __hash__(self) -> int:
        return hash((self.p, self.q, self.g))

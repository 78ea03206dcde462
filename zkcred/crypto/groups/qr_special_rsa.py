"""
⚠️ DRAFT — requires crypto review before production use

Hidden-order group QR_N of quadratic residues modulo a special RSA
modulus N = p*q, where p = 2p' + 1 and q = 2q' + 1 are safe primes.

|QR_N| = p'q'. Only the party that generated N knows the factorization;
for everybody else ``order`` is None and exponents are plain integers.
"""

import logging
from math import gcd
from typing import Optional

from ..config import MAX_GENERATOR_ATTEMPTS
from ..exceptions import DomainError, SecurityError, SetupError
from ..primes import get_safe_prime
from ..security import RandomnessSource, default_randomness
from .base import Group

logger = logging.getLogger(__name__)


class QRSpecialRSA(Group):
    """
    Quadratic residues modulo a special RSA modulus.

    Construct with ``QRSpecialRSA(n)`` for a public view, or through
    ``generate`` / ``from_primes`` to keep the factorization.

    Example:
        >>> group = QRSpecialRSA.generate(512)
        >>> s = group.random_generator()
        >>> public = QRSpecialRSA(group.n)
        >>> public.exponentiate(s, -3) == group.invert(group.exponentiate(s, 3))
        True
    """

    def __init__(
        self,
        n: int,
        p: Optional[int] = None,
        q: Optional[int] = None,
        rng: Optional[RandomnessSource] = None,
    ):
        if n <= 3:
            raise DomainError("modulus too small")
        if (p is None) != (q is None):
            raise DomainError("either both or neither of p, q must be given")
        if p is not None and p * q != n:
            raise DomainError("p * q != n")
        self.n = n
        self.p = p
        self.q = q
        self.rng = rng or default_randomness()

    @classmethod
    def from_primes(
        cls, p: int, q: int, rng: Optional[RandomnessSource] = None
    ) -> "QRSpecialRSA":
        """Build the group from two known safe primes."""
        return cls(p * q, p, q, rng=rng)

    @classmethod
    def generate(
        cls, safe_prime_bits: int, rng: Optional[RandomnessSource] = None
    ) -> "QRSpecialRSA":
        """
        Generate two distinct safe primes of ``safe_prime_bits`` bits each.

        Raises:
            SetupError: If safe-prime generation fails
        """
        p = get_safe_prime(safe_prime_bits)
        q = get_safe_prime(safe_prime_bits)
        while q == p:
            q = get_safe_prime(safe_prime_bits)
        logger.debug("generated special RSA modulus of %d bits", (p * q).bit_length())
        return cls.from_primes(p, q, rng=rng)

    # ------------------------------------------------------------------
    # Factorization-dependent values
    # ------------------------------------------------------------------

    @property
    def has_secret(self) -> bool:
        return self.p is not None

    @property
    def p1(self) -> int:
        self._require_secret()
        return (self.p - 1) // 2

    @property
    def q1(self) -> int:
        self._require_secret()
        return (self.q - 1) // 2

    @property
    def secret_order(self) -> int:
        """|QR_N| = p'q'. Only available with the factorization."""
        return self.p1 * self.q1

    def _require_secret(self) -> None:
        if self.p is None:
            raise SecurityError("group factorization is not available")

    # ------------------------------------------------------------------
    # Group interface
    # ------------------------------------------------------------------

    @property
    def order(self) -> Optional[int]:
        return None

    @property
    def modulus_bit_length(self) -> int:
        return self.n.bit_length()

    def identity(self) -> int:
        return 1

    def multiply(self, a: int, b: int) -> int:
        return a * b % self.n

    def exponentiate(self, base: int, exponent: int) -> int:
        """
        Raises:
            DomainError: If exponent is negative and base is not invertible
        """
        try:
            return pow(base, exponent, self.n)
        except ValueError as exc:
            raise DomainError(f"cannot raise non-invertible element to {exponent}") from exc

    def invert(self, a: int) -> int:
        try:
            return pow(a, -1, self.n)
        except ValueError as exc:
            raise DomainError("element is not invertible") from exc

    def random_element(self) -> int:
        """Random square of a unit modulo N."""
        x = self.rng.get_random_invertible(self.n)
        return x * x % self.n

    def random_generator(self) -> int:
        """
        Random generator of QR_N.

        A random square has order p', q' or p'q'; the first two are
        rejected, which needs the factorization.

        Raises:
            SecurityError: Without the factorization
            SetupError: If no generator is found
        """
        self._require_secret()
        p1, q1 = self.p1, self.q1
        for _ in range(MAX_GENERATOR_ATTEMPTS):
            a = self.random_element()
            if a == 1:
                continue
            if pow(a, p1, self.n) == 1 or pow(a, q1, self.n) == 1:
                continue
            return a
        raise SetupError("could not find a generator of QR_N")

    def is_member(self, a: int) -> bool:
        """
        Unit check for the public view; with the factorization also checks
        that ``a`` is a square modulo both primes.
        """
        if not isinstance(a, int) or not 0 < a < self.n or gcd(a, self.n) != 1:
            return False
        if self.p is None:
            return True
        return pow(a, (self.p - 1) // 2, self.p) == 1 and pow(a, (self.q - 1) // 2, self.q) == 1

    def public(self) -> "QRSpecialRSA":
        """Copy of the group without the factorization."""
        return QRSpecialRSA(self.n, rng=self.rng)

    def __eq__(self, other) -> bool:
        return isinstance(other, QRSpecialRSA) and self.n == other.n

    def __hash__(self) -> int:
        return hash(self.n)

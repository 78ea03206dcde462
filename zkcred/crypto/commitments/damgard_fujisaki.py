"""
⚠️ DRAFT — requires crypto review before production use

Damgård–Fujisaki integer commitments in QR_N.

Formula: c = G^a · H^r mod N with a in (-T, T) and r uniform in
[0, 2^(B+K)), where B = bitlen(N) - 2 bounds log2 |QR_N| and K is the
statistical security parameter. The commitment is statistically hiding
without the committer knowing the group order.
"""

import logging
from typing import Optional, Tuple

from ..config import DEFAULT_SEC_PARAM
from ..exceptions import DomainError, ProtocolStateError
from ..groups.qr_special_rsa import QRSpecialRSA
from ..security import RandomnessSource, default_randomness

logger = logging.getLogger(__name__)


class DamgardFujisakiCommitter:
    """
    Committer side. Needs only the public modulus and bases.

    Attributes:
        group: Public view of QR_N
        g, h: Commitment bases (g = h^alpha, alpha known to the receiver)
        t: Exclusive bound on |a|
        k: Statistical security parameter
        b: Public bound on log2 of the group order
    """

    def __init__(
        self,
        n: int,
        h: int,
        g: int,
        t: int,
        k: int = DEFAULT_SEC_PARAM,
        rng: Optional[RandomnessSource] = None,
    ):
        self.rng = rng or default_randomness()
        self.group = QRSpecialRSA(n, rng=self.rng)
        self.g = g
        self.h = h
        self.t = t
        self.k = k
        self.b = n.bit_length() - 2
        self.commitment: Optional[int] = None
        self._value: Optional[int] = None
        self._blinding: Optional[int] = None

    @property
    def n(self) -> int:
        return self.group.n

    def compute_commit(self, a: int, r: int) -> int:
        return self.group.multiply(
            self.group.exponentiate(self.g, a), self.group.exponentiate(self.h, r)
        )

    def commit(self, a: int) -> int:
        """
        Commit to a with |a| < T.

        Raises:
            DomainError: If |a| >= T
        """
        if abs(a) >= self.t:
            raise DomainError("committed value must satisfy |a| < T")
        r = self.rng.get_random_int(self.b + self.k)
        self.commitment = self.compute_commit(a, r)
        self._value, self._blinding = a, r
        return self.commitment

    def decommit(self) -> Tuple[int, int]:
        """Return (a, r) of the last commitment."""
        if self._value is None:
            raise ProtocolStateError("nothing has been committed yet")
        return self._value, self._blinding

    def restore(self, a: int, r: int) -> int:
        """Reload a saved opening; returns the matching commitment."""
        self.commitment = self.compute_commit(a, r)
        self._value, self._blinding = a, r
        return self.commitment


class DamgardFujisakiReceiver:
    """
    Receiver side: owns the modulus and picks the bases.

    H is a random generator of QR_N and G = H^alpha for random alpha, so
    the committer cannot know a relation between G and H.

    Example:
        >>> receiver = DamgardFujisakiReceiver.generate(512, k=80)
        >>> committer = DamgardFujisakiCommitter(
        ...     receiver.n, receiver.h, receiver.g, receiver.t, receiver.k)
        >>> receiver.set_commitment(committer.commit(-17))
        >>> receiver.check_decommitment(committer.decommit()[1], -17)
        True
    """

    def __init__(
        self,
        group: QRSpecialRSA,
        g: int,
        h: int,
        k: int = DEFAULT_SEC_PARAM,
        t: Optional[int] = None,
    ):
        self.group = group
        self.g = g
        self.h = h
        self.k = k
        self.t = t if t is not None else group.n
        self.commitment: Optional[int] = None

    @classmethod
    def generate(
        cls,
        safe_prime_bits: int,
        k: int = DEFAULT_SEC_PARAM,
        rng: Optional[RandomnessSource] = None,
    ) -> "DamgardFujisakiReceiver":
        """
        Generate a fresh modulus and bases.

        Raises:
            SetupError: If safe-prime or generator search fails
        """
        rng = rng or default_randomness()
        group = QRSpecialRSA.generate(safe_prime_bits, rng=rng)
        h = group.random_generator()
        alpha = rng.get_random_scalar(group.secret_order)
        g = group.exponentiate(h, alpha)
        logger.debug("generated Damgard-Fujisaki receiver, N=%d bits", group.n.bit_length())
        return cls(group, g, h, k=k)

    @property
    def n(self) -> int:
        return self.group.n

    def set_commitment(self, commitment: int) -> None:
        self.commitment = commitment

    def check_decommitment(self, r: int, a: int) -> bool:
        if self.commitment is None:
            raise ProtocolStateError("no commitment received")
        expected = self.group.multiply(
            self.group.exponentiate(self.g, a), self.group.exponentiate(self.h, r)
        )
        return expected == self.commitment

"""
⚠️ DRAFT — requires crypto review before production use

Representation proofs: proof of knowledge of x_1..x_k with
y = Π base_i^x_i, as a three-move sigma protocol.

Protocol:
1. Prover: t = Π base_i^r_i for random r_i          (get_proof_random_data)
2. Verifier: challenge c                            (get_challenge / Fiat-Shamir)
3. Prover: z_i = r_i + c·x_i                        (get_proof_data)
4. Verifier: Π base_i^z_i == y^c · t                (verify)

Two arithmetic modes, chosen from the group:
- Known order q (Schnorr, EC): r_i uniform in [0, q), z_i reduced mod q.
- Hidden order (QR_N): r_i drawn from a bit range and z_i computed in Z.
  The range must dominate c·x_i for statistical zero-knowledge, and the
  verifier must also run ``verify_length`` so that oversized responses
  are rejected.

The randomizers live in a ``ProofRandomData`` value returned by the first
prover call and passed into the second; prover objects keep no per-run
state.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from ..config import CHALLENGE_SPACE_BITS, DEFAULT_SEC_PARAM
from ..exceptions import DomainError, ProofGenerationError, ProtocolStateError
from ..groups.base import Group
from ..security import RandomnessSource, default_randomness
from ..types import RepresentationProof
from .boundaries import default_randomizer_bit_length, response_bit_length, within_boundary

logger = logging.getLogger(__name__)


# ============================================================================
# PROVER
# ============================================================================


@dataclass(frozen=True)
class ProofRandomData:
    """
    First-move state of one proof run.

    Attributes:
        t: Commitment sent to the verifier
        randomizers: r_i, needed for the response and nothing else
    """

    t: Any
    randomizers: List[int] = field(repr=False)


class RepresentationProver:
    """
    Prover for y = Π bases_i^secrets_i.

    Example:
        >>> prover = RepresentationProver(group, [x1, x2], [g, h], y)
        >>> random_data = prover.get_proof_random_data()
        >>> challenge = verifier_challenge(random_data.t)
        >>> z = prover.get_proof_data(random_data, challenge)
    """

    def __init__(
        self,
        group: Group,
        secrets: Sequence[int],
        bases: Sequence[Any],
        y: Any,
        sec_param: int = DEFAULT_SEC_PARAM,
        rng: Optional[RandomnessSource] = None,
    ):
        if len(secrets) != len(bases):
            raise ProofGenerationError("secrets and bases must have the same length")
        if not secrets:
            raise ProofGenerationError("at least one secret is required")
        self.group = group
        self.secrets = list(secrets)
        self.bases = list(bases)
        self.y = y
        self.sec_param = sec_param
        self.rng = rng or default_randomness()

    @property
    def known_order(self) -> bool:
        return self.group.order is not None

    def get_proof_random_data(
        self, boundaries: Optional[Sequence[int]] = None, also_neg: bool = False
    ) -> ProofRandomData:
        """
        Draw randomizers and compute t.

        Args:
            boundaries: Per-secret randomizer bit lengths (hidden order only).
                Defaults to bitlen(N) + sec_param for every secret.
            also_neg: Draw randomizers from (-2^b, 2^b) instead of [0, 2^b)

        Raises:
            ProofGenerationError: If boundaries do not match the secrets
        """
        if self.known_order:
            randomizers = [self.rng.get_random_scalar(self.group.order) for _ in self.secrets]
        else:
            if boundaries is None:
                bits = default_randomizer_bit_length(
                    self.group.modulus_bit_length, self.sec_param
                )
                boundaries = [bits] * len(self.secrets)
            elif len(boundaries) != len(self.secrets):
                raise ProofGenerationError("one boundary per secret is required")
            randomizers = [self.rng.get_random_int(b, also_neg) for b in boundaries]
        t = self.group.multi_exponentiate(self.bases, randomizers)
        return ProofRandomData(t, randomizers)

    def get_proof_data(self, random_data: ProofRandomData, challenge: int) -> List[int]:
        """Responses z_i = r_i + challenge * secret_i (mod q when known)."""
        if len(random_data.randomizers) != len(self.secrets):
            raise ProtocolStateError("random data belongs to a different proof")
        responses = [r + challenge * x for r, x in zip(random_data.randomizers, self.secrets)]
        if self.known_order:
            q = self.group.order
            responses = [z % q for z in responses]
        return responses


# ============================================================================
# VERIFIER
# ============================================================================


class RepresentationVerifier:
    """
    Verifier for one proof exchange.

    Create a new verifier per exchange; it holds t, bases, y and the
    challenge between the protocol moves.
    """

    def __init__(
        self,
        group: Group,
        challenge_space_bits: int = CHALLENGE_SPACE_BITS,
        rng: Optional[RandomnessSource] = None,
    ):
        self.group = group
        self.challenge_space_bits = challenge_space_bits
        self.rng = rng or default_randomness()
        self._t: Any = None
        self._bases: List[Any] = []
        self._y: Any = None
        self._challenge: Optional[int] = None

    def set_proof_random_data(self, t: Any, bases: Sequence[Any], y: Any) -> None:
        self._t = t
        self._bases = list(bases)
        self._y = y

    def get_challenge(self) -> int:
        """Random challenge from [0, 2^challenge_space_bits)."""
        self._challenge = self.rng.get_random_int(self.challenge_space_bits)
        return self._challenge

    def set_challenge(self, challenge: int) -> None:
        """Use an externally derived (Fiat-Shamir) challenge."""
        self._challenge = challenge

    def verify(self, proof_data: Sequence[int]) -> bool:
        """Check Π bases_i^z_i == y^c · t."""
        if self._t is None or self._challenge is None:
            raise ProtocolStateError("proof random data and challenge must be set first")
        if len(proof_data) != len(self._bases):
            logger.debug("representation proof has %d responses for %d bases",
                         len(proof_data), len(self._bases))
            return False
        if not (self.group.is_member(self._t) and self.group.is_member(self._y)):
            return False
        try:
            left = self.group.multi_exponentiate(self._bases, proof_data)
            right = self.group.multiply(
                self.group.exponentiate(self._y, self._challenge), self._t
            )
        except DomainError:
            return False
        return left == right

    def verify_length(self, proof_data: Sequence[int], boundaries: Sequence[int]) -> bool:
        """
        Reject responses outside the range an honest prover produces.

        ``boundaries`` are the randomizer bit lengths the prover used; z_i
        must satisfy |z_i| < 2^(boundary_i + 1). For known-order groups
        responses must be reduced, i.e. lie in [0, q).
        """
        if self.group.order is not None:
            q = self.group.order
            return all(0 <= z < q for z in proof_data)
        if len(proof_data) != len(boundaries):
            return False
        return all(
            within_boundary(z, response_bit_length(b)) for z, b in zip(proof_data, boundaries)
        )


# ============================================================================
# NON-INTERACTIVE HELPERS
# ============================================================================


def prove_representation(
    group: Group,
    secrets: Sequence[int],
    bases: Sequence[Any],
    y: Any,
    challenge_fn: Callable[[Any], int],
    boundaries: Optional[Sequence[int]] = None,
    also_neg: bool = False,
    sec_param: int = DEFAULT_SEC_PARAM,
    rng: Optional[RandomnessSource] = None,
) -> RepresentationProof:
    """
    Fiat-Shamir representation proof; ``challenge_fn`` maps t to the
    challenge and must hash everything the verifier will hash.
    """
    prover = RepresentationProver(group, secrets, bases, y, sec_param=sec_param, rng=rng)
    random_data = prover.get_proof_random_data(boundaries, also_neg)
    challenge = challenge_fn(random_data.t)
    return RepresentationProof(
        proof_random_data=random_data.t,
        challenge=challenge,
        proof_data=prover.get_proof_data(random_data, challenge),
    )


def verify_representation(
    group: Group,
    proof: RepresentationProof,
    bases: Sequence[Any],
    y: Any,
    challenge_fn: Optional[Callable[[Any], int]] = None,
    boundaries: Optional[Sequence[int]] = None,
) -> bool:
    """
    Verify a proof from ``prove_representation``.

    When ``challenge_fn`` is given the challenge is recomputed and compared;
    when ``boundaries`` is given response lengths are checked as well.
    """
    if challenge_fn is not None and challenge_fn(proof.proof_random_data) != proof.challenge:
        return False
    verifier = RepresentationVerifier(group)
    verifier.set_proof_random_data(proof.proof_random_data, bases, y)
    verifier.set_challenge(proof.challenge)
    if not verifier.verify(proof.proof_data):
        return False
    if boundaries is not None and not verifier.verify_length(proof.proof_data, boundaries):
        return False
    return True

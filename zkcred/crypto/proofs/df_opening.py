"""
⚠️ DRAFT — requires crypto review before production use

Opening proof for a Damgård–Fujisaki commitment: knowledge of (a, r) with
c = G^a · H^r mod N, without revealing either.

This is a two-base representation proof in the hidden-order group with
per-secret boundaries:
- a: bitlen(T) + K + challenge bits
- r: (B + K) + K + challenge bits, since r < 2^(B+K)

Randomizers are signed because a may be negative.
"""

from typing import Callable, List, Optional, Sequence

from ..config import (
    CHALLENGE_SPACE_BITS,
    DEFAULT_SEC_PARAM,
    DOMAIN_SEPARATORS,
    HASH_OUTPUT_BITS,
)
from ..commitments.damgard_fujisaki import DamgardFujisakiCommitter
from ..groups.qr_special_rsa import QRSpecialRSA
from ..security import RandomnessSource, hash_numbers
from ..types import RepresentationProof
from .boundaries import randomizer_bit_length
from .representation import ProofRandomData, RepresentationProver, RepresentationVerifier


def opening_boundaries(n: int, t: int, k: int, challenge_bits: int) -> List[int]:
    """Randomizer bit lengths for (a, r)."""
    b = n.bit_length() - 2
    return [
        randomizer_bit_length(t.bit_length(), k, challenge_bits),
        randomizer_bit_length(b + k, k, challenge_bits),
    ]


class DFOpeningProver:
    """Proves knowledge of the opening held by a committer."""

    def __init__(
        self,
        committer: DamgardFujisakiCommitter,
        challenge_bits: int = CHALLENGE_SPACE_BITS,
        rng: Optional[RandomnessSource] = None,
    ):
        a, r = committer.decommit()
        self.committer = committer
        self.boundaries = opening_boundaries(committer.n, committer.t, committer.k, challenge_bits)
        self._prover = RepresentationProver(
            committer.group,
            [a, r],
            [committer.g, committer.h],
            committer.commitment,
            sec_param=committer.k,
            rng=rng or committer.rng,
        )

    def get_proof_random_data(self) -> ProofRandomData:
        return self._prover.get_proof_random_data(self.boundaries, also_neg=True)

    def get_proof_data(self, random_data: ProofRandomData, challenge: int) -> List[int]:
        return self._prover.get_proof_data(random_data, challenge)


class DFOpeningVerifier:
    """
    Verifies an opening proof against a received commitment.

    ``verify`` checks both the verification equation and the response
    lengths.
    """

    def __init__(
        self,
        n: int,
        g: int,
        h: int,
        commitment: int,
        t: Optional[int] = None,
        k: int = DEFAULT_SEC_PARAM,
        challenge_bits: int = CHALLENGE_SPACE_BITS,
        rng: Optional[RandomnessSource] = None,
    ):
        self.group = QRSpecialRSA(n)
        self.g = g
        self.h = h
        self.commitment = commitment
        self.boundaries = opening_boundaries(n, t if t is not None else n, k, challenge_bits)
        self._verifier = RepresentationVerifier(
            self.group, challenge_space_bits=challenge_bits, rng=rng
        )

    def set_proof_random_data(self, t: int) -> None:
        self._verifier.set_proof_random_data(t, [self.g, self.h], self.commitment)

    def get_challenge(self) -> int:
        return self._verifier.get_challenge()

    def set_challenge(self, challenge: int) -> None:
        self._verifier.set_challenge(challenge)

    def verify(self, proof_data: Sequence[int]) -> bool:
        return self._verifier.verify(proof_data) and self._verifier.verify_length(
            proof_data, self.boundaries
        )


def _default_challenge(n: int, g: int, h: int, commitment: int) -> Callable[[int], int]:
    def challenge_fn(t: int) -> int:
        return hash_numbers(DOMAIN_SEPARATORS["df_opening"], n, g, h, commitment, t)

    return challenge_fn


def prove_opening(
    committer: DamgardFujisakiCommitter,
    challenge_bits: int = HASH_OUTPUT_BITS,
    rng: Optional[RandomnessSource] = None,
) -> RepresentationProof:
    """Standalone non-interactive opening proof (SHA3-512 challenge)."""
    prover = DFOpeningProver(committer, challenge_bits=challenge_bits, rng=rng)
    random_data = prover.get_proof_random_data()
    challenge = _default_challenge(
        committer.n, committer.g, committer.h, committer.commitment
    )(random_data.t)
    return RepresentationProof(
        proof_random_data=random_data.t,
        challenge=challenge,
        proof_data=prover.get_proof_data(random_data, challenge),
    )


def verify_opening(
    n: int,
    g: int,
    h: int,
    commitment: int,
    proof: RepresentationProof,
    t: Optional[int] = None,
    k: int = DEFAULT_SEC_PARAM,
    challenge_bits: int = HASH_OUTPUT_BITS,
) -> bool:
    """Verify a proof produced by ``prove_opening``."""
    if _default_challenge(n, g, h, commitment)(proof.proof_random_data) != proof.challenge:
        return False
    verifier = DFOpeningVerifier(n, g, h, commitment, t=t, k=k, challenge_bits=challenge_bits)
    verifier.set_proof_random_data(proof.proof_random_data)
    verifier.set_challenge(proof.challenge)
    return verifier.verify(proof.proof_data)

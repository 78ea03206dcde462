"""
⚠️ DRAFT — requires crypto review before production use

Tests for Damgård–Fujisaki opening proofs.
"""

import pytest

from zkcred.crypto.commitments import DamgardFujisakiCommitter, DamgardFujisakiReceiver
from zkcred.crypto.proofs.df_opening import (
    DFOpeningProver,
    DFOpeningVerifier,
    opening_boundaries,
    prove_opening,
    verify_opening,
)

K = 80
CHALLENGE_BITS = 80


@pytest.fixture(scope="module")
def receiver():
    return DamgardFujisakiReceiver.generate(128, k=K)


@pytest.fixture
def committer(receiver):
    committer = DamgardFujisakiCommitter(receiver.n, receiver.h, receiver.g, receiver.t, K)
    committer.commit(-(2**100) + 5)
    return committer


def make_verifier(receiver, commitment):
    return DFOpeningVerifier(
        receiver.n, receiver.g, receiver.h, commitment, t=receiver.t, k=K,
        challenge_bits=CHALLENGE_BITS,
    )


# ============================================================================
# INTERACTIVE
# ============================================================================


class TestInteractiveOpening:
    def test_completeness(self, receiver, committer):
        """Prover knowing (a, r) convinces the receiver."""
        prover = DFOpeningProver(committer, challenge_bits=CHALLENGE_BITS)
        verifier = make_verifier(receiver, committer.commitment)
        random_data = prover.get_proof_random_data()
        verifier.set_proof_random_data(random_data.t)
        z = prover.get_proof_data(random_data, verifier.get_challenge())
        assert verifier.verify(z)

    def test_randomizers_are_signed(self, committer):
        prover = DFOpeningProver(committer, challenge_bits=CHALLENGE_BITS)
        draws = [r for _ in range(20) for r in prover.get_proof_random_data().randomizers]
        assert any(r < 0 for r in draws)

    def test_other_commitment_rejected(self, receiver, committer):
        prover = DFOpeningProver(committer, challenge_bits=CHALLENGE_BITS)
        other = DamgardFujisakiCommitter(receiver.n, receiver.h, receiver.g, receiver.t, K)
        verifier = make_verifier(receiver, other.commit(1))
        random_data = prover.get_proof_random_data()
        verifier.set_proof_random_data(random_data.t)
        z = prover.get_proof_data(random_data, verifier.get_challenge())
        assert not verifier.verify(z)

    def test_oversized_response_rejected(self, receiver, committer):
        """verify includes the length check."""
        prover = DFOpeningProver(committer, challenge_bits=CHALLENGE_BITS)
        verifier = make_verifier(receiver, committer.commitment)
        random_data = prover.get_proof_random_data()
        verifier.set_proof_random_data(random_data.t)
        z = prover.get_proof_data(random_data, verifier.get_challenge())
        shift = receiver.group.secret_order << (verifier.boundaries[1] + 2)
        assert not verifier.verify([z[0], z[1] + shift])


# ============================================================================
# NON-INTERACTIVE
# ============================================================================


class TestNonInteractiveOpening:
    def test_round_trip(self, receiver, committer):
        proof = prove_opening(committer)
        assert verify_opening(
            receiver.n, receiver.g, receiver.h, committer.commitment, proof, t=receiver.t, k=K
        )

    def test_wrong_commitment(self, receiver, committer):
        proof = prove_opening(committer)
        wrong = receiver.group.multiply(committer.commitment, receiver.h)
        assert not verify_opening(receiver.n, receiver.g, receiver.h, wrong, proof, t=receiver.t, k=K)

    def test_tampered_challenge(self, receiver, committer):
        proof = prove_opening(committer)
        proof.challenge += 1
        assert not verify_opening(
            receiver.n, receiver.g, receiver.h, committer.commitment, proof, t=receiver.t, k=K
        )


def test_opening_boundaries(receiver):
    b = receiver.n.bit_length() - 2
    assert opening_boundaries(receiver.n, receiver.t, K, CHALLENGE_BITS) == [
        receiver.t.bit_length() + K + CHALLENGE_BITS,
        b + 2 * K + CHALLENGE_BITS,
    ]

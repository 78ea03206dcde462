"""Sigma-protocol proofs: representation proofs and commitment openings."""

from .df_opening import DFOpeningProver, DFOpeningVerifier, prove_opening, verify_opening
from .representation import (
    ProofRandomData,
    RepresentationProver,
    RepresentationVerifier,
    prove_representation,
    verify_representation,
)

__all__ = [
    "ProofRandomData",
    "RepresentationProver",
    "RepresentationVerifier",
    "prove_representation",
    "verify_representation",
    "DFOpeningProver",
    "DFOpeningVerifier",
    "prove_opening",
    "verify_opening",
]

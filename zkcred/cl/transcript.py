"""
Fiat-Shamir challenges of the CL protocol.

Each challenge hashes the key context, the public values of the statement,
the prover commitments t and the verifier's nonce, under its own domain
separator.
"""

from typing import Sequence

from ..crypto.config import DOMAIN_SEPARATORS
from ..crypto.security import hash_numbers


def credential_request_challenge(
    context: int,
    u: int,
    nym: int,
    nonce_org: int,
    commitments_of_attrs: Sequence[int],
    nym_t: int,
    u_t: int,
    opening_ts: Sequence[int],
) -> int:
    return hash_numbers(
        DOMAIN_SEPARATORS["credential_request"],
        context,
        u,
        nym,
        nonce_org,
        *commitments_of_attrs,
        nym_t,
        u_t,
        *opening_ts,
    )


def issue_challenge(context: int, q: int, a: int, t: int, nonce_user: int) -> int:
    return hash_numbers(DOMAIN_SEPARATORS["issue_credential"], context, q, a, t, nonce_user)


def presentation_challenge(context: int, a_prime: int, y: int, t: int, nonce_org: int) -> int:
    return hash_numbers(DOMAIN_SEPARATORS["prove_credential"], context, a_prime, y, t, nonce_org)

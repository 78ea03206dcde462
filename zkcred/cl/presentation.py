"""
Selective-disclosure statement shared by prover and verifier.

A presentation proves knowledge of the unrevealed exponents in

    y = Z / (Π R_known[i]^attr_i · Π R_committed[j]^commitment_j)   (revealed i, j)
      = Π R_known^attr · Π R_committed^commitment · Π R_hidden^attr · A'^e · S^v
        (unrevealed known, unrevealed committed, all hidden)
"""

from typing import List, Sequence

from ..crypto.exceptions import DomainError
from .keys import PubKey


def check_revealed_indices(indices: Sequence[int], count: int, kind: str) -> List[int]:
    """
    Raises:
        DomainError: On out-of-range or duplicate indices
    """
    result = list(indices)
    if len(set(result)) != len(result):
        raise DomainError(f"duplicate revealed {kind} index")
    for i in result:
        if isinstance(i, bool) or not isinstance(i, int) or not 0 <= i < count:
            raise DomainError(f"revealed {kind} index out of range: {i!r}")
    return result


def unrevealed(indices: Sequence[int], count: int) -> List[int]:
    revealed = set(indices)
    return [i for i in range(count) if i not in revealed]


def presentation_target(
    pub_key: PubKey,
    revealed_known_idx: Sequence[int],
    revealed_known_attrs: Sequence[int],
    revealed_committed_idx: Sequence[int],
    revealed_commitments: Sequence[int],
) -> int:
    if len(revealed_known_idx) != len(revealed_known_attrs):
        raise DomainError("one value per revealed known index is required")
    if len(revealed_committed_idx) != len(revealed_commitments):
        raise DomainError("one commitment per revealed committed index is required")
    group = pub_key.group
    bases = [pub_key.rs_known[i] for i in revealed_known_idx] + [
        pub_key.rs_committed[i] for i in revealed_committed_idx
    ]
    exponents = list(revealed_known_attrs) + list(revealed_commitments)
    return group.divide(pub_key.z, group.multi_exponentiate(bases, exponents))


def presentation_bases(
    pub_key: PubKey,
    revealed_known_idx: Sequence[int],
    revealed_committed_idx: Sequence[int],
    a_prime: int,
) -> List[int]:
    return (
        [pub_key.rs_known[i] for i in unrevealed(revealed_known_idx, len(pub_key.rs_known))]
        + [
            pub_key.rs_committed[i]
            for i in unrevealed(revealed_committed_idx, len(pub_key.rs_committed))
        ]
        + list(pub_key.rs_hidden)
        + [a_prime, pub_key.s]
    )

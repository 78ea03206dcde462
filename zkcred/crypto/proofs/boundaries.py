"""
Boundary formulas for proofs in hidden-order groups.

A response z = r + c*x leaks negligible information about x when r is
drawn from a range that exceeds c*x by a factor of 2^sec_param. For a
secret of ``secret_bits`` bits and a challenge of ``challenge_bits`` bits
the randomizer therefore needs ``secret_bits + sec_param +
challenge_bits`` bits. An honest response then stays below
2^(randomizer_bits + 1) in absolute value, which is what length
verification checks.
"""

from typing import Sequence


def randomizer_bit_length(secret_bits: int, sec_param: int, challenge_bits: int) -> int:
    """Bits of the range randomizers are drawn from (in absolute value)."""
    if min(secret_bits, sec_param, challenge_bits) <= 0:
        raise ValueError("bit lengths must be positive")
    return secret_bits + sec_param + challenge_bits


def response_bit_length(randomizer_bits: int) -> int:
    """Exclusive bound on the bit length of |z| for an honest prover."""
    return randomizer_bits + 1


def default_randomizer_bit_length(modulus_bits: int, sec_param: int) -> int:
    """Randomizer range used when no per-secret boundaries are given."""
    return modulus_bits + sec_param


def within_boundary(value: int, boundary_bits: int) -> bool:
    """|value| < 2^boundary_bits."""
    return abs(value) < (1 << boundary_bits)


def all_within(values: Sequence[int], boundaries: Sequence[int]) -> bool:
    if len(values) != len(boundaries):
        return False
    return all(within_boundary(v, b) for v, b in zip(values, boundaries))

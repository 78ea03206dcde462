"""
Named boundary formulas for the CL proofs.

Every CL proof in QR_N draws its randomizers from ±2^b with
b = secret_bits + sec_param + hash_bit_len (the Fiat-Shamir challenge
has hash_bit_len bits). The functions below fix ``secret_bits`` for each
kind of secret; prover and verifier both call them, so they cannot drift
apart.

Secret bit lengths:
- attribute value: attr_bit_len
- committed attribute (the DF commitment, an element mod N1): n_length
- v1: n_length + sec_param
- e: e_bit_len
- v = v1 + v11 - e*r after randomization: v_bit_len + 1
- e^-1 mod |QR_N|: n_length
"""

from typing import List

from ..crypto.proofs.boundaries import randomizer_bit_length
from .params import Params


def _bound(params: Params, secret_bits: int) -> int:
    return randomizer_bit_length(secret_bits, params.sec_param, params.hash_bit_len)


def attribute_boundary(params: Params) -> int:
    """b_m: known or hidden attribute exponents."""
    return _bound(params, params.attr_bit_len)


def commitment_boundary(params: Params) -> int:
    """b_c: committed-attribute exponents (DF commitments mod N1)."""
    return _bound(params, params.n_length)


def v1_boundary(params: Params) -> int:
    """b_v1: the holder's blinding exponent v1."""
    return _bound(params, params.n_length + params.sec_param)


def e_boundary(params: Params) -> int:
    """b_e: the credential prime e."""
    return _bound(params, params.e_bit_len)


def v_boundary(params: Params) -> int:
    """b_v: v = v1 + v11 of a randomized credential."""
    return _bound(params, params.v_bit_len + 1)


def e_inverse_boundary(params: Params) -> int:
    """b_einv: issuer's exponent e^-1 mod |QR_N|."""
    return _bound(params, params.n_length)


def u_proof_boundaries(params: Params) -> List[int]:
    """Secrets of the U proof: hidden attributes, then v1."""
    return [attribute_boundary(params)] * params.hidden_attrs_num + [v1_boundary(params)]


def presentation_boundaries(
    params: Params, unrevealed_known: int, unrevealed_committed: int
) -> List[int]:
    """
    Secrets of a presentation proof, in base order: unrevealed known
    attributes, unrevealed committed attributes, hidden attributes, e, v.
    """
    return (
        [attribute_boundary(params)] * unrevealed_known
        + [commitment_boundary(params)] * unrevealed_committed
        + [attribute_boundary(params)] * params.hidden_attrs_num
        + [e_boundary(params), v_boundary(params)]
    )

"""
CL credential parameters.

Issuer and holder must use identical ``Params``; every boundary in
``zkcred.cl.boundaries`` is derived from them.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from ..crypto.config import HASH_OUTPUT_BITS
from ..crypto.exceptions import ConfigurationError


@dataclass(frozen=True)
class Params:
    """
    Bit-length configuration of the CL scheme.

    Attributes:
        rho_bit_len: Order of the Pedersen (nym) group
        pedersen_modulus_bit_len: Modulus of the Pedersen group
        n_length: Special RSA modulus size
        known_attrs_num: Attributes sent to the issuer in the clear
        committed_attrs_num: Attributes sent as DF commitments
        hidden_attrs_num: Attributes never sent
        attr_bit_len: Maximum attribute bit length
        hash_bit_len: Fiat-Shamir challenge length
        sec_param: Statistical security parameter
        e_bit_len: Bit length of e
        e1_bit_len: e lies in (2^(e_bit_len-1), 2^(e_bit_len-1) + 2^(e1_bit_len-1))
        v_bit_len: Bit length of v11
        challenge_space: Interactive challenge length
    """

    known_attrs_num: int
    committed_attrs_num: int
    hidden_attrs_num: int
    rho_bit_len: int = 256
    pedersen_modulus_bit_len: int = 2048
    n_length: int = 1024
    attr_bit_len: int = 256
    hash_bit_len: int = 512
    sec_param: int = 80
    e_bit_len: int = 597
    e1_bit_len: int = 120
    v_bit_len: int = 2724
    challenge_space: int = 80

    def validate(self) -> "Params":
        """
        Raises:
            ConfigurationError: If the parameters are inconsistent
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{f.name} must be an integer")
            if f.name.endswith("_num"):
                if value < 0:
                    raise ConfigurationError(f"{f.name} must be non-negative")
            elif value <= 0:
                raise ConfigurationError(f"{f.name} must be positive")
        if self.n_length % 2:
            raise ConfigurationError("n_length must be even")
        if self.e1_bit_len >= self.e_bit_len:
            raise ConfigurationError("e1_bit_len must be smaller than e_bit_len")
        if self.hash_bit_len != HASH_OUTPUT_BITS:
            raise ConfigurationError(
                f"hash_bit_len must match the Fiat-Shamir hash ({HASH_OUTPUT_BITS})"
            )
        if self.v_bit_len <= self.n_length + self.sec_param + self.e_bit_len:
            raise ConfigurationError("v_bit_len too small to absorb randomization")
        if self.pedersen_modulus_bit_len <= self.rho_bit_len + 1:
            raise ConfigurationError("Pedersen modulus must be longer than its order")
        return self

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Params":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"unknown parameters: {sorted(unknown)}")
        try:
            params = cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"incomplete parameters: {exc}") from exc
        return params.validate()

    def with_counts(self, known: int, committed: int, hidden: int) -> "Params":
        values = self.to_dict()
        values.update(
            known_attrs_num=known, committed_attrs_num=committed, hidden_attrs_num=hidden
        )
        return Params.from_dict(values)


def default_params(
    known: int = 0, committed: int = 0, hidden: int = 0, overrides: Optional[Dict[str, int]] = None
) -> Params:
    values: Dict[str, Any] = dict(
        known_attrs_num=known, committed_attrs_num=committed, hidden_attrs_num=hidden
    )
    values.update(overrides or {})
    return Params.from_dict(values)

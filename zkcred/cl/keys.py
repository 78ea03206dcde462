"""
⚠️ DRAFT — requires crypto review before production use

Issuer key material for CL credentials.

PubKey:
- special RSA modulus N with bases S, Z and one base per attribute slot
  (R_known, R_committed, R_hidden), all in QR_N
- Pedersen group and generators for nyms
- a second modulus N1 with bases G, H for attribute commitments

SecKey: factorizations of N and N1.

Keys serialize to CBOR files.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import cbor2

from ..crypto.commitments.damgard_fujisaki import (
    DamgardFujisakiCommitter,
    DamgardFujisakiReceiver,
)
from ..crypto.commitments.pedersen import PedersenParams
from ..crypto.config import DEFAULT_SEC_PARAM, DOMAIN_SEPARATORS, KEY_FILE_VERSION
from ..crypto.exceptions import ConfigurationError
from ..crypto.groups.qr_special_rsa import QRSpecialRSA
from ..crypto.groups.schnorr import SchnorrGroup
from ..crypto.security import RandomnessSource, default_randomness, hash_numbers
from .params import Params

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# PUBLIC KEY
# ============================================================================


@dataclass(frozen=True)
class PubKey:
    n: int
    s: int
    z: int
    rs_known: List[int]
    rs_committed: List[int]
    rs_hidden: List[int]
    pedersen: PedersenParams
    n1: int
    g: int
    h: int

    @property
    def group(self) -> QRSpecialRSA:
        """Public view of QR_N."""
        return QRSpecialRSA(self.n)

    @property
    def commitment_group(self) -> QRSpecialRSA:
        """Public view of QR_N1."""
        return QRSpecialRSA(self.n1)

    @property
    def context(self) -> int:
        """Hash of the whole public key; bound into every challenge."""
        pedersen_group = self.pedersen.group
        return hash_numbers(
            DOMAIN_SEPARATORS["key_context"],
            self.n,
            self.s,
            self.z,
            *self.rs_known,
            *self.rs_committed,
            *self.rs_hidden,
            pedersen_group.p,
            pedersen_group.q,
            self.pedersen.g,
            self.pedersen.h,
            self.n1,
            self.g,
            self.h,
        )

    def df_committer(
        self, rng: Optional[RandomnessSource] = None, k: int = DEFAULT_SEC_PARAM
    ) -> DamgardFujisakiCommitter:
        """Committer for attribute commitments (T = N1)."""
        return DamgardFujisakiCommitter(self.n1, self.h, self.g, self.n1, k=k, rng=rng)

    def check_counts(self, params: Params) -> None:
        """
        Raises:
            ConfigurationError: If the key does not fit the parameters
        """
        if (
            len(self.rs_known) != params.known_attrs_num
            or len(self.rs_committed) != params.committed_attrs_num
            or len(self.rs_hidden) != params.hidden_attrs_num
        ):
            raise ConfigurationError("public key attribute slots do not match params")

    def to_dict(self) -> Dict[str, Any]:
        group = self.pedersen.group
        return {
            "version": KEY_FILE_VERSION,
            "n": self.n,
            "s": self.s,
            "z": self.z,
            "rs_known": list(self.rs_known),
            "rs_committed": list(self.rs_committed),
            "rs_hidden": list(self.rs_hidden),
            "pedersen": {"p": group.p, "q": group.q, "g": self.pedersen.g, "h": self.pedersen.h},
            "n1": self.n1,
            "g": self.g,
            "h": self.h,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PubKey":
        if data.get("version") != KEY_FILE_VERSION:
            raise ConfigurationError("unsupported public key version")
        try:
            ped = data["pedersen"]
            group = SchnorrGroup(ped["p"], ped["q"], ped["g"])
            return cls(
                n=data["n"],
                s=data["s"],
                z=data["z"],
                rs_known=list(data["rs_known"]),
                rs_committed=list(data["rs_committed"]),
                rs_hidden=list(data["rs_hidden"]),
                pedersen=PedersenParams(group, ped["g"], ped["h"]),
                n1=data["n1"],
                g=data["g"],
                h=data["h"],
            )
        except (KeyError, TypeError) as exc:
            raise ConfigurationError(f"malformed public key: {exc}") from exc

    def save(self, path: PathLike) -> None:
        Path(path).write_bytes(cbor2.dumps(self.to_dict()))

    @classmethod
    def load(cls, path: PathLike) -> "PubKey":
        return cls.from_dict(cbor2.loads(Path(path).read_bytes()))


# ============================================================================
# SECRET KEY
# ============================================================================


@dataclass(frozen=True, repr=False)
class SecKey:
    """Factorizations of N and N1. Never leaves the issuer."""

    p: int
    q: int
    p_n1: int
    q_n1: int

    def __repr__(self) -> str:
        return "SecKey(<redacted>)"

    @property
    def group(self) -> QRSpecialRSA:
        """QR_N with its factorization."""
        return QRSpecialRSA.from_primes(self.p, self.q)

    def matches(self, pub_key: PubKey) -> bool:
        return self.p * self.q == pub_key.n and self.p_n1 * self.q_n1 == pub_key.n1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": KEY_FILE_VERSION,
            "p": self.p,
            "q": self.q,
            "p_n1": self.p_n1,
            "q_n1": self.q_n1,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecKey":
        if data.get("version") != KEY_FILE_VERSION:
            raise ConfigurationError("unsupported secret key version")
        try:
            return cls(p=data["p"], q=data["q"], p_n1=data["p_n1"], q_n1=data["q_n1"])
        except KeyError as exc:
            raise ConfigurationError(f"malformed secret key: {exc}") from exc

    def save(self, path: PathLike) -> None:
        Path(path).write_bytes(cbor2.dumps(self.to_dict()))

    @classmethod
    def load(cls, path: PathLike) -> "SecKey":
        return cls.from_dict(cbor2.loads(Path(path).read_bytes()))


# ============================================================================
# KEY GENERATION
# ============================================================================


def generate_keys(
    params: Params, rng: Optional[RandomnessSource] = None
) -> Tuple[PubKey, SecKey]:
    """
    Generate an issuer key pair for ``params``.

    Raises:
        SetupError: If prime or generator search fails
    """
    params.validate()
    rng = rng or default_randomness()
    safe_prime_bits = params.n_length // 2

    group = QRSpecialRSA.generate(safe_prime_bits, rng=rng)
    order = group.secret_order
    s = group.random_generator()

    def _base() -> int:
        return group.exponentiate(s, rng.get_random_scalar(order))

    z = _base()
    rs_known = [_base() for _ in range(params.known_attrs_num)]
    rs_committed = [_base() for _ in range(params.committed_attrs_num)]
    rs_hidden = [_base() for _ in range(params.hidden_attrs_num)]

    df_receiver = DamgardFujisakiReceiver.generate(safe_prime_bits, k=params.sec_param, rng=rng)
    schnorr = SchnorrGroup.generate(params.rho_bit_len, params.pedersen_modulus_bit_len, rng=rng)
    pedersen = PedersenParams.generate(schnorr, rng=rng)

    pub_key = PubKey(
        n=group.n,
        s=s,
        z=z,
        rs_known=rs_known,
        rs_committed=rs_committed,
        rs_hidden=rs_hidden,
        pedersen=pedersen,
        n1=df_receiver.n,
        g=df_receiver.g,
        h=df_receiver.h,
    )
    sec_key = SecKey(
        p=group.p, q=group.q, p_n1=df_receiver.group.p, q_n1=df_receiver.group.q
    )
    logger.info(
        "generated CL keys: N=%d bits, %d/%d/%d known/committed/hidden slots",
        group.n.bit_length(),
        params.known_attrs_num,
        params.committed_attrs_num,
        params.hidden_attrs_num,
    )
    return pub_key, sec_key

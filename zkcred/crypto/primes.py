"""
Prime and safe-prime generation backed by petlib's OpenSSL bindings.

petlib draws its candidates from OpenSSL's generator, not from the
injected ``RandomnessSource``; seeding a test RNG does not make prime
generation deterministic.
"""

import logging
from typing import Optional

from petlib.bn import Bn

from .config import MAX_PRIME_SEARCH_ATTEMPTS
from .exceptions import SetupError
from .security import RandomnessSource, default_randomness

logger = logging.getLogger(__name__)

# BN_generate_prime_ex limit enforced by petlib
_MAX_PETLIB_PRIME_BITS = 9999


def to_bn(value: int) -> Bn:
    """Convert a Python int to a petlib Bn."""
    return Bn.from_decimal(str(value))


def is_probable_prime(value: int) -> bool:
    """Miller-Rabin test via OpenSSL. Values below 2 are never prime."""
    if value < 2:
        return False
    return bool(to_bn(value).is_prime())


def get_prime(bits: int) -> int:
    """
    Random prime of exactly ``bits`` bits.

    Raises:
        SetupError: If OpenSSL cannot produce a prime of this size
    """
    return _generate(bits, safe=0)


def get_safe_prime(bits: int) -> int:
    """
    Random safe prime p = 2p' + 1 of exactly ``bits`` bits.

    Raises:
        SetupError: If OpenSSL cannot produce a safe prime of this size
    """
    return _generate(bits, safe=1)


def _generate(bits: int, safe: int) -> int:
    if bits < 3 or bits > _MAX_PETLIB_PRIME_BITS:
        raise SetupError(f"unsupported prime size: {bits} bits")
    try:
        prime = int(Bn.get_prime(bits, safe=safe))
    except Exception as exc:
        raise SetupError(f"prime generation failed ({bits} bits): {exc}") from exc
    logger.debug("generated %s prime of %d bits", "safe" if safe else "plain", bits)
    return prime


def get_prime_in_window(
    base: int,
    width_bits: int,
    rng: Optional[RandomnessSource] = None,
    max_attempts: int = MAX_PRIME_SEARCH_ATTEMPTS,
) -> int:
    """
    Random prime in the open interval (base, base + 2^width_bits).

    Candidates are ``base + x`` for uniform ``x``; even ones are skipped.

    Raises:
        SetupError: If no prime is found within ``max_attempts`` candidates
    """
    rng = rng or default_randomness()
    for _ in range(max_attempts):
        offset = rng.get_random_int(width_bits)
        candidate = base + offset
        if offset == 0 or candidate % 2 == 0:
            continue
        if is_probable_prime(candidate):
            return candidate
    raise SetupError(
        f"prime search exhausted after {max_attempts} candidates "
        f"(window width {width_bits} bits)"
    )

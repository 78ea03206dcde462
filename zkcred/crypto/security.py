"""
⚠️ DRAFT — requires crypto review before production use

Security utilities for cryptographic operations.

This module provides:
1. RandomnessSource - fork-safe, injectable randomness
2. hash_numbers - Fiat-Shamir hashing over integers and byte strings
3. constant_time_compare - timing-safe comparison
"""

import os
import random
import secrets
import hashlib
import hmac
import math
from typing import Optional, Union

from .config import DOMAIN_SEPARATOR_PREFIX, HASH_FUNCTION


# ============================================================================
# INTEGER ENCODING
# ============================================================================


def int_to_bytes(value: int) -> bytes:
    """
    Big-endian minimal encoding of a non-negative integer.

    Zero encodes as a single zero byte so that it is never confused with
    an absent field.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError("int_to_bytes only encodes non-negative integers")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def bytes_to_int(data: bytes) -> int:
    """Inverse of int_to_bytes."""
    return int.from_bytes(data, "big")


# ============================================================================
# RANDOMNESS SOURCE (Fork-Safe)
# ============================================================================


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Every component that draws randomness takes a ``RandomnessSource`` so
    tests can inject a seeded generator. When no generator is passed the
    source wraps ``secrets.SystemRandom`` and reinitializes itself after a
    fork to prevent randomness reuse in the child.

    Example:
        >>> rng = RandomnessSource()
        >>> r = rng.get_random_int(80, also_neg=True)
        >>> seeded = RandomnessSource(random.Random(7))  # tests only
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize randomness source with fork detection."""
        self._pid = os.getpid()
        self._injected = rng is not None
        self._rng = rng if rng is not None else secrets.SystemRandom()

    def _check_fork(self) -> None:
        if not self._injected and os.getpid() != self._pid:
            self._pid = os.getpid()
            self._rng = secrets.SystemRandom()

    def get_random_scalar(self, max_value: int) -> int:
        """
        Get random scalar in [0, max_value).

        Args:
            max_value: Upper bound (exclusive)

        Returns:
            Random scalar in [0, max_value)
        """
        if max_value <= 0:
            raise ValueError(f"max_value must be positive, got {max_value}")
        self._check_fork()
        return self._rng.randrange(0, max_value)

    def get_random_int(self, bits: int, also_neg: bool = False) -> int:
        """
        Get random integer in [0, 2^bits), or in (-2^bits, 2^bits) with a
        uniformly chosen sign when ``also_neg`` is set.
        """
        if bits <= 0:
            raise ValueError(f"bits must be positive, got {bits}")
        self._check_fork()
        value = self._rng.getrandbits(bits)
        if also_neg and self._rng.getrandbits(1):
            return -value
        return value

    def get_random_int_of_length(self, bits: int) -> int:
        """Get random integer with exactly ``bits`` bits (top bit set)."""
        if bits <= 0:
            raise ValueError(f"bits must be positive, got {bits}")
        if bits == 1:
            return 1
        self._check_fork()
        return (1 << (bits - 1)) | self._rng.getrandbits(bits - 1)

    def get_random_invertible(self, n: int) -> int:
        """Get random element of Z_n^* (1 <= x < n, gcd(x, n) == 1)."""
        if n <= 2:
            raise ValueError(f"modulus too small: {n}")
        while True:
            x = self.get_random_scalar(n - 1) + 1
            if math.gcd(x, n) == 1:
                return x

    def get_random_bytes(self, n: int) -> bytes:
        """
        Get n cryptographically secure random bytes.

        Args:
            n: Number of bytes to generate

        Returns:
            n random bytes
        """
        self._check_fork()
        if self._injected:
            return self._rng.getrandbits(8 * n).to_bytes(n, "big")
        return secrets.token_bytes(n)


_default_source: Optional[RandomnessSource] = None


def default_randomness() -> RandomnessSource:
    """Shared system randomness used when a caller does not inject one."""
    global _default_source
    if _default_source is None:
        _default_source = RandomnessSource()
    return _default_source


# ============================================================================
# HASH FUNCTIONS
# ============================================================================


def _new_hash():
    if HASH_FUNCTION == "SHA3-512":
        return hashlib.sha3_512()
    return hashlib.sha512()


def hash_numbers(domain_sep: bytes, *values: Union[int, bytes]) -> int:
    """
    Fiat-Shamir hash over a sequence of integers and byte strings.

    Every item is length-prefixed before hashing so that the encoding of a
    sequence is injective. Integers are encoded big-endian and must be
    non-negative.

    Args:
        domain_sep: Domain separator (must start with the toolkit prefix)
        *values: Integers or byte strings, in transcript order

    Returns:
        Digest as a non-negative integer of HASH_OUTPUT_BITS bits

    Raises:
        ValueError: If the separator is foreign or a value is negative
        TypeError: If a value is neither int nor bytes

    Example:
        >>> c = hash_numbers(DOMAIN_SEPARATORS["prove_credential"], ctx, t, nonce)
    """
    if not isinstance(domain_sep, bytes):
        raise TypeError(f"domain_sep must be bytes, got {type(domain_sep)}")
    if not domain_sep.startswith(DOMAIN_SEPARATOR_PREFIX):
        raise ValueError("Domain separator must use the toolkit prefix")

    h = _new_hash()
    h.update(len(domain_sep).to_bytes(4, "big"))
    h.update(domain_sep)
    for value in values:
        if isinstance(value, bool):
            raise TypeError("bool is not a transcript value")
        if isinstance(value, int):
            encoded = int_to_bytes(value)
        elif isinstance(value, (bytes, bytearray)):
            encoded = bytes(value)
        else:
            raise TypeError(f"cannot hash value of type {type(value)}")
        h.update(len(encoded).to_bytes(4, "big"))
        h.update(encoded)

    return int.from_bytes(h.digest(), "big")


# ============================================================================
# CONSTANT-TIME OPERATIONS
# ============================================================================


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        True if a == b, False otherwise
    """
    return hmac.compare_digest(a, b)


def constant_time_int_equal(a: int, b: int) -> bool:
    """Compare two non-negative integers without an early exit."""
    if a < 0 or b < 0:
        return a == b
    size = max(1, (max(a.bit_length(), b.bit_length()) + 7) // 8)
    return hmac.compare_digest(a.to_bytes(size, "big"), b.to_bytes(size, "big"))

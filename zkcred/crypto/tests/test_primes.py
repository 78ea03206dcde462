"""Tests for prime generation."""

import random

import pytest

from zkcred.crypto.exceptions import SetupError
from zkcred.crypto.primes import (
    get_prime,
    get_prime_in_window,
    get_safe_prime,
    is_probable_prime,
    to_bn,
)
from zkcred.crypto.security import RandomnessSource


class TestPrimality:
    def test_small_values(self):
        assert is_probable_prime(2)
        assert is_probable_prime(97)
        assert not is_probable_prime(91)
        assert not is_probable_prime(1)
        assert not is_probable_prime(0)
        assert not is_probable_prime(-7)

    def test_to_bn_round_trip(self):
        value = 2**300 + 12345
        assert int(to_bn(value)) == value


class TestPrimeGeneration:
    def test_get_prime_bit_length(self):
        p = get_prime(64)
        assert p.bit_length() == 64
        assert is_probable_prime(p)

    def test_get_safe_prime(self):
        """p = 2p' + 1 with p' prime."""
        p = get_safe_prime(64)
        assert p.bit_length() == 64
        assert is_probable_prime(p)
        assert is_probable_prime((p - 1) // 2)

    @pytest.mark.parametrize("bits", [0, 2, 10000])
    def test_unsupported_sizes(self, bits):
        with pytest.raises(SetupError):
            get_safe_prime(bits)


class TestPrimeInWindow:
    def test_prime_in_window(self):
        base = 2**120
        rng = RandomnessSource(random.Random(3))
        for _ in range(5):
            e = get_prime_in_window(base, 40, rng)
            assert base < e < base + 2**40
            assert is_probable_prime(e)

    def test_exhausted_search(self):
        """No candidates means SetupError, not a hang."""
        with pytest.raises(SetupError, match="exhausted"):
            get_prime_in_window(2**64, 16, max_attempts=0)

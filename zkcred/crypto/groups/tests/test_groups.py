"""
⚠️ DRAFT — requires crypto review before production use

Tests for the Schnorr, special-RSA QR and elliptic-curve groups.
"""

import pytest

from zkcred.crypto.exceptions import DomainError, SecurityError
from zkcred.crypto.groups import ECGroup, Group, QRSpecialRSA, SchnorrGroup

# Safe primes 23 = 2*11 + 1 and 47 = 2*23 + 1
SMALL_P = 23
SMALL_Q = 47


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(scope="module")
def schnorr():
    return SchnorrGroup.generate(q_bits=64, p_bits=256)


@pytest.fixture
def small_qr():
    return QRSpecialRSA.from_primes(SMALL_P, SMALL_Q)


@pytest.fixture(scope="module")
def ec():
    return ECGroup()


# ============================================================================
# SCHNORR GROUP
# ============================================================================


class TestSchnorrGroup:
    def test_generate(self, schnorr):
        """Generated parameters have the requested sizes and structure."""
        assert schnorr.p.bit_length() == 256
        assert schnorr.q.bit_length() == 64
        assert (schnorr.p - 1) % schnorr.q == 0
        assert schnorr.order == schnorr.q
        assert schnorr.is_member(schnorr.generator)

    def test_exponent_reduced_mod_q(self, schnorr):
        g = schnorr.generator
        assert schnorr.exponentiate(g, schnorr.q + 5) == schnorr.exponentiate(g, 5)
        assert schnorr.exponentiate(g, -1) == schnorr.invert(g)

    def test_random_element_is_member(self, schnorr):
        for _ in range(10):
            assert schnorr.is_member(schnorr.random_element())

    def test_non_member(self, schnorr):
        """p - 1 has order 2, outside the order-q subgroup."""
        assert not schnorr.is_member(schnorr.p - 1)
        assert not schnorr.is_member(0)
        assert not schnorr.is_member(schnorr.p)

    def test_multi_exponentiate(self, schnorr):
        g = schnorr.generator
        h = schnorr.random_element()
        expected = schnorr.multiply(schnorr.exponentiate(g, 3), schnorr.exponentiate(h, 4))
        assert schnorr.multi_exponentiate([g, h], [3, 4]) == expected
        with pytest.raises(ValueError):
            schnorr.multi_exponentiate([g, h], [3])

    def test_divide(self, schnorr):
        g = schnorr.generator
        assert schnorr.divide(schnorr.exponentiate(g, 9), schnorr.exponentiate(g, 4)) == (
            schnorr.exponentiate(g, 5)
        )

    def test_invalid_parameters(self):
        assert SchnorrGroup(23, 11, 2).order == 11
        with pytest.raises(DomainError):
            SchnorrGroup(23, 7, 2)
        with pytest.raises(DomainError):
            SchnorrGroup(23, 11, 5)


# ============================================================================
# QR OF A SPECIAL RSA MODULUS
# ============================================================================


class TestQRSpecialRSA:
    def test_order_is_hidden(self, small_qr):
        assert small_qr.order is None
        assert small_qr.has_secret
        assert small_qr.secret_order == 11 * 23

    def test_public_view_has_no_secret(self, small_qr):
        public = small_qr.public()
        assert public == small_qr
        assert not public.has_secret
        with pytest.raises(SecurityError):
            public.secret_order
        with pytest.raises(SecurityError):
            public.random_generator()

    def test_membership_public_vs_secret(self, small_qr):
        """5 is a unit mod N but not a square mod 23."""
        assert small_qr.public().is_member(5)
        assert not small_qr.is_member(5)
        assert small_qr.is_member(25)

    def test_non_units_rejected(self, small_qr):
        public = small_qr.public()
        assert not public.is_member(SMALL_P)
        assert not public.is_member(0)
        assert not public.is_member(small_qr.n)

    def test_random_generator_has_full_order(self, small_qr):
        for _ in range(10):
            s = small_qr.random_generator()
            assert small_qr.is_member(s)
            assert pow(s, small_qr.p1, small_qr.n) != 1
            assert pow(s, small_qr.q1, small_qr.n) != 1
            assert pow(s, small_qr.secret_order, small_qr.n) == 1

    def test_negative_exponent(self, small_qr):
        s = small_qr.random_generator()
        public = small_qr.public()
        assert public.exponentiate(s, -3) == public.invert(public.exponentiate(s, 3))

    def test_non_invertible(self, small_qr):
        with pytest.raises(DomainError):
            small_qr.invert(SMALL_P)
        with pytest.raises(DomainError):
            small_qr.exponentiate(SMALL_P, -1)

    def test_constructor_checks(self):
        with pytest.raises(DomainError):
            QRSpecialRSA(SMALL_P * SMALL_Q, p=SMALL_P)
        with pytest.raises(DomainError):
            QRSpecialRSA(SMALL_P * SMALL_Q, p=SMALL_P, q=SMALL_P)
        with pytest.raises(DomainError):
            QRSpecialRSA(3)

    def test_generate(self):
        group = QRSpecialRSA.generate(128)
        assert group.p != group.q
        assert group.p.bit_length() == 128
        assert group.is_member(group.random_generator())


# ============================================================================
# ELLIPTIC CURVE
# ============================================================================


class TestECGroup:
    def test_order_and_generator(self, ec):
        assert ec.order.bit_length() == 256
        assert ec.is_member(ec.generator)
        assert ec.exponentiate(ec.generator, ec.order) == ec.identity()

    def test_inverse(self, ec):
        a = ec.exponentiate(ec.generator, 5)
        assert ec.multiply(a, ec.invert(a)) == ec.identity()
        assert ec.exponentiate(ec.generator, -5) == ec.invert(a)

    def test_element_bytes(self, ec):
        a = ec.random_element()
        assert ec.element_from_bytes(ec.element_to_bytes(a)) == a
        with pytest.raises(DomainError):
            ec.element_from_bytes(b"\x07" * 5)

    def test_hash_to_element(self, ec):
        h1 = ec.hash_to_element(b"seed")
        assert ec.is_member(h1)
        assert h1 == ec.hash_to_element(b"seed")
        assert h1 != ec.hash_to_element(b"other")
        with pytest.raises(ValueError):
            ec.hash_to_element(b"")

    def test_integer_is_not_a_point(self, ec):
        assert not ec.is_member(5)


# ============================================================================
# INTERFACE
# ============================================================================


def test_modulus_bit_length_is_required():
    assert "modulus_bit_length" in Group.__abstractmethods__
    with pytest.raises(TypeError):
        Group()


@pytest.mark.parametrize("group_cls", [SchnorrGroup, QRSpecialRSA, ECGroup])
def test_concrete_groups_are_complete(group_cls):
    assert not group_cls.__abstractmethods__

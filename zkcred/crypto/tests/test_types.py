"""
Tests for proof types and wire integer helpers.
"""

import pytest

from zkcred.crypto.config import PROOF_VERSION, validate_config
from zkcred.crypto.groups.ec import ECGroup
from zkcred.crypto.types import (
    RepresentationProof,
    VerificationResult,
    decode_signed,
    decode_unsigned,
    encode_signed,
    encode_unsigned,
)


# ============================================================================
# VERIFICATION RESULT
# ============================================================================


class TestVerificationResult:
    def test_success_is_truthy(self):
        result = VerificationResult.success()
        assert result
        assert result.reason is None

    def test_failure_is_falsy(self):
        result = VerificationResult.failure("bad challenge")
        assert not result
        assert result.reason == "bad challenge"


# ============================================================================
# REPRESENTATION PROOF
# ============================================================================


class TestRepresentationProof:
    def test_dict_round_trip(self):
        proof = RepresentationProof(proof_random_data=7, challenge=3, proof_data=[-5, 11])
        data = proof.to_dict()
        assert data["version"] == PROOF_VERSION
        assert RepresentationProof.from_dict(data) == proof

    def test_point_proof_does_not_serialize(self):
        """Only integer-group transcripts have a dict form."""
        group = ECGroup()
        proof = RepresentationProof(proof_random_data=group.generator, challenge=1, proof_data=[1])
        with pytest.raises(TypeError):
            proof.to_dict()


# ============================================================================
# WIRE INTEGERS
# ============================================================================


class TestWireIntegers:
    def test_unsigned(self):
        assert encode_unsigned(0) == b"\x00"
        assert decode_unsigned(encode_unsigned(2**700 + 1)) == 2**700 + 1

    def test_signed_layout(self):
        assert encode_signed(-5) == [True, b"\x05"]
        assert encode_signed(0) == [False, b"\x00"]

    def test_signed_values(self):
        for value in (-(2**900), -1, 0, 1, 2**900):
            assert decode_signed(encode_signed(value)) == value

    @pytest.mark.parametrize("data", [b"", "01", 5, None])
    def test_bad_unsigned(self, data):
        with pytest.raises(ValueError):
            decode_unsigned(data)

    @pytest.mark.parametrize(
        "data",
        [[1, b"\x01"], [True], [True, b"\x01", b"\x02"], b"\x01", [False, b""]],
    )
    def test_bad_signed(self, data):
        """Sign must be a real bool and the magnitude non-empty bytes."""
        with pytest.raises(ValueError):
            decode_signed(data)


def test_config_is_valid():
    assert validate_config()

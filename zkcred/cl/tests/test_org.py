"""
⚠️ DRAFT — requires crypto review before production use

Test suite for the issuer / verifier side of the CL protocol.

Test Coverage:
- Credential request verification and issuance
- Single-use nonces
- Credential update from receiver records
- Presentation verification with selective disclosure
- Verify-only organizations
"""

import dataclasses

import pytest

from zkcred.cl.credential import CredRequest, ReceiverRecord
from zkcred.cl.keys import SecKey
from zkcred.cl.org import Org
from zkcred.crypto.exceptions import (
    ConfigurationError,
    DomainError,
    ProofVerificationError,
    ProtocolStateError,
    RecordNotFoundError,
)
from zkcred.crypto.primes import is_probable_prime


def string_attr(value):
    return int.from_bytes(value.encode("utf-8"), "big")


def present(org, manager, cred, revealed_known, revealed_committed):
    nonce = org.get_prove_cred_nonce()
    rcred, proof = manager.build_proof(cred, revealed_known, revealed_committed, nonce)
    return rcred, proof, org.prove_cred(
        rcred.a,
        proof,
        revealed_known,
        revealed_committed,
        [manager.known_attrs[i] for i in revealed_known],
        [manager.commitments_of_attrs[i] for i in revealed_committed],
    )


# ============================================================================
# CONSTRUCTION
# ============================================================================


class TestOrgSetup:
    def test_mismatched_secret_key(self, cl_params, cl_keys):
        pub_key, _ = cl_keys
        with pytest.raises(ConfigurationError):
            Org(cl_params, pub_key, SecKey(p=23, q=47, p_n1=59, q_n1=83))

    def test_context_is_key_context(self, org, cl_keys):
        assert org.context == cl_keys[0].context

    def test_nonces_are_fresh(self, org, cl_params):
        nonces = {org.get_credential_issue_nonce() for _ in range(5)}
        assert len(nonces) > 1
        assert all(n < 2**cl_params.sec_param for n in nonces)

    def test_gen_cred_randoms(self, org, cl_params):
        """e is a prime in its window; v11 has exactly v_bit_len bits."""
        e, v11 = org.gen_cred_randoms()
        low = 1 << (cl_params.e_bit_len - 1)
        assert low < e < low + (1 << (cl_params.e1_bit_len - 1))
        assert is_probable_prime(e)
        assert v11.bit_length() == cl_params.v_bit_len


# ============================================================================
# ISSUANCE
# ============================================================================


class TestIssuance:
    def test_request_verifies(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        assert org.verify_credential_request(request)

    def test_verification_has_no_side_effects(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        assert org.verify_credential_request(request)
        assert org.verify_credential_request(request)
        assert org.cred_issue_nonce is not None

    def test_issue_stores_record(self, org, manager, record_store, issued):
        record = record_store.get(manager.nym)
        assert record == issued.record
        assert record.known_attrs == manager.known_attrs
        assert record.commitments_of_attrs == manager.commitments_of_attrs
        assert record.v11 == issued.cred.v11
        assert record.context == org.context

    def test_credential_equation(self, org, manager, issued):
        """A^e == Q for the Q the holder computes."""
        cred = issued.cred
        assert org.pub_key.group.exponentiate(cred.a, cred.e) == manager.compute_q(cred.v11)

    def test_nonce_is_single_use(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        org.issue_credential(request)
        assert org.cred_issue_nonce is None
        with pytest.raises(ProtocolStateError):
            org.issue_credential(request)

    def test_no_nonce(self, org, manager):
        request = manager.get_credential_request(12345)
        with pytest.raises(ProtocolStateError):
            org.verify_credential_request(request)

    def test_stale_nonce(self, org, manager):
        """A request built for an earlier nonce is rejected and the nonce consumed."""
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        org.get_credential_issue_nonce()
        with pytest.raises(ProofVerificationError, match="challenge"):
            org.issue_credential(request)
        assert org.cred_issue_nonce is None

    def test_tampered_u_proof(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.u_proof.proof_data[0] += 1
        result = org.verify_credential_request(request)
        assert not result
        assert "U proof" in result.reason

    def test_oversized_u_response(self, org, manager, cl_keys):
        """A response shifted by a multiple of |QR_N| passes the equation but not the length."""
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        order = cl_keys[1].group.secret_order
        request.u_proof.proof_data[-1] += order << 4000
        result = org.verify_credential_request(request)
        assert not result
        assert "out of range" in result.reason

    def test_tampered_nym_proof(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.nym_proof.proof_data[0] += 1
        assert not org.verify_credential_request(request)

    def test_unreduced_nym_response(self, org, manager, cl_keys):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.nym_proof.proof_data[0] += cl_keys[0].pedersen.q
        result = org.verify_credential_request(request)
        assert not result
        assert "reduced" in result.reason

    def test_swapped_commitment(self, org, manager, cl_keys):
        """Commitments are bound by the shared challenge."""
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        other = cl_keys[0].df_committer().commit(121)
        request.commitments_of_attrs[0] = other
        assert not org.verify_credential_request(request)

    def test_tampered_opening_proof(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.commitments_of_attrs_proofs[0].proof_data[0] += 1
        result = org.verify_credential_request(request)
        assert not result
        assert "opening" in result.reason

    def test_wrong_attribute_count(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.known_attrs.append(1)
        assert not org.verify_credential_request(request)

    def test_oversized_known_attribute(self, org, manager, cl_params):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.known_attrs[0] = 1 << cl_params.attr_bit_len
        assert not org.verify_credential_request(request)

    def test_non_unit_u(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        request.u = 0
        assert not org.verify_credential_request(request)

    def test_request_survives_dict_round_trip(self, org, manager):
        request = manager.get_credential_request(org.get_credential_issue_nonce())
        assert org.verify_credential_request(CredRequest.from_dict(request.to_dict()))

    def test_malformed_request_dict(self):
        with pytest.raises(DomainError):
            CredRequest.from_dict({"nym": 1})


# ============================================================================
# UPDATE
# ============================================================================


class TestUpdate:
    def test_update(self, org, manager, record_store, issued):
        new_known = [string_attr("John"), manager.known_attrs[1]]
        nonce = manager.update_known_attrs(new_known)
        result = org.update_credential(manager.nym, nonce, new_known)
        assert manager.verify_update(result.cred, result.a_proof)
        assert record_store.get(manager.nym).known_attrs == new_known
        assert result.cred.v11 != issued.cred.v11

    def test_update_then_present(self, org, manager, issued):
        new_known = [string_attr("John"), manager.known_attrs[1]]
        nonce = manager.update_known_attrs(new_known)
        updated = org.update_credential(manager.nym, nonce, new_known)
        assert manager.verify_update(updated.cred, updated.a_proof)
        _, _, result = present(org, manager, updated.cred, [0], [])
        assert result

    def test_old_credential_no_longer_matches(self, org, manager, issued):
        new_known = [string_attr("John"), manager.known_attrs[1]]
        nonce = manager.update_known_attrs(new_known)
        result = org.update_credential(manager.nym, nonce, new_known)
        assert manager.verify_update(result.cred, result.a_proof)
        _, _, verdict = present(org, manager, issued.cred, [], [])
        assert not verdict

    def test_staged_update_keeps_current_credential(self, org, manager, issued):
        """Until the reissued credential verifies, the old one stays usable."""
        before = list(manager.known_attrs)
        manager.update_known_attrs([string_attr("John"), manager.known_attrs[1]])
        assert manager.known_attrs == before
        _, _, result = present(org, manager, issued.cred, [0], [])
        assert result

    def test_update_uses_fresh_holder_nonce(self, org, manager, issued):
        """The issuer proof is bound to the nonce sent with the update."""
        new_known = [string_attr("John"), manager.known_attrs[1]]
        nonce = manager.update_known_attrs(new_known)
        result = org.update_credential(manager.nym, nonce + 1, new_known)
        before = list(manager.known_attrs)
        verdict = manager.verify_update(result.cred, result.a_proof)
        assert not verdict
        assert "challenge" in verdict.reason
        assert manager.known_attrs == before

    def test_explicit_record(self, cl_params, cl_keys, manager, issued):
        """A store-less Org can update from a record passed in."""
        pub_key, sec_key = cl_keys
        org = Org(cl_params, pub_key, sec_key)
        new_known = [string_attr("John"), manager.known_attrs[1]]
        nonce = manager.update_known_attrs(new_known)
        result = org.update_credential(manager.nym, nonce, new_known, record=issued.record)
        assert manager.verify_update(result.cred, result.a_proof)

    def test_no_record_store(self, cl_params, cl_keys):
        pub_key, sec_key = cl_keys
        with pytest.raises(ProtocolStateError):
            Org(cl_params, pub_key, sec_key).update_credential(1, 1, [1, 2])

    def test_unknown_nym(self, org):
        with pytest.raises(RecordNotFoundError):
            org.update_credential(42, 1, [1, 2])

    def test_record_from_other_key(self, org, manager, issued):
        record = dataclasses.replace(issued.record, context=issued.record.context + 1)
        with pytest.raises(DomainError):
            org.update_credential(manager.nym, 1, manager.known_attrs, record=record)

    def test_wrong_attribute_count(self, org, manager, issued):
        with pytest.raises(DomainError):
            org.update_credential(manager.nym, 1, [1])

    def test_record_is_replaced(self, org, manager, record_store, issued):
        nonce = manager.update_known_attrs(manager.known_attrs)
        result = org.update_credential(manager.nym, nonce, manager.known_attrs)
        stored = record_store.get(manager.nym)
        assert isinstance(stored, ReceiverRecord)
        assert stored.v11 == result.cred.v11
        assert stored.q != issued.record.q


# ============================================================================
# PRESENTATION
# ============================================================================


class TestPresentation:
    @pytest.mark.parametrize(
        "revealed_known,revealed_committed",
        [([], []), ([1], []), ([0, 1], []), ([], [0]), ([0, 1], [0])],
    )
    def test_selective_disclosure(self, org, manager, issued, revealed_known, revealed_committed):
        _, _, result = present(org, manager, issued.cred, revealed_known, revealed_committed)
        assert result

    def test_nonce_is_single_use(self, org, manager, issued):
        rcred, proof, result = present(org, manager, issued.cred, [1], [])
        assert result
        with pytest.raises(ProtocolStateError):
            org.prove_cred(rcred.a, proof, [1], [], [manager.known_attrs[1]], [])

    def test_replay_under_new_nonce(self, org, manager, issued):
        rcred, proof, _ = present(org, manager, issued.cred, [1], [])
        org.get_prove_cred_nonce()
        result = org.prove_cred(rcred.a, proof, [1], [], [manager.known_attrs[1]], [])
        assert not result
        assert "challenge" in result.reason

    def test_wrong_revealed_value(self, org, manager, issued):
        nonce = org.get_prove_cred_nonce()
        rcred, proof = manager.build_proof(issued.cred, [1], [], nonce)
        result = org.prove_cred(rcred.a, proof, [1], [], [string_attr("F")], [])
        assert not result

    def test_revealed_index_mismatch(self, org, manager, issued):
        """Claiming a different attribute was revealed changes the statement."""
        nonce = org.get_prove_cred_nonce()
        rcred, proof = manager.build_proof(issued.cred, [1], [], nonce)
        result = org.prove_cred(rcred.a, proof, [0], [], [manager.known_attrs[1]], [])
        assert not result

    def test_randomized_credentials_are_unlinkable(self, org, manager, issued):
        """A' differs between presentations and from the issued A."""
        first, _, ok1 = present(org, manager, issued.cred, [1], [])
        second, _, ok2 = present(org, manager, issued.cred, [1], [])
        assert ok1 and ok2
        assert first.a != second.a
        assert issued.cred.a not in (first.a, second.a)

    def test_non_unit_a_prime(self, org, manager, issued):
        nonce = org.get_prove_cred_nonce()
        _, proof = manager.build_proof(issued.cred, [], [], nonce)
        result = org.prove_cred(0, proof, [], [], [], [])
        assert not result

    def test_oversized_response(self, org, manager, issued, cl_keys):
        nonce = org.get_prove_cred_nonce()
        rcred, proof = manager.build_proof(issued.cred, [], [], nonce)
        proof.proof_data[-1] += cl_keys[1].group.secret_order << 4000
        result = org.prove_cred(rcred.a, proof, [], [], [], [])
        assert not result
        assert "out of range" in result.reason

    def test_no_prove_nonce(self, org, manager, issued):
        _, proof = manager.build_proof(issued.cred, [], [], 1)
        with pytest.raises(ProtocolStateError):
            org.prove_cred(issued.cred.a, proof, [], [], [], [])

    @pytest.mark.parametrize("revealed_known", [[2], [0, 0], [-1]])
    def test_bad_revealed_indices(self, org, manager, issued, revealed_known):
        org.get_prove_cred_nonce()
        _, proof = manager.build_proof(issued.cred, [], [], 1)
        with pytest.raises(DomainError):
            org.prove_cred(issued.cred.a, proof, revealed_known, [], [1] * len(revealed_known), [])


# ============================================================================
# VERIFY-ONLY ORGANIZATION
# ============================================================================


class TestVerifyOnlyOrg:
    @pytest.fixture
    def verifier(self, cl_params, cl_keys):
        return Org(cl_params, cl_keys[0])

    def test_verifies_presentations(self, verifier, manager, issued):
        _, _, result = present(verifier, manager, issued.cred, [0], [0])
        assert result

    def test_cannot_issue(self, verifier, manager):
        request = manager.get_credential_request(verifier.get_credential_issue_nonce())
        assert verifier.verify_credential_request(request)
        with pytest.raises(ProtocolStateError):
            verifier.issue_credential(request)

    def test_cannot_update(self, verifier, manager, issued):
        with pytest.raises(ProtocolStateError):
            verifier.update_credential(manager.nym, 1, manager.known_attrs, record=issued.record)

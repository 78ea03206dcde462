"""
⚠️ DRAFT — requires crypto review before production use

Issuer / verifier side of the CL credential protocol.

An Org built without a secret key can only verify presentations
(``prove_cred``) and credential requests. Issuing and updating need the
factorization of N to compute e^-1 mod |QR_N|.

Nonces are single-use: issuing and presentation verification consume the
nonce they were checked against.
"""

import logging
from typing import Optional, Sequence, Tuple

from ..crypto.exceptions import (
    ConfigurationError,
    DomainError,
    ProofVerificationError,
    ProtocolStateError,
)
from ..crypto.primes import get_prime_in_window
from ..crypto.proofs.df_opening import DFOpeningVerifier
from ..crypto.proofs.representation import RepresentationProver, RepresentationVerifier
from ..crypto.security import RandomnessSource, default_randomness
from ..crypto.types import RepresentationProof, VerificationResult
from .boundaries import e_inverse_boundary, presentation_boundaries, u_proof_boundaries
from .cred_manager import check_attribute_values
from .credential import Cred, CredRequest, CredResult, ReceiverRecord
from .keys import PubKey, SecKey, generate_keys
from .params import Params
from .presentation import (
    check_revealed_indices,
    presentation_bases,
    presentation_target,
    unrevealed,
)
from .records import RecordStore
from .transcript import credential_request_challenge, issue_challenge, presentation_challenge


class Org:
    """
    Credential issuer and verifier.

    Example:
        >>> org = Org.generate(params, record_store=InMemoryRecordStore())
        >>> nonce = org.get_credential_issue_nonce()
        >>> result = org.issue_credential(manager.get_credential_request(nonce))
    """

    def __init__(
        self,
        params: Params,
        pub_key: PubKey,
        sec_key: Optional[SecKey] = None,
        record_store: Optional[RecordStore] = None,
        rng: Optional[RandomnessSource] = None,
        logger: Optional[logging.Logger] = None,
    ):
        pub_key.check_counts(params)
        if sec_key is not None and not sec_key.matches(pub_key):
            raise ConfigurationError("secret key does not belong to the public key")
        self.params = params
        self.pub_key = pub_key
        self.sec_key = sec_key
        self.record_store = record_store
        self.rng = rng or default_randomness()
        self.logger = logger or logging.getLogger(__name__)
        self.context = pub_key.context
        self.cred_issue_nonce: Optional[int] = None
        self.prove_cred_nonce: Optional[int] = None

    @classmethod
    def generate(
        cls,
        params: Params,
        record_store: Optional[RecordStore] = None,
        rng: Optional[RandomnessSource] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "Org":
        """New issuer with freshly generated keys."""
        pub_key, sec_key = generate_keys(params, rng=rng)
        return cls(params, pub_key, sec_key, record_store=record_store, rng=rng, logger=logger)

    # ------------------------------------------------------------------
    # Nonces
    # ------------------------------------------------------------------

    def get_credential_issue_nonce(self) -> int:
        self.cred_issue_nonce = self.rng.get_random_int(self.params.sec_param)
        return self.cred_issue_nonce

    def get_prove_cred_nonce(self) -> int:
        self.prove_cred_nonce = self.rng.get_random_int(self.params.sec_param)
        return self.prove_cred_nonce

    # ------------------------------------------------------------------
    # Credential request
    # ------------------------------------------------------------------

    def verify_credential_request(self, cr: CredRequest) -> VerificationResult:
        """
        Check every proof of a credential request against the current
        issue nonce. Has no side effects.

        Raises:
            ProtocolStateError: If no issue nonce has been handed out
        """
        params, pub_key = self.params, self.pub_key
        if self.cred_issue_nonce is None:
            raise ProtocolStateError("no credential issue nonce has been generated")

        if len(cr.known_attrs) != params.known_attrs_num:
            return self._reject("wrong number of known attributes")
        if len(cr.commitments_of_attrs) != params.committed_attrs_num or len(
            cr.commitments_of_attrs_proofs
        ) != params.committed_attrs_num:
            return self._reject("wrong number of attribute commitments")
        try:
            check_attribute_values(cr.known_attrs, params, "known")
        except DomainError as exc:
            return self._reject(str(exc))

        pedersen = pub_key.pedersen
        group = pub_key.group
        commitment_group = pub_key.commitment_group
        if not pedersen.group.is_member(cr.nym):
            return self._reject("nym is not in the Pedersen group")
        if not group.is_member(cr.u):
            return self._reject("U is not a unit modulo N")
        if not all(commitment_group.is_member(c) for c in cr.commitments_of_attrs):
            return self._reject("attribute commitment is not a unit modulo N1")

        challenge = credential_request_challenge(
            self.context,
            cr.u,
            cr.nym,
            self.cred_issue_nonce,
            cr.commitments_of_attrs,
            cr.nym_proof.proof_random_data,
            cr.u_proof.proof_random_data,
            [p.proof_random_data for p in cr.commitments_of_attrs_proofs],
        )
        proofs = [cr.nym_proof, cr.u_proof] + list(cr.commitments_of_attrs_proofs)
        if any(p.challenge != challenge for p in proofs):
            return self._reject("credential request challenge mismatch")

        nym_verifier = RepresentationVerifier(pedersen.group)
        nym_verifier.set_proof_random_data(
            cr.nym_proof.proof_random_data, [pedersen.g, pedersen.h], cr.nym
        )
        nym_verifier.set_challenge(challenge)
        if not nym_verifier.verify(cr.nym_proof.proof_data):
            return self._reject("nym proof does not verify")
        if not nym_verifier.verify_length(cr.nym_proof.proof_data, []):
            return self._reject("nym proof responses are not reduced")

        u_verifier = RepresentationVerifier(group)
        u_verifier.set_proof_random_data(
            cr.u_proof.proof_random_data, list(pub_key.rs_hidden) + [pub_key.s], cr.u
        )
        u_verifier.set_challenge(challenge)
        if not u_verifier.verify(cr.u_proof.proof_data):
            return self._reject("U proof does not verify")
        if not u_verifier.verify_length(cr.u_proof.proof_data, u_proof_boundaries(params)):
            return self._reject("U proof response out of range")

        for commitment, proof in zip(cr.commitments_of_attrs, cr.commitments_of_attrs_proofs):
            opening_verifier = DFOpeningVerifier(
                pub_key.n1,
                pub_key.g,
                pub_key.h,
                commitment,
                t=pub_key.n1,
                k=params.sec_param,
                challenge_bits=params.hash_bit_len,
            )
            opening_verifier.set_proof_random_data(proof.proof_random_data)
            opening_verifier.set_challenge(challenge)
            if not opening_verifier.verify(proof.proof_data):
                return self._reject("attribute commitment opening proof does not verify")

        return VerificationResult.success()

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def _require_sec_key(self) -> SecKey:
        if self.sec_key is None:
            raise ProtocolStateError("this Org has no secret key and cannot issue")
        return self.sec_key

    def gen_cred_randoms(self) -> Tuple[int, int]:
        """
        Prime e in (2^(e_bit_len-1), 2^(e_bit_len-1) + 2^(e1_bit_len-1)) and
        a v_bit_len-bit v11.
        """
        params = self.params
        e = get_prime_in_window(1 << (params.e_bit_len - 1), params.e1_bit_len - 1, rng=self.rng)
        v11 = self.rng.get_random_int_of_length(params.v_bit_len)
        return e, v11

    def issue_credential(self, cr: CredRequest) -> CredResult:
        """
        Verify ``cr`` and issue a credential for it.

        The issue nonce is consumed whether or not issuance succeeds. The
        receiver record is written only after the credential is complete.

        Raises:
            ProofVerificationError: If the request does not verify
            ProtocolStateError: Without an issue nonce or secret key
        """
        self._require_sec_key()
        try:
            result = self.verify_credential_request(cr)
            if not result:
                raise ProofVerificationError(f"credential request rejected: {result.reason}")
        finally:
            self.cred_issue_nonce = None

        pub_key = self.pub_key
        group = pub_key.group
        e, v11 = self.gen_cred_randoms()
        denominator = group.multiply(
            cr.u,
            group.multi_exponentiate(
                [pub_key.s] + list(pub_key.rs_known) + list(pub_key.rs_committed),
                [v11] + list(cr.known_attrs) + list(cr.commitments_of_attrs),
            ),
        )
        q = group.divide(pub_key.z, denominator)
        cred, a_proof = self._sign(q, e, v11, cr.nonce)

        record = ReceiverRecord(
            known_attrs=list(cr.known_attrs),
            commitments_of_attrs=list(cr.commitments_of_attrs),
            q=q,
            v11=v11,
            context=self.context,
        )
        if self.record_store is not None:
            self.record_store.put(cr.nym, record)
        self.logger.info("issued credential (e=%d bits)", e.bit_length())
        return CredResult(cred=cred, a_proof=a_proof, record=record)

    def _sign(self, q: int, e: int, v11: int, nonce_user: int) -> Tuple[Cred, RepresentationProof]:
        """A = Q^(e^-1) and a proof that A and Q are related by e^-1."""
        sec_group = self._require_sec_key().group
        e_inv = pow(e, -1, sec_group.secret_order)
        a = sec_group.exponentiate(q, e_inv)
        prover = RepresentationProver(
            sec_group, [e_inv], [q], a, sec_param=self.params.sec_param, rng=self.rng
        )
        random_data = prover.get_proof_random_data([e_inverse_boundary(self.params)], also_neg=True)
        challenge = issue_challenge(self.context, q, a, random_data.t, nonce_user)
        a_proof = RepresentationProof(
            random_data.t, challenge, prover.get_proof_data(random_data, challenge)
        )
        return Cred(a=a, e=e, v11=v11), a_proof

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_credential(
        self,
        nym: int,
        nonce_user: int,
        new_known_attrs: Sequence[int],
        record: Optional[ReceiverRecord] = None,
    ) -> CredResult:
        """
        Reissue the credential of ``nym`` with new known attribute values.

        The stored record supplies Q and v11 of the previous credential; only
        the change in known attributes and in v11 is folded into the new Q.

        Raises:
            RecordNotFoundError: If the store has no record for ``nym``
            DomainError: On a record from another key or bad attributes
        """
        self._require_sec_key()
        params, pub_key = self.params, self.pub_key
        if record is None:
            if self.record_store is None:
                raise ProtocolStateError("no record given and no record store configured")
            record = self.record_store.get(nym)
        if record.context != self.context:
            raise DomainError("receiver record was issued under a different key")
        if len(new_known_attrs) != params.known_attrs_num:
            raise DomainError("wrong number of known attributes")
        new_known = check_attribute_values(new_known_attrs, params, "known")

        group = pub_key.group
        e, v11 = self.gen_cred_randoms()
        deltas = [new - old for new, old in zip(new_known, record.known_attrs)]
        change = group.multi_exponentiate(
            [pub_key.s] + list(pub_key.rs_known), [v11 - record.v11] + deltas
        )
        q = group.divide(record.q, change)
        cred, a_proof = self._sign(q, e, v11, nonce_user)

        new_record = ReceiverRecord(
            known_attrs=new_known,
            commitments_of_attrs=list(record.commitments_of_attrs),
            q=q,
            v11=v11,
            context=self.context,
        )
        if self.record_store is not None:
            self.record_store.put(nym, new_record)
        self.logger.info("updated credential")
        return CredResult(cred=cred, a_proof=a_proof, record=new_record)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def prove_cred(
        self,
        a_prime: int,
        proof: RepresentationProof,
        revealed_known_idx: Sequence[int],
        revealed_committed_idx: Sequence[int],
        revealed_known_attrs: Sequence[int],
        revealed_commitments: Sequence[int],
    ) -> VerificationResult:
        """
        Verify a presentation against the current prove nonce, which is
        consumed.

        Raises:
            ProtocolStateError: If no prove nonce has been handed out
            DomainError: On malformed revealed indices
        """
        params, pub_key = self.params, self.pub_key
        nonce = self.prove_cred_nonce
        if nonce is None:
            raise ProtocolStateError("no prove nonce has been generated")
        self.prove_cred_nonce = None

        revealed_known = check_revealed_indices(
            revealed_known_idx, params.known_attrs_num, "known"
        )
        revealed_committed = check_revealed_indices(
            revealed_committed_idx, params.committed_attrs_num, "committed"
        )
        group = pub_key.group
        if not group.is_member(a_prime):
            return self._reject("A' is not a unit modulo N")

        y = presentation_target(
            pub_key, revealed_known, revealed_known_attrs, revealed_committed, revealed_commitments
        )
        bases = presentation_bases(pub_key, revealed_known, revealed_committed, a_prime)
        expected = presentation_challenge(self.context, a_prime, y, proof.proof_random_data, nonce)
        if expected != proof.challenge:
            return self._reject("presentation challenge mismatch")

        verifier = RepresentationVerifier(group)
        verifier.set_proof_random_data(proof.proof_random_data, bases, y)
        verifier.set_challenge(proof.challenge)
        if not verifier.verify(proof.proof_data):
            return self._reject("presentation proof does not verify")
        boundaries = presentation_boundaries(
            params,
            len(unrevealed(revealed_known, params.known_attrs_num)),
            len(unrevealed(revealed_committed, params.committed_attrs_num)),
        )
        if not verifier.verify_length(proof.proof_data, boundaries):
            return self._reject("presentation proof response out of range")
        self.logger.info("presentation verified")
        return VerificationResult.success()

    def _reject(self, reason: str) -> VerificationResult:
        self.logger.warning("verification failed: %s", reason)
        return VerificationResult.failure(reason)

"""
⚠️ DRAFT — requires crypto review before production use

Holder side of the CL credential protocol.

Session flow:
1. generate_nym / commitments of committed attributes (construction)
2. get_credential_request(nonce_org) -> CredRequest       (sets v1)
3. verify_credential(cred, a_proof)                       (needs v1)
4. build_proof(cred, revealed..., nonce_org)              (randomizes, needs v1)
5. update_known_attrs(new_known) -> nonce, then verify_update(cred, a_proof);
   the new values replace the old ones only once the reissued credential
   verifies

A CredManager holds v1 and per-session nonces; use one instance per
(holder, organization) session.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..crypto.commitments.damgard_fujisaki import DamgardFujisakiCommitter
from ..crypto.commitments.pedersen import PedersenCommitter
from ..crypto.exceptions import DomainError, ProtocolStateError
from ..crypto.primes import is_probable_prime
from ..crypto.proofs.df_opening import DFOpeningProver
from ..crypto.proofs.representation import RepresentationProver, RepresentationVerifier
from ..crypto.security import RandomnessSource, default_randomness
from ..crypto.types import RepresentationProof, VerificationResult
from .attributes import RawCredential
from .boundaries import e_inverse_boundary, presentation_boundaries, u_proof_boundaries
from .credential import Cred, CredRequest
from .keys import PubKey
from .params import Params
from .presentation import check_revealed_indices, presentation_bases, presentation_target
from .transcript import credential_request_challenge, issue_challenge, presentation_challenge


def generate_master_secret(pub_key: PubKey, rng: Optional[RandomnessSource] = None) -> int:
    """Master secret in [0, q) of the nym group."""
    rng = rng or default_randomness()
    return rng.get_random_scalar(pub_key.pedersen.q)


def check_attribute_values(values: Sequence[int], params: Params, kind: str) -> List[int]:
    """
    Raises:
        DomainError: If a value is negative or longer than attr_bit_len
    """
    result = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DomainError(f"{kind} attribute must be an integer")
        if value < 0 or value.bit_length() > params.attr_bit_len:
            raise DomainError(f"{kind} attribute exceeds {params.attr_bit_len} bits")
        result.append(value)
    return result


class CredManager:
    """
    Credential holder.

    Example:
        >>> manager = CredManager(params, pub_key, master_secret, known, committed, hidden)
        >>> nonce = org.get_credential_issue_nonce()
        >>> request = manager.get_credential_request(nonce)
        >>> result = org.issue_credential(request)
        >>> assert manager.verify_credential(result.cred, result.a_proof)
    """

    def __init__(
        self,
        params: Params,
        pub_key: PubKey,
        master_secret: int,
        known_attrs: Sequence[int],
        committed_attrs: Sequence[int],
        hidden_attrs: Sequence[int],
        rng: Optional[RandomnessSource] = None,
        logger: Optional[logging.Logger] = None,
    ):
        pub_key.check_counts(params)
        if (
            len(known_attrs) != params.known_attrs_num
            or len(committed_attrs) != params.committed_attrs_num
            or len(hidden_attrs) != params.hidden_attrs_num
        ):
            raise DomainError("attribute counts do not match params")
        self.params = params
        self.pub_key = pub_key
        self.rng = rng or default_randomness()
        self.logger = logger or logging.getLogger(__name__)
        self.master_secret = master_secret
        self.known_attrs = check_attribute_values(known_attrs, params, "known")
        self.committed_attrs = check_attribute_values(committed_attrs, params, "committed")
        self.hidden_attrs = check_attribute_values(hidden_attrs, params, "hidden")

        self.nym_committer = PedersenCommitter(pub_key.pedersen, rng=self.rng)
        self.nym = self.generate_nym()

        self.attr_committers: List[DamgardFujisakiCommitter] = []
        self.commitments_of_attrs: List[int] = []
        for value in self.committed_attrs:
            committer = pub_key.df_committer(rng=self.rng, k=params.sec_param)
            self.commitments_of_attrs.append(committer.commit(value))
            self.attr_committers.append(committer)

        self.u: Optional[int] = None
        self.v1: Optional[int] = None
        self.cred_req_nonce: Optional[int] = None
        self._pending_update: Optional[Tuple[List[int], int]] = None

    @classmethod
    def from_raw_credential(
        cls,
        params: Params,
        pub_key: PubKey,
        master_secret: int,
        raw_cred: RawCredential,
        **kwargs: Any,
    ) -> "CredManager":
        return cls(
            params,
            pub_key,
            master_secret,
            raw_cred.get_known_values(),
            raw_cred.get_committed_values(),
            raw_cred.get_hidden_values(),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    def generate_nym(self) -> int:
        """Pedersen commitment to the master secret."""
        return self.nym_committer.commit(self.master_secret)

    def compute_u(self) -> Tuple[int, int]:
        """U = S^v1 · Π R_hidden^attr with v1 from ±2^(n_length+sec_param)."""
        group = self.pub_key.group
        v1 = self.rng.get_random_int(self.params.n_length + self.params.sec_param, also_neg=True)
        u = group.multiply(
            group.exponentiate(self.pub_key.s, v1),
            group.multi_exponentiate(self.pub_key.rs_hidden, self.hidden_attrs),
        )
        return u, v1

    def get_credential_request(self, nonce_org: int) -> CredRequest:
        """
        Build the credential request for the issuer nonce ``nonce_org``.

        Draws a fresh v1 and a fresh holder nonce; the issuer proof of the
        resulting credential is checked against both.
        """
        params, pub_key = self.params, self.pub_key
        self.u, self.v1 = self.compute_u()

        pedersen = pub_key.pedersen
        nym_value, nym_blinding = self.nym_committer.decommit()
        nym_prover = RepresentationProver(
            pedersen.group, [nym_value, nym_blinding], [pedersen.g, pedersen.h], self.nym,
            rng=self.rng,
        )
        nym_random = nym_prover.get_proof_random_data()

        u_prover = RepresentationProver(
            pub_key.group,
            self.hidden_attrs + [self.v1],
            list(pub_key.rs_hidden) + [pub_key.s],
            self.u,
            sec_param=params.sec_param,
            rng=self.rng,
        )
        u_random = u_prover.get_proof_random_data(u_proof_boundaries(params), also_neg=True)

        opening_provers = [
            DFOpeningProver(c, challenge_bits=params.hash_bit_len, rng=self.rng)
            for c in self.attr_committers
        ]
        opening_randoms = [p.get_proof_random_data() for p in opening_provers]

        challenge = credential_request_challenge(
            pub_key.context,
            self.u,
            self.nym,
            nonce_org,
            self.commitments_of_attrs,
            nym_random.t,
            u_random.t,
            [r.t for r in opening_randoms],
        )

        self.cred_req_nonce = self.rng.get_random_int(params.sec_param)
        self.logger.debug("built credential request (%d known, %d committed attributes)",
                          len(self.known_attrs), len(self.committed_attrs))
        return CredRequest(
            nym=self.nym,
            known_attrs=list(self.known_attrs),
            commitments_of_attrs=list(self.commitments_of_attrs),
            nym_proof=RepresentationProof(
                nym_random.t, challenge, nym_prover.get_proof_data(nym_random, challenge)
            ),
            u=self.u,
            u_proof=RepresentationProof(
                u_random.t, challenge, u_prover.get_proof_data(u_random, challenge)
            ),
            commitments_of_attrs_proofs=[
                RepresentationProof(r.t, challenge, p.get_proof_data(r, challenge))
                for p, r in zip(opening_provers, opening_randoms)
            ],
            nonce=self.cred_req_nonce,
        )

    # ------------------------------------------------------------------
    # Credential verification
    # ------------------------------------------------------------------

    def _require_v1(self) -> int:
        if self.v1 is None:
            raise ProtocolStateError("v1 is not set; build a credential request first")
        return self.v1

    def compute_q(self, v11: int, known_attrs: Optional[Sequence[int]] = None) -> int:
        """Q = Z / (S^(v1+v11) · Π R_known^attr · Π R_committed^commitment · Π R_hidden^attr)."""
        pub_key = self.pub_key
        group = pub_key.group
        bases = (
            [pub_key.s]
            + list(pub_key.rs_known)
            + list(pub_key.rs_committed)
            + list(pub_key.rs_hidden)
        )
        exponents = (
            [self._require_v1() + v11]
            + list(self.known_attrs if known_attrs is None else known_attrs)
            + self.commitments_of_attrs
            + self.hidden_attrs
        )
        return group.divide(pub_key.z, group.multi_exponentiate(bases, exponents))

    def verify_credential(self, cred: Cred, a_proof: RepresentationProof) -> VerificationResult:
        """
        Check a credential issued for this holder's request or update.

        Raises:
            ProtocolStateError: If no request has been built in this session
        """
        self._require_v1()
        if self.cred_req_nonce is None:
            raise ProtocolStateError("no holder nonce; build a request first")
        return self._check_credential(cred, a_proof, self.known_attrs, self.cred_req_nonce)

    def _check_credential(
        self,
        cred: Cred,
        a_proof: RepresentationProof,
        known_attrs: Sequence[int],
        nonce: int,
    ) -> VerificationResult:
        params, pub_key = self.params, self.pub_key
        e_low = 1 << (params.e_bit_len - 1)
        e_high = e_low + (1 << (params.e1_bit_len - 1))
        if not e_low < cred.e < e_high:
            return self._reject("e is outside its bit-length window")
        if not is_probable_prime(cred.e):
            return self._reject("e is not prime")

        group = pub_key.group
        if not group.is_member(cred.a):
            return self._reject("A is not a unit modulo N")
        q = self.compute_q(cred.v11, known_attrs)
        if group.exponentiate(cred.a, cred.e) != q:
            return self._reject("A^e does not match Q")

        expected = issue_challenge(
            pub_key.context, q, cred.a, a_proof.proof_random_data, nonce
        )
        if expected != a_proof.challenge:
            return self._reject("issuer proof challenge mismatch")

        verifier = RepresentationVerifier(group)
        verifier.set_proof_random_data(a_proof.proof_random_data, [q], cred.a)
        verifier.set_challenge(a_proof.challenge)
        if not verifier.verify(a_proof.proof_data):
            return self._reject("issuer proof does not verify")
        if not verifier.verify_length(a_proof.proof_data, [e_inverse_boundary(params)]):
            return self._reject("issuer proof response out of range")
        self.logger.debug("credential verified")
        return VerificationResult.success()

    def _reject(self, reason: str) -> VerificationResult:
        self.logger.warning("credential rejected: %s", reason)
        return VerificationResult.failure(reason)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_known_attrs(self, new_known_attrs: Sequence[int]) -> int:
        """
        Stage new known attribute values and return a fresh holder nonce
        for the issuer's update proof.

        ``known_attrs`` keeps the values of the current credential until
        ``verify_update`` accepts the reissued one.
        """
        if len(new_known_attrs) != self.params.known_attrs_num:
            raise DomainError("known attribute count does not match params")
        known = check_attribute_values(new_known_attrs, self.params, "known")
        nonce = self.rng.get_random_int(self.params.sec_param)
        self._pending_update = (known, nonce)
        return nonce

    def verify_update(self, cred: Cred, a_proof: RepresentationProof) -> VerificationResult:
        """
        Check a credential reissued for the staged update and switch to the
        new known attributes if it verifies.

        Raises:
            ProtocolStateError: Without a request in this session or a staged update
        """
        self._require_v1()
        if self._pending_update is None:
            raise ProtocolStateError("no update has been staged")
        known, nonce = self._pending_update
        result = self._check_credential(cred, a_proof, known, nonce)
        if result:
            self.known_attrs = known
            self.cred_req_nonce = nonce
            self._pending_update = None
        return result

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def randomize_credential(self, cred: Cred) -> Cred:
        """(A·S^r, e, v11 - e·r) for fresh r from [0, 2^(n_length+sec_param))."""
        group = self.pub_key.group
        r = self.rng.get_random_int(self.params.n_length + self.params.sec_param)
        a_prime = group.multiply(cred.a, group.exponentiate(self.pub_key.s, r))
        return Cred(a=a_prime, e=cred.e, v11=cred.v11 - cred.e * r)

    def build_proof(
        self,
        cred: Cred,
        revealed_known_idx: Sequence[int],
        revealed_committed_idx: Sequence[int],
        nonce_org: int,
    ) -> Tuple[Cred, RepresentationProof]:
        """
        Randomize ``cred`` and prove possession, revealing the known
        attributes and commitments at the given indices.

        Returns:
            (randomized credential, proof); only ``A'`` of the randomized
            credential is sent to the verifier.

        Raises:
            ProtocolStateError: If v1 was never set
            DomainError: On invalid revealed indices
        """
        params, pub_key = self.params, self.pub_key
        v1 = self._require_v1()
        revealed_known = check_revealed_indices(revealed_known_idx, len(self.known_attrs), "known")
        revealed_committed = check_revealed_indices(
            revealed_committed_idx, len(self.commitments_of_attrs), "committed"
        )

        rcred = self.randomize_credential(cred)
        known_secret = [a for i, a in enumerate(self.known_attrs) if i not in revealed_known]
        committed_secret = [
            c for i, c in enumerate(self.commitments_of_attrs) if i not in revealed_committed
        ]
        secrets = known_secret + committed_secret + self.hidden_attrs + [rcred.e, rcred.v11 + v1]
        bases = presentation_bases(pub_key, revealed_known, revealed_committed, rcred.a)
        y = presentation_target(
            pub_key,
            revealed_known,
            [self.known_attrs[i] for i in revealed_known],
            revealed_committed,
            [self.commitments_of_attrs[i] for i in revealed_committed],
        )
        boundaries = presentation_boundaries(params, len(known_secret), len(committed_secret))

        prover = RepresentationProver(
            pub_key.group, secrets, bases, y, sec_param=params.sec_param, rng=self.rng
        )
        random_data = prover.get_proof_random_data(boundaries, also_neg=True)
        challenge = presentation_challenge(pub_key.context, rcred.a, y, random_data.t, nonce_org)
        proof = RepresentationProof(
            random_data.t, challenge, prover.get_proof_data(random_data, challenge)
        )
        self.logger.debug("built presentation proof revealing %d known, %d committed",
                          len(revealed_known), len(revealed_committed))
        return rcred, proof

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> Dict[str, Any]:
        """
        Everything needed to resume the session later. Contains secrets;
        store it encrypted.
        """
        _, nym_blinding = self.nym_committer.decommit()
        return {
            "master_secret": self.master_secret,
            "nym_blinding": nym_blinding,
            "known_attrs": list(self.known_attrs),
            "committed_attrs": list(self.committed_attrs),
            "hidden_attrs": list(self.hidden_attrs),
            "attr_blindings": [c.decommit()[1] for c in self.attr_committers],
            "v1": self.v1,
            "cred_req_nonce": self.cred_req_nonce,
        }

    @classmethod
    def from_state(
        cls,
        params: Params,
        pub_key: PubKey,
        state: Dict[str, Any],
        rng: Optional[RandomnessSource] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "CredManager":
        """Restore a manager saved with ``export_state``."""
        manager = cls.__new__(cls)
        manager.params = params
        manager.pub_key = pub_key
        manager.rng = rng or default_randomness()
        manager.logger = logger or logging.getLogger(__name__)
        manager.master_secret = state["master_secret"]
        manager.known_attrs = check_attribute_values(state["known_attrs"], params, "known")
        manager.committed_attrs = check_attribute_values(
            state["committed_attrs"], params, "committed"
        )
        manager.hidden_attrs = check_attribute_values(state["hidden_attrs"], params, "hidden")

        manager.nym_committer = PedersenCommitter(pub_key.pedersen, rng=manager.rng)
        manager.nym = manager.nym_committer.restore(manager.master_secret, state["nym_blinding"])

        manager.attr_committers = []
        manager.commitments_of_attrs = []
        for value, blinding in zip(manager.committed_attrs, state["attr_blindings"]):
            committer = pub_key.df_committer(rng=manager.rng, k=params.sec_param)
            manager.commitments_of_attrs.append(committer.restore(value, blinding))
            manager.attr_committers.append(committer)

        manager.u = None
        manager.v1 = state.get("v1")
        manager.cred_req_nonce = state.get("cred_req_nonce")
        return manager

    @classmethod
    def from_existing(
        cls,
        params: Params,
        pub_key: PubKey,
        master_secret: int,
        nym_blinding: int,
        known_attrs: Sequence[int],
        committed_attrs: Sequence[int],
        attr_blindings: Sequence[int],
        hidden_attrs: Sequence[int],
        v1: int,
        cred_req_nonce: int,
        **kwargs: Any,
    ) -> "CredManager":
        """Rebuild a holder that already obtained a credential."""
        if len(attr_blindings) != len(committed_attrs):
            raise DomainError("one blinding per committed attribute is required")
        state = {
            "master_secret": master_secret,
            "nym_blinding": nym_blinding,
            "known_attrs": known_attrs,
            "committed_attrs": committed_attrs,
            "hidden_attrs": hidden_attrs,
            "attr_blindings": attr_blindings,
            "v1": v1,
            "cred_req_nonce": cred_req_nonce,
        }
        return cls.from_state(params, pub_key, state, **kwargs)

    def get_nonce(self) -> Optional[int]:
        """Holder nonce the issuer proof is bound to."""
        return self.cred_req_nonce

"""
CBOR message schemas for the CL credential exchange.

Every message is a CBOR map carrying ``msg_v`` and ``type`` next to its
fields. Unsigned integers travel as big-endian bytes, signed integers as
``[negative, magnitude]`` and representation proofs as
``{"t": bytes, "c": bytes, "z": [signed, ...]}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Type

import cbor2

from ..cl.attributes import RawCredential
from ..cl.credential import Cred, CredRequest
from ..crypto.exceptions import ConfigurationError
from ..crypto.types import (
    RepresentationProof,
    decode_signed,
    decode_unsigned,
    encode_signed,
    encode_unsigned,
)
from .constants import (
    CL_SCHEMA,
    MAX_CLIENT_ID_LEN,
    MAX_ERR_LEN,
    MAX_INT_BYTES,
    MAX_LIST_ITEMS,
    MSG_V,
    SESSION_VARIANTS,
)
from .errors import SchemaError, SizeLimitError
from .limits import MAX_FRAME_BYTES, READ_TIMEOUT, WRITE_TIMEOUT, read_frame, write_frame

MAX_MESSAGE_BYTES = MAX_FRAME_BYTES


# ----------------------------------------------------------------------
# Field helpers
# ----------------------------------------------------------------------


def _check_uint(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaError(f"{name} must be a non-negative integer")
    if (value.bit_length() + 7) // 8 > MAX_INT_BYTES:
        raise SizeLimitError(f"{name} too large")


def _check_uints(values: Sequence[Any], name: str) -> None:
    _check_list(values, name)
    for value in values:
        _check_uint(value, name)


def _check_list(values: Any, name: str) -> None:
    if not isinstance(values, (list, tuple)):
        raise SchemaError(f"{name} must be a list")
    if len(values) > MAX_LIST_ITEMS:
        raise SizeLimitError(f"{name} has too many items")


def _check_proof(proof: Any, name: str) -> None:
    if not isinstance(proof, RepresentationProof):
        raise SchemaError(f"{name} must be a representation proof")
    _check_uint(proof.proof_random_data, f"{name}.t")
    _check_uint(proof.challenge, f"{name}.c")
    _check_list(proof.proof_data, f"{name}.z")
    for z in proof.proof_data:
        if isinstance(z, bool) or not isinstance(z, int):
            raise SchemaError(f"{name}.z must hold integers")
        if (abs(z).bit_length() + 7) // 8 > MAX_INT_BYTES:
            raise SizeLimitError(f"{name}.z too large")


def _uint(payload: Dict[str, Any], key: str) -> int:
    try:
        return decode_unsigned(payload[key])
    except ValueError as exc:
        raise SchemaError(f"{key}: {exc}") from exc


def _uints(payload: Dict[str, Any], key: str) -> List[int]:
    values = payload[key]
    _check_list(values, key)
    try:
        return [decode_unsigned(v) for v in values]
    except ValueError as exc:
        raise SchemaError(f"{key}: {exc}") from exc


def _indices(payload: Dict[str, Any], key: str) -> List[int]:
    values = payload[key]
    _check_list(values, key)
    if not all(isinstance(i, int) and not isinstance(i, bool) for i in values):
        raise SchemaError(f"{key} must hold integers")
    return list(values)


def _encode_proof(proof: RepresentationProof) -> Dict[str, Any]:
    return {
        "t": encode_unsigned(proof.proof_random_data),
        "c": encode_unsigned(proof.challenge),
        "z": [encode_signed(z) for z in proof.proof_data],
    }


def _decode_proof(data: Any, name: str) -> RepresentationProof:
    if not isinstance(data, dict):
        raise SchemaError(f"{name} must be a map")
    z = data.get("z")
    _check_list(z, f"{name}.z")
    try:
        return RepresentationProof(
            proof_random_data=decode_unsigned(data.get("t")),
            challenge=decode_unsigned(data.get("c")),
            proof_data=[decode_signed(item) for item in z],
        )
    except ValueError as exc:
        raise SchemaError(f"{name}: {exc}") from exc


# ----------------------------------------------------------------------
# Messages
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class InitialRequest:
    """First message of every session; selects the session variant."""

    TYPE: ClassVar[str] = "initial"

    client_id: str
    schema: str
    variant: str

    def validate(self) -> None:
        if not isinstance(self.client_id, str) or not self.client_id:
            raise SchemaError("client_id required")
        if len(self.client_id) > MAX_CLIENT_ID_LEN:
            raise SchemaError("client_id too long")
        if self.schema != CL_SCHEMA:
            raise SchemaError("unsupported schema")
        if self.variant not in SESSION_VARIANTS:
            raise SchemaError("unsupported session variant")

    def to_payload(self) -> Dict[str, Any]:
        return {"client_id": self.client_id, "schema": self.schema, "variant": self.variant}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "InitialRequest":
        return cls(
            client_id=payload.get("client_id", ""),
            schema=payload.get("schema", ""),
            variant=payload.get("variant", ""),
        )


@dataclass(frozen=True)
class NonceMessage:
    TYPE: ClassVar[str] = "nonce"

    value: int

    def validate(self) -> None:
        _check_uint(self.value, "nonce")

    def to_payload(self) -> Dict[str, Any]:
        return {"value": encode_unsigned(self.value)}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "NonceMessage":
        return cls(value=_uint(payload, "value"))


@dataclass(frozen=True)
class CredentialRequestMessage:
    TYPE: ClassVar[str] = "cred_request"

    request: CredRequest

    def validate(self) -> None:
        cr = self.request
        _check_uint(cr.nym, "nym")
        _check_uint(cr.u, "u")
        _check_uint(cr.nonce, "nonce")
        _check_uints(cr.known_attrs, "known_attrs")
        _check_uints(cr.commitments_of_attrs, "commitments_of_attrs")
        _check_list(cr.commitments_of_attrs_proofs, "commitments_of_attrs_proofs")
        if len(cr.commitments_of_attrs) != len(cr.commitments_of_attrs_proofs):
            raise SchemaError("one opening proof per attribute commitment is required")
        _check_proof(cr.nym_proof, "nym_proof")
        _check_proof(cr.u_proof, "u_proof")
        for proof in cr.commitments_of_attrs_proofs:
            _check_proof(proof, "commitments_of_attrs_proofs")

    def to_payload(self) -> Dict[str, Any]:
        cr = self.request
        return {
            "nym": encode_unsigned(cr.nym),
            "known_attrs": [encode_unsigned(a) for a in cr.known_attrs],
            "commitments_of_attrs": [encode_unsigned(c) for c in cr.commitments_of_attrs],
            "nym_proof": _encode_proof(cr.nym_proof),
            "u": encode_unsigned(cr.u),
            "u_proof": _encode_proof(cr.u_proof),
            "commitments_of_attrs_proofs": [
                _encode_proof(p) for p in cr.commitments_of_attrs_proofs
            ],
            "nonce": encode_unsigned(cr.nonce),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CredentialRequestMessage":
        proofs = payload["commitments_of_attrs_proofs"]
        _check_list(proofs, "commitments_of_attrs_proofs")
        return cls(
            CredRequest(
                nym=_uint(payload, "nym"),
                known_attrs=_uints(payload, "known_attrs"),
                commitments_of_attrs=_uints(payload, "commitments_of_attrs"),
                nym_proof=_decode_proof(payload["nym_proof"], "nym_proof"),
                u=_uint(payload, "u"),
                u_proof=_decode_proof(payload["u_proof"], "u_proof"),
                commitments_of_attrs_proofs=[
                    _decode_proof(p, "commitments_of_attrs_proofs") for p in proofs
                ],
                nonce=_uint(payload, "nonce"),
            )
        )


@dataclass(frozen=True)
class IssuerResponse:
    """Issued or updated credential with the issuer's proof."""

    TYPE: ClassVar[str] = "issuer_response"

    a: int
    e: int
    v11: int
    a_proof: RepresentationProof

    def validate(self) -> None:
        _check_uint(self.a, "a")
        _check_uint(self.e, "e")
        if isinstance(self.v11, bool) or not isinstance(self.v11, int):
            raise SchemaError("v11 must be an integer")
        _check_proof(self.a_proof, "a_proof")

    @classmethod
    def from_cred(cls, cred: Cred, a_proof: RepresentationProof) -> "IssuerResponse":
        return cls(a=cred.a, e=cred.e, v11=cred.v11, a_proof=a_proof)

    def cred(self) -> Cred:
        return Cred(a=self.a, e=self.e, v11=self.v11)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "a": encode_unsigned(self.a),
            "e": encode_unsigned(self.e),
            "v11": encode_signed(self.v11),
            "a_proof": _encode_proof(self.a_proof),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IssuerResponse":
        try:
            v11 = decode_signed(payload["v11"])
        except ValueError as exc:
            raise SchemaError(f"v11: {exc}") from exc
        return cls(
            a=_uint(payload, "a"),
            e=_uint(payload, "e"),
            v11=v11,
            a_proof=_decode_proof(payload["a_proof"], "a_proof"),
        )


@dataclass(frozen=True)
class UpdateRequest:
    TYPE: ClassVar[str] = "update_request"

    nym: int
    nonce: int
    new_known_attrs: List[int]

    def validate(self) -> None:
        _check_uint(self.nym, "nym")
        _check_uint(self.nonce, "nonce")
        _check_uints(self.new_known_attrs, "new_known_attrs")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "nym": encode_unsigned(self.nym),
            "nonce": encode_unsigned(self.nonce),
            "new_known_attrs": [encode_unsigned(a) for a in self.new_known_attrs],
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "UpdateRequest":
        return cls(
            nym=_uint(payload, "nym"),
            nonce=_uint(payload, "nonce"),
            new_known_attrs=_uints(payload, "new_known_attrs"),
        )


@dataclass(frozen=True)
class ProveRequest:
    """Presentation: randomized A', the proof and the revealed values."""

    TYPE: ClassVar[str] = "prove_request"

    revealed_known_idx: List[int]
    revealed_committed_idx: List[int]
    revealed_known_attrs: List[int]
    revealed_commitments: List[int]
    a_prime: int
    proof: RepresentationProof

    def validate(self) -> None:
        _check_list(self.revealed_known_idx, "revealed_known_idx")
        _check_list(self.revealed_committed_idx, "revealed_committed_idx")
        _check_uints(self.revealed_known_attrs, "revealed_known_attrs")
        _check_uints(self.revealed_commitments, "revealed_commitments")
        if len(self.revealed_known_idx) != len(self.revealed_known_attrs):
            raise SchemaError("one value per revealed known index is required")
        if len(self.revealed_committed_idx) != len(self.revealed_commitments):
            raise SchemaError("one commitment per revealed committed index is required")
        _check_uint(self.a_prime, "a_prime")
        _check_proof(self.proof, "proof")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "revealed_known_idx": list(self.revealed_known_idx),
            "revealed_committed_idx": list(self.revealed_committed_idx),
            "revealed_known_attrs": [encode_unsigned(a) for a in self.revealed_known_attrs],
            "revealed_commitments": [encode_unsigned(c) for c in self.revealed_commitments],
            "a_prime": encode_unsigned(self.a_prime),
            "proof": _encode_proof(self.proof),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProveRequest":
        return cls(
            revealed_known_idx=_indices(payload, "revealed_known_idx"),
            revealed_committed_idx=_indices(payload, "revealed_committed_idx"),
            revealed_known_attrs=_uints(payload, "revealed_known_attrs"),
            revealed_commitments=_uints(payload, "revealed_commitments"),
            a_prime=_uint(payload, "a_prime"),
            proof=_decode_proof(payload["proof"], "proof"),
        )


@dataclass(frozen=True)
class Status:
    TYPE: ClassVar[str] = "status"

    success: bool
    err: Optional[str] = None

    def validate(self) -> None:
        if not isinstance(self.success, bool):
            raise SchemaError("success must be a bool")
        if self.success:
            if self.err not in (None, ""):
                raise SchemaError("err must be empty when success=True")
        else:
            if not isinstance(self.err, str) or not self.err:
                raise SchemaError("err required when success=False")
            if len(self.err) > MAX_ERR_LEN:
                raise SchemaError("err too long")

    def to_payload(self) -> Dict[str, Any]:
        return {"success": self.success, "err": self.err}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Status":
        err = payload.get("err")
        if err is not None and not isinstance(err, str):
            raise SchemaError("err must be a string")
        return cls(success=payload.get("success"), err=err)


@dataclass(frozen=True)
class StructureResponse:
    """Credential structure and acceptable credentials of a service."""

    TYPE: ClassVar[str] = "structure"

    attributes: List[Dict[str, Any]]
    acceptable_credentials: Dict[str, List[int]] = field(default_factory=dict)

    def validate(self) -> None:
        _check_list(self.attributes, "attributes")
        try:
            RawCredential.from_structure(self.attributes)
        except ConfigurationError as exc:
            raise SchemaError(f"invalid credential structure: {exc}") from exc
        if not isinstance(self.acceptable_credentials, dict):
            raise SchemaError("acceptable_credentials must be a map")
        for org, indices in self.acceptable_credentials.items():
            if not isinstance(org, str):
                raise SchemaError("organization names must be strings")
            _check_list(indices, "acceptable_credentials")

    def raw_credential(self) -> RawCredential:
        return RawCredential.from_structure(self.attributes)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "attributes": list(self.attributes),
            "acceptable_credentials": dict(self.acceptable_credentials),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "StructureResponse":
        return cls(
            attributes=payload.get("attributes", []),
            acceptable_credentials=payload.get("acceptable_credentials", {}),
        )


MESSAGE_TYPES: Dict[str, Type[Any]] = {
    cls.TYPE: cls
    for cls in (
        InitialRequest,
        NonceMessage,
        CredentialRequestMessage,
        IssuerResponse,
        UpdateRequest,
        ProveRequest,
        Status,
        StructureResponse,
    )
}


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------


def encode_message(msg: Any) -> bytes:
    """
    Raises:
        SchemaError: If the message does not validate
        SizeLimitError: If the encoded message exceeds the size limit
    """
    if MESSAGE_TYPES.get(getattr(msg, "TYPE", None)) is not type(msg):
        raise SchemaError("unknown message type")
    msg.validate()
    payload = {"msg_v": MSG_V, "type": msg.TYPE}
    payload.update(msg.to_payload())
    blob = cbor2.dumps(payload)
    if len(blob) > MAX_MESSAGE_BYTES:
        raise SizeLimitError("message too large")
    return blob


def decode_message(blob: bytes, expected: Optional[Type[Any]] = None) -> Any:
    """
    Decode and validate a message; with ``expected`` any other type is a
    SchemaError.
    """
    if not isinstance(blob, (bytes, bytearray)):
        raise SchemaError("message blob must be bytes")
    blob_bytes = bytes(blob)
    if len(blob_bytes) > MAX_MESSAGE_BYTES:
        raise SizeLimitError("message too large")
    try:
        payload = cbor2.loads(blob_bytes)
    except cbor2.CBORDecodeError as exc:
        raise SchemaError("message is not valid CBOR") from exc
    if not isinstance(payload, dict):
        raise SchemaError("message payload must be a dict")
    if payload.get("msg_v") != MSG_V:
        raise SchemaError("unsupported msg_v")
    cls = MESSAGE_TYPES.get(payload.get("type"))
    if cls is None:
        raise SchemaError("unknown message type")
    if expected is not None and cls is not expected:
        raise SchemaError(f"expected {expected.TYPE} message, got {cls.TYPE}")
    try:
        msg = cls.from_payload(payload)
    except (KeyError, TypeError) as exc:
        raise SchemaError(f"malformed {cls.TYPE} message: {exc}") from exc
    msg.validate()
    return msg


async def read_message(
    stream: Any, expected: Optional[Type[Any]] = None, timeout: float = READ_TIMEOUT
) -> Any:
    return decode_message(await read_frame(stream, timeout=timeout), expected)


async def write_message(stream: Any, msg: Any, timeout: float = WRITE_TIMEOUT) -> None:
    await write_frame(stream, encode_message(msg), timeout=timeout)

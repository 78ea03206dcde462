"""CL credential exchange over framed CBOR streams."""

from .client import (
    fetch_structure,
    issue_credential,
    open_cl_stream,
    prove_credential,
    update_credential,
)
from .constants import PROTOCOL_ID
from .errors import ProtocolError, RemoteError, SchemaError, SizeLimitError
from .limits import TrioStreamAdapter
from .messages import (
    CredentialRequestMessage,
    InitialRequest,
    IssuerResponse,
    NonceMessage,
    ProveRequest,
    Status,
    StructureResponse,
    UpdateRequest,
    decode_message,
    encode_message,
)
from .protocol import ClService, handle_cl_stream, register_cl_protocol, run_local_session

__all__ = [
    "PROTOCOL_ID",
    "ProtocolError",
    "RemoteError",
    "SchemaError",
    "SizeLimitError",
    "TrioStreamAdapter",
    "InitialRequest",
    "NonceMessage",
    "CredentialRequestMessage",
    "IssuerResponse",
    "UpdateRequest",
    "ProveRequest",
    "Status",
    "StructureResponse",
    "encode_message",
    "decode_message",
    "ClService",
    "handle_cl_stream",
    "register_cl_protocol",
    "run_local_session",
    "issue_credential",
    "update_credential",
    "prove_credential",
    "fetch_structure",
    "open_cl_stream",
]

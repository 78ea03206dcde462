"""Client flows for the CL credential exchange, one session per stream."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ..cl.cred_manager import CredManager
from ..cl.credential import Cred
from ..crypto.exceptions import ProofVerificationError
from ..crypto.types import VerificationResult
from .constants import CL_SCHEMA, PROTOCOL_ID
from .errors import RemoteError, SchemaError
from .limits import read_frame
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
    read_message,
    write_message,
)

DEFAULT_CLIENT_ID = "zkcred-client"

logger = logging.getLogger(__name__)


async def open_cl_stream(host: Any, peer_id: Any) -> Any:
    return await host.new_stream(peer_id, [PROTOCOL_ID])


async def _read_reply(stream: Any, expected: type) -> Any:
    """Read ``expected`` or raise RemoteError when the peer sent a failed Status."""
    msg = decode_message(await read_frame(stream))
    if isinstance(msg, Status) and expected is not Status:
        raise RemoteError(msg.err or "peer reported failure")
    if not isinstance(msg, expected):
        raise SchemaError(f"expected {expected.TYPE} message, got {msg.TYPE}")
    return msg


async def _start(stream: Any, variant: str, client_id: str) -> None:
    await write_message(stream, InitialRequest(client_id, CL_SCHEMA, variant))


def _accept(manager: CredManager, response: IssuerResponse, update: bool = False) -> Cred:
    cred = response.cred()
    verify = manager.verify_update if update else manager.verify_credential
    result = verify(cred, response.a_proof)
    if not result:
        raise ProofVerificationError(f"issuer response rejected: {result.reason}")
    return cred


async def issue_credential(
    stream: Any, manager: CredManager, client_id: str = DEFAULT_CLIENT_ID
) -> Cred:
    """
    Obtain a credential and check it before returning.

    Raises:
        RemoteError: If the issuer refused the request
        ProofVerificationError: If the issued credential does not verify
    """
    await _start(stream, "issue", client_id)
    nonce = await _read_reply(stream, NonceMessage)
    request = manager.get_credential_request(nonce.value)
    await write_message(stream, CredentialRequestMessage(request))
    cred = _accept(manager, await _read_reply(stream, IssuerResponse))
    logger.debug("credential issued")
    return cred


async def update_credential(
    stream: Any,
    manager: CredManager,
    new_known_attrs: Sequence[int],
    client_id: str = DEFAULT_CLIENT_ID,
) -> Cred:
    """
    Fetch a credential reissued over ``new_known_attrs``.

    The manager keeps its current known attributes unless the reissued
    credential verifies.

    Raises:
        RemoteError: If the issuer refused the update
        ProofVerificationError: If the reissued credential does not verify
    """
    nonce = manager.update_known_attrs(new_known_attrs)
    await _start(stream, "update", client_id)
    await write_message(stream, UpdateRequest(manager.nym, nonce, list(new_known_attrs)))
    cred = _accept(manager, await _read_reply(stream, IssuerResponse), update=True)
    logger.debug("credential updated")
    return cred


async def prove_credential(
    stream: Any,
    manager: CredManager,
    cred: Cred,
    revealed_known_idx: Sequence[int],
    revealed_committed_idx: Sequence[int],
    client_id: str = DEFAULT_CLIENT_ID,
) -> VerificationResult:
    """Present ``cred``; returns the verifier's verdict."""
    await _start(stream, "prove", client_id)
    nonce = await _read_reply(stream, NonceMessage)
    rcred, proof = manager.build_proof(cred, revealed_known_idx, revealed_committed_idx, nonce.value)
    await write_message(
        stream,
        ProveRequest(
            revealed_known_idx=list(revealed_known_idx),
            revealed_committed_idx=list(revealed_committed_idx),
            revealed_known_attrs=[manager.known_attrs[i] for i in revealed_known_idx],
            revealed_commitments=[manager.commitments_of_attrs[i] for i in revealed_committed_idx],
            a_prime=rcred.a,
            proof=proof,
        ),
    )
    status = await read_message(stream, Status)
    if status.success:
        return VerificationResult.success()
    return VerificationResult.failure(status.err or "presentation rejected")


async def fetch_structure(stream: Any, client_id: str = DEFAULT_CLIENT_ID) -> StructureResponse:
    await _start(stream, "structure", client_id)
    return await _read_reply(stream, StructureResponse)

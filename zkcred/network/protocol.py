"""
Server side of the CL credential exchange.

One stream carries one session. The client opens with an
``InitialRequest`` naming the variant:

- issue:     -> NonceMessage, <- CredentialRequestMessage, -> IssuerResponse
- update:    <- UpdateRequest, -> IssuerResponse
- prove:     -> NonceMessage, <- ProveRequest, -> Status
- structure: -> StructureResponse

Any failure ends the session with ``Status(success=False, err=...)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional

import trio
import trio.testing

from ..cl.keys import PubKey, SecKey
from ..cl.org import Org
from ..cl.params import Params
from ..cl.records import InMemoryRecordStore, RecordStore
from ..crypto.exceptions import ZKCredError
from ..crypto.security import RandomnessSource
from .constants import MAX_ERR_LEN, PROTOCOL_ID
from .errors import ProtocolError, SchemaError
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
    read_message,
    write_message,
)

TOTAL_TIMEOUT = 120.0


@dataclass
class ClService:
    """
    Everything a session needs besides the stream.

    ``registered_clients``: when set, only these client ids are served.
    """

    params: Params
    pub_key: PubKey
    sec_key: Optional[SecKey] = None
    record_store: RecordStore = field(default_factory=InMemoryRecordStore)
    structure: List[Dict[str, Any]] = field(default_factory=list)
    acceptable_credentials: Dict[str, List[int]] = field(default_factory=dict)
    registered_clients: Optional[FrozenSet[str]] = None
    rng: Optional[RandomnessSource] = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def new_org(self) -> Org:
        """Fresh per-session Org sharing the keys and the record store."""
        return Org(
            self.params,
            self.pub_key,
            self.sec_key,
            record_store=self.record_store,
            rng=self.rng,
            logger=self.logger,
        )

    def check_client(self, client_id: str) -> None:
        if self.registered_clients is not None and client_id not in self.registered_clients:
            raise ProtocolError("client is not registered")


async def _issue_session(stream: Any, service: ClService) -> None:
    org = service.new_org()
    await write_message(stream, NonceMessage(org.get_credential_issue_nonce()))
    msg = await read_message(stream, CredentialRequestMessage)
    result = org.issue_credential(msg.request)
    await write_message(stream, IssuerResponse.from_cred(result.cred, result.a_proof))


async def _update_session(stream: Any, service: ClService) -> None:
    org = service.new_org()
    msg = await read_message(stream, UpdateRequest)
    result = org.update_credential(msg.nym, msg.nonce, msg.new_known_attrs)
    await write_message(stream, IssuerResponse.from_cred(result.cred, result.a_proof))


async def _prove_session(stream: Any, service: ClService) -> None:
    org = service.new_org()
    await write_message(stream, NonceMessage(org.get_prove_cred_nonce()))
    msg = await read_message(stream, ProveRequest)
    result = org.prove_cred(
        msg.a_prime,
        msg.proof,
        msg.revealed_known_idx,
        msg.revealed_committed_idx,
        msg.revealed_known_attrs,
        msg.revealed_commitments,
    )
    if result:
        await write_message(stream, Status(True))
    else:
        await write_message(stream, Status(False, _truncate(f"proof rejected: {result.reason}")))


async def _structure_session(stream: Any, service: ClService) -> None:
    await write_message(
        stream, StructureResponse(list(service.structure), dict(service.acceptable_credentials))
    )


SESSIONS: Dict[str, Callable[[Any, ClService], Awaitable[None]]] = {
    "issue": _issue_session,
    "update": _update_session,
    "prove": _prove_session,
    "structure": _structure_session,
}


async def handle_cl_stream(stream: Any, service: ClService) -> None:
    log = service.logger
    try:
        with trio.fail_after(TOTAL_TIMEOUT):
            initial = await read_message(stream, InitialRequest)
            service.check_client(initial.client_id)
            session = SESSIONS.get(initial.variant)
            if session is None:
                raise SchemaError("unsupported session variant")
            log.debug("starting %s session for %s", initial.variant, initial.client_id)
            await session(stream, service)
    except trio.TooSlowError:
        log.warning("CL session timed out")
        await _send_error(stream, "session timed out", log)
    except (ProtocolError, ZKCredError) as exc:
        log.warning("CL session failed: %s", exc)
        await _send_error(stream, f"protocol error: {exc}", log)
    except Exception:
        log.exception("CL session crashed")
        await _send_error(stream, "internal error", log)
    finally:
        try:
            await stream.close()
        except Exception:
            log.debug("stream close failed", exc_info=True)


def register_cl_protocol(host: Any, service: ClService) -> None:
    async def _handler(stream: Any) -> None:
        await handle_cl_stream(stream, service)

    host.set_stream_handler(PROTOCOL_ID, _handler)


def _truncate(err: str) -> str:
    return err if len(err) <= MAX_ERR_LEN else err[: MAX_ERR_LEN - 3] + "..."


async def _send_error(stream: Any, err: str, log: logging.Logger) -> None:
    try:
        await write_message(stream, Status(False, _truncate(err)))
    except Exception:
        log.debug("could not report error to peer", exc_info=True)


async def run_local_session(service: ClService, flow: Callable[[Any], Awaitable[Any]]) -> Any:
    """
    Run ``flow(stream)`` against ``handle_cl_stream`` over an in-memory
    trio stream pair and return the flow's result. Exceptions of the flow
    are re-raised as they are.
    """
    client_raw, server_raw = trio.testing.memory_stream_pair()
    client_stream = TrioStreamAdapter(client_raw)
    result: Any = None
    error: Optional[Exception] = None
    async with trio.open_nursery() as nursery:
        nursery.start_soon(handle_cl_stream, TrioStreamAdapter(server_raw), service)
        try:
            result = await flow(client_stream)
        except Exception as exc:
            error = exc
        finally:
            await client_stream.close()
    if error is not None:
        raise error
    return result

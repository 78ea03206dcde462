"""Stream framing helpers with size limits and timeouts."""

from __future__ import annotations

import struct
from typing import Any, Optional

import trio

from .errors import SchemaError, SizeLimitError

MAX_FRAME_BYTES = 131072
READ_TIMEOUT = 30.0
WRITE_TIMEOUT = 10.0

_HEADER = struct.Struct(">I")


async def read_exact(stream: Any, size: int, timeout: float) -> bytes:
    if size < 0:
        raise SchemaError("invalid read size")
    data = bytearray()
    with trio.fail_after(timeout):
        while len(data) < size:
            chunk = await stream.read(size - len(data))
            if not chunk:
                raise SchemaError("unexpected EOF")
            data.extend(chunk)
    return bytes(data)


async def read_frame(
    stream: Any, max_bytes: int = MAX_FRAME_BYTES, timeout: float = READ_TIMEOUT
) -> bytes:
    header = await read_exact(stream, _HEADER.size, timeout)
    (length,) = _HEADER.unpack(header)
    if length > max_bytes:
        raise SizeLimitError("frame too large")
    return await read_exact(stream, length, timeout)


async def write_frame(
    stream: Any,
    payload: bytes,
    max_bytes: int = MAX_FRAME_BYTES,
    timeout: float = WRITE_TIMEOUT,
) -> None:
    if len(payload) > max_bytes:
        raise SizeLimitError("frame too large")
    with trio.fail_after(timeout):
        await stream.write(_HEADER.pack(len(payload)) + payload)


class TrioStreamAdapter:
    """
    Exposes a ``trio.abc.Stream`` through the read/write/close interface of
    libp2p streams, so handlers run unchanged over in-memory or TCP streams.
    """

    def __init__(self, stream: trio.abc.Stream, max_chunk: int = 65536) -> None:
        self._stream = stream
        self._max_chunk = max_chunk

    async def read(self, n: Optional[int] = None) -> bytes:
        size = self._max_chunk if n is None else min(n, self._max_chunk)
        if size <= 0:
            return b""
        return await self._stream.receive_some(size)

    async def write(self, data: bytes) -> None:
        await self._stream.send_all(data)

    async def close(self) -> None:
        await self._stream.aclose()

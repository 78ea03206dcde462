"""
Receiver record stores.

The issuer keeps one ``ReceiverRecord`` per nym so that it can update a
credential without rerunning the request protocol. Writes are
last-writer-wins per nym; callers serialize updates for the same nym.

- InMemoryRecordStore: lock-protected dict, for tests and single-process use
- RedisRecordStore: CBOR-encoded records in redis, keyed by str(nym)
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import cbor2
import redis

from ..crypto.exceptions import RecordNotFoundError, RecordStoreError
from .credential import ReceiverRecord

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Interface: ``put(nym, record)`` and ``get(nym)``."""

    @abstractmethod
    def put(self, nym: int, record: ReceiverRecord) -> None:
        pass

    @abstractmethod
    def get(self, nym: int) -> ReceiverRecord:
        """
        Raises:
            RecordNotFoundError: If no record is stored for ``nym``
        """


def record_key(nym: int) -> str:
    return str(nym)


class InMemoryRecordStore(RecordStore):
    def __init__(self) -> None:
        self._records: Dict[str, ReceiverRecord] = {}
        self._lock = threading.Lock()

    def put(self, nym: int, record: ReceiverRecord) -> None:
        with self._lock:
            self._records[record_key(nym)] = record

    def get(self, nym: int) -> ReceiverRecord:
        with self._lock:
            try:
                return self._records[record_key(nym)]
            except KeyError:
                raise RecordNotFoundError(f"no receiver record for nym {nym}") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisRecordStore(RecordStore):
    """
    Redis-backed store.

    Connection errors from redis-py propagate unchanged; the store does
    not retry.

    Example:
        >>> store = RedisRecordStore.from_url("redis://localhost:6379/0")
        >>> store.put(nym, record)
    """

    def __init__(self, client: Any, prefix: str = "") -> None:
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> "RedisRecordStore":
        return cls(redis.Redis.from_url(url), prefix=prefix)

    def _key(self, nym: int) -> str:
        return self.prefix + record_key(nym)

    def put(self, nym: int, record: ReceiverRecord) -> None:
        self.client.set(self._key(nym), cbor2.dumps(record.to_dict()))
        logger.debug("stored receiver record under %s", self._key(nym)[:16])

    def get(self, nym: int) -> ReceiverRecord:
        blob: Optional[bytes] = self.client.get(self._key(nym))
        if blob is None:
            raise RecordNotFoundError(f"no receiver record for nym {nym}")
        if isinstance(blob, str):
            raise RecordStoreError("redis client must not decode responses")
        try:
            data = cbor2.loads(blob)
        except cbor2.CBORDecodeError as exc:
            raise RecordStoreError(f"corrupt receiver record: {exc}") from exc
        return ReceiverRecord.from_dict(data)

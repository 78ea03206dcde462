"""
Camenisch-Lysyanskaya anonymous credentials.

⚠️ DRAFT — requires crypto review before production use

Holder side lives in ``cred_manager``, issuer/verifier side in ``org``.
"""

from .attributes import Attribute, RawCredential, Visibility
from .cred_manager import CredManager, generate_master_secret
from .credential import Cred, CredRequest, CredResult, ReceiverRecord
from .keys import PubKey, SecKey, generate_keys
from .org import Org
from .params import Params, default_params
from .records import InMemoryRecordStore, RecordStore, RedisRecordStore

__all__ = [
    "Attribute",
    "RawCredential",
    "Visibility",
    "CredManager",
    "generate_master_secret",
    "Cred",
    "CredRequest",
    "CredResult",
    "ReceiverRecord",
    "PubKey",
    "SecKey",
    "generate_keys",
    "Org",
    "Params",
    "default_params",
    "RecordStore",
    "InMemoryRecordStore",
    "RedisRecordStore",
]

"""Protocol constants for the CL credential exchange."""

from __future__ import annotations

PROTOCOL_ID = "/zkcred/cl/1.0.0"
MSG_V = 1
CL_SCHEMA = "cl"
SESSION_VARIANTS = frozenset({"issue", "update", "prove", "structure"})

MAX_CLIENT_ID_LEN = 128
MAX_ERR_LEN = 256
MAX_LIST_ITEMS = 256
MAX_INT_BYTES = 1024

"""Protocol error types."""


class ProtocolError(Exception):
    """Base error for CL exchange protocol issues."""


class SchemaError(ProtocolError):
    """Raised when a message fails schema validation."""


class SizeLimitError(ProtocolError):
    """Raised when a message exceeds configured size limits."""


class RemoteError(ProtocolError):
    """Raised on the client when the peer answers with a failed Status."""

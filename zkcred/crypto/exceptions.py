"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the credential toolkit.

"Proof invalid" is reported as a return value (``False`` or a falsy
``VerificationResult``). The exceptions below cover everything else:
domain violations, setup failures, out-of-order calls and store errors.
"""


class ZKCredError(Exception):
    """Base exception for credential toolkit errors."""

    pass


class ProofGenerationError(ZKCredError):
    """Error during proof generation."""

    pass


class ProofVerificationError(ZKCredError):
    """A step that requires a valid proof was given an invalid one."""

    pass


class ConfigurationError(ZKCredError):
    """Configuration error."""

    pass


class SecurityError(ZKCredError):
    """Security requirement violation."""

    pass


class DomainError(ZKCredError, ValueError):
    """Value outside the domain an operation accepts."""

    pass


class SetupError(ZKCredError):
    """Group or parameter generation failed."""

    pass


class ProtocolStateError(ZKCredError):
    """Protocol step called before the state it depends on exists."""

    pass


class RecordStoreError(ZKCredError):
    """Receiver record store error."""

    pass


class RecordNotFoundError(RecordStoreError, KeyError):
    """No receiver record stored under the requested nym."""

    pass

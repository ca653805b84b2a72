"""Errors raised during the Keyspaces SigV4 handshake.

Messages carry only non-sensitive identifiers (region, access key id,
session state); key material never appears here.
"""

from typing import Optional


class AuthenticationError(Exception):
    """Base class for handshake failures. Always terminal for the session."""


class InvalidChallengeEncoding(AuthenticationError):
    """Challenge bytes were not valid UTF-8."""

    def __init__(self, message: str = "Expected UTF-8 challenge"):
        super().__init__(message)


class MissingNoncePrefix(AuthenticationError):
    """Challenge did not carry a ``nonce=`` field."""

    def __init__(self, message: str = 'Expected "nonce=" in challenge'):
        super().__init__(message)


class MissingRegion(AuthenticationError):
    """Credential source has no region configured."""

    def __init__(self, message: str = "Region must be configured on the credential source"):
        super().__init__(message)


class MissingCredentialSource(AuthenticationError):
    """No credential source, or the source has no credential provider."""

    def __init__(self, message: str = "No AWS credentials provider available"):
        super().__init__(message)


class CredentialSourceError(AuthenticationError):
    """Credential lookup failed. The underlying exception is kept in ``cause``."""

    def __init__(self, cause: BaseException, region: Optional[str] = None):
        self.cause = cause
        self.region = region
        detail = f" in region {region}" if region else ""
        super().__init__(
            f"Cannot get AWS credentials{detail}: {type(cause).__name__}"
        )


class ProtocolSequenceViolation(AuthenticationError):
    """A handshake operation was invoked in the wrong session state."""

    def __init__(self, operation: str, state: object):
        self.operation = operation
        self.state = state
        state_name = getattr(state, "value", state)
        super().__init__(f"Cannot {operation} in session state {state_name}")

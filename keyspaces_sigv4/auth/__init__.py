"""
SigV4 signing and handshake session for Amazon Keyspaces.

This module provides the signing engine and the per-connection session state
machine used to answer the Keyspaces nonce challenge.
"""

from .errors import (
    AuthenticationError,
    CredentialSourceError,
    InvalidChallengeEncoding,
    MissingCredentialSource,
    MissingNoncePrefix,
    MissingRegion,
    ProtocolSequenceViolation,
)
from .session import (
    MECHANISM_ADVERTISEMENT,
    AuthenticationSession,
    SessionState,
    extract_nonce,
)
from .sigv4 import (
    Credentials,
    SignedResponse,
    SigningContext,
    build_signed_response,
    compute_scope,
    derive_signing_key,
    form_canonical_request,
    sign,
)

__all__ = [
    # Signing engine
    "Credentials",
    "SignedResponse",
    "SigningContext",
    "build_signed_response",
    "compute_scope",
    "derive_signing_key",
    "form_canonical_request",
    "sign",
    # Session
    "MECHANISM_ADVERTISEMENT",
    "AuthenticationSession",
    "SessionState",
    "extract_nonce",
    # Errors
    "AuthenticationError",
    "CredentialSourceError",
    "InvalidChallengeEncoding",
    "MissingCredentialSource",
    "MissingNoncePrefix",
    "MissingRegion",
    "ProtocolSequenceViolation",
]

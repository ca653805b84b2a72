"""Keyspaces SigV4 - AWS SigV4 authentication for Amazon Keyspaces (for Apache Cassandra)."""

__version__ = "0.1.0"

from .auth import (
    AuthenticationError,
    AuthenticationSession,
    CredentialSourceError,
    Credentials,
    InvalidChallengeEncoding,
    MissingCredentialSource,
    MissingNoncePrefix,
    MissingRegion,
    ProtocolSequenceViolation,
    SessionState,
    SignedResponse,
    SigningContext,
    build_signed_response,
)
from .authenticator import KeyspacesAuthenticator, create_authenticator
from .config import AuthenticatorConfig
from .credentials import Boto3CredentialSource, StaticCredentialSource
from .driver import KeyspacesAuthProvider
from .interfaces import AuthenticatorProvider, AuthenticatorSession, CredentialSource
from .metrics import MetricsEmitter, HandshakeMetricName

__all__ = [
    "__version__",
    # Signing engine
    "Credentials",
    "SignedResponse",
    "SigningContext",
    "build_signed_response",
    # Session and factory
    "AuthenticationSession",
    "SessionState",
    "KeyspacesAuthenticator",
    "create_authenticator",
    "KeyspacesAuthProvider",
    # Credential sources
    "Boto3CredentialSource",
    "StaticCredentialSource",
    # Interfaces
    "AuthenticatorProvider",
    "AuthenticatorSession",
    "CredentialSource",
    # Configuration
    "AuthenticatorConfig",
    # Metrics
    "MetricsEmitter",
    "HandshakeMetricName",
    # Errors
    "AuthenticationError",
    "CredentialSourceError",
    "InvalidChallengeEncoding",
    "MissingCredentialSource",
    "MissingNoncePrefix",
    "MissingRegion",
    "ProtocolSequenceViolation",
]

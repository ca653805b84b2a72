"""
Authenticator factory for Amazon Keyspaces SigV4.

Usage:
    from keyspaces_sigv4 import create_authenticator

    authenticator = create_authenticator(region="us-east-1")

    advertisement, session = authenticator.start_session(
        "com.amazonaws.cassandra.DefaultAuthenticator"
    )
    # send advertisement, then:
    response = await session.on_challenge(challenge_bytes)
    # send response, then on server success:
    await session.on_success(token)
"""

import dataclasses
import datetime
import logging
from typing import Callable, Optional

from .auth.session import AuthenticationSession
from .config import AuthenticatorConfig
from .credentials import Boto3CredentialSource
from .metrics import MetricsEmitter
from .tracing import init_tracing

logger = logging.getLogger(__name__)


class KeyspacesAuthenticator:
    """
    Starts SigV4 handshake sessions bound to one credential source.

    Holds no per-connection state, so one instance can serve any number of
    concurrent connections.

    Attributes:
        credential_source: Source of region and credentials shared by all sessions
    """

    def __init__(
        self,
        credential_source,
        metrics: Optional[MetricsEmitter] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        """
        Initialize the authenticator.

        Args:
            credential_source: CredentialSource used by every session
            metrics: Optional emitter passed on to sessions
            clock: Optional signing clock passed on to sessions
        """
        self._credential_source = credential_source
        self._metrics = metrics
        self._clock = clock

    @property
    def credential_source(self):
        return self._credential_source

    def start_session(self, mechanism_name: str) -> tuple[bytes, AuthenticationSession]:
        """
        Start a handshake for a new connection.

        Args:
            mechanism_name: Authenticator class announced by the server

        Returns:
            Tuple of the mechanism advertisement bytes and a fresh session
        """
        logger.debug(f"Starting SigV4 session for server authenticator {mechanism_name}")
        session = AuthenticationSession(
            self._credential_source,
            clock=self._clock,
            metrics=self._metrics,
        )
        return session.initial_response(), session

    @classmethod
    def from_config(cls, config: AuthenticatorConfig) -> "KeyspacesAuthenticator":
        """Build an authenticator from configuration using the boto3 credential chain."""
        source = Boto3CredentialSource(
            region=config.aws_region,
            profile_name=config.aws_profile,
        )
        if config.otel_endpoint or config.otel_console_export:
            init_tracing(
                service_name=config.service_name,
                otlp_endpoint=config.otel_endpoint or None,
                enable_console_export=config.otel_console_export,
            )
        metrics = MetricsEmitter(config.service_name) if config.emit_metrics else None
        return cls(source, metrics=metrics)


def create_authenticator(
    region: Optional[str] = None,
    profile_name: Optional[str] = None,
    emit_metrics: Optional[bool] = None,
) -> KeyspacesAuthenticator:
    """
    Convenience function to create an authenticator on the boto3 credential chain.

    Settings not passed explicitly are read from the environment
    (see ``AuthenticatorConfig.from_env``).

    Args:
        region: AWS region
        profile_name: Optional AWS profile name
        emit_metrics: Emit CloudWatch EMF handshake metrics

    Returns:
        KeyspacesAuthenticator
    """
    config = AuthenticatorConfig.from_env()
    overrides = {
        "aws_region": region,
        "aws_profile": profile_name,
        "emit_metrics": emit_metrics,
    }
    config = dataclasses.replace(
        config, **{key: value for key, value in overrides.items() if value is not None}
    )
    return KeyspacesAuthenticator.from_config(config)

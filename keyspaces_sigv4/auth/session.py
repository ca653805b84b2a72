"""
Authentication session for the Keyspaces SigV4 handshake.

One session drives exactly one handshake round on one connection:

    Started -> AwaitingChallenge -> ChallengeReceived -> Completed
                      \\                  \\
                       +-------------------+--> Failed

Every failure is terminal. Retrying means starting a new session.
"""

import datetime
import logging
import time
from enum import Enum
from typing import Callable, Optional

from opentelemetry import trace

from ..metrics import MetricsEmitter
from ..tracing import add_handshake_span_attributes, traced
from .errors import (
    AuthenticationError,
    CredentialSourceError,
    InvalidChallengeEncoding,
    MissingCredentialSource,
    MissingNoncePrefix,
    MissingRegion,
    ProtocolSequenceViolation,
)
from .sigv4 import SignedResponse, SigningContext, sign

logger = logging.getLogger(__name__)

MECHANISM_ADVERTISEMENT = b"SigV4\x00\x00"
NONCE_PREFIX = "nonce="


class SessionState(str, Enum):
    """Handshake progress of a single session."""
    STARTED = "Started"
    AWAITING_CHALLENGE = "AwaitingChallenge"
    CHALLENGE_RECEIVED = "ChallengeReceived"
    COMPLETED = "Completed"
    FAILED = "Failed"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def extract_nonce(payload: Optional[bytes]) -> str:
    """
    Extract the nonce from a server challenge.

    Args:
        payload: Raw challenge bytes, ``nonce=<value>``

    Returns:
        The nonce value

    Raises:
        InvalidChallengeEncoding: If the payload is not UTF-8
        MissingNoncePrefix: If there is no payload, no ``nonce=`` prefix or no value
    """
    if payload is None:
        raise MissingNoncePrefix("Expected nonce in challenge, got no payload")

    try:
        text = bytes(payload).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidChallengeEncoding() from e

    if not text.startswith(NONCE_PREFIX):
        raise MissingNoncePrefix()

    nonce = text[len(NONCE_PREFIX):]
    if not nonce:
        raise MissingNoncePrefix("Challenge carried an empty nonce")
    return nonce


class AuthenticationSession:
    """
    State machine for a single SigV4 handshake.

    Not thread-safe; a session belongs to one connection.

    Attributes:
        state: Current SessionState
    """

    def __init__(
        self,
        credential_source,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        metrics: Optional[MetricsEmitter] = None,
    ):
        """
        Initialize the session.

        Args:
            credential_source: CredentialSource to ask for region and credentials
            clock: Returns the signing instant; defaults to the current UTC time
            metrics: Optional emitter for handshake metrics
        """
        self._credential_source = credential_source
        self._clock = clock or _utcnow
        self._metrics = metrics
        self._state = SessionState.STARTED

    @property
    def state(self) -> SessionState:
        return self._state

    def _violation(self, operation: str) -> ProtocolSequenceViolation:
        error = ProtocolSequenceViolation(operation, self._state)
        logger.warning(f"Handshake sequence violation: {error}")
        self._state = SessionState.FAILED
        return error

    def initial_response(self) -> bytes:
        """Return the mechanism advertisement and start waiting for the challenge."""
        if self._state is not SessionState.STARTED:
            raise self._violation("send initial response")

        self._state = SessionState.AWAITING_CHALLENGE
        logger.debug("Advertised SigV4 mechanism, awaiting challenge")
        return MECHANISM_ADVERTISEMENT

    @traced(name="keyspaces.handshake")
    async def on_challenge(self, token: Optional[bytes]) -> Optional[bytes]:
        """
        Answer the server's nonce challenge.

        Args:
            token: Challenge bytes from the server

        Returns:
            UTF-8 encoded signed response

        Raises:
            AuthenticationError: On any failure; the session is then Failed
        """
        if self._state is not SessionState.AWAITING_CHALLENGE:
            raise self._violation("evaluate challenge")

        started = time.monotonic()
        region: Optional[str] = None
        try:
            nonce = extract_nonce(token)
            self._state = SessionState.CHALLENGE_RECEIVED
            logger.debug("Received nonce challenge")

            if self._credential_source is None:
                raise MissingCredentialSource("No credential source configured")

            try:
                region = self._credential_source.current_region()
            except Exception as e:
                raise CredentialSourceError(e) from e
            if not region:
                raise MissingRegion()

            response = await self._sign(nonce, region)
            if self._state is not SessionState.CHALLENGE_RECEIVED:
                raise ProtocolSequenceViolation("complete handshake", self._state)
        except AuthenticationError as e:
            self._state = SessionState.FAILED
            logger.warning(f"SigV4 handshake failed: {type(e).__name__}: {e}")
            add_handshake_span_attributes(
                trace.get_current_span(),
                region=region,
                state=self._state.value,
            )
            if self._metrics:
                self._metrics.record_handshake(
                    success=False,
                    latency_ms=(time.monotonic() - started) * 1000,
                    region=region,
                    error_type=type(e).__name__,
                )
            raise
        except BaseException:
            self._state = SessionState.FAILED
            raise

        self._state = SessionState.COMPLETED
        logger.info(
            f"SigV4 handshake signed for access key {response.access_key_id} in {region}"
        )
        add_handshake_span_attributes(
            trace.get_current_span(),
            region=region,
            access_key_id=response.access_key_id,
            state=self._state.value,
            temporary_credentials=response.session_token is not None,
        )
        if self._metrics:
            self._metrics.record_handshake(
                success=True,
                latency_ms=(time.monotonic() - started) * 1000,
                region=region,
            )
        return response.to_bytes()

    async def _sign(self, nonce: str, region: str) -> SignedResponse:
        lookup_started = time.monotonic()
        try:
            credentials = await self._credential_source.resolve_credentials()
        except AuthenticationError:
            raise
        except Exception as e:
            raise CredentialSourceError(e, region) from e

        if self._metrics:
            self._metrics.record_credential_resolution(
                latency_ms=(time.monotonic() - lookup_started) * 1000,
                region=region,
            )

        # Single clock sample for scope, canonical request and string to sign
        context = SigningContext(region=region, timestamp=self._clock(), nonce=nonce)
        return sign(context, credentials)

    async def on_success(self, token: Optional[bytes] = None) -> None:
        """Acknowledge the server's success message. No further work is done."""
        if self._state is not SessionState.COMPLETED:
            raise self._violation("acknowledge success")
        logger.debug("SigV4 handshake acknowledged by server")

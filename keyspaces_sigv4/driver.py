"""
Blocking adapter for Cassandra drivers with a synchronous auth plugin API.

The adapter exposes the ``new_authenticator(host)`` / ``initial_response()`` /
``evaluate_challenge()`` / ``on_authentication_success()`` shape used by
DataStax-style Python drivers, without importing any driver package.

Usage:
    from cassandra.cluster import Cluster
    from keyspaces_sigv4.driver import KeyspacesAuthProvider

    auth_provider = KeyspacesAuthProvider(region="us-east-1")
    cluster = Cluster(
        ["cassandra.us-east-1.amazonaws.com"],
        port=9142,
        ssl_context=ssl_context,
        auth_provider=auth_provider,
    )
    ...
    cluster.shutdown()
    auth_provider.close()

Sessions run on a private event loop thread owned by the provider, so the
blocking calls work from any thread, including one that runs its own
asyncio loop.
"""

import asyncio
import logging
import threading
from typing import Any, Coroutine, Optional, TypeVar

from .auth.session import AuthenticationSession
from .authenticator import KeyspacesAuthenticator, create_authenticator

logger = logging.getLogger(__name__)

DEFAULT_SERVER_AUTHENTICATOR = "com.amazonaws.cassandra.DefaultAuthenticator"

T = TypeVar("T")


class BackgroundLoop:
    """Event loop on a daemon thread, started on first use."""

    def __init__(self, name: str = "keyspaces-sigv4-auth"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._loop.run_forever,
                    name=self._name,
                    daemon=True,
                )
                self._thread.start()
                logger.debug(f"Started event loop thread {self._name}")
            return self._loop

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine on the loop thread and block for its result."""
        loop = self._ensure_started()
        return asyncio.run_coroutine_threadsafe(coro, loop).result()

    def close(self) -> None:
        """Stop the loop thread. A later ``run`` starts a new one."""
        with self._lock:
            if self._loop is None:
                return
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None

        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()


class KeyspacesDriverAuthenticator:
    """Per-connection blocking authenticator wrapping one AuthenticationSession."""

    server_authenticator_class: Optional[str] = None

    def __init__(self, authenticator: KeyspacesAuthenticator, loop: BackgroundLoop, host=None):
        self._authenticator = authenticator
        self._loop = loop
        self._host = host
        self._session: Optional[AuthenticationSession] = None

    @property
    def session(self) -> Optional[AuthenticationSession]:
        return self._session

    def initial_response(self) -> bytes:
        mechanism = self.server_authenticator_class or DEFAULT_SERVER_AUTHENTICATOR
        advertisement, self._session = self._authenticator.start_session(mechanism)
        return advertisement

    def evaluate_challenge(self, challenge: Optional[bytes]) -> Optional[bytes]:
        if self._session is None:
            self.initial_response()
        logger.debug(f"Evaluating SigV4 challenge from {self._host}")
        return self._loop.run(self._session.on_challenge(challenge))

    def on_authentication_success(self, token: Optional[bytes]) -> None:
        if self._session is None:
            return
        self._loop.run(self._session.on_success(token))


class KeyspacesAuthProvider:
    """
    Driver auth provider creating one SigV4 authenticator per connection.

    Attributes:
        authenticator: Shared KeyspacesAuthenticator
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile_name: Optional[str] = None,
        authenticator: Optional[KeyspacesAuthenticator] = None,
    ):
        """
        Initialize the provider.

        Args:
            region: AWS region (ignored when ``authenticator`` is given)
            profile_name: Optional AWS profile name (ignored when ``authenticator`` is given)
            authenticator: Pre-built authenticator to share across connections
        """
        self.authenticator = authenticator or create_authenticator(
            region=region,
            profile_name=profile_name,
        )
        self._loop = BackgroundLoop()

    def new_authenticator(self, host) -> KeyspacesDriverAuthenticator:
        return KeyspacesDriverAuthenticator(self.authenticator, self._loop, host)

    def close(self) -> None:
        """Stop the provider's event loop thread."""
        self._loop.close()

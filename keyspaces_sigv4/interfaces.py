"""
Boundary interfaces for the Keyspaces SigV4 authenticator.

Transports call into an ``AuthenticatorProvider`` to start a handshake and
then drive the returned ``AuthenticatorSession``. The session, in turn, asks
a ``CredentialSource`` for the region and for fresh credentials.
"""

from typing import Optional, Protocol, runtime_checkable

from .auth.sigv4 import Credentials


@runtime_checkable
class CredentialSource(Protocol):
    """Supplies region and credentials. Must be safe to share read-only."""

    def current_region(self) -> Optional[str]:
        """Region to scope signatures to, or None when unconfigured."""
        ...

    async def resolve_credentials(self) -> Credentials:
        """Return current credentials. May suspend; raises on failure."""
        ...


@runtime_checkable
class AuthenticatorSession(Protocol):
    """One handshake round on one connection."""

    async def on_challenge(self, token: Optional[bytes]) -> Optional[bytes]:
        ...

    async def on_success(self, token: Optional[bytes] = None) -> None:
        ...


@runtime_checkable
class AuthenticatorProvider(Protocol):
    """Manufactures independent sessions for new connections."""

    def start_session(self, mechanism_name: str) -> tuple[bytes, AuthenticatorSession]:
        ...

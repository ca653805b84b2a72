"""
Test doubles for the Keyspaces SigV4 authenticator.

Provides a credential source whose region, credentials and failure mode can
be set per test, and which counts how often it is asked.
"""

import asyncio
from typing import Optional

from keyspaces_sigv4.auth.sigv4 import Credentials


class FakeCredentialSource:
    """In-memory CredentialSource with call tracking."""

    def __init__(
        self,
        region: Optional[str] = "us-east-1",
        credentials: Optional[Credentials] = None,
        error: Optional[BaseException] = None,
        delay_seconds: float = 0.0,
    ):
        self.region = region
        self.credentials = credentials or Credentials(
            access_key_id="AKIDEXAMPLE",
            secret_access_key="examplesecret",
        )
        self.error = error
        self.delay_seconds = delay_seconds
        self.region_calls = 0
        self.resolve_calls = 0

    def current_region(self) -> Optional[str]:
        self.region_calls += 1
        return self.region

    async def resolve_credentials(self) -> Credentials:
        self.resolve_calls += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.credentials


__all__ = ["FakeCredentialSource"]

"""
Credential sources for the Keyspaces SigV4 handshake.

A credential source answers two questions for a session: which region to
scope the signature to, and which credentials to sign with right now. The
session asks for credentials fresh on every handshake; refresh and caching
belong to the source.

Usage:
    from keyspaces_sigv4.credentials import Boto3CredentialSource

    # Default boto3 chain (env vars, profile, container/instance role)
    source = Boto3CredentialSource(region="us-east-1")

    # Named profile
    source = Boto3CredentialSource(profile_name="keyspaces")
"""

import asyncio
import logging
from typing import Optional

import boto3

from .auth.errors import MissingCredentialSource
from .auth.sigv4 import Credentials

logger = logging.getLogger(__name__)


class StaticCredentialSource:
    """Fixed region and credentials, e.g. injected from a secrets store."""

    def __init__(self, region: Optional[str], credentials: Credentials):
        self._region = region
        self._credentials = credentials

    def current_region(self) -> Optional[str]:
        return self._region

    async def resolve_credentials(self) -> Credentials:
        return self._credentials


class Boto3CredentialSource:
    """
    Credential source backed by a boto3 session.

    The session's credential provider chain handles refresh of temporary
    credentials; each call freezes a consistent snapshot of them.

    Attributes:
        session: The underlying boto3 session
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile_name: Optional[str] = None,
        session: Optional[boto3.Session] = None,
    ):
        """
        Initialize the credential source.

        Args:
            region: AWS region; falls back to the session's configured region
            profile_name: Optional AWS profile name
            session: Pre-built boto3 session (region and profile are then ignored)
        """
        if session is None:
            if profile_name:
                session = boto3.Session(profile_name=profile_name, region_name=region)
            else:
                session = boto3.Session(region_name=region)
        self.session = session

    def current_region(self) -> Optional[str]:
        return self.session.region_name

    def _frozen_credentials(self) -> Credentials:
        credentials = self.session.get_credentials()
        if credentials is None:
            raise MissingCredentialSource("No AWS credentials found")

        frozen_credentials = credentials.get_frozen_credentials()

        return Credentials(
            access_key_id=frozen_credentials.access_key,
            secret_access_key=frozen_credentials.secret_key,
            session_token=frozen_credentials.token,
        )

    async def resolve_credentials(self) -> Credentials:
        """
        Resolve current credentials from the boto3 provider chain.

        The lookup may hit the network (STS, instance metadata), so it runs
        in a worker thread.

        Returns:
            Frozen credentials

        Raises:
            MissingCredentialSource: If boto3 finds no credential provider
        """
        credentials = await asyncio.to_thread(self._frozen_credentials)
        logger.debug(f"Resolved AWS credentials for access key {credentials.access_key_id}")
        return credentials

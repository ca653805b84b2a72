"""
Pytest configuration and fixtures for keyspaces-sigv4 tests.

Shared fixtures pin the reference handshake inputs so every test signs the
same nonce at the same instant.
"""

import datetime
from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from keyspaces_sigv4.auth.sigv4 import Credentials
from tests import vectors
from tests.mocks import FakeCredentialSource


# ============================================================================
# Reference Handshake Fixtures
# ============================================================================

@pytest.fixture
def reference_timestamp() -> datetime.datetime:
    """Signing instant of the reference vector."""
    return vectors.TIMESTAMP


@pytest.fixture
def reference_credentials() -> Credentials:
    """Long-term credentials of the reference vector."""
    return Credentials(
        access_key_id=vectors.ACCESS_KEY_ID,
        secret_access_key=vectors.SECRET,
    )


@pytest.fixture
def temporary_credentials() -> Credentials:
    """Credentials carrying a session token."""
    return Credentials(
        access_key_id="ASIATEMPEXAMPLE",
        secret_access_key="temporarysecret",
        session_token="FwoGZXIvYXdzEBYaDK...",
    )


@pytest.fixture
def credential_source(reference_credentials: Credentials) -> FakeCredentialSource:
    """Credential source answering with the reference region and credentials."""
    return FakeCredentialSource(region=vectors.REGION, credentials=reference_credentials)


@pytest.fixture
def fixed_clock(reference_timestamp: datetime.datetime):
    """Clock pinned to the reference instant."""
    return lambda: reference_timestamp


# ============================================================================
# Tracing Fixtures
# ============================================================================

@pytest.fixture
def span_exporter():
    """Collect spans from the package tracer in memory."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    with patch("keyspaces_sigv4.tracing._tracer", provider.get_tracer("tests")):
        yield exporter
    provider.shutdown()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires AWS credentials)",
    )

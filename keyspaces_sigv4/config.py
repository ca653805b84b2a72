"""Configuration for the Keyspaces SigV4 authenticator."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class AuthenticatorConfig:
    """Configuration for the authenticator. Never holds key material."""

    # AWS configuration
    aws_region: Optional[str] = None
    aws_profile: Optional[str] = None

    # Attribution for traces and metrics
    service_name: str = "keyspaces-sigv4-auth"
    emit_metrics: bool = False

    # OpenTelemetry configuration
    otel_endpoint: str = ""
    otel_console_export: bool = False

    @classmethod
    def from_env(cls) -> "AuthenticatorConfig":
        """Load configuration from environment variables."""
        return cls(
            aws_region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None,
            aws_profile=os.getenv("AWS_PROFILE") or None,
            service_name=os.getenv("KEYSPACES_AUTH_SERVICE_NAME", cls.service_name),
            emit_metrics=os.getenv("KEYSPACES_AUTH_EMIT_METRICS", "").lower() == "true",
            otel_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
            otel_console_export=os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true",
        )

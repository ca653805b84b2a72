"""Tests for the authenticator configuration module."""

import dataclasses
import os
from unittest.mock import patch

import pytest

from keyspaces_sigv4.config import AuthenticatorConfig


class TestAuthenticatorConfig:
    """Tests for AuthenticatorConfig class."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        config = AuthenticatorConfig()

        assert config.aws_region is None
        assert config.aws_profile is None
        assert config.service_name == "keyspaces-sigv4-auth"
        assert config.emit_metrics is False
        assert config.otel_endpoint == ""
        assert config.otel_console_export is False

    def test_from_env_with_defaults(self):
        """Test from_env uses defaults when env vars not set."""
        with patch.dict(os.environ, {}, clear=True):
            config = AuthenticatorConfig.from_env()

            assert config.aws_region is None
            assert config.aws_profile is None
            assert config.emit_metrics is False

    def test_from_env_with_custom_values(self):
        """Test from_env reads environment variables correctly."""
        env_vars = {
            "AWS_REGION": "us-east-1",
            "AWS_PROFILE": "keyspaces",
            "KEYSPACES_AUTH_SERVICE_NAME": "orders-service",
            "KEYSPACES_AUTH_EMIT_METRICS": "true",
            "OTEL_EXPORTER_OTLP_ENDPOINT": "http://localhost:4317",
            "OTEL_CONSOLE_EXPORT": "TRUE",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = AuthenticatorConfig.from_env()

            assert config.aws_region == "us-east-1"
            assert config.aws_profile == "keyspaces"
            assert config.service_name == "orders-service"
            assert config.emit_metrics is True
            assert config.otel_endpoint == "http://localhost:4317"
            assert config.otel_console_export is True

    def test_default_region_fallback(self):
        """Test that AWS_DEFAULT_REGION is used when AWS_REGION is unset."""
        with patch.dict(os.environ, {"AWS_DEFAULT_REGION": "eu-west-1"}, clear=True):
            config = AuthenticatorConfig.from_env()

            assert config.aws_region == "eu-west-1"

    def test_empty_region_is_none(self):
        """Test that an empty AWS_REGION counts as unset."""
        with patch.dict(os.environ, {"AWS_REGION": ""}, clear=True):
            assert AuthenticatorConfig.from_env().aws_region is None

    def test_config_is_immutable(self):
        """Test that configuration cannot be changed once shared."""
        config = AuthenticatorConfig(aws_region="us-east-1")

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.aws_region = "us-west-2"

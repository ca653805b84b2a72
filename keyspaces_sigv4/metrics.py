"""
Custom CloudWatch metrics for the Keyspaces SigV4 authenticator.

This module provides CloudWatch metrics emission using the Embedded Metric Format (EMF)
for efficient metric publishing without requiring explicit PutMetricData API calls.

Metrics cover the handshake as a whole and the credential lookup inside it.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class MetricUnit(str, Enum):
    """CloudWatch metric units."""
    COUNT = "Count"
    MILLISECONDS = "Milliseconds"
    NONE = "None"


class HandshakeMetricName(str, Enum):
    """Metric names for the authenticator."""
    HANDSHAKE_COUNT = "HandshakeCount"
    HANDSHAKE_SUCCESS = "HandshakeSuccess"
    HANDSHAKE_FAILURE = "HandshakeFailure"
    HANDSHAKE_LATENCY = "HandshakeLatency"
    CREDENTIAL_RESOLUTION_LATENCY = "CredentialResolutionLatency"


@dataclass
class MetricDimensions:
    """Dimensions for CloudWatch metrics."""
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    region: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary, excluding None values."""
        result = {"Environment": self.environment}
        if self.region:
            result["Region"] = self.region
        if self.error_type:
            result["ErrorType"] = self.error_type
        return result


class MetricsEmitter:
    """
    CloudWatch metrics emitter using Embedded Metric Format (EMF).

    EMF allows publishing metrics by simply logging JSON in a specific format.
    CloudWatch automatically extracts metrics from these logs.
    """

    NAMESPACE = "KeyspacesSigV4Auth"

    def __init__(self, service_name: str = "keyspaces-sigv4-auth"):
        """
        Initialize the metrics emitter.

        Args:
            service_name: Service name for metric attribution
        """
        self.service_name = service_name
        self._dimensions = MetricDimensions()

    def _create_emf_log(
        self,
        metrics: dict[str, tuple[float, MetricUnit]],
        dimensions: Optional[MetricDimensions] = None,
        properties: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Create an EMF-formatted log entry.

        Args:
            metrics: Dictionary of metric name to (value, unit) tuples
            dimensions: Optional custom dimensions
            properties: Additional properties to include in the log

        Returns:
            EMF-formatted dictionary
        """
        dims = dimensions or self._dimensions
        dim_dict = dims.to_dict()

        metrics_array = [
            {"Name": name, "Unit": unit.value}
            for name, (_, unit) in metrics.items()
        ]

        emf_log: dict[str, Any] = {
            "_aws": {
                "Timestamp": int(time.time() * 1000),
                "CloudWatchMetrics": [
                    {
                        "Namespace": self.NAMESPACE,
                        "Dimensions": [list(dim_dict.keys())],
                        "Metrics": metrics_array,
                    }
                ],
            },
            "service": self.service_name,
            **dim_dict,
        }

        for name, (value, _) in metrics.items():
            emf_log[name] = value

        if properties:
            emf_log.update(properties)

        return emf_log

    def emit(
        self,
        metric_name: HandshakeMetricName,
        value: float,
        unit: MetricUnit = MetricUnit.COUNT,
        dimensions: Optional[MetricDimensions] = None,
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Emit a single metric.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit
            dimensions: Optional custom dimensions
            properties: Additional properties to log
        """
        emf_log = self._create_emf_log(
            {metric_name.value: (value, unit)},
            dimensions,
            properties,
        )
        # Print to stdout for CloudWatch to pick up
        print(json.dumps(emf_log))

    def emit_multiple(
        self,
        metrics: dict[HandshakeMetricName, tuple[float, MetricUnit]],
        dimensions: Optional[MetricDimensions] = None,
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        """Emit multiple metrics in a single log entry."""
        metrics_dict = {name.value: value_unit for name, value_unit in metrics.items()}
        emf_log = self._create_emf_log(metrics_dict, dimensions, properties)
        print(json.dumps(emf_log))

    def record_handshake(
        self,
        success: bool,
        latency_ms: float,
        region: Optional[str] = None,
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record a completed or failed handshake.

        Args:
            success: Whether a response was produced
            latency_ms: Time from challenge to response in milliseconds
            region: AWS region the handshake was scoped to
            error_type: Error class name if the handshake failed
        """
        dims = MetricDimensions(
            region=region,
            error_type=error_type[:50] if error_type else None,
        )

        metrics: dict[HandshakeMetricName, tuple[float, MetricUnit]] = {
            HandshakeMetricName.HANDSHAKE_COUNT: (1, MetricUnit.COUNT),
            HandshakeMetricName.HANDSHAKE_LATENCY: (latency_ms, MetricUnit.MILLISECONDS),
        }

        if success:
            metrics[HandshakeMetricName.HANDSHAKE_SUCCESS] = (1, MetricUnit.COUNT)
        else:
            metrics[HandshakeMetricName.HANDSHAKE_FAILURE] = (1, MetricUnit.COUNT)

        properties = {}
        if error_type:
            properties["errorType"] = error_type

        self.emit_multiple(metrics, dims, properties)

    def record_credential_resolution(
        self,
        latency_ms: float,
        region: Optional[str] = None,
    ) -> None:
        """Record how long the credential source took to answer."""
        self.emit(
            HandshakeMetricName.CREDENTIAL_RESOLUTION_LATENCY,
            latency_ms,
            MetricUnit.MILLISECONDS,
            MetricDimensions(region=region),
        )

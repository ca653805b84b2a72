"""OpenTelemetry tracing for the Keyspaces SigV4 authenticator.

Handshake code only talks to the OpenTelemetry API. Spans go to whatever
tracer provider the application installed and are dropped when there is
none, so importing or using this package never changes global telemetry
settings.

Applications without their own OpenTelemetry setup can opt in with
``init_tracing``, which installs an SDK provider with:
- AWS X-Ray compatible trace ids and propagation
- OTLP gRPC export and/or console export
"""

import inspect
import logging
import os
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator, TypeVar, ParamSpec

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.aws import AwsXRayPropagator
from opentelemetry.sdk.extension.aws.trace import AwsXRayIdGenerator
from opentelemetry.propagate import set_global_textmap
from opentelemetry.trace import Status, StatusCode

from . import __version__

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Tracer from init_tracing; None means use the API proxy tracer
_tracer: trace.Tracer | None = None


def _build_provider(
    service_name: str,
    otlp_endpoint: str | None,
    enable_console_export: bool,
) -> TracerProvider:
    provider = TracerProvider(
        resource=Resource.create({
            SERVICE_NAME: service_name,
            "service.version": __version__,
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }),
        id_generator=AwsXRayIdGenerator(),
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    return provider


def init_tracing(
    service_name: str = "keyspaces-sigv4-auth",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
) -> trace.Tracer:
    """Opt in to exporting handshake spans.

    If the application already installed a tracer provider, it is reused
    and neither the provider nor the global propagator is touched. The
    X-Ray propagator is only installed together with our own provider and
    only when OTEL_PROPAGATORS does not choose one.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        enable_console_export: If True, also export spans to console (for debugging)

    Returns:
        Tracer used for handshake spans
    """
    global _tracer

    if _tracer is not None:
        return _tracer

    if isinstance(trace.get_tracer_provider(), trace.ProxyTracerProvider):
        trace.set_tracer_provider(
            _build_provider(service_name, otlp_endpoint, enable_console_export)
        )
        if not os.getenv("OTEL_PROPAGATORS"):
            set_global_textmap(AwsXRayPropagator())
        logger.info(f"Installed OpenTelemetry tracer provider for {service_name}")
    else:
        logger.debug("Tracer provider already configured by the application, reusing it")

    _tracer = trace.get_tracer(service_name, __version__)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Tracer from ``init_tracing``, else the no-op-until-configured API tracer."""
    return _tracer or trace.get_tracer(__name__, __version__)


@contextmanager
def _span(name: str, attributes: dict[str, Any] | None) -> Iterator[trace.Span]:
    with get_tracer().start_as_current_span(
        name,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            # Class name only; messages stay in the exception event
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, type(e).__name__))
            raise
        span.set_status(Status(StatusCode.OK))


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Run the decorated function inside a span.

    Args:
        name: Span name (defaults to the function's qualified name)
        attributes: Attributes set when the span starts
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__qualname__

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                with _span(span_name, attributes):
                    return await func(*args, **kwargs)  # type: ignore
            return async_wrapper  # type: ignore

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with _span(span_name, attributes):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator


def add_handshake_span_attributes(
    span: trace.Span,
    region: str | None = None,
    access_key_id: str | None = None,
    state: str | None = None,
    temporary_credentials: bool | None = None,
) -> None:
    """Add handshake attributes to a span.

    Args:
        span: The span to add attributes to
        region: AWS region the signature is scoped to
        access_key_id: Access key id used for signing
        state: Session state after the step
        temporary_credentials: Whether a session token was present
    """
    if region:
        span.set_attribute("keyspaces.region", region)
    if access_key_id:
        span.set_attribute("keyspaces.access_key_id", access_key_id)
    if state:
        span.set_attribute("keyspaces.session_state", state)
    if temporary_credentials is not None:
        span.set_attribute("keyspaces.temporary_credentials", temporary_credentials)

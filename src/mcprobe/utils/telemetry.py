"""OpenTelemetry tracing helpers for mcprobe.

Modules call ``get_tracer(__name__)`` and open spans unconditionally; until
:func:`configure_telemetry` installs an SDK provider those spans are the
API's no-op implementations.

Usage::

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("mcprobe.round_trip") as span:
        span.set_attribute(ATTR_RPC_METHOD, "tools/list")

``configure_telemetry`` needs the ``otel`` extra (``pip install mcprobe[otel]``).
"""

from __future__ import annotations

from opentelemetry import trace

ATTR_RPC_METHOD = "mcprobe.rpc.method"
ATTR_RPC_ID = "mcprobe.rpc.id"
ATTR_TOOL_NAME = "mcprobe.tool.name"
ATTR_FRAME_BYTES = "mcprobe.frame.bytes"
ATTR_TOOL_COUNT = "mcprobe.tools.count"

_INSTRUMENTATION_NAME = "mcprobe"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (no-op unless telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(*, service_name: str = "mcprobe", otlp_endpoint: str | None = None) -> None:
    """Install an SDK tracer provider.

    Spans are exported via OTLP/gRPC when *otlp_endpoint* is given and
    printed as JSON to stdout otherwise.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install mcprobe[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install mcprobe[otel]"
            )
            raise ImportError(msg) from exc
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    else:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

import logging
import re
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from ephemeral_clip.core.config import Settings

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"


class ClipSpanProcessor(SpanProcessor):
    """
    SpanProcessor that redacts sensitive attributes before handing finished
    spans to the wrapped (exporting) processor.
    """
    def __init__(self, processor: SpanProcessor):
        self._processor = processor
        self._sensitive_keys = {
            "authorization", "cookie", "set-cookie",
            "ciphertext", "iv", "key",
        }
        self._sensitive_patterns = [
            re.compile(r"http\.request\.header\..*", re.IGNORECASE),
            re.compile(r"http\.response\.header\..*", re.IGNORECASE),
            re.compile(r".*(ciphertext|nonce|secret|token|fragment).*", re.IGNORECASE),
            re.compile(r".*\.(iv|key)", re.IGNORECASE),
        ]

    def _should_redact(self, key: str) -> bool:
        if key.lower() in self._sensitive_keys:
            return True
        return any(p.fullmatch(key) for p in self._sensitive_patterns)

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        self._processor.on_start(span, parent_context)

    def on_end(self, span: ReadableSpan) -> None:
        attributes = span.attributes or {}
        if not any(self._should_redact(k) for k in attributes):
            self._processor.on_end(span)
            return

        # ReadableSpan is immutable once ended, so forward a redacted copy
        redacted = ReadableSpan(
            name=span.name,
            context=span.context,
            parent=span.parent,
            resource=span.resource,
            attributes={k: REDACTED if self._should_redact(k) else v for k, v in attributes.items()},
            events=span.events,
            links=span.links,
            kind=span.kind,
            status=span.status,
            start_time=span.start_time,
            end_time=span.end_time,
            instrumentation_scope=span.instrumentation_scope,
        )
        self._processor.on_end(redacted)

    def shutdown(self) -> None:
        self._processor.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._processor.force_flush(timeout_millis)


def setup_opentelemetry(app: FastAPI, config: Settings) -> None:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    provider = TracerProvider()

    if config.OTEL_EXPORTER_OTLP_ENDPOINT:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=config.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True))
    elif config.DEV_MODE:
        processor = BatchSpanProcessor(ConsoleSpanExporter())
    else:
        processor = None

    if processor:
        provider.add_span_processor(ClipSpanProcessor(processor))

    trace.set_tracer_provider(provider)

    # Health checks are excluded to reduce noise
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls="health/*,api/health"
    )
    logger.info("OpenTelemetry tracing enabled")

from unittest.mock import Mock

from opentelemetry.sdk.trace import ReadableSpan

from ephemeral_clip.observability.tracing import ClipSpanProcessor


def test_sensitive_attributes_are_redacted():
    inner = Mock()
    processor = ClipSpanProcessor(inner)
    span = ReadableSpan(
        name="POST /api/create",
        attributes={
            "http.method": "POST",
            "ciphertext": "AAAA",
            "clip.iv": "BBBB",
            "http.request.header.cookie": "session=1",
        },
    )

    processor.on_end(span)

    forwarded = inner.on_end.call_args[0][0]
    assert forwarded.name == "POST /api/create"
    assert forwarded.attributes["http.method"] == "POST"
    assert forwarded.attributes["ciphertext"] == "[REDACTED]"
    assert forwarded.attributes["clip.iv"] == "[REDACTED]"
    assert forwarded.attributes["http.request.header.cookie"] == "[REDACTED]"


def test_clean_span_passes_through_unchanged():
    inner = Mock()
    processor = ClipSpanProcessor(inner)
    span = ReadableSpan(name="GET /api/health", attributes={"http.status_code": 200})

    processor.on_end(span)

    inner.on_end.assert_called_once_with(span)


def test_lifecycle_delegates():
    inner = Mock()
    inner.force_flush.return_value = True
    processor = ClipSpanProcessor(inner)

    assert processor.force_flush() is True
    processor.shutdown()
    inner.shutdown.assert_called_once()

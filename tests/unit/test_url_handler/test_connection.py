"""Unit tests for the httpx connection adapter."""

import gzip
from collections.abc import Iterator

import httpx

from url_handler.connection import HttpConnection, HttpxConnection


class _RawStream(httpx.SyncByteStream):
    """Unread response stream yielding bytes exactly as sent on the wire."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks

    def close(self) -> None:
        self.closed = True


class TestHttpxConnection:
    """Tests for HttpxConnection class."""

    def test_satisfies_protocol(self) -> None:
        """Test the adapter is an HttpConnection."""
        connection = HttpxConnection(httpx.Response(200))

        assert isinstance(connection, HttpConnection)

    def test_status_and_reason(self) -> None:
        """Test status code and reason phrase are forwarded."""
        connection = HttpxConnection(httpx.Response(403))

        assert connection.status_code == 403
        assert connection.reason_phrase == "Forbidden"

    def test_no_error_stream_on_success(self) -> None:
        """Test successful responses expose no error body."""
        connection = HttpxConnection(httpx.Response(201, content=b"created"))

        assert connection.error_stream() is None

    def test_no_error_stream_for_empty_body(self) -> None:
        """Test an empty error body is reported as absent."""
        connection = HttpxConnection(httpx.Response(500, content=b""))

        assert connection.error_stream() is None

    def test_read_response_exposes_decoded_content(self) -> None:
        """Test already-read bodies are exposed decoded, without encoding."""
        response = httpx.Response(
            500,
            content=gzip.compress(b"server exploded"),
            headers={"Content-Encoding": "gzip"},
        )
        connection = HttpxConnection(response)

        stream = connection.error_stream()

        assert stream is not None
        assert stream.read() == b"server exploded"
        assert connection.content_encoding is None

    def test_unread_response_exposes_raw_bytes(self) -> None:
        """Test streamed bodies are exposed raw with their encoding."""
        body = gzip.compress(b"denied")
        raw = _RawStream([body[:5], body[5:]])
        response = httpx.Response(
            403, stream=raw, headers={"Content-Encoding": "gzip"}
        )
        connection = HttpxConnection(response)

        assert connection.content_encoding == "gzip"
        stream = connection.error_stream()

        assert stream is not None
        assert stream.read() == body
        stream.close()
        assert raw.closed

    def test_content_type(self) -> None:
        """Test the Content-Type header is forwarded."""
        response = httpx.Response(
            500, headers={"Content-Type": "text/html; charset=UTF-8"}
        )

        assert HttpxConnection(response).content_type == "text/html; charset=UTF-8"

    def test_header_fields_group_values(self) -> None:
        """Test repeated headers are grouped under one name."""
        response = httpx.Response(
            500,
            headers=[("X-Trace", "a"), ("Server", "nginx"), ("X-Trace", "b")],
        )

        fields = HttpxConnection(response).header_fields()

        assert fields["x-trace"] == ["a", "b"]
        assert fields["server"] == ["nginx"]

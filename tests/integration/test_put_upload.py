"""Integration tests for classifying PUT uploads made with httpx."""

import gzip
import zlib
from collections.abc import Iterator

import httpx
import pytest

from url_handler.connection import HttpxConnection
from url_handler.errors import AccessDeniedError, UploadFailedError
from url_handler.metrics import HandlerMetrics
from url_handler.models import PutErrorClass
from url_handler.put import classify_put_response, validate_put_status
from url_handler.url import normalize_to_url


class _WireStream(httpx.SyncByteStream):
    """Response body delivered in chunks, exactly as sent by the server."""

    def __init__(self, body: bytes, chunk_size: int = 7) -> None:
        self._body = body
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        for i in range(0, len(self._body), self._chunk_size):
            yield self._body[i : i + self._chunk_size]


class _ResetStream(httpx.SyncByteStream):
    """Response body whose connection drops after the first chunk."""

    def __iter__(self) -> Iterator[bytes]:
        yield b"partial "
        msg = "connection reset"
        raise httpx.ReadError(msg)


def _raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(6, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _repository(request: httpx.Request) -> httpx.Response:
    """Fake artifact repository keyed on the request path."""
    path = request.url.raw_path.decode()
    if path.endswith("/ok.jar"):
        return httpx.Response(201)
    if path.endswith("/locked.jar"):
        return httpx.Response(
            403,
            content=gzip.compress(b"repository is read-only"),
            headers={
                "Content-Encoding": "gzip",
                "Content-Type": "text/plain; charset=utf-8",
            },
        )
    if path.endswith("/raw.jar"):
        return httpx.Response(
            500,
            stream=_WireStream(_raw_deflate(b"storage backend unavailable")),
            headers={"Content-Encoding": "deflate", "X-Request-Id": "r-42"},
        )
    if path.endswith("/reset.jar"):
        return httpx.Response(500, stream=_ResetStream())
    return httpx.Response(
        500,
        content=b"x" * 2000,
        headers={"Content-Type": "text/plain"},
    )


class TestPutUpload:
    """Tests for PUT uploads against a mock repository."""

    @pytest.fixture(autouse=True)
    def reset_metrics(self) -> None:
        """Reset metrics singleton before each test."""
        HandlerMetrics.reset()

    @pytest.fixture
    def client(self) -> Iterator[httpx.Client]:
        """Create a client backed by the fake repository."""
        with httpx.Client(transport=httpx.MockTransport(_repository)) as client:
            yield client

    def test_successful_upload(self, client: httpx.Client) -> None:
        """Test a 201 response validates cleanly."""
        url = normalize_to_url("https://repo.example.com/libs/ok.jar")
        response = client.put(url, content=b"jar-bytes")

        result = validate_put_status(url, HttpxConnection(response))

        assert result.is_success is True
        assert result.status_code == 201

    def test_read_only_repository(self, client: httpx.Client) -> None:
        """Test a gzip error body from a 403 is decoded into the message."""
        url = normalize_to_url("https://repo.example.com/libs/locked.jar")
        response = client.put(url, content=b"jar-bytes")

        with pytest.raises(AccessDeniedError) as exc_info:
            validate_put_status(url, HttpxConnection(response))

        assert str(exc_info.value) == (
            "Access to URL https://repo.example.com/libs/locked.jar was refused "
            "by the server: Forbidden; Response Body: repository is read-only"
        )

    def test_streamed_raw_deflate_error(self, client: httpx.Client) -> None:
        """Test an unread raw deflate error body is sniffed and decoded."""
        url = normalize_to_url("https://repo.example.com/libs/raw.jar")

        with client.stream("PUT", url, content=b"jar-bytes") as response:
            result = classify_put_response(url, 500, HttpxConnection(response))

        assert result.error is not None
        assert result.error.error_class == PutErrorClass.UPLOAD_FAILED
        assert "status code 500" in result.error.message
        assert "(body = storage backend unavailable" in result.error.message
        assert "x-request-idr-42" in result.error.message
        assert HandlerMetrics.get_instance().decoder_selections_total == {"raw": 1}

    def test_dropped_connection_keeps_status(self, client: httpx.Client) -> None:
        """Test a connection reset mid-body still reports the 500."""
        url = normalize_to_url("https://repo.example.com/libs/reset.jar")

        with client.stream("PUT", url, content=b"jar-bytes") as response:
            result = classify_put_response(url, 500, HttpxConnection(response))

        assert result.error is not None
        assert result.error.error_class == PutErrorClass.UPLOAD_FAILED
        assert "failed with status code 500: (body = " in result.error.message
        assert "partial" not in result.error.message
        assert HandlerMetrics.get_instance().error_body_failures_total == 1

    def test_large_error_body_truncated(self, client: httpx.Client) -> None:
        """Test only 512 bytes of a large error body are reported."""
        url = normalize_to_url("https://repo.example.com/libs/other+name.jar")
        response = client.put(url, content=b"jar-bytes")

        with pytest.raises(UploadFailedError) as exc_info:
            validate_put_status(url, HttpxConnection(response))

        message = str(exc_info.value)
        assert "libs/other%2Bname.jar failed with status code 500" in message
        assert "x" * 512 in message
        assert "x" * 513 not in message

"""Connection interface consumed by the PUT response classifier."""

import io
from collections.abc import Callable, Iterator, Mapping
from typing import BinaryIO, Protocol, runtime_checkable

import httpx


@runtime_checkable
class HttpConnection(Protocol):
    """Protocol for an HTTP response that has already been received.

    Any object exposing these members can be classified, regardless of
    the transport that produced it.
    """

    @property
    def status_code(self) -> int:
        """HTTP status code."""
        ...

    @property
    def reason_phrase(self) -> str:
        """Status reason phrase, e.g. ``Forbidden``."""
        ...

    @property
    def content_encoding(self) -> str | None:
        """Content-Encoding of the bytes returned by ``error_stream``."""
        ...

    @property
    def content_type(self) -> str | None:
        """Content-Type header value."""
        ...

    def header_fields(self) -> Mapping[str, list[str]]:
        """Response headers as name to ordered list of values."""
        ...

    def error_stream(self) -> BinaryIO | None:
        """Stream over the error body, or None when there is none."""
        ...


class _ChunkIteratorStream(io.RawIOBase):
    """Raw stream view over an iterator of byte chunks."""

    def __init__(
        self,
        chunks: Iterator[bytes],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        super().__init__()
        self._chunks = chunks
        self._pending = b""
        self._on_close = on_close

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        data = self._pending[: len(buffer)]
        self._pending = self._pending[len(data) :]
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if not self.closed:
            try:
                if self._on_close is not None:
                    self._on_close()
            finally:
                super().close()


class HttpxConnection:
    """Adapter exposing an ``httpx.Response`` as an ``HttpConnection``.

    An unread streamed response exposes its raw bytes together with the
    declared Content-Encoding. A response whose body was already read has
    been decoded by httpx, so its content is exposed with no encoding.
    """

    def __init__(self, response: httpx.Response) -> None:
        """Initialize the adapter.

        Args:
            response: The received response.
        """
        self._response = response

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def content_encoding(self) -> str | None:
        if self._response.is_stream_consumed:
            return None
        return self._response.headers.get("content-encoding")

    @property
    def content_type(self) -> str | None:
        return self._response.headers.get("content-type")

    def header_fields(self) -> dict[str, list[str]]:
        headers = self._response.headers
        return {name: headers.get_list(name) for name in headers}

    def error_stream(self) -> BinaryIO | None:
        if self._response.status_code < httpx.codes.BAD_REQUEST:
            return None

        if not self._response.is_stream_consumed:
            chunks = self._response.iter_raw()
            return io.BufferedReader(  # type: ignore[return-value]
                _ChunkIteratorStream(chunks, on_close=self._response.close)
            )

        try:
            content = self._response.content
        except httpx.ResponseNotRead:
            return None
        if not content:
            return None
        return io.BytesIO(content)

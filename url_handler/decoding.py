"""Decoding stream selection for Content-Encoding'd response bodies.

Servers use the ``deflate`` token for two incompatible layouts: zlib-wrapped
deflate (RFC 1950) and raw deflate without any wrapper. The header alone
does not tell them apart, so the selector sniffs a bounded prefix of the
body and trial-decompresses it. This is best effort: short or corrupt
bodies can be misclassified.
"""

import gzip
import io
import zlib
from typing import BinaryIO

import structlog

from url_handler.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFLATE_PROBE_MAX_OUTPUT,
    DEFLATE_PROBE_SIZE,
    ENCODING_DEFLATE,
    ENCODING_GZIP,
    ENCODING_X_GZIP,
)
from url_handler.metrics import HandlerMetrics
from url_handler.models import DeflateVariant


logger = structlog.get_logger()

_WBITS = {
    DeflateVariant.ZLIB: zlib.MAX_WBITS,
    DeflateVariant.RAW: -zlib.MAX_WBITS,
}


class RewindableStream(io.RawIOBase):
    """Stream that can re-read a bounded prefix of its source.

    ``mark(limit)`` starts recording; ``reset()`` replays everything read
    since the mark, as long as no more than ``limit`` bytes were read.
    Closing this stream closes the source.
    """

    def __init__(self, source: BinaryIO) -> None:
        """Initialize the stream.

        Args:
            source: Underlying binary stream.
        """
        super().__init__()
        self._source = source
        self._recorded = bytearray()
        self._replay = b""
        self._mark_limit: int | None = None

    def readable(self) -> bool:
        return True

    def mark(self, limit: int) -> None:
        """Remember the current position, allowing ``limit`` bytes of replay."""
        self._recorded = bytearray()
        self._mark_limit = limit

    def reset(self) -> None:
        """Rewind to the last mark.

        Raises:
            OSError: If no mark is set or the mark limit was exceeded.
        """
        if self._mark_limit is None:
            msg = "Resetting to invalid mark"
            raise OSError(msg)
        self._replay = bytes(self._recorded) + self._replay
        self._recorded = bytearray()
        self._mark_limit = None

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        size = len(buffer)
        if self._replay:
            data = self._replay[:size]
            self._replay = self._replay[size:]
        else:
            data = self._source.read(size)

        if self._mark_limit is not None:
            self._recorded.extend(data)
            if len(self._recorded) > self._mark_limit:
                # Read past the limit; the mark is no longer valid
                self._recorded = bytearray()
                self._mark_limit = None

        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if not self.closed:
            try:
                self._source.close()
            finally:
                super().close()


class InflatingStream(io.RawIOBase):
    """Stream that inflates deflate data read from a source stream.

    Raises ``EOFError`` when the source ends before the end-of-stream
    marker, the same way ``gzip`` does. Closing this stream closes the
    source.
    """

    def __init__(self, source: BinaryIO, variant: DeflateVariant) -> None:
        """Initialize the stream.

        Args:
            source: Stream of compressed bytes.
            variant: Layout of the compressed data.
        """
        super().__init__()
        self._source = source
        self._variant = variant
        self._inflater = zlib.decompressobj(_WBITS[variant])
        self._pending = b""
        self._seen_input = False
        self._finished = False

    @property
    def variant(self) -> DeflateVariant:
        return self._variant

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._pending and not self._finished:
            self._pending = self._inflate_next()

        data = self._pending[: len(buffer)]
        self._pending = self._pending[len(data) :]
        buffer[: len(data)] = data
        return len(data)

    def _inflate_next(self) -> bytes:
        if self._inflater.eof:
            self._finished = True
            return b""

        if self._inflater.unconsumed_tail:
            return self._inflater.decompress(
                self._inflater.unconsumed_tail, DEFAULT_CHUNK_SIZE
            )

        chunk = self._source.read(DEFAULT_CHUNK_SIZE)
        if not chunk:
            self._finished = True
            tail = self._inflater.flush()
            if self._seen_input and not self._inflater.eof:
                msg = (
                    "Compressed stream ended before the end-of-stream "
                    "marker was reached"
                )
                raise EOFError(msg)
            return tail

        self._seen_input = True
        return self._inflater.decompress(chunk, DEFAULT_CHUNK_SIZE)

    def close(self) -> None:
        if not self.closed:
            try:
                self._source.close()
            finally:
                super().close()


def probe_deflate_variant(prefix: bytes) -> DeflateVariant:
    """Guess the deflate layout from the first bytes of a body.

    Trial-inflates ``prefix`` as zlib-wrapped data, keeping at most
    ``DEFLATE_PROBE_MAX_OUTPUT`` bytes of output, which is discarded.

    Args:
        prefix: Leading bytes of the compressed body.

    Returns:
        ZLIB if the prefix inflates cleanly, RAW on a format error.
    """
    inflater = zlib.decompressobj(zlib.MAX_WBITS)
    try:
        inflater.decompress(prefix, DEFLATE_PROBE_MAX_OUTPUT)
    except zlib.error:
        return DeflateVariant.RAW
    return DeflateVariant.ZLIB


def get_decoding_stream(encoding: str | None, stream: BinaryIO) -> BinaryIO:
    """Select the decoder for a body given its Content-Encoding token.

    - ``gzip`` / ``x-gzip``: gzip decompression
    - ``deflate``: zlib-wrapped or raw deflate, chosen by probing
    - anything else: the stream is returned unchanged

    Token matching is exact and case-sensitive. The caller hands ownership
    of ``stream`` to the returned object; closing it closes the source.

    Args:
        encoding: Content-Encoding header value, if any.
        stream: Raw body stream.

    Returns:
        Stream yielding decoded body bytes.
    """
    metrics = HandlerMetrics.get_instance()

    if encoding in {ENCODING_GZIP, ENCODING_X_GZIP}:
        metrics.record_decoder("gzip")
        return _OwningGzipFile(stream)  # type: ignore[return-value]

    if encoding == ENCODING_DEFLATE:
        rewindable = RewindableStream(stream)
        rewindable.mark(DEFLATE_PROBE_SIZE)
        prefix = _read_up_to(rewindable, DEFLATE_PROBE_SIZE)
        rewindable.reset()

        variant = probe_deflate_variant(prefix)
        metrics.record_decoder(variant.value)
        logger.debug(
            "deflate_variant_detected",
            variant=variant.value,
            probe_bytes=len(prefix),
        )
        return io.BufferedReader(InflatingStream(rewindable, variant))  # type: ignore[arg-type, return-value]

    metrics.record_decoder("identity")
    return stream


def _read_up_to(stream: io.RawIOBase, size: int) -> bytes:
    """Read until ``size`` bytes are collected or the stream ends."""
    collected = bytearray()
    while len(collected) < size:
        chunk = stream.read(size - len(collected))
        if not chunk:
            break
        collected.extend(chunk)
    return bytes(collected)


class _OwningGzipFile(gzip.GzipFile):
    """``GzipFile`` that closes the stream it was given.

    A plain ``GzipFile`` leaves a caller-supplied ``fileobj`` open on close.
    """

    def __init__(self, source: BinaryIO) -> None:
        self._source = source
        super().__init__(fileobj=source, mode="rb")

    def close(self) -> None:
        try:
            super().close()
        finally:
            self._source.close()

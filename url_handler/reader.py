"""Bounded reads of response bodies."""

from io import BytesIO
from typing import BinaryIO

import structlog

from url_handler.constants import DEFAULT_CHUNK_SIZE


logger = structlog.get_logger()


def read_truncated(stream: BinaryIO, max_len: int) -> bytes:
    """Read at most ``max_len`` bytes from a stream, then close it.

    The stream is closed on every exit path. A failure while closing is
    logged and ignored so it never hides the bytes already read.

    Args:
        stream: Binary stream to read from.
        max_len: Maximum number of bytes to return.

    Returns:
        Up to ``max_len`` bytes from the start of the stream.

    Raises:
        ValueError: If ``max_len`` is negative.
    """
    buffer = BytesIO()
    try:
        if max_len < 0:
            msg = f"max_len must be >= 0, got {max_len}"
            raise ValueError(msg)

        remaining = max_len
        while remaining > 0:
            chunk = stream.read(min(remaining, DEFAULT_CHUNK_SIZE))
            if not chunk:
                break
            chunk = chunk[:remaining]
            buffer.write(chunk)
            remaining -= len(chunk)
        return buffer.getvalue()
    finally:
        try:
            stream.close()
        except OSError as e:
            logger.debug("stream_close_failed", error=str(e))

"""Classification of PUT responses into success and failure outcomes."""

import contextlib
import zlib

import httpx
import structlog

from url_handler.charset import decode_text, get_charset_from_content_type
from url_handler.connection import HttpConnection
from url_handler.constants import (
    ERROR_BODY_TRUNCATE_LEN,
    PUT_ACCESS_DENIED_STATUSES,
    PUT_SUCCESS_STATUSES,
)
from url_handler.decoding import get_decoding_stream
from url_handler.metrics import HandlerMetrics
from url_handler.models import PutError, PutErrorClass, PutResult
from url_handler.reader import read_truncated
from url_handler.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()

RESPONSE_BODY_PREFIX = "; Response Body: "


def classify_put_response(
    destination: str | httpx.URL,
    status_code: int,
    connection: HttpConnection,
    *,
    max_body_bytes: int = ERROR_BODY_TRUNCATE_LEN,
) -> PutResult:
    """Classify the status code returned by a PUT operation.

    - 200, 201, 202, 204: success
    - 401, 403: access denied
    - anything else: upload failed, with the error body and response
      headers in the message

    A broken error body never hides the status-based outcome: read
    failures are logged and the message is built from what is available.

    Args:
        destination: URL the PUT was sent to.
        status_code: HTTP status code returned by the server.
        connection: The received response.
        max_body_bytes: Maximum number of error body bytes to include.

    Returns:
        PutResult with error details when the PUT failed.
    """
    dest = str(destination)
    metrics = HandlerMetrics.get_instance()
    log = logger.bind(
        component="url_handler",
        destination=redact_url_credentials(dest),
        status_code=status_code,
    )

    if status_code in PUT_SUCCESS_STATUSES:
        metrics.record_put_outcome(None)
        log.debug("put_status_classified", outcome="success")
        return PutResult(destination=dest, status_code=status_code)

    body_text = read_error_body(connection, max_body_bytes, log=log)

    if status_code in PUT_ACCESS_DENIED_STATUSES:
        extra = f"{RESPONSE_BODY_PREFIX}{body_text}" if body_text is not None else ""
        status_message = f"{connection.reason_phrase}{extra}"
        error = PutError(
            error_class=PutErrorClass.ACCESS_DENIED,
            message=(
                f"Access to URL {dest} was refused by the server: {status_message}"
            ),
            status_code=status_code,
        )
    else:
        diagnostic = build_diagnostic(body_text or "", connection)
        error = PutError(
            error_class=PutErrorClass.UPLOAD_FAILED,
            message=(
                f"PUT operation to URL {dest} failed with status code "
                f"{status_code}: {diagnostic}"
            ),
            status_code=status_code,
        )

    metrics.record_put_outcome(error.error_class)
    log.info(
        "put_status_classified",
        outcome=error.error_class.value,
        headers=redact_headers(connection.header_fields()),
    )
    return PutResult(destination=dest, status_code=status_code, error=error)


def validate_put_status(
    destination: str | httpx.URL,
    connection: HttpConnection,
    *,
    max_body_bytes: int = ERROR_BODY_TRUNCATE_LEN,
) -> PutResult:
    """Classify a PUT response and raise if it failed.

    Args:
        destination: URL the PUT was sent to.
        connection: The received response.
        max_body_bytes: Maximum number of error body bytes to include.

    Returns:
        The successful PutResult.

    Raises:
        AccessDeniedError: For 401 and 403 responses.
        UploadFailedError: For any other non-success status.
    """
    result = classify_put_response(
        destination,
        connection.status_code,
        connection,
        max_body_bytes=max_body_bytes,
    )
    result.raise_for_status()
    return result


def read_error_body(
    connection: HttpConnection,
    max_body_bytes: int,
    log: structlog.stdlib.BoundLogger | None = None,
) -> str | None:
    """Read and decode the start of the error body for diagnostics.

    Args:
        connection: The received response.
        max_body_bytes: Maximum number of decoded bytes to read.
        log: Bound logger.

    Returns:
        Decoded body text, or None when there is no error body or it
        could not be read.
    """
    log = log or logger.bind(component="url_handler")
    metrics = HandlerMetrics.get_instance()

    encoding = connection.content_encoding
    stream = connection.error_stream()
    if stream is None:
        return None

    try:
        decoding_stream = get_decoding_stream(encoding, stream)
        # One byte past the cap tells a cut body from one that fits exactly
        truncated = read_truncated(decoding_stream, max_body_bytes + 1)
    except (
        OSError,
        EOFError,
        zlib.error,
        httpx.TransportError,
        httpx.StreamError,
    ) as e:
        with contextlib.suppress(OSError):
            stream.close()
        metrics.record_error_body_failure()
        log.warning(
            "error_body_read_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    was_cut = len(truncated) > max_body_bytes
    truncated = truncated[:max_body_bytes]
    metrics.record_error_body(truncated=was_cut)
    if was_cut:
        log.debug("error_body_truncated", max_body_bytes=max_body_bytes)

    charset = get_charset_from_content_type(connection.content_type)
    return decode_text(truncated, charset)


def build_diagnostic(body_text: str, connection: HttpConnection) -> str:
    """Format the error body and response headers for a failure message.

    Args:
        body_text: Decoded (possibly truncated) error body.
        connection: The received response.

    Returns:
        Text of the form ``(body = <text><name><values>...)``, with each
        header's values joined by a space and no other separators.
    """
    parts = [f"(body = {body_text}"]
    for name, values in connection.header_fields().items():
        parts.append(f"{name}{' '.join(values)}")
    parts.append(")")
    return "".join(parts)

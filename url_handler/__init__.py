"""Protocol-correctness utilities for an HTTP client layer.

This package provides:
- URL canonicalization before dereferencing
- Charset resolution from Content-Type headers
- Decoding stream selection, including deflate variant detection
- Bounded reads of error bodies
- PUT response status classification with diagnostics
"""

from url_handler.charset import decode_text, get_charset_from_content_type
from url_handler.config import UrlHandlerConfig
from url_handler.connection import HttpConnection, HttpxConnection
from url_handler.constants import (
    DEFAULT_CHARSET,
    DEFLATE_PROBE_MAX_OUTPUT,
    DEFLATE_PROBE_SIZE,
    ERROR_BODY_TRUNCATE_LEN,
)
from url_handler.decoding import get_decoding_stream, probe_deflate_variant
from url_handler.errors import (
    AccessDeniedError,
    MalformedURLError,
    PutStatusError,
    UploadFailedError,
    UrlHandlerError,
)
from url_handler.handler import BaseUrlHandler
from url_handler.metrics import HandlerMetrics
from url_handler.models import (
    DeflateVariant,
    PutError,
    PutErrorClass,
    PutResult,
    RequestMethod,
    UrlInfo,
)
from url_handler.observability import configure_logging
from url_handler.put import classify_put_response, validate_put_status
from url_handler.reader import read_truncated
from url_handler.settings import UrlHandlerSettings, get_settings
from url_handler.url import normalize_to_string, normalize_to_url


__all__ = [
    # Handler
    "BaseUrlHandler",
    # Config
    "UrlHandlerConfig",
    "UrlHandlerSettings",
    "get_settings",
    # URL canonicalization
    "normalize_to_string",
    "normalize_to_url",
    # Body decoding
    "get_charset_from_content_type",
    "decode_text",
    "get_decoding_stream",
    "probe_deflate_variant",
    "read_truncated",
    # PUT classification
    "classify_put_response",
    "validate_put_status",
    "HttpConnection",
    "HttpxConnection",
    # Models
    "DeflateVariant",
    "PutError",
    "PutErrorClass",
    "PutResult",
    "RequestMethod",
    "UrlInfo",
    # Errors
    "UrlHandlerError",
    "MalformedURLError",
    "PutStatusError",
    "AccessDeniedError",
    "UploadFailedError",
    # Constants
    "DEFAULT_CHARSET",
    "DEFLATE_PROBE_SIZE",
    "DEFLATE_PROBE_MAX_OUTPUT",
    "ERROR_BODY_TRUNCATE_LEN",
    # Observability
    "HandlerMetrics",
    "configure_logging",
]

"""Base URL handler combining URL info lookups with protocol utilities."""

from abc import ABC, abstractmethod
from typing import BinaryIO

import httpx
import structlog

from url_handler.config import UrlHandlerConfig
from url_handler.connection import HttpConnection
from url_handler.decoding import get_decoding_stream
from url_handler.models import PutResult, RequestMethod, UrlInfo
from url_handler.put import validate_put_status
from url_handler.redact import redact_url_credentials
from url_handler.url import normalize_to_string, normalize_to_url


logger = structlog.get_logger()


class BaseUrlHandler(ABC):
    """Base class for URL handlers.

    Subclasses provide ``get_url_info``, which talks to the network using
    the configured request method. Reachability, content length and last
    modified accessors are answered from that info. Canonicalization,
    body decoding and PUT status validation are shared by all handlers.
    """

    def __init__(self, config: UrlHandlerConfig | None = None) -> None:
        """Initialize the handler.

        Args:
            config: Handler configuration. Defaults to ``UrlHandlerConfig()``.
        """
        self._config = config or UrlHandlerConfig()
        self._log = logger.bind(component="url_handler", handler=type(self).__name__)

    @property
    def config(self) -> UrlHandlerConfig:
        return self._config

    @property
    def request_method(self) -> RequestMethod:
        """Request method the handler uses to probe URLs."""
        return self._config.request_method

    def set_request_method(self, method: RequestMethod) -> None:
        """Change the request method used to probe URLs.

        Only this handler is affected.

        Args:
            method: New request method.
        """
        self._config = self._config.with_request_method(method)
        self._log.debug("request_method_changed", request_method=method.value)

    @abstractmethod
    def get_url_info(self, url: str, timeout: float | None = None) -> UrlInfo:
        """Look up reachability, length and modification time of a URL.

        Args:
            url: URL to inspect.
            timeout: Timeout in seconds, or None for the handler default.

        Returns:
            Information about the URL.
        """

    def is_reachable(self, url: str, timeout: float | None = None) -> bool:
        return self._info(url, timeout).reachable

    def get_content_length(self, url: str, timeout: float | None = None) -> int:
        return self._info(url, timeout).content_length

    def get_last_modified(self, url: str, timeout: float | None = None) -> int:
        return self._info(url, timeout).last_modified

    def normalize_to_string(self, url: str) -> str:
        return normalize_to_string(url)

    def normalize_to_url(self, url: str) -> httpx.URL:
        return normalize_to_url(url)

    def get_decoding_stream(self, encoding: str | None, stream: BinaryIO) -> BinaryIO:
        return get_decoding_stream(encoding, stream)

    def validate_put_status(
        self, destination: str | httpx.URL, connection: HttpConnection
    ) -> PutResult:
        """Raise if a PUT response reports a failure.

        Args:
            destination: URL the PUT was sent to.
            connection: The received response.

        Returns:
            The successful PutResult.

        Raises:
            AccessDeniedError: For 401 and 403 responses.
            UploadFailedError: For any other non-success status.
        """
        return validate_put_status(
            destination,
            connection,
            max_body_bytes=self._config.error_body_truncate_len,
        )

    def _info(self, url: str, timeout: float | None) -> UrlInfo:
        if timeout is None:
            timeout = self._config.default_timeout_seconds
        info = self.get_url_info(url, timeout)
        self._log.debug(
            "url_info",
            url=redact_url_credentials(url),
            reachable=info.reachable,
            content_length=info.content_length,
            last_modified=info.last_modified,
        )
        return info

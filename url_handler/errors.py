"""Domain exceptions for the URL handler.

Every exception raised on purpose by this package inherits from
``UrlHandlerError`` so callers can catch the whole family at once.
"""


class UrlHandlerError(Exception):
    """Base exception for all URL handler errors."""


class MalformedURLError(UrlHandlerError, ValueError):
    """Raised when a URL cannot be rebuilt into a syntactically valid URI.

    The underlying parse error is chained as ``__cause__``.
    """

    def __init__(self, url: str) -> None:
        """Initialize the error with the offending URL.

        Args:
            url: The URL that could not be converted.
        """
        self.url = url
        super().__init__(f"Couldn't convert '{url}' to a valid URI")


class PutStatusError(UrlHandlerError):
    """Raised when a PUT operation returned a non-success status code.

    Attributes:
        destination: URL the PUT was sent to.
        status_code: HTTP status code returned by the server.
    """

    def __init__(self, message: str, destination: str, status_code: int) -> None:
        """Initialize the PUT status error.

        Args:
            message: Full diagnostic message.
            destination: URL the PUT was sent to.
            status_code: HTTP status code returned by the server.
        """
        super().__init__(message)
        self.message = message
        self.destination = destination
        self.status_code = status_code


class AccessDeniedError(PutStatusError):
    """Raised when the server refused the PUT (401 or 403)."""


class UploadFailedError(PutStatusError):
    """Raised for any other non-success PUT status."""

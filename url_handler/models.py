"""Data models for the URL handler."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from url_handler.constants import UNKNOWN_CONTENT_LENGTH, UNKNOWN_LAST_MODIFIED
from url_handler.errors import AccessDeniedError, UploadFailedError


class RequestMethod(str, Enum):
    """HTTP method the URL-info collaborator uses to probe a URL."""

    HEAD = "HEAD"
    GET = "GET"


class DeflateVariant(str, Enum):
    """Binary layout of a body declared as ``Content-Encoding: deflate``.

    - ZLIB: RFC 1950 zlib-wrapped deflate (header and checksum trailer)
    - RAW: bare deflate data without any wrapper
    """

    ZLIB = "zlib"
    RAW = "raw"


class PutErrorClass(str, Enum):
    """Classification of failed PUT operations.

    - ACCESS_DENIED: server refused the request (401, 403)
    - UPLOAD_FAILED: any other non-success status
    """

    ACCESS_DENIED = "ACCESS_DENIED"
    UPLOAD_FAILED = "UPLOAD_FAILED"


class PutError(BaseModel):
    """Typed error from a PUT status classification."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: PutErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Diagnostic message")]
    status_code: int = Field(description="HTTP status code returned by the server")


class PutResult(BaseModel):
    """Result of classifying the status of a PUT response."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    destination: Annotated[str, Field(min_length=1, description="Target URL")]
    status_code: int = Field(description="HTTP status code")
    error: PutError | None = Field(
        default=None, description="Error details if the PUT failed"
    )

    @property
    def is_success(self) -> bool:
        """Check if the PUT was accepted by the server."""
        return self.error is None

    def raise_for_status(self) -> None:
        """Raise the exception matching the error class, if any.

        Raises:
            AccessDeniedError: For 401 and 403 responses.
            UploadFailedError: For any other failed status.
        """
        if self.error is None:
            return

        if self.error.error_class == PutErrorClass.ACCESS_DENIED:
            raise AccessDeniedError(
                self.error.message, self.destination, self.status_code
            )
        raise UploadFailedError(self.error.message, self.destination, self.status_code)


class UrlInfo(BaseModel):
    """What the URL-info collaborator knows about a URL.

    ``content_length`` is -1 and ``last_modified`` is 0 when unknown.
    ``last_modified`` is expressed in milliseconds since the epoch.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    reachable: bool = False
    content_length: Annotated[int, Field(ge=UNKNOWN_CONTENT_LENGTH)] = (
        UNKNOWN_CONTENT_LENGTH
    )
    last_modified: Annotated[int, Field(ge=0)] = UNKNOWN_LAST_MODIFIED

    @classmethod
    def unavailable(cls) -> "UrlInfo":
        """Return the info describing an unreachable URL."""
        return cls()

"""Configuration models for the URL handler."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from url_handler.constants import ERROR_BODY_TRUNCATE_LEN, MAX_ERROR_BODY_TRUNCATE_LEN
from url_handler.models import RequestMethod


class UrlHandlerConfig(BaseModel):
    """Configuration for a URL handler instance.

    Holds the preferred request method handed to the URL-info collaborator
    and the limits applied while building PUT diagnostics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_method: RequestMethod = Field(
        default=RequestMethod.HEAD,
        description="Method used by the URL-info collaborator to probe URLs",
    )
    error_body_truncate_len: Annotated[
        int, Field(ge=0, le=MAX_ERROR_BODY_TRUNCATE_LEN)
    ] = ERROR_BODY_TRUNCATE_LEN
    default_timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] | None = Field(
        default=None,
        description="Timeout passed to the collaborator when none is given",
    )

    def with_request_method(self, method: RequestMethod) -> "UrlHandlerConfig":
        """Return a copy of this config using another request method.

        Args:
            method: The new preferred request method.

        Returns:
            Updated configuration.
        """
        return self.model_copy(update={"request_method": method})

"""Handler settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from url_handler.config import UrlHandlerConfig
from url_handler.constants import ERROR_BODY_TRUNCATE_LEN
from url_handler.models import RequestMethod


class UrlHandlerSettings(BaseSettings):
    """Environment configuration for URL handlers."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    request_method: RequestMethod = Field(
        default=RequestMethod.HEAD, validation_alias="URL_HANDLER_REQUEST_METHOD"
    )
    error_body_truncate_len: int = Field(
        default=ERROR_BODY_TRUNCATE_LEN,
        validation_alias="URL_HANDLER_ERROR_BODY_TRUNCATE_LEN",
    )
    timeout_seconds: float | None = Field(
        default=None, validation_alias="URL_HANDLER_TIMEOUT_SECONDS"
    )

    def to_config(self) -> UrlHandlerConfig:
        """Build a validated handler config from these settings."""
        return UrlHandlerConfig(
            request_method=self.request_method,
            error_body_truncate_len=self.error_body_truncate_len,
            default_timeout_seconds=self.timeout_seconds,
        )


def get_settings() -> UrlHandlerSettings:
    """Get a settings instance."""
    return UrlHandlerSettings()

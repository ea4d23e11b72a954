"""Unit tests for handler configuration and settings."""

import pytest
from pydantic import ValidationError

from url_handler.config import UrlHandlerConfig
from url_handler.constants import ERROR_BODY_TRUNCATE_LEN
from url_handler.models import RequestMethod
from url_handler.settings import UrlHandlerSettings, get_settings


class TestUrlHandlerConfig:
    """Tests for UrlHandlerConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = UrlHandlerConfig()

        assert config.request_method == RequestMethod.HEAD
        assert config.error_body_truncate_len == ERROR_BODY_TRUNCATE_LEN == 512
        assert config.default_timeout_seconds is None

    def test_rejects_unknown_fields(self) -> None:
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            UrlHandlerConfig(retries=3)  # type: ignore[call-arg]

    def test_rejects_negative_body_limit(self) -> None:
        """Test the body limit must not be negative."""
        with pytest.raises(ValidationError):
            UrlHandlerConfig(error_body_truncate_len=-1)

    def test_rejects_zero_timeout(self) -> None:
        """Test timeouts must be positive."""
        with pytest.raises(ValidationError):
            UrlHandlerConfig(default_timeout_seconds=0)

    def test_frozen(self) -> None:
        """Test the config cannot be mutated."""
        config = UrlHandlerConfig()

        with pytest.raises(ValidationError):
            config.request_method = RequestMethod.GET  # type: ignore[misc]

    def test_with_request_method(self) -> None:
        """Test a copy with another method is returned."""
        config = UrlHandlerConfig(error_body_truncate_len=64)

        updated = config.with_request_method(RequestMethod.GET)

        assert updated.request_method == RequestMethod.GET
        assert updated.error_body_truncate_len == 64
        assert config.request_method == RequestMethod.HEAD


class TestUrlHandlerSettings:
    """Tests for environment-driven settings."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from URL_HANDLER_* variables."""
        monkeypatch.setenv("URL_HANDLER_REQUEST_METHOD", "GET")
        monkeypatch.setenv("URL_HANDLER_ERROR_BODY_TRUNCATE_LEN", "128")
        monkeypatch.setenv("URL_HANDLER_TIMEOUT_SECONDS", "7.5")

        config = get_settings().to_config()

        assert config.request_method == RequestMethod.GET
        assert config.error_body_truncate_len == 128
        assert config.default_timeout_seconds == 7.5

    def test_defaults_without_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults apply when nothing is set."""
        monkeypatch.delenv("URL_HANDLER_REQUEST_METHOD", raising=False)
        monkeypatch.delenv("URL_HANDLER_ERROR_BODY_TRUNCATE_LEN", raising=False)
        monkeypatch.delenv("URL_HANDLER_TIMEOUT_SECONDS", raising=False)

        settings = UrlHandlerSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.to_config() == UrlHandlerConfig()

    def test_invalid_limit_rejected_by_config(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test out-of-range limits fail when building the config."""
        monkeypatch.setenv("URL_HANDLER_ERROR_BODY_TRUNCATE_LEN", "-5")

        with pytest.raises(ValidationError):
            get_settings().to_config()

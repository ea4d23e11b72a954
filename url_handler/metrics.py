"""Metrics collection for the URL handler."""

from dataclasses import dataclass, field
from typing import ClassVar

from url_handler.models import PutErrorClass


PUT_OUTCOME_SUCCESS = "SUCCESS"


@dataclass
class HandlerMetrics:
    """Metrics for URL handler operations.

    Singleton class that tracks PUT outcomes, decoder selections, and
    error body reads.
    """

    put_outcomes_total: dict[str, int] = field(default_factory=dict)
    decoder_selections_total: dict[str, int] = field(default_factory=dict)
    error_bodies_read_total: int = 0
    error_bodies_truncated_total: int = 0
    error_body_failures_total: int = 0

    _instance: ClassVar["HandlerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "HandlerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_put_outcome(self, error_class: PutErrorClass | None) -> None:
        """Record a classified PUT response.

        Args:
            error_class: Classification of the failure, None on success.
        """
        key = error_class.value if error_class else PUT_OUTCOME_SUCCESS
        self.put_outcomes_total[key] = self.put_outcomes_total.get(key, 0) + 1

    def record_decoder(self, kind: str) -> None:
        """Record which body decoder was selected.

        Args:
            kind: One of gzip, zlib, raw, identity.
        """
        self.decoder_selections_total[kind] = (
            self.decoder_selections_total.get(kind, 0) + 1
        )

    def record_error_body(self, truncated: bool) -> None:
        """Record an error body read for diagnostics.

        Args:
            truncated: Whether bytes past the cap were dropped.
        """
        self.error_bodies_read_total += 1
        if truncated:
            self.error_bodies_truncated_total += 1

    def record_error_body_failure(self) -> None:
        """Record an error body that could not be read."""
        self.error_body_failures_total += 1

    def to_dict(self) -> dict[str, int | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "put_outcomes_total": dict(self.put_outcomes_total),
            "decoder_selections_total": dict(self.decoder_selections_total),
            "error_bodies_read_total": self.error_bodies_read_total,
            "error_bodies_truncated_total": self.error_bodies_truncated_total,
            "error_body_failures_total": self.error_body_failures_total,
        }

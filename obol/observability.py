"""Emit structured observability events for the capture pipeline.

The agent reports on its own health through femtologging only. Every event
carries a ``CaptureEventType`` tag so log aggregators can count dropped or
degraded events without parsing free text.

Usage
-----
>>> event_logger = CaptureEventLogger()
>>> event_logger.log_dropped(fingerprint="ab12", reason="saturated")

"""

from __future__ import annotations

import enum

from obol.logging import get_logger, log_debug, log_error, log_info, log_warning

logger = get_logger(__name__)


class CaptureEventType(enum.StrEnum):
    """Structured log event types for the capture pipeline."""

    INSTALLED = "capture.installed"
    CAPTURE_FAILED = "capture.failed"
    CONTEXT_DEGRADED = "context.degraded"
    DISPATCHED = "delivery.dispatched"
    DROPPED = "delivery.dropped"
    DELIVERY_FAILED = "delivery.failed"


class CaptureEventLogger:
    """Emit structured capture events via femtologging."""

    def log_installed(self, *, host: str) -> None:
        """Log that the three capture handlers were registered."""
        log_info(logger, "[%s] host=%s", CaptureEventType.INSTALLED, host)

    def log_capture_failed(self, *, source: str, error: BaseException) -> None:
        """Log an unexpected failure inside a capture hook.

        Parameters
        ----------
        source
            Hook that failed (``runtime_error``, ``exception``, ``shutdown``).
        error
            The swallowed exception.

        """
        log_error(
            logger,
            "[%s] source=%s error_type=%s error_message=%s",
            CaptureEventType.CAPTURE_FAILED,
            source,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_context_degraded(self, *, field: str, error: BaseException) -> None:
        """Log that one piece of context fell back to its default."""
        log_warning(
            logger,
            "[%s] field=%s error_type=%s error_message=%s",
            CaptureEventType.CONTEXT_DEGRADED,
            field,
            type(error).__name__,
            str(error),
        )

    def log_dispatched(self, *, fingerprint: str | None, endpoint: str) -> None:
        """Log that an event was handed to the dispatcher."""
        log_debug(
            logger,
            "[%s] fingerprint=%s endpoint=%s",
            CaptureEventType.DISPATCHED,
            fingerprint,
            endpoint,
        )

    def log_dropped(self, *, fingerprint: str | None, reason: str) -> None:
        """Log that an event was discarded before it reached the network."""
        log_warning(
            logger,
            "[%s] fingerprint=%s reason=%s",
            CaptureEventType.DROPPED,
            fingerprint,
            reason,
        )

    def log_delivery_failed(self, *, endpoint: str, error: BaseException) -> None:
        """Log a transport failure. The event is not retried."""
        log_debug(
            logger,
            "[%s] endpoint=%s error_type=%s error_message=%s",
            CaptureEventType.DELIVERY_FAILED,
            endpoint,
            type(error).__name__,
            str(error),
        )

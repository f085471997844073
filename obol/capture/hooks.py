"""Capture hooks: the three entry points the host invokes on failure.

Each hook builds an event and drives it through fingerprint, enrichment,
and delivery within the same call. Hooks never raise: any unexpected error
is logged and the event is dropped. The runtime-error hook always returns
``False`` so the host's default error handling carries on.

Usage
-----
>>> hooks = CaptureHooks(config, is_enabled=host.is_enabled,
...                      last_error=host.last_error,
...                      enricher=enricher, delivery=delivery)
>>> hooks.install(host)
True

"""

from __future__ import annotations

import time
import typing as typ

from obol.capture import builder
from obol.capture.fingerprint import with_fingerprint
from obol.observability import CaptureEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from obol.capture.builder import LastError
    from obol.capture.models import ErrorEvent
    from obol.config import CaptureConfig
    from obol.context.enricher import ContextEnricher
    from obol.delivery.client import DeliveryClient

RuntimeErrorHandler: typ.TypeAlias = "cabc.Callable[[int, str, str, int], bool]"
ExceptionHandler: typ.TypeAlias = "cabc.Callable[[BaseException], None]"
ShutdownHandler: typ.TypeAlias = "cabc.Callable[[], None]"


class Host(typ.Protocol):
    """Host runtime collaborator that invokes the capture hooks."""

    def set_error_handler(self, handler: RuntimeErrorHandler) -> None:
        """Register the runtime-error hook."""
        ...

    def set_exception_handler(self, handler: ExceptionHandler) -> None:
        """Register the uncaught-exception hook."""
        ...

    def register_shutdown_function(self, handler: ShutdownHandler) -> None:
        """Register the process-termination hook."""
        ...

    def is_enabled(self, raw_code: int) -> bool:
        """Return whether ``raw_code`` is currently reported by the host."""
        ...

    def last_error(self) -> LastError | None:
        """Return the last error the host recorded, if any."""
        ...


class EventSink(typ.Protocol):
    """Anything that accepts finished events, such as ``DeliveryClient``."""

    def deliver(self, event: ErrorEvent) -> None:
        """Ship ``event`` without blocking."""
        ...


class CaptureHooks:
    """Bind the capture pipeline to a host's failure signals.

    Parameters
    ----------
    config
        Capture configuration (fingerprint and shutdown policies).
    is_enabled
        Ambient severity predicate consulted before any other work.
    last_error
        Accessor for the host's last recorded error, read at shutdown.
    enricher
        Enricher attaching environment context.
    delivery
        Sink receiving fingerprinted, enriched events.
    clock
        Source of capture timestamps.

    """

    def __init__(  # noqa: PLR0913
        self,
        config: CaptureConfig,
        *,
        is_enabled: cabc.Callable[[int], bool],
        last_error: cabc.Callable[[], LastError | None],
        enricher: ContextEnricher,
        delivery: DeliveryClient | EventSink,
        event_logger: CaptureEventLogger | None = None,
        clock: cabc.Callable[[], float] = time.time,
    ) -> None:
        """Store the collaborators the hooks drive events through."""
        self._config = config
        self._is_enabled = is_enabled
        self._last_error = last_error
        self._enricher = enricher
        self._delivery = delivery
        self._event_logger = event_logger or CaptureEventLogger()
        self._clock = clock
        self._hosts: list[Host] = []

    def _process(self, event: ErrorEvent) -> None:
        tagged = with_fingerprint(
            event, include_category=self._config.fingerprint_category
        )
        self._delivery.deliver(self._enricher.enrich(tagged))

    def handle_runtime_error(
        self, raw_code: int, message: str, file: str, line: int
    ) -> bool:
        """Capture a runtime error signal.

        Returns
        -------
        bool
            Always ``False``: the host's own handling must continue.

        """
        try:
            event = builder.from_runtime_error(
                raw_code,
                message,
                file,
                line,
                is_enabled=self._is_enabled,
                clock=self._clock,
            )
            if event is not None:
                self._process(event)
        except Exception as exc:  # noqa: BLE001 - hooks never raise into the host
            self._event_logger.log_capture_failed(source="runtime_error", error=exc)
        return False

    def handle_exception(self, exc: BaseException) -> None:
        """Capture an uncaught exception. There is no severity gate."""
        try:
            self._process(builder.from_exception(exc, clock=self._clock))
        except Exception as error:  # noqa: BLE001 - hooks never raise into the host
            self._event_logger.log_capture_failed(source="exception", error=error)

    def handle_shutdown(self) -> None:
        """Capture the host's last recorded error at process termination."""
        try:
            event = builder.from_shutdown(
                self._last_error(),
                policy=self._config.shutdown_policy,
                clock=self._clock,
            )
            if event is not None:
                self._process(event)
        except Exception as exc:  # noqa: BLE001 - hooks never raise into the host
            self._event_logger.log_capture_failed(source="shutdown", error=exc)

    def install(self, host: Host) -> bool:
        """Register the three hooks with ``host``.

        Idempotent: installing on the same host twice registers nothing the
        second time.

        Returns
        -------
        bool
            ``True`` when the hooks were newly registered.

        """
        if any(installed is host for installed in self._hosts):
            return False
        host.set_error_handler(self.handle_runtime_error)
        host.set_exception_handler(self.handle_exception)
        host.register_shutdown_function(self.handle_shutdown)
        self._hosts.append(host)
        self._event_logger.log_installed(host=type(host).__name__)
        return True

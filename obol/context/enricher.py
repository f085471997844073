"""Attach environment context to fingerprinted events."""

from __future__ import annotations

import typing as typ

import msgspec

from obol.capture.models import ErrorEvent, EventContext, ThemeDescriptor
from obol.observability import CaptureEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from obol.context.provider import ContextProvider

_T = typ.TypeVar("_T")


class ContextEnricher:
    """Attach context from a provider, tolerating partial provider failure.

    Each piece of context is fetched independently. A piece that raises, or
    returns a value of the wrong shape, falls back to its empty default and
    the rest of the context is still attached.
    """

    def __init__(
        self,
        provider: ContextProvider,
        *,
        event_logger: CaptureEventLogger | None = None,
    ) -> None:
        """Store the provider and the logger used for degraded fields."""
        self._provider = provider
        self._event_logger = event_logger or CaptureEventLogger()

    def _fetch(
        self,
        field: str,
        getter: cabc.Callable[[], object],
        expected: type[_T],
        default: cabc.Callable[[], _T],
    ) -> _T:
        try:
            value = getter()
            if not isinstance(value, expected):
                msg = f"expected {expected.__name__}, got {type(value).__name__}"
                raise TypeError(msg)  # noqa: TRY301 - shape errors degrade like failures
        except Exception as exc:  # noqa: BLE001 - provider failures never propagate
            self._event_logger.log_context_degraded(field=field, error=exc)
            return default()
        return value

    def build_context(self) -> EventContext:
        """Query the provider and assemble an ``EventContext``."""
        return EventContext(
            site=self._fetch("site", self._provider.site_url, str, str),
            runtime_version=self._fetch(
                "runtime_version", self._provider.runtime_version, str, str
            ),
            framework_version=self._fetch(
                "framework_version", self._provider.framework_version, str, str
            ),
            theme=self._fetch(
                "theme", self._provider.theme, ThemeDescriptor, ThemeDescriptor
            ),
            components=self._fetch(
                "components", lambda: dict(self._provider.components()), dict, dict
            ),
        )

    def enrich(self, event: ErrorEvent) -> ErrorEvent:
        """Return a copy of ``event`` carrying environment context.

        Never raises. The fingerprint is carried over unchanged.
        """
        return msgspec.structs.replace(event, context=self.build_context())

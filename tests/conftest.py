"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest

from obol.capture.hooks import CaptureHooks
from obol.config import CaptureConfig
from obol.context.enricher import ContextEnricher
from tests.helpers.pipeline import (
    RecordingEventLogger,
    RecordingSink,
    StaticContextProvider,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from obol.capture.builder import LastError
    from obol.capture.hooks import EventSink
    from obol.context.provider import ContextProvider

FIXED_TIMESTAMP = 1_700_000_000


@pytest.fixture(autouse=True)
def _clear_obol_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep OBOL_* variables from the developer's shell out of tests."""
    for name in (
        "OBOL_ENDPOINT",
        "OBOL_TIMEOUT_S",
        "OBOL_MAX_IN_FLIGHT",
        "OBOL_SHUTDOWN_POLICY",
        "OBOL_FINGERPRINT_CATEGORY",
        "OBOL_SITE_URL",
        "OBOL_FRAMEWORK_DISTRIBUTION",
        "OBOL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Return a sink collecting delivered events."""
    return RecordingSink()


@pytest.fixture
def event_logger() -> RecordingEventLogger:
    """Return an event logger remembering pipeline failures."""
    return RecordingEventLogger()


class MakeHooksFn(typ.Protocol):
    """Callable fixture building ``CaptureHooks`` with test collaborators."""

    def __call__(
        self,
        *,
        config: CaptureConfig | None = None,
        is_enabled: cabc.Callable[[int], bool] | None = None,
        last_error: cabc.Callable[[], LastError | None] | None = None,
        provider: ContextProvider | None = None,
        sink: EventSink | None = None,
    ) -> CaptureHooks: ...


@pytest.fixture
def make_hooks(
    recording_sink: RecordingSink, event_logger: RecordingEventLogger
) -> MakeHooksFn:
    """Return a factory for hooks wired to a recording sink."""

    def _make(
        *,
        config: CaptureConfig | None = None,
        is_enabled: cabc.Callable[[int], bool] | None = None,
        last_error: cabc.Callable[[], LastError | None] | None = None,
        provider: ContextProvider | None = None,
        sink: EventSink | None = None,
    ) -> CaptureHooks:
        return CaptureHooks(
            config or CaptureConfig(),
            is_enabled=is_enabled or (lambda _code: True),
            last_error=last_error or (lambda: None),
            enricher=ContextEnricher(
                provider or StaticContextProvider(), event_logger=event_logger
            ),
            delivery=sink or recording_sink,
            event_logger=event_logger,
            clock=lambda: FIXED_TIMESTAMP,
        )

    return _make

"""Unit tests for the Obol boot entrypoint."""

from __future__ import annotations

import importlib.metadata
import sys
import typing as typ
import warnings

import httpx
import pytest

from obol import runtime
from obol.capture.classify import ErrorCode
from obol.config import CaptureConfig
from obol.errors import ObolConfigError
from obol.host import PythonHost
from tests.helpers.pipeline import SITE_URL, RecordingTransport, StaticContextProvider

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch: pytest.MonkeyPatch) -> cabc.Iterator[None]:
    """Stub logging configuration and tear down any installation."""
    monkeypatch.setattr(
        runtime, "configure_logging", lambda level: (level.upper(), False)
    )
    yield
    runtime.shutdown()


def test_boot_installs_hooks_once() -> None:
    """A second boot returns the first installation's hooks."""
    host = PythonHost()
    previous_excepthook = sys.excepthook

    with warnings.catch_warnings():
        first = runtime.boot(CaptureConfig(), host=host)
        second = runtime.boot(CaptureConfig(), host=PythonHost())
        runtime.shutdown()

    assert first is second
    assert host.error_reporting == ErrorCode.ALL
    assert sys.excepthook is previous_excepthook


def test_boot_delivers_captured_warnings() -> None:
    """A warning raised after boot reaches the endpoint enriched."""
    transport = RecordingTransport()

    with warnings.catch_warnings():
        warnings.simplefilter("always")
        runtime.boot(
            CaptureConfig(endpoint="http://collector.test/api/errors"),
            host=PythonHost(),
            provider=StaticContextProvider(),
            http_client=httpx.Client(transport=transport),
        )
        warnings.warn_explicit(
            "division by zero", RuntimeWarning, "a.php", 10, registry={}
        )
        transport.wait_for_count(1)
        runtime.shutdown()

    [payload] = transport.payloads
    assert payload["category"] == "runtime_warning"
    assert payload["source_location"] == {"file": "a.php", "line": 10}
    assert payload["context"]["site"] == SITE_URL


def test_boot_rejects_invalid_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configuration errors surface before anything is installed."""
    monkeypatch.setenv("OBOL_TIMEOUT_S", "never")
    previous_excepthook = sys.excepthook

    with pytest.raises(ObolConfigError):
        runtime.boot()

    assert sys.excepthook is previous_excepthook


def test_shutdown_without_boot_is_noop() -> None:
    """Shutting down an agent that never booted does nothing."""
    runtime.shutdown()


def test_boot_scans_component_inventory_up_front(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The default provider reads distribution metadata during boot."""
    scans: list[int] = []

    def distributions() -> list[object]:
        scans.append(1)
        return []

    monkeypatch.setattr(importlib.metadata, "distributions", distributions)

    with warnings.catch_warnings():
        runtime.boot(CaptureConfig(), host=PythonHost())
        assert scans == [1]
        runtime.shutdown()


def test_recorded_errors_reach_the_shutdown_hook() -> None:
    """Applications can feed fatal conditions to the host boot() built."""
    transport = RecordingTransport()

    with warnings.catch_warnings():
        hooks = runtime.boot(
            CaptureConfig(endpoint="http://collector.test/api/errors"),
            provider=StaticContextProvider(),
            http_client=httpx.Client(transport=transport),
        )
        recorded = runtime.record_error(
            ErrorCode.CORE_ERROR, "fd limit reached", "server.py", 12
        )
        hooks.handle_shutdown()
        transport.wait_for_count(1)
        runtime.shutdown()

    assert recorded is True
    [payload] = transport.payloads
    assert payload["category"] == "shutdown_fatal"
    assert payload["message"] == "fd limit reached"
    assert payload["source_location"] == {"file": "server.py", "line": 12}


def test_record_error_without_boot_is_refused() -> None:
    """Nothing is recorded when no agent is installed."""
    assert runtime.record_error(ErrorCode.ERROR, "boom", "a.py", 1) is False

"""Obol: in-process error capture with fire-and-forget delivery.

* **Capture** - hooks for runtime errors, uncaught exceptions, and process
  termination, normalized into ``ErrorEvent`` records.
* **Context** - environment metadata attached to every event.
* **Delivery** - one non-blocking JSON POST per event, never retried.
"""

from __future__ import annotations

from .capture import (
    CaptureHooks,
    ErrorCategory,
    ErrorCode,
    ErrorEvent,
    LastError,
    classify,
    fingerprint,
)
from .config import CaptureConfig, ShutdownPolicy
from .context import ContextEnricher, ContextProvider, EnvironmentContextProvider
from .delivery import DeliveryClient
from .errors import ObolConfigError, ObolError
from .host import PythonHost
from .runtime import boot, record_error, shutdown

__all__ = [
    "CaptureConfig",
    "CaptureHooks",
    "ContextEnricher",
    "ContextProvider",
    "DeliveryClient",
    "EnvironmentContextProvider",
    "ErrorCategory",
    "ErrorCode",
    "ErrorEvent",
    "LastError",
    "ObolConfigError",
    "ObolError",
    "PythonHost",
    "ShutdownPolicy",
    "boot",
    "classify",
    "fingerprint",
    "record_error",
    "shutdown",
]

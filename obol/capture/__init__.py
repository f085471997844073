"""Capture primitives: classification, event building, fingerprinting, hooks."""

from __future__ import annotations

from .builder import LastError, from_exception, from_runtime_error, from_shutdown
from .classify import FATAL_CODES, ErrorCategory, ErrorCode, classify, is_fatal
from .fingerprint import fingerprint, with_fingerprint
from .hooks import CaptureHooks, EventSink, Host
from .models import ErrorEvent, EventContext, SourceLocation, ThemeDescriptor

__all__ = [
    "FATAL_CODES",
    "CaptureHooks",
    "ErrorCategory",
    "ErrorCode",
    "ErrorEvent",
    "EventContext",
    "EventSink",
    "Host",
    "LastError",
    "SourceLocation",
    "ThemeDescriptor",
    "classify",
    "fingerprint",
    "from_exception",
    "from_runtime_error",
    "from_shutdown",
    "is_fatal",
    "with_fingerprint",
]

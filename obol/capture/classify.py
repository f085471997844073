"""Host error codes and their mapping onto event categories."""

from __future__ import annotations

import enum


class ErrorCode(enum.IntFlag):
    """Bitmask of host error severities.

    ``USER_*`` codes are raised by application code rather than the runtime
    itself; they classify the same way as their built-in counterparts.
    """

    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767


class ErrorCategory(enum.StrEnum):
    """Semantic category carried by every delivered event."""

    RUNTIME_WARNING = "runtime_warning"
    RUNTIME_NOTICE = "runtime_notice"
    RUNTIME_DEPRECATED = "runtime_deprecated"
    RUNTIME_STRICT = "runtime_strict"
    RUNTIME_FATAL = "runtime_fatal"
    RUNTIME_GENERIC = "runtime_generic"
    EXCEPTION = "exception"
    SHUTDOWN_FATAL = "shutdown_fatal"


FATAL_CODES = (
    ErrorCode.ERROR | ErrorCode.PARSE | ErrorCode.CORE_ERROR | ErrorCode.COMPILE_ERROR
)

_CODE_CATEGORY_MAP: dict[int, ErrorCategory] = {
    ErrorCode.WARNING: ErrorCategory.RUNTIME_WARNING,
    ErrorCode.USER_WARNING: ErrorCategory.RUNTIME_WARNING,
    ErrorCode.NOTICE: ErrorCategory.RUNTIME_NOTICE,
    ErrorCode.USER_NOTICE: ErrorCategory.RUNTIME_NOTICE,
    ErrorCode.DEPRECATED: ErrorCategory.RUNTIME_DEPRECATED,
    ErrorCode.USER_DEPRECATED: ErrorCategory.RUNTIME_DEPRECATED,
    ErrorCode.STRICT: ErrorCategory.RUNTIME_STRICT,
    ErrorCode.ERROR: ErrorCategory.RUNTIME_FATAL,
    ErrorCode.USER_ERROR: ErrorCategory.RUNTIME_FATAL,
}


def classify(raw_code: int) -> ErrorCategory:
    """Map a raw host error code to its category.

    Total over all integers: codes without an explicit mapping, including
    combined masks and values outside the known range, fall back to
    ``runtime_generic``.

    Examples
    --------
    >>> classify(ErrorCode.USER_WARNING)
    <ErrorCategory.RUNTIME_WARNING: 'runtime_warning'>
    >>> classify(-7)
    <ErrorCategory.RUNTIME_GENERIC: 'runtime_generic'>

    """
    return _CODE_CATEGORY_MAP.get(int(raw_code), ErrorCategory.RUNTIME_GENERIC)


def is_fatal(raw_code: int | None) -> bool:
    """Return True when ``raw_code`` is a single fatal-class severity."""
    if raw_code is None or raw_code <= 0:
        return False
    code = int(raw_code)
    # Exactly one bit, and that bit within the fatal subset.
    return code & (code - 1) == 0 and bool(code & FATAL_CODES)

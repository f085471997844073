"""Build normalized events from the three capture sources.

Every builder is best effort: missing or malformed input is replaced with a
placeholder instead of raising, so capture itself can never become a new
failure inside the host.

Usage
-----
>>> event = from_runtime_error(2, "division by zero", "a.php", 10,
...                            is_enabled=lambda code: True)
>>> event.category
<ErrorCategory.RUNTIME_WARNING: 'runtime_warning'>

"""

from __future__ import annotations

import dataclasses as dc
import os
import time
import traceback
import typing as typ
from pathlib import Path

from obol.capture.classify import ErrorCategory, classify, is_fatal
from obol.capture.models import ErrorEvent, SourceLocation
from obol.config import ShutdownPolicy

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import types

MESSAGE_PLACEHOLDER = "<no message>"
FILE_PLACEHOLDER = "<unknown>"

_PACKAGE_ROOT = f"{Path(__file__).parent.parent}{os.sep}"


@dc.dataclass(frozen=True, slots=True)
class LastError:
    """The most recent error the host recorded before termination."""

    raw_code: int | None
    message: str
    file: str
    line: int


def _encodable(text: str) -> str:
    # Lone surrogates (e.g. from surrogateescape-decoded paths) become U+FFFD.
    return text.encode("utf-8", "surrogatepass").decode("utf-8", "replace")


def _text(value: object, placeholder: str) -> str:
    if value is None:
        return placeholder
    try:
        text = value if isinstance(value, str) else str(value)
    except Exception:  # noqa: BLE001 - broken __str__ on host objects
        return placeholder
    return _encodable(text) or placeholder


def _line(value: object) -> int:
    try:
        line = int(typ.cast("typ.SupportsInt", value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(line, 0)


def _location(file: object, line: object) -> SourceLocation:
    return SourceLocation(file=_text(file, FILE_PLACEHOLDER), line=_line(line))


def _frame_payload(frames: traceback.StackSummary) -> list[typ.Any]:
    # Frame locals and arguments are never captured.
    return [
        {
            "file": _encodable(frame.filename),
            "line": frame.lineno or 0,
            "function": _encodable(frame.name),
        }
        for frame in frames
    ]


def _current_stack() -> list[typ.Any]:
    frames = traceback.StackSummary.from_list(
        [
            frame
            for frame in traceback.extract_stack()
            if not frame.filename.startswith(_PACKAGE_ROOT)
        ]
    )
    return _frame_payload(frames)


def _exception_type_name(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def from_runtime_error(  # noqa: PLR0913
    raw_code: int,
    message: object,
    file: object,
    line: object,
    *,
    is_enabled: cabc.Callable[[int], bool],
    clock: cabc.Callable[[], float] = time.time,
) -> ErrorEvent | None:
    """Build an event from a runtime error signal.

    Parameters
    ----------
    raw_code
        Native host error code.
    message, file, line
        Error details as reported by the host.
    is_enabled
        Ambient predicate telling whether the severity is currently reported.
        Checked before any other work.
    clock
        Source of the capture timestamp.

    Returns
    -------
    ErrorEvent | None
        The event, or ``None`` when the severity is disabled.

    """
    if not is_enabled(raw_code):
        return None

    return ErrorEvent(
        category=classify(raw_code),
        raw_code=int(raw_code),
        message=_text(message, MESSAGE_PLACEHOLDER),
        source_location=_location(file, line),
        trace=_current_stack(),
        timestamp=int(clock()),
    )


def from_exception(
    exc: BaseException, *, clock: cabc.Callable[[], float] = time.time
) -> ErrorEvent:
    """Build an event from an uncaught throwable.

    The location is the innermost traceback frame. Exceptions are always
    reported; there is no severity gate.
    """
    tb: types.TracebackType | None = getattr(exc, "__traceback__", None)
    frames = traceback.extract_tb(tb) if tb is not None else traceback.StackSummary()
    if frames:
        origin = frames[-1]
        location = _location(origin.filename, origin.lineno)
    else:
        location = _location(None, 0)

    return ErrorEvent(
        category=ErrorCategory.EXCEPTION,
        message=_text(exc, _exception_type_name(exc)),
        source_location=location,
        trace=_frame_payload(frames),
        exception_type=_exception_type_name(exc),
        timestamp=int(clock()),
    )


def from_shutdown(
    last_error: LastError | None,
    *,
    policy: ShutdownPolicy,
    clock: cabc.Callable[[], float] = time.time,
) -> ErrorEvent | None:
    """Build an event from the last error recorded before termination.

    Returns ``None`` when there is nothing to report: no last error, or a
    non-fatal one under ``ShutdownPolicy.FATAL_ONLY``. No trace is available
    at this stage.
    """
    if last_error is None:
        return None
    if policy is ShutdownPolicy.FATAL_ONLY and not is_fatal(last_error.raw_code):
        return None

    return ErrorEvent(
        category=ErrorCategory.SHUTDOWN_FATAL,
        raw_code=last_error.raw_code,
        message=_text(last_error.message, MESSAGE_PLACEHOLDER),
        source_location=_location(last_error.file, last_error.line),
        timestamp=int(clock()),
    )

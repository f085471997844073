"""Python host adapter for the capture hooks.

``PythonHost`` maps the three capture sources onto interpreter facilities:

- runtime errors are warnings routed through ``warnings.showwarning``;
- uncaught throws arrive via ``sys.excepthook`` and ``threading.excepthook``;
- process termination is an ``atexit`` callback.

Every replaced hook chains to the one it replaced, so the interpreter's
default output is never suppressed.

Usage
-----
>>> host = PythonHost()
>>> host.activate()
>>> hooks.install(host)
True

"""

from __future__ import annotations

import atexit
import sys
import threading
import typing as typ
import warnings

from obol.capture.builder import LastError
from obol.capture.classify import ErrorCode

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import types

    from obol.capture.hooks import ExceptionHandler, RuntimeErrorHandler

# Checked in order; the first matching base class wins.
_WARNING_CODE_MAP: tuple[tuple[type[Warning], ErrorCode], ...] = (
    (DeprecationWarning, ErrorCode.DEPRECATED),
    (PendingDeprecationWarning, ErrorCode.DEPRECATED),
    (FutureWarning, ErrorCode.DEPRECATED),
    (SyntaxWarning, ErrorCode.COMPILE_WARNING),
    (ImportWarning, ErrorCode.CORE_WARNING),
    (ResourceWarning, ErrorCode.NOTICE),
    (BytesWarning, ErrorCode.NOTICE),
    (UnicodeWarning, ErrorCode.NOTICE),
    (EncodingWarning, ErrorCode.STRICT),
    (UserWarning, ErrorCode.USER_WARNING),
    (RuntimeWarning, ErrorCode.WARNING),
)

# Matches the usual production setting: deprecations and strict notices off.
DEFAULT_ERROR_REPORTING = ErrorCode.ALL & ~(
    ErrorCode.DEPRECATED | ErrorCode.USER_DEPRECATED | ErrorCode.STRICT
)


def code_for_warning(category: type[Warning]) -> ErrorCode:
    """Return the host error code for a warning class.

    Examples
    --------
    >>> code_for_warning(DeprecationWarning)
    <ErrorCode.DEPRECATED: 8192>
    >>> code_for_warning(Warning)
    <ErrorCode.WARNING: 2>

    """
    for base, code in _WARNING_CODE_MAP:
        if issubclass(category, base):
            return code
    return ErrorCode.WARNING


class PythonHost:
    """Host collaborator backed by the running interpreter.

    Parameters
    ----------
    error_reporting
        Bitmask of ``ErrorCode`` severities currently reported. Warnings
        whose code is masked out are still shown by the interpreter and still
        recorded as the last error; they are just not captured.

    """

    def __init__(self, *, error_reporting: int = DEFAULT_ERROR_REPORTING) -> None:
        """Initialise the reporting mask and last-error slot."""
        self.error_reporting = int(error_reporting)
        self._last_error: LastError | None = None
        self._restorers: list[cabc.Callable[[], None]] = []

    def activate(self) -> None:
        """Mark every error category as reportable."""
        self.error_reporting = int(ErrorCode.ALL)

    def is_enabled(self, raw_code: int) -> bool:
        """Return whether ``raw_code`` falls inside the reporting mask."""
        return bool(self.error_reporting & int(raw_code))

    def record_error(self, raw_code: int, message: str, file: str, line: int) -> None:
        """Record an error as the last one seen by the host.

        Applications call this for fatal conditions they detect themselves
        (for example from a signal handler) so the shutdown hook can report
        them.
        """
        self._last_error = LastError(
            raw_code=int(raw_code), message=message, file=file, line=line
        )

    def last_error(self) -> LastError | None:
        """Return the last recorded error, if any."""
        return self._last_error

    def set_error_handler(self, handler: RuntimeErrorHandler) -> None:
        """Route warnings through ``handler`` before the previous display hook."""
        previous = warnings.showwarning

        def showwarning(  # noqa: PLR0913
            message: Warning | str,
            category: type[Warning],
            filename: str,
            lineno: int,
            file: typ.TextIO | None = None,
            line: str | None = None,
        ) -> None:
            code = code_for_warning(category)
            text = str(message)
            self.record_error(code, text, filename, lineno)
            if not handler(code, text, filename, lineno):
                previous(message, category, filename, lineno, file, line)

        warnings.showwarning = showwarning
        self._restorers.append(lambda: setattr(warnings, "showwarning", previous))

    def set_exception_handler(self, handler: ExceptionHandler) -> None:
        """Report uncaught exceptions from the main and worker threads."""
        previous_excepthook = sys.excepthook
        previous_thread_excepthook = threading.excepthook

        def excepthook(
            exc_type: type[BaseException],
            exc_value: BaseException,
            exc_tb: types.TracebackType | None,
        ) -> None:
            if not issubclass(exc_type, KeyboardInterrupt):
                handler(exc_value)
            previous_excepthook(exc_type, exc_value, exc_tb)

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            if args.exc_value is not None and not issubclass(
                args.exc_type, SystemExit
            ):
                handler(args.exc_value)
            previous_thread_excepthook(args)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook
        self._restorers.append(lambda: setattr(sys, "excepthook", previous_excepthook))
        self._restorers.append(
            lambda: setattr(threading, "excepthook", previous_thread_excepthook)
        )

    def register_shutdown_function(self, handler: cabc.Callable[[], None]) -> None:
        """Run ``handler`` when the interpreter exits."""
        atexit.register(handler)
        self._restorers.append(lambda: atexit.unregister(handler))

    def restore(self) -> None:
        """Undo every registration made through this host, newest first."""
        while self._restorers:
            self._restorers.pop()()

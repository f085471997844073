"""femtologging helpers for the agent's own diagnostics.

The agent logs from inside the host's failure path, so these helpers must
never raise: a template that does not match its arguments is logged verbatim
with the arguments appended instead of propagating a formatting error. The
agent never logs through the host's ``warnings`` machinery, so its own
diagnostics cannot feed back into the capture hooks.

Example:
>>> from obol.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Installed %d hooks", 3)

"""

from __future__ import annotations

import typing as typ

from femtologging import basicConfig, get_logger

# The agent stays quiet unless asked otherwise.
DEFAULT_LOG_LEVEL = "WARNING"

_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Normalize a log level name and report invalid input.

    ``WARN`` and ``FATAL`` are accepted as aliases. Empty or unknown names
    fall back to ``DEFAULT_LOG_LEVEL``.

    Returns
    -------
    tuple[str, bool]
        The normalized level and whether the input was invalid.

    """
    normalized = (level or "").strip().upper()
    normalized = _LEVEL_ALIASES.get(normalized, normalized)
    if normalized in _LEVELS:
        return (normalized, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging for the agent and return the normalized level."""
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


class _SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _render(template: str, args: tuple[object, ...]) -> str:
    if not args:
        return template
    try:
        return template % args
    except (TypeError, ValueError, KeyError):
        return f"{template} {args!r}"


def _log_at_level(
    logger: _SupportsLog,
    level: str,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    logger.log(level, _render(template, args), exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a DEBUG message. Used for per-event delivery traces."""
    _log_at_level(logger, "DEBUG", template, *args, exc_info=exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting.

    Parameters
    ----------
    logger : _SupportsLog
        Logger that receives the formatted message.
    template : str
        Message template using percent-style placeholders. Without ``args``
        it is logged as is, so literal ``%`` signs are safe.
    *args : object
        Values to interpolate into the template.
    exc_info : object | None, optional
        Exception information to attach to the log record.

    """
    _log_at_level(logger, "INFO", template, *args, exc_info=exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message, the agent's default level."""
    _log_at_level(logger, "WARNING", template, *args, exc_info=exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message for failures inside the capture hooks."""
    _log_at_level(logger, "ERROR", template, *args, exc_info=exc_info)


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "configure_logging",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "normalize_log_level",
]

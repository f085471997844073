"""Obol boot entrypoint.

``boot()`` wires the capture pipeline and installs it on the running
interpreter. Call it once, as early as possible in the host's start-up:

>>> import obol
>>> hooks = obol.boot()

Configuration is driven by environment variables (see
:meth:`obol.config.CaptureConfig.from_env`), plus:

- ``OBOL_LOG_LEVEL``: Log level for the agent's own diagnostics (default
  ``WARNING``)

Fatal conditions the application detects itself are reported at shutdown
after a call to :func:`record_error`:

>>> obol.record_error(obol.ErrorCode.CORE_ERROR, "fd limit reached", __file__, 0)
True

Invalid configuration raises ``ObolConfigError`` from ``boot()`` before any
handler is installed.
"""

from __future__ import annotations

import os
import threading
import typing as typ

from obol.capture.hooks import CaptureHooks
from obol.config import CaptureConfig
from obol.context.enricher import ContextEnricher
from obol.context.provider import ContextProvider, EnvironmentContextProvider
from obol.delivery.client import DeliveryClient
from obol.host import PythonHost
from obol.logging import (
    DEFAULT_LOG_LEVEL,
    configure_logging,
    get_logger,
    log_warning,
)

if typ.TYPE_CHECKING:
    import httpx

__all__ = ["boot", "record_error", "shutdown"]

logger = get_logger(__name__)

_lock = threading.Lock()


class _Installation(typ.NamedTuple):
    hooks: CaptureHooks
    host: PythonHost
    delivery: DeliveryClient


_installation: _Installation | None = None


def _configure_agent_logging() -> None:
    raw_level = os.environ.get("OBOL_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    normalized_level, invalid_level = configure_logging(raw_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid OBOL_LOG_LEVEL %r, falling back to %s",
            raw_level,
            normalized_level,
        )


def boot(
    config: CaptureConfig | None = None,
    *,
    host: PythonHost | None = None,
    provider: ContextProvider | None = None,
    http_client: httpx.Client | None = None,
) -> CaptureHooks:
    """Build the capture pipeline and install it on the interpreter.

    Idempotent: later calls return the hooks installed by the first one and
    ignore their arguments.

    Parameters
    ----------
    config
        Capture configuration; read from the environment when omitted.
    host
        Host adapter; a fresh ``PythonHost`` when omitted.
    provider
        Context provider; an ``EnvironmentContextProvider`` built from the
        configuration when omitted.
    http_client
        Optional ``httpx.Client`` used for delivery.

    Returns
    -------
    CaptureHooks
        The installed hooks.

    Raises
    ------
    ObolConfigError
        If ``config`` is omitted and the environment holds invalid values.

    """
    global _installation  # noqa: PLW0603 - one installation per process

    with _lock:
        if _installation is not None:
            return _installation.hooks

        _configure_agent_logging()
        config = config or CaptureConfig.from_env()
        host = host or PythonHost()
        if provider is None:
            environment = EnvironmentContextProvider(
                site_url=config.site_url,
                framework_distribution=config.framework_distribution,
            )
            # Scan the component inventory now, not on the first failure.
            environment.components()
            provider = environment
        delivery = DeliveryClient(config, http_client=http_client)
        hooks = CaptureHooks(
            config,
            is_enabled=host.is_enabled,
            last_error=host.last_error,
            enricher=ContextEnricher(provider),
            delivery=delivery,
        )
        host.activate()
        hooks.install(host)
        _installation = _Installation(hooks=hooks, host=host, delivery=delivery)
        return hooks


def shutdown() -> None:
    """Uninstall the hooks and release delivery resources.

    Pending sends are not awaited. A later ``boot()`` installs afresh.
    """
    global _installation  # noqa: PLW0603 - one installation per process

    with _lock:
        if _installation is None:
            return
        _installation.host.restore()
        _installation.delivery.close()
        _installation = None


def record_error(raw_code: int, message: str, file: str, line: int) -> bool:
    """Record a fatal condition on the installed host for the shutdown hook.

    The host built by ``boot()`` is otherwise private, so this is how an
    application reports a failure it detected itself (a signal handler, a
    supervisor check) before the process exits.

    Returns
    -------
    bool
        ``False`` when nothing is installed and the error was not recorded.

    """
    with _lock:
        if _installation is None:
            return False
        _installation.host.record_error(raw_code, message, file, line)
        return True

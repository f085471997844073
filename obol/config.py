"""Configuration for the capture agent.

This module provides the CaptureConfig dataclass, built once at boot and
injected into every component. Nothing reads the environment after boot.

Usage
-----
Create a configuration with defaults:

>>> config = CaptureConfig()
>>> config.timeout_s
0.1

Or load from environment variables:

>>> import os
>>> os.environ["OBOL_SHUTDOWN_POLICY"] = "any"
>>> CaptureConfig.from_env().shutdown_policy
<ShutdownPolicy.ANY: 'any'>

"""

from __future__ import annotations

import dataclasses as dc
import enum
import os
from urllib.parse import urlsplit

from obol.errors import ObolConfigError

# Default configuration values - single source of truth
_DEFAULT_ENDPOINT = "http://127.0.0.1:3000/api/errors"
_DEFAULT_TIMEOUT_S = 0.1
_DEFAULT_MAX_IN_FLIGHT = 4
_DEFAULT_USER_AGENT = "obol/0.1"

_TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})
_FALSE_FLAGS = frozenset({"0", "false", "no", "off"})


class ShutdownPolicy(enum.StrEnum):
    """Which last-recorded errors the shutdown hook reports."""

    ANY = "any"
    FATAL_ONLY = "fatal_only"


@dc.dataclass(frozen=True, slots=True)
class CaptureConfig:
    """Process-wide configuration for capture and delivery.

    Attributes
    ----------
    endpoint
        Collection endpoint receiving one JSON POST per event.
    timeout_s
        Connect/write/read timeout applied by the HTTP client. Caps the worst
        case delay of a send, including inline sends during shutdown.
    max_in_flight
        Maximum number of pending sends. Events beyond this are dropped.
    shutdown_policy
        ``fatal_only`` reports a last-recorded error at shutdown only when its
        code is fatal-class; ``any`` reports every last-recorded error.
    fingerprint_category
        Whether the event category is part of the fingerprint key.
    site_url
        Site identity attached to every event's context.
    framework_distribution
        Distribution name whose installed version is reported as the host
        framework version.
    user_agent
        ``User-Agent`` header sent with deliveries.

    """

    endpoint: str = _DEFAULT_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S
    max_in_flight: int = _DEFAULT_MAX_IN_FLIGHT
    shutdown_policy: ShutdownPolicy = ShutdownPolicy.FATAL_ONLY
    fingerprint_category: bool = True
    site_url: str = ""
    framework_distribution: str | None = None
    user_agent: str = _DEFAULT_USER_AGENT

    @staticmethod
    def _parse_endpoint() -> str:
        raw = os.environ.get("OBOL_ENDPOINT", "").strip()
        if not raw:
            return _DEFAULT_ENDPOINT
        parts = urlsplit(raw)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ObolConfigError.invalid_endpoint(raw)
        return raw

    @staticmethod
    def _parse_timeout() -> float:
        raw = os.environ.get("OBOL_TIMEOUT_S", "")
        if not raw.strip():
            return _DEFAULT_TIMEOUT_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise ObolConfigError.invalid_timeout(raw) from exc
        if not value > 0:
            raise ObolConfigError.invalid_timeout(raw)
        return value

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise ObolConfigError.invalid_positive_int(env_var, raw) from exc
        if value < 1:
            raise ObolConfigError.invalid_positive_int(env_var, raw)
        return value

    @staticmethod
    def _parse_flag(env_var: str, *, default: bool) -> bool:
        raw = os.environ.get(env_var, "")
        normalised = raw.strip().lower()
        if not normalised:
            return default
        if normalised in _TRUE_FLAGS:
            return True
        if normalised in _FALSE_FLAGS:
            return False
        raise ObolConfigError.invalid_flag(env_var, raw)

    @staticmethod
    def _parse_shutdown_policy() -> ShutdownPolicy:
        raw = os.environ.get("OBOL_SHUTDOWN_POLICY", "")
        if not raw.strip():
            return ShutdownPolicy.FATAL_ONLY
        try:
            return ShutdownPolicy(raw.strip().lower().replace("-", "_"))
        except ValueError as exc:
            raise ObolConfigError.invalid_shutdown_policy(raw) from exc

    @classmethod
    def from_env(cls) -> CaptureConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``OBOL_ENDPOINT``: Collection endpoint URL (http or https).
        - ``OBOL_TIMEOUT_S``: Delivery timeout in seconds. Must be positive.
        - ``OBOL_MAX_IN_FLIGHT``: Maximum pending sends. Positive integer.
        - ``OBOL_SHUTDOWN_POLICY``: ``any`` or ``fatal_only``.
        - ``OBOL_FINGERPRINT_CATEGORY``: Boolean flag.
        - ``OBOL_SITE_URL``: Site identity reported in event context.
        - ``OBOL_FRAMEWORK_DISTRIBUTION``: Distribution name of the host
          framework.

        Returns
        -------
        CaptureConfig
            Configuration instance with values from environment or defaults.

        Raises
        ------
        ObolConfigError
            If any variable holds an invalid value.

        """
        framework = os.environ.get("OBOL_FRAMEWORK_DISTRIBUTION", "").strip()
        return cls(
            endpoint=cls._parse_endpoint(),
            timeout_s=cls._parse_timeout(),
            max_in_flight=cls._parse_positive_int(
                "OBOL_MAX_IN_FLIGHT", _DEFAULT_MAX_IN_FLIGHT
            ),
            shutdown_policy=cls._parse_shutdown_policy(),
            fingerprint_category=cls._parse_flag(
                "OBOL_FINGERPRINT_CATEGORY", default=True
            ),
            site_url=os.environ.get("OBOL_SITE_URL", "").strip(),
            framework_distribution=framework or None,
        )

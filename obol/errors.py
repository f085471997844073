"""Errors raised while configuring the capture agent.

Configuration problems are the only failures Obol raises. They surface at
boot, before any handler is installed, so a misconfigured agent never takes
part in the host's error handling.
"""

from __future__ import annotations


class ObolError(Exception):
    """Base exception for all Obol errors."""


class ObolConfigError(ObolError):
    """Raised when capture configuration is invalid."""

    @classmethod
    def invalid_endpoint(cls, raw: str) -> ObolConfigError:
        """Return an error for an endpoint that is not an HTTP(S) URL."""
        return cls(f"OBOL_ENDPOINT must be an http(s) URL, got: {raw!r}")

    @classmethod
    def invalid_timeout(cls, raw: str) -> ObolConfigError:
        """Return an error for a non-positive or non-numeric timeout."""
        return cls(f"OBOL_TIMEOUT_S must be a positive number, got: {raw!r}")

    @classmethod
    def invalid_positive_int(cls, env_var: str, raw: str) -> ObolConfigError:
        """Return an error for a value that is not a positive integer."""
        return cls(f"{env_var} must be a positive integer, got: {raw!r}")

    @classmethod
    def invalid_shutdown_policy(cls, raw: str) -> ObolConfigError:
        """Return an error for an unknown shutdown policy name."""
        return cls(
            f"OBOL_SHUTDOWN_POLICY must be one of 'any' or 'fatal_only', got: {raw!r}"
        )

    @classmethod
    def invalid_flag(cls, env_var: str, raw: str) -> ObolConfigError:
        """Return an error for a boolean flag that cannot be parsed."""
        return cls(f"{env_var} must be a boolean flag, got: {raw!r}")

"""Environment context providers and the event enricher."""

from __future__ import annotations

from .enricher import ContextEnricher
from .provider import ContextProvider, EnvironmentContextProvider

__all__ = ["ContextEnricher", "ContextProvider", "EnvironmentContextProvider"]

"""Unit tests for context enrichment and the environment provider."""

from __future__ import annotations

import importlib.metadata
import platform
import typing as typ

import pytest

from obol.capture.classify import ErrorCategory
from obol.capture.fingerprint import with_fingerprint
from obol.capture.models import ErrorEvent, EventContext, SourceLocation, ThemeDescriptor
from obol.context.enricher import ContextEnricher
from obol.context.provider import ContextProvider, EnvironmentContextProvider
from tests.helpers.pipeline import (
    COMPONENTS,
    SITE_URL,
    THEME,
    FailingContextProvider,
    RecordingEventLogger,
    StaticContextProvider,
)


def _tagged_event() -> ErrorEvent:
    return with_fingerprint(
        ErrorEvent(
            category=ErrorCategory.RUNTIME_WARNING,
            message="division by zero",
            source_location=SourceLocation(file="a.php", line=10),
            timestamp=1_700_000_000,
        )
    )


class _PartlyBrokenProvider(StaticContextProvider):
    """Provider failing on some pieces and returning junk for others."""

    def site_url(self) -> str:
        raise ConnectionError("site registry down")

    def theme(self) -> ThemeDescriptor:
        return {"name": "not a descriptor"}  # type: ignore[return-value]

    def components(self) -> dict[str, str]:
        return "checkout"  # type: ignore[return-value]


class TestContextEnricher:
    """Tests for ``ContextEnricher``."""

    def test_enrich_attaches_full_context(self) -> None:
        """Every piece of provider context lands on the event."""
        event = _tagged_event()

        enriched = ContextEnricher(StaticContextProvider()).enrich(event)

        assert enriched.context == EventContext(
            site=SITE_URL,
            runtime_version="3.12.4",
            framework_version="6.5.2",
            theme=THEME,
            components=COMPONENTS,
        )
        assert enriched.fingerprint == event.fingerprint
        assert event.context is None, "the input event must not change"

    def test_partial_failure_defaults_only_broken_pieces(self) -> None:
        """Broken pieces fall back to defaults; the rest is kept."""
        event_logger = RecordingEventLogger()
        enricher = ContextEnricher(_PartlyBrokenProvider(), event_logger=event_logger)

        context = enricher.enrich(_tagged_event()).context

        assert context is not None
        assert context.site == ""
        assert context.theme == ThemeDescriptor()
        assert context.components == {}
        assert context.runtime_version == "3.12.4"
        assert context.framework_version == "6.5.2"
        assert event_logger.degraded == ["site", "theme", "components"]

    def test_total_provider_failure_never_raises(self) -> None:
        """An unusable provider still yields an enriched event."""
        event_logger = RecordingEventLogger()
        enricher = ContextEnricher(FailingContextProvider(), event_logger=event_logger)
        event = _tagged_event()

        enriched = enricher.enrich(event)

        assert enriched.context == EventContext()
        assert enriched.fingerprint == event.fingerprint
        assert len(event_logger.degraded) == 5


class TestEnvironmentContextProvider:
    """Tests for the interpreter-backed provider."""

    def test_satisfies_protocol(self) -> None:
        """The adapter conforms to ``ContextProvider``."""
        assert isinstance(EnvironmentContextProvider(), ContextProvider)

    def test_reports_configured_site_and_theme(self) -> None:
        """Static pieces are returned verbatim."""
        provider = EnvironmentContextProvider(site_url=SITE_URL, theme=THEME)

        assert provider.site_url() == SITE_URL
        assert provider.theme() == THEME
        assert EnvironmentContextProvider().theme() == ThemeDescriptor()

    def test_runtime_version_is_python_version(self) -> None:
        """The runtime version is the interpreter version."""
        assert EnvironmentContextProvider().runtime_version() == (
            platform.python_version()
        )

    @pytest.mark.parametrize(
        ("distribution", "expected"),
        [
            ("httpx", importlib.metadata.version("httpx")),
            ("obol-definitely-not-installed", ""),
            (None, ""),
        ],
    )
    def test_framework_version(self, distribution: str | None, expected: str) -> None:
        """The framework version comes from installed distribution metadata."""
        provider = EnvironmentContextProvider(framework_distribution=distribution)

        assert provider.framework_version() == expected

    def test_components_lists_installed_distributions(self) -> None:
        """The inventory maps distribution names to versions."""
        components = EnvironmentContextProvider().components()

        assert components["msgspec"] == importlib.metadata.version("msgspec")
        assert list(components) == sorted(components)

    def test_components_scanned_once_across_events(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Enriching many events reads distribution metadata only once."""
        scans: list[int] = []

        class _Distribution:
            metadata: typ.ClassVar[dict[str, str]] = {"Name": "checkout"}
            version = "1.4.2"

        def distributions() -> list[_Distribution]:
            scans.append(1)
            return [_Distribution()]

        monkeypatch.setattr(importlib.metadata, "distributions", distributions)
        enricher = ContextEnricher(EnvironmentContextProvider())

        contexts = [enricher.enrich(_tagged_event()).context for _ in range(5)]

        assert len(scans) == 1
        assert all(
            context is not None and context.components == {"checkout": "1.4.2"}
            for context in contexts
        )

    def test_components_returns_independent_copies(self) -> None:
        """Mutating a returned inventory leaves the cached one intact."""
        provider = EnvironmentContextProvider()

        first = provider.components()
        first["injected"] = "0"

        assert "injected" not in provider.components()

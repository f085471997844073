"""Normalized error event records."""

from __future__ import annotations

import typing as typ

import msgspec

from obol.capture.classify import ErrorCategory  # noqa: TC001


class SourceLocation(msgspec.Struct, kw_only=True, frozen=True):
    """File and line the failure originated from."""

    file: str
    line: int = 0


class ThemeDescriptor(msgspec.Struct, kw_only=True, frozen=True):
    """Active theme or skin of the host site."""

    name: str = ""
    version: str = ""
    identifier: str = ""


class EventContext(msgspec.Struct, kw_only=True, frozen=True):
    """Environment metadata attached by the enricher.

    Attributes
    ----------
    site
        Base URL or other identity of the host site.
    runtime_version
        Version of the language runtime the host is running on.
    framework_version
        Version of the host framework, empty when unknown.
    theme
        Descriptor of the active theme or skin.
    components
        Installed component inventory. Opaque and passed through as given.

    """

    site: str = ""
    runtime_version: str = ""
    framework_version: str = ""
    theme: ThemeDescriptor = msgspec.field(default_factory=ThemeDescriptor)
    components: dict[str, typ.Any] = msgspec.field(default_factory=dict)


class ErrorEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A captured failure, normalized across the three capture sources.

    Events are never mutated. The fingerprinter and enricher each return a
    new instance, so the fingerprint always reflects the identity fields the
    event was built with.

    Attributes
    ----------
    category
        Semantic category of the failure.
    message
        Non-empty description of the failure.
    source_location
        Where the failure originated.
    timestamp
        Seconds since the epoch, assigned when the event was built.
    raw_code
        Native host error code, when the capture source provides one.
    trace
        Opaque list of stack frame mappings.
    exception_type
        Qualified class name for events built from a throwable.
    context
        Environment metadata, attached once after fingerprinting.
    fingerprint
        Content digest of the identity fields.

    """

    category: ErrorCategory
    message: str
    source_location: SourceLocation
    timestamp: int
    raw_code: int | None = None
    trace: list[typ.Any] | None = None
    exception_type: str | None = None
    context: EventContext | None = None
    fingerprint: str | None = None

"""Content fingerprints used by the collector to group recurring errors."""

from __future__ import annotations

import hashlib

import msgspec

from obol.capture.models import ErrorEvent

# Category key used when the category is excluded from the fingerprint.
CATEGORY_WILDCARD = "*"


def _length_prefixed(value: str) -> bytes:
    encoded = value.encode("utf-8", errors="surrogatepass")
    return str(len(encoded)).encode("ascii") + b":" + encoded


def fingerprint(event: ErrorEvent, *, include_category: bool = True) -> str:
    """Return a deterministic digest of an event's identity fields.

    The key is ``(category, message, file, line)`` in that order. Each field is
    length-prefixed so shifting characters between adjacent fields changes
    the digest: ``("ab", "c")`` and ``("a", "bc")`` never collide.
    """
    category = str(event.category) if include_category else CATEGORY_WILDCARD
    material = b"".join(
        _length_prefixed(field)
        for field in (
            category,
            event.message,
            event.source_location.file,
            str(event.source_location.line),
        )
    )
    return hashlib.sha256(material).hexdigest()


def with_fingerprint(event: ErrorEvent, *, include_category: bool = True) -> ErrorEvent:
    """Return a copy of ``event`` tagged with its fingerprint."""
    return msgspec.structs.replace(
        event, fingerprint=fingerprint(event, include_category=include_category)
    )

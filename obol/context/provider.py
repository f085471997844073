"""ContextProvider protocol and the default environment-backed adapter.

Providers supply the environment metadata attached to every event. The
enricher queries each piece separately, so an adapter may fail on any single
method without affecting the others.

Usage
-----
>>> from obol.context.provider import ContextProvider, EnvironmentContextProvider
>>> isinstance(EnvironmentContextProvider(site_url="https://example.org"),
...            ContextProvider)
True

"""

from __future__ import annotations

import importlib.metadata
import platform
import typing as typ

from obol.capture.models import ThemeDescriptor

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@typ.runtime_checkable
class ContextProvider(typ.Protocol):
    """Source of environment metadata queried at enrichment time."""

    def site_url(self) -> str:
        """Return the base URL or identity of the host site."""
        ...

    def runtime_version(self) -> str:
        """Return the language runtime version."""
        ...

    def framework_version(self) -> str:
        """Return the host framework version."""
        ...

    def theme(self) -> ThemeDescriptor:
        """Return the active theme or skin descriptor."""
        ...

    def components(self) -> cabc.Mapping[str, typ.Any]:
        """Return the installed component inventory."""
        ...


class EnvironmentContextProvider:
    """Context provider backed by the running interpreter.

    Parameters
    ----------
    site_url
        Site identity reported verbatim.
    framework_distribution
        Distribution whose installed version is reported as the framework
        version. Reported as empty when unset or not installed.
    theme
        Active theme descriptor; an empty descriptor when not given.

    """

    def __init__(
        self,
        *,
        site_url: str = "",
        framework_distribution: str | None = None,
        theme: ThemeDescriptor | None = None,
    ) -> None:
        """Store the static pieces of context."""
        self._site_url = site_url
        self._framework_distribution = framework_distribution
        self._theme = theme or ThemeDescriptor()
        self._components: dict[str, str] | None = None

    def site_url(self) -> str:
        """Return the configured site identity."""
        return self._site_url

    def runtime_version(self) -> str:
        """Return the Python version, e.g. ``3.12.4``."""
        return platform.python_version()

    def framework_version(self) -> str:
        """Return the installed version of the framework distribution."""
        if not self._framework_distribution:
            return ""
        try:
            return importlib.metadata.version(self._framework_distribution)
        except importlib.metadata.PackageNotFoundError:
            return ""

    def theme(self) -> ThemeDescriptor:
        """Return the configured theme descriptor."""
        return self._theme

    def components(self) -> dict[str, str]:
        """Return ``{distribution name: version}`` for installed packages.

        The inventory is scanned on first use and reused for the life of the
        provider, so later events cost no disk access. Each call returns a
        fresh copy.
        """
        if self._components is None:
            inventory: dict[str, str] = {}
            for dist in importlib.metadata.distributions():
                name = dist.metadata["Name"]
                if name:
                    inventory[name] = dist.version
            self._components = dict(sorted(inventory.items()))
        return dict(self._components)

"""Process-wide registry holding the active configuration source.

Purpose
-------
Let libraries resolve configuration without threading a source parameter
through every public API in the dependency graph. The final application
installs a source once, at the top of its entry point; every record reads the
same source afterwards.

Contents
--------
* :class:`Registry` – init-once holder with ``install``/``get``.
* :data:`CONFIGURATION` – the process-wide instance.
* :func:`install_source` / :func:`active_source` – module-level shortcuts.

System Role
-----------
Read by :mod:`lib_configure.application.configurable` on every ``generate`` and
``regenerate``. Libraries must never install a source; only applications do.
:data:`CONFIGURATION` is rebound by :func:`lib_configure.testing.isolated_registry`,
so callers go through :func:`install_source` and :func:`active_source` (or
read it from this module at call time) instead of importing the name.
"""

from __future__ import annotations

import threading
from typing import Callable

from ..adapters.layered import DefaultSource
from ..domain.errors import UsageError
from ..observability import log_debug, log_info
from .ports import ConfigSource


class Registry:
    """Init-once, read-many holder of the active :class:`ConfigSource`.

    Why
    ----
    Installation must be explicit and happen exactly once. A second install, or
    an install after some component already resolved configuration from the
    default source, is a wiring bug that should fail loudly instead of
    silently switching sources under running components.

    Parameters
    ----------
    default_factory:
        Callable producing the source bound lazily when :meth:`get` runs before
        any :meth:`install`.

    Examples
    --------
    >>> class Static:
    ...     def fetch(self, namespace, fields):
    ...         return {}
    >>> registry = Registry(default_factory=Static)
    >>> registry.is_default()
    True
    >>> source = Static()
    >>> registry.install(source)
    >>> registry.get() is source, registry.is_overridden()
    (True, True)
    >>> registry.install(Static())
    Traceback (most recent call last):
    ...
    lib_configure.domain.errors.UsageError: a configuration source is already installed (Static); install exactly once, before resolving configuration
    """

    def __init__(self, *, default_factory: Callable[[], ConfigSource]) -> None:
        self._default_factory = default_factory
        self._lock = threading.Lock()
        self._source: ConfigSource | None = None
        self._overridden = False

    def install(self, source: ConfigSource) -> None:
        """Bind *source* as the active source for the rest of the process.

        Raises
        ------
        UsageError
            If *source* does not implement ``fetch``, if a source was already
            installed, or if the default source was already bound by an earlier
            :meth:`get`.
        """

        if not isinstance(source, ConfigSource):
            raise UsageError(f"{type(source).__name__} does not implement ConfigSource.fetch")
        with self._lock:
            if self._source is not None:
                bound = type(self._source).__name__
                if self._overridden:
                    raise UsageError(
                        f"a configuration source is already installed ({bound}); "
                        "install exactly once, before resolving configuration"
                    )
                raise UsageError(
                    f"configuration was already resolved from the default source ({bound}); "
                    "install the source before any component generates its configuration"
                )
            self._source = source
            self._overridden = True
        log_info("source_installed", source=type(source).__name__)

    def get(self) -> ConfigSource:
        """Return the active source, binding the default one on first use."""

        source = self._source
        if source is not None:
            return source
        with self._lock:
            if self._source is None:
                self._source = self._default_factory()
                log_debug("default_source_bound", source=type(self._source).__name__)
            return self._source

    def is_default(self) -> bool:
        """Return ``True`` while no source has been installed explicitly."""

        return not self._overridden

    def is_overridden(self) -> bool:
        """Return ``True`` once an application installed its own source."""

        return self._overridden


CONFIGURATION = Registry(default_factory=DefaultSource)
"""The process-wide registry read by every record."""


def install_source(source: ConfigSource) -> None:
    """Install *source* into :data:`CONFIGURATION`; call once from ``main``."""

    CONFIGURATION.install(source)


def active_source() -> ConfigSource:
    """Return the source currently bound in :data:`CONFIGURATION`."""

    return CONFIGURATION.get()

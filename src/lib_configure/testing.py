"""Test helpers for libraries and applications that use configurable records.

Purpose
    Let test suites exercise ``generate``/``regenerate`` against known values
    without touching the real environment or the process-wide registry.

Contents
    - ``StaticSource``: in-memory source keyed by namespace.
    - ``isolated_registry``: context manager swapping the process-wide registry
      for a fresh one (optionally with a source installed) and restoring it.

System Integration
    Used by this package's own tests and doctests; downstream projects use it
    to test their records the same way.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Sequence

from .adapters.layered import DefaultSource
from .application import registry
from .application.ports import ConfigSource
from .domain.fields import FieldSpec, RawValue


class StaticSource:
    """Serve values from a nested ``{namespace: {field: value}}`` mapping.

    Parameters
    ----------
    data:
        Values per namespace. The mapping is read on every call, so tests may
        mutate it between ``generate`` and ``regenerate``.
    textual:
        When ``True`` values are treated like environment strings.

    Examples
    --------
    >>> source = StaticSource({"foo": {"bar": "42"}}, textual=True)
    >>> found = source.fetch("foo", [FieldSpec("bar", int), FieldSpec("baz", str)])
    >>> found["bar"].textual, found["bar"].key, "baz" in found
    (True, 'foo.bar', False)
    """

    layer = "static"

    def __init__(self, data: Mapping[str, Mapping[str, Any]], *, textual: bool = False) -> None:
        self.data = data
        self._textual = textual

    def fetch(self, namespace: str, fields: Sequence[FieldSpec]) -> dict[str, RawValue]:
        """Return the values stored for *namespace*."""

        table = self.data.get(namespace, {})
        return {
            spec.name: RawValue(table[spec.name], self._textual, self.layer, f"{namespace}.{spec.name}")
            for spec in fields
            if spec.name in table
        }


@contextmanager
def isolated_registry(source: ConfigSource | None = None) -> Iterator[registry.Registry]:
    """Run the block against a fresh registry, installing *source* when given.

    The previous process-wide registry is restored on exit, even when the block
    raises.
    """

    fresh = registry.Registry(default_factory=DefaultSource)
    if source is not None:
        fresh.install(source)
    previous = registry.CONFIGURATION
    registry.CONFIGURATION = fresh
    try:
        yield fresh
    finally:
        registry.CONFIGURATION = previous

"""Layered source composition.

Purpose
-------
Combine several sources so that, field by field, the first source that has a
value wins. The default source is just one fixed composition of this
combinator, so custom sources reuse the same fallback mechanism.

Contents
--------
* :class:`FallbackSource` – ordered "first present value wins" combinator.
* :class:`DefaultSource` – environment variables, then the project manifest.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ..application.ports import ConfigSource
from ..domain.fields import FieldSpec, RawValue
from ..observability import log_debug, make_event
from .env.default import EnvSource
from .manifest.pyproject import ManifestSource


class FallbackSource:
    """Query *sources* in order and keep the first value found for each field.

    Why
    ----
    Operational layering (deployment overrides on top of checked-in defaults)
    should not require a monolithic source per combination.

    What
    ----
    Every layer is asked only for the fields still missing. A
    :class:`~lib_configure.domain.errors.SourceError` from any consulted layer
    propagates immediately; later layers are not consulted.

    Examples
    --------
    >>> class Static:
    ...     def __init__(self, values):
    ...         self.values = values
    ...     def fetch(self, namespace, fields):
    ...         return {f.name: self.values[f.name] for f in fields if f.name in self.values}
    >>> layered = FallbackSource([Static({'bar': 1}), Static({'bar': 2, 'baz': 'x'})])
    >>> layered.fetch('foo', [FieldSpec('bar', int), FieldSpec('baz', str)])
    {'bar': 1, 'baz': 'x'}
    """

    def __init__(self, sources: Sequence[ConfigSource]) -> None:
        self._sources = tuple(sources)

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        """Return the layers in precedence order (highest first)."""

        return self._sources

    def fetch(self, namespace: str, fields: Sequence[FieldSpec]) -> dict[str, RawValue | object]:
        """Return the first available value for each field across the layers."""

        found: dict[str, RawValue | object] = {}
        remaining = list(fields)
        for source in self._sources:
            if not remaining:
                break
            layer_values: Mapping[str, RawValue | object] = source.fetch(namespace, remaining)
            for spec in remaining:
                if spec.name in layer_values:
                    found[spec.name] = layer_values[spec.name]
            remaining = [spec for spec in remaining if spec.name not in found]
        log_debug(
            "layers_resolved",
            **make_event(namespace, None, {"found": sorted(found), "missing": [spec.name for spec in remaining]}),
        )
        return found


class DefaultSource(FallbackSource):
    """Environment variables first, then ``[tool.<namespace>]`` in ``pyproject.toml``.

    The order is fixed: environment variables describe the real deployment,
    the manifest carries shared developer defaults.
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, start_dir: str | None = None) -> None:
        super().__init__((EnvSource(environ=environ), ManifestSource(start_dir=start_dir, environ=environ)))

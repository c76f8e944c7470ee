"""Application-layer ports describing source responsibilities.

Purpose
-------
Define the structural contract every configuration source satisfies so the
registry and the generation protocol can call sources without depending on
concrete implementations.

Contents
--------
* :class:`ConfigSource` – resolves the raw values of one namespaced record.
* :class:`FileLoader` – parses a structured file into a mapping; used by the
  manifest and file-backed sources.

System Role
-----------
These protocols enforce Dependency Inversion. Environment lookup, manifest
parsing, and remote stores are all adapters behind :class:`ConfigSource`.
"""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from ..domain.fields import FieldSpec, RawValue


@runtime_checkable
class ConfigSource(Protocol):
    """Resolve raw values for the fields of a namespaced record.

    Why
    ----
    Component authors declare *what* they need; the final application decides
    *where* it comes from by installing a source.

    Contract
    --------
    * Return a mapping of field name to :class:`RawValue` (plain values are
      accepted and treated as structured). Fields the source does not have are
      simply left out: absence is distinct from a malformed value.
    * Reflect the external state at call time. Two calls against an unchanged
      environment return equal mappings; nothing is cached in a way that hides
      external changes.
    * Raise :class:`~lib_configure.domain.errors.SourceError` when no mapping can
      be produced at all (I/O failure, malformed syntax, network timeout).
    """

    def fetch(self, namespace: str, fields: Sequence[FieldSpec]) -> Mapping[str, RawValue | object]:
        """Return the raw values present for *fields* within *namespace*."""


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping representation or raise ``InvalidFormat`` / ``NotFound``."""

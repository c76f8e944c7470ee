"""Structured file source.

Purpose
-------
Serve record fields from a TOML, JSON or YAML document whose tables are keyed by
namespace. It is the building block of the manifest fallback layer and can be
installed on its own (or inside a :class:`~lib_configure.adapters.layered.FallbackSource`)
by applications that keep configuration in a dedicated file.

Lookup
------
For namespace ``foo`` and table prefix ``("tool",)`` the value of field
``bar`` is read from ``document["tool"]["foo"]["bar"]``. Values are already
structured; they are handed to the decoder untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Sequence

from ...application.ports import FileLoader
from ...domain.errors import NotFound
from ...domain.fields import FieldSpec, RawValue
from ...observability import log_debug, make_event
from ..file_loaders.structured import loader_for


class FileSource:
    """Resolve fields from a structured file read fresh on every lookup.

    Parameters
    ----------
    path:
        File to read. A missing file means every field is absent.
    table:
        Key path under which namespace tables live (empty for top level).
    loader:
        Explicit :class:`FileLoader`; chosen from the suffix of *path* when omitted.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / 'settings.json'
    >>> _ = target.write_text('{"foo": {"bar": 42}}', encoding='utf-8')
    >>> found = FileSource(target).fetch('foo', [FieldSpec('bar', int)])
    >>> found['bar'].value, found['bar'].key
    (42, 'foo.bar')
    >>> tmp.cleanup()
    """

    layer = "file"

    def __init__(
        self,
        path: str | Path | None,
        *,
        table: Sequence[str] = (),
        loader: FileLoader | None = None,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._table = tuple(table)
        self._loader = loader

    def fetch(self, namespace: str, fields: Sequence[FieldSpec]) -> dict[str, RawValue]:
        """Return structured raw values for fields present in the namespace table."""

        path = self.locate()
        if path is None:
            return {}
        loader = self._loader or loader_for(path)
        try:
            document = loader.load(str(path))
        except NotFound:
            log_debug("config_file_missing", **make_event(namespace, self.layer, {"path": str(path)}))
            return {}
        found = self._select(document, namespace, fields)
        log_debug("file_lookup", **make_event(namespace, self.layer, {"path": str(path), "keys": sorted(found)}))
        return found

    def locate(self) -> Path | None:
        """Return the file this source reads, or ``None`` when there is none."""

        return self._path

    def _select(
        self,
        document: Mapping[str, object],
        namespace: str,
        fields: Sequence[FieldSpec],
    ) -> dict[str, RawValue]:
        segments = (*self._table, namespace)
        node: object = document
        for segment in segments:
            if not isinstance(node, Mapping) or segment not in node:
                return {}
            node = node[segment]
        if not isinstance(node, Mapping):
            return {}
        prefix = ".".join(segments)
        return {
            spec.name: RawValue.structured(node[spec.name], layer=self.layer, key=f"{prefix}.{spec.name}")
            for spec in fields
            if spec.name in node
        }

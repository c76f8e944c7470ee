"""Project manifest fallback source.

Purpose
-------
Read shared developer defaults checked into version control from the project
manifest. For Python projects the manifest is ``pyproject.toml`` and each
component owns the ``[tool.<namespace>]`` table, so field ``bar`` of namespace
``foo`` lives at ``tool.foo.bar``.

Discovery
---------
1. an explicit ``path`` given to the constructor;
2. ``<dir>/pyproject.toml`` where ``<dir>`` is named by the
   ``LIB_CONFIGURE_MANIFEST_DIR`` environment variable;
3. the first ``pyproject.toml`` found walking up from ``start_dir`` (the current
   working directory by default).

No manifest means every field is absent. A manifest that exists but is not
valid TOML raises :class:`~lib_configure.domain.errors.InvalidFormat`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Sequence

from ...observability import log_debug
from ..file.default import FileSource
from ..file_loaders.structured import TOMLFileLoader

MANIFEST_NAME = "pyproject.toml"
MANIFEST_DIR_ENV = "LIB_CONFIGURE_MANIFEST_DIR"


class ManifestSource(FileSource):
    """Resolve fields from the ``[tool.<namespace>]`` table of the project manifest.

    Parameters
    ----------
    path:
        Manifest file to read; skips discovery when given.
    table:
        Key path holding namespace tables. ``("package", "metadata")`` reads
        Cargo-style manifests.
    start_dir:
        Directory where the upward search begins.
    environ:
        Mapping consulted for ``LIB_CONFIGURE_MANIFEST_DIR`` (defaults to
        :data:`os.environ`).
    """

    layer = "manifest"

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        table: Sequence[str] = ("tool",),
        start_dir: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(path, table=table, loader=TOMLFileLoader())
        self._start_dir = Path(start_dir) if start_dir is not None else None
        self._environ = os.environ if environ is None else environ

    def locate(self) -> Path | None:
        """Return the manifest to read right now, following the discovery order."""

        if self._path is not None:
            return self._path
        override = self._environ.get(MANIFEST_DIR_ENV)
        if override:
            return Path(override) / MANIFEST_NAME
        return find_manifest(self._start_dir or Path.cwd())


def find_manifest(start: Path) -> Path | None:
    """Return the closest ``pyproject.toml`` at or above *start*.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / 'pyproject.toml').write_text('', encoding='utf-8')
    >>> nested = root / 'src' / 'pkg'
    >>> nested.mkdir(parents=True)
    >>> find_manifest(nested) == root / 'pyproject.toml'
    True
    >>> tmp.cleanup()
    """

    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            log_debug("manifest_found", layer="manifest", path=str(candidate))
            return candidate
    return None

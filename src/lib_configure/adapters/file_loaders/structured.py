"""Structured configuration file loaders.

Purpose
-------
Convert on-disk artifacts into Python mappings for the file-backed sources.
Adapters are small wrappers around ``tomllib``/``json``/``yaml.safe_load`` so
error handling and observability live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`TOMLFileLoader` – loader for TOML (project manifests included).
* :class:`JSONFileLoader` – minimal JSON loader.
* :class:`YAMLFileLoader` – optional YAML loader (only available when PyYAML is
  installed).
* :func:`loader_for` – pick a loader from a file suffix.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[assignment]

from ...application.ports import FileLoader
from ...domain.errors import InvalidFormat, NotFound, SourceError
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format = "file"

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing.

        Raises
        ------
        NotFound
            When *path* is not a regular file.
        SourceError
            When the file exists but cannot be read.
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        try:
            payload = file_path.read_bytes()
        except OSError as exc:
            log_error("config_file_unreadable", path=path, format=self.format, error=str(exc))
            raise SourceError(f"Cannot read {path}: {exc}") from exc
        log_debug("config_file_read", path=path, format=self.format, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_configure.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data

    def _invalid(self, path: str, exc: Exception) -> InvalidFormat:
        log_error("config_file_invalid", path=path, format=self.format, error=str(exc))
        return InvalidFormat(f"Invalid {self.format.upper()} in {path}: {exc}")


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser.

    Examples
    --------
    >>> from tempfile import NamedTemporaryFile
    >>> tmp = NamedTemporaryFile('w', suffix='.toml', delete=False, encoding='utf-8')
    >>> _ = tmp.write('[tool.foo]\\nbar = 42')
    >>> tmp.close()
    >>> TOMLFileLoader().load(tmp.name)["tool"]["foo"]["bar"]
    42
    >>> Path(tmp.name).unlink()
    """

    format = "toml"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from the TOML file at *path*."""

        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format = "json"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from the JSON file at *path*."""

        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents when PyYAML is available."""

    format = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from the YAML file at *path*.

        Raises
        ------
        SourceError
            When PyYAML is not installed.
        """

        if yaml is None:
            raise SourceError("PyYAML is required for YAML configuration support")
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        if data is None:
            data = {}
        return self._ensure_mapping(data, path=path)


_LOADERS: dict[str, FileLoader] = {
    ".toml": TOMLFileLoader(),
    ".json": JSONFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}


def loader_for(path: str | Path) -> FileLoader:
    """Return the loader registered for the suffix of *path*.

    Examples
    --------
    >>> type(loader_for("settings.yml")).__name__
    'YAMLFileLoader'
    >>> loader_for("settings.ini")
    Traceback (most recent call last):
    ...
    lib_configure.domain.errors.SourceError: Unsupported configuration file type: settings.ini
    """

    loader = _LOADERS.get(Path(path).suffix.lower())
    if loader is None:
        raise SourceError(f"Unsupported configuration file type: {path}")
    return loader

"""Shared fixtures keeping every test away from the real project manifest and registry."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest

from lib_configure.adapters.manifest.pyproject import MANIFEST_DIR_ENV, MANIFEST_NAME
from lib_configure.application.registry import Registry
from lib_configure.testing import isolated_registry

RECORD_VARIABLES = (
    "FOO_BAR",
    "FOO_BAZ",
    "SERVER_HOST",
    "SERVER_PORT",
    "SERVER_WORKERS",
    "SERVER_DEBUG",
    "TEST_FIRST_FIELD",
    "TEST_SECOND_FIELD",
    "TEST_THIRD_FIELD",
)


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test from an empty directory with no manifest override and no record variables."""

    monkeypatch.delenv(MANIFEST_DIR_ENV, raising=False)
    for name in RECORD_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    directory = tmp_path / "work"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture()
def registry() -> Iterator[Registry]:
    """Swap in a fresh process-wide registry bound lazily to the default source."""

    with isolated_registry() as fresh:
        yield fresh


@pytest.fixture()
def write_manifest(workdir: Path) -> Callable[[str], Path]:
    """Return a helper writing ``pyproject.toml`` into the working directory."""

    def _write(body: str) -> Path:
        path = workdir / MANIFEST_NAME
        path.write_text(body, encoding="utf-8")
        return path

    return _write

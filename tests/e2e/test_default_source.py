"""End-to-end scenarios for records resolved through the default source.

Each scenario mirrors a deployment: only defaults, only environment variables,
only a checked-in manifest, and a mix where the environment overrides part of
the manifest.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_configure.adapters.manifest.pyproject import MANIFEST_DIR_ENV
from lib_configure.application.registry import active_source
from lib_configure.domain.errors import DecodeError
from tests.records import Configuration

MANIFEST = """\
[project]
name = "test-setup"

[tool.test]
first_field = 9
second_field = "Colonel Aureliano Buendia"
third_field = [10, 20, 30]
"""

ALT_MANIFEST = """\
[tool.test]
second_field = "Labyrinth"
"""


def _values(config: Configuration) -> tuple[int, str, list[int] | None]:
    return config.first_field, config.second_field, config.third_field


def _project(root: Path, body: str) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "pyproject.toml").write_text(body, encoding="utf-8")
    return root


def test_defaults_only(registry) -> None:
    assert _values(Configuration.generate()) == (100, "FooBar", [])
    assert registry.is_default()


def test_environment_only(monkeypatch: pytest.MonkeyPatch, registry) -> None:
    monkeypatch.setenv("TEST_FIRST_FIELD", "7")
    monkeypatch.setenv("TEST_SECOND_FIELD", "BazQuux")
    monkeypatch.setenv("TEST_THIRD_FIELD", "0,1")
    assert _values(Configuration.generate()) == (7, "BazQuux", [0, 1])


def test_manifest_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, registry) -> None:
    monkeypatch.setenv(MANIFEST_DIR_ENV, str(_project(tmp_path / "test-setup", MANIFEST)))
    assert _values(Configuration.generate()) == (9, "Colonel Aureliano Buendia", [10, 20, 30])


def test_environment_overrides_part_of_manifest(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, registry) -> None:
    monkeypatch.setenv(MANIFEST_DIR_ENV, str(_project(tmp_path / "alt-toml", ALT_MANIFEST)))
    monkeypatch.setenv("TEST_FIRST_FIELD", "12")
    assert _values(Configuration.generate()) == (12, "Labyrinth", [])


def test_manifest_found_from_working_directory(write_manifest, registry) -> None:
    write_manifest(ALT_MANIFEST)
    assert Configuration.generate().second_field == "Labyrinth"


def test_regenerate_follows_environment_changes(monkeypatch: pytest.MonkeyPatch, write_manifest, registry) -> None:
    write_manifest(MANIFEST)
    config = Configuration.generate()
    assert config.first_field == 9

    monkeypatch.setenv("TEST_FIRST_FIELD", "12")
    config.regenerate()
    assert _values(config) == (12, "Colonel Aureliano Buendia", [10, 20, 30])

    monkeypatch.setenv("TEST_THIRD_FIELD", "1,x")
    with pytest.raises(DecodeError) as excinfo:
        config.regenerate()
    assert [problem.key for problem in excinfo.value.problems] == ["TEST_THIRD_FIELD"]
    assert _values(config) == (12, "Colonel Aureliano Buendia", [10, 20, 30])


def test_manifest_type_errors_name_the_manifest_key(write_manifest, registry) -> None:
    write_manifest('[tool.test]\nfirst_field = "many"\n')
    with pytest.raises(DecodeError) as excinfo:
        Configuration.generate()
    assert [problem.key for problem in excinfo.value.problems] == ["tool.test.first_field"]


def test_default_source_is_shared_by_all_records(registry) -> None:
    assert active_source() is active_source()
    assert registry.is_default()

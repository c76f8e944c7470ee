"""Layered source tests: first present value wins, field by field."""

from __future__ import annotations

import pytest

from lib_configure.adapters.env.default import EnvSource
from lib_configure.adapters.layered import DefaultSource, FallbackSource
from lib_configure.adapters.manifest.pyproject import ManifestSource
from lib_configure.domain.errors import SourceError
from lib_configure.domain.fields import FieldSpec
from lib_configure.testing import StaticSource

FIELDS = [FieldSpec("bar", int), FieldSpec("baz", str, required=False)]


class Recording:
    """Source remembering which fields it was asked for."""

    def __init__(self, values: dict[str, object]) -> None:
        self.values = values
        self.requested: list[list[str]] = []

    def fetch(self, namespace, fields):
        self.requested.append([spec.name for spec in fields])
        return {spec.name: self.values[spec.name] for spec in fields if spec.name in self.values}


class Failing:
    def fetch(self, namespace, fields):
        raise SourceError("store unavailable")


def test_earlier_layers_win() -> None:
    layered = FallbackSource([StaticSource({"foo": {"bar": 1}}), StaticSource({"foo": {"bar": 2, "baz": "x"}})])
    found = layered.fetch("foo", FIELDS)
    assert (found["bar"].value, found["baz"].value) == (1, "x")


def test_later_layers_are_asked_only_for_missing_fields() -> None:
    first, second = Recording({"bar": 1}), Recording({"baz": "x"})
    FallbackSource([first, second]).fetch("foo", FIELDS)
    assert first.requested == [["bar", "baz"]]
    assert second.requested == [["baz"]]


def test_layers_are_skipped_once_everything_is_found() -> None:
    first, second = Recording({"bar": 1, "baz": "x"}), Recording({})
    assert FallbackSource([first, second]).fetch("foo", FIELDS) == {"bar": 1, "baz": "x"}
    assert second.requested == []


def test_source_errors_propagate() -> None:
    with pytest.raises(SourceError):
        FallbackSource([Recording({}), Failing()]).fetch("foo", FIELDS)


def test_default_source_is_env_then_manifest() -> None:
    default = DefaultSource()
    assert [type(source) for source in default.sources] == [EnvSource, ManifestSource]


def test_default_source_prefers_environment(monkeypatch: pytest.MonkeyPatch, write_manifest) -> None:
    write_manifest('[tool.foo]\nbar = 1\nbaz = "from manifest"\n')
    monkeypatch.setenv("FOO_BAR", "2")
    found = DefaultSource().fetch("foo", FIELDS)
    assert (found["bar"].layer, found["bar"].value) == ("env", "2")
    assert (found["baz"].layer, found["baz"].value) == ("manifest", "from manifest")


def test_default_source_with_explicit_environ(write_manifest) -> None:
    write_manifest("[tool.foo]\nbar = 1\n")
    found = DefaultSource(environ={"FOO_BAZ": "env"}).fetch("foo", FIELDS)
    assert (found["bar"].value, found["baz"].value) == (1, "env")

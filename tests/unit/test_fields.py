from __future__ import annotations

from dataclasses import dataclass, field

from lib_configure import Configurable, record_fields
from lib_configure.domain.fields import NO_DEFAULT, FieldSpec, RawValue


def test_fallback_prefers_default_then_factory_then_none() -> None:
    assert FieldSpec("port", int, required=False, default=80).fallback() == 80
    assert FieldSpec("tags", list, required=False, default_factory=list).fallback() == []
    assert FieldSpec("cert", str, required=False).fallback() is None


def test_fallback_factory_returns_fresh_objects() -> None:
    spec = FieldSpec("tags", list, required=False, default_factory=list)
    assert spec.fallback() is not spec.fallback()


def test_raw_value_constructors() -> None:
    text = RawValue.text("42", layer="env", key="FOO_BAR")
    structured = RawValue.structured([1, 2], layer="manifest", key="tool.foo.bar")
    assert (text.textual, text.layer, text.key) == (True, "env", "FOO_BAR")
    assert (structured.textual, structured.value) == (False, [1, 2])


def test_spec_without_fallback_uses_no_default_marker() -> None:
    spec = FieldSpec("bar", int)
    assert spec.required is True
    assert spec.default is NO_DEFAULT
    assert spec.default_factory is NO_DEFAULT
    assert repr(NO_DEFAULT) == "NO_DEFAULT"


def test_record_fields_translate_dataclass_defaults() -> None:
    @dataclass
    class Sample(Configurable, namespace="sample"):
        bar: int
        tags: list[str] = field(default_factory=list)
        retries: int = 3

    bar, tags, retries = record_fields(Sample)
    assert (bar.default, bar.default_factory, bar.required) == (NO_DEFAULT, NO_DEFAULT, True)
    assert (tags.default, tags.default_factory) == (NO_DEFAULT, list)
    assert (retries.default, retries.default_factory) == (3, NO_DEFAULT)
    assert tags.fallback() == [] and retries.fallback() == 3

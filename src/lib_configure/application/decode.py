"""Decode raw source values into typed record fields.

Purpose
-------
Glue between the mapping a :class:`~lib_configure.application.ports.ConfigSource`
returns and the typed fields a record declares. Generic type coercion is
delegated to :class:`pydantic.TypeAdapter`; this module only adds the string
parsing rules that apply to text-only media such as environment variables and
the absence policy for required and optional fields.

Contents
--------
* :func:`decode_fields` – decode a whole record mapping, collecting problems.
* :func:`decode_value` – decode a single :class:`RawValue` for an annotation.
* :func:`as_raw_value` – normalise plain values returned by custom sources.

Text rules
----------
* sequences (``list``/``tuple``/``set``/``frozenset``) split on ``,``;
* ``bool`` accepts ``0``/``1`` and ``false``/``true`` in lower, title or upper
  case only;
* ``bytes`` are hex digits with an optional ``0x`` prefix;
* ``Optional[T]`` decodes as ``T``;
* mappings and nested records cannot be spelled as text.
"""

from __future__ import annotations

import dataclasses
import types
from collections.abc import Mapping as MappingABC
from collections.abc import MutableSequence, MutableSet, Sequence as SequenceABC, Set as SetABC
from functools import lru_cache
from typing import Any, Mapping, Sequence, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..domain.errors import DecodeError, Problem
from ..domain.fields import FieldSpec, RawValue

_ABSENT = object()
_TRUE = frozenset({"1", "true", "True", "TRUE"})
_FALSE = frozenset({"0", "false", "False", "FALSE"})
_SEQUENCE_TYPES = (list, tuple, set, frozenset, SequenceABC, MutableSequence, SetABC, MutableSet)
_MAPPING_TYPES = (dict, MappingABC)


def decode_fields(
    namespace: str,
    fields: Sequence[FieldSpec],
    raw: Mapping[str, object],
) -> dict[str, Any]:
    """Decode *raw* into a complete ``{field: value}`` mapping for *fields*.

    Why
    ----
    Records must be built all at once: either every field decodes or the caller
    gets a single :class:`DecodeError` listing every problem.

    What
    ----
    Present values are decoded with :func:`decode_value`; absent optional fields
    receive their declared fallback; absent required fields become problems.
    Keys in *raw* that the record does not declare are ignored.

    Raises
    ------
    DecodeError
        When at least one field is missing or malformed.

    Examples
    --------
    >>> specs = [FieldSpec("bar", int), FieldSpec("baz", str | None, required=False)]
    >>> decode_fields("foo", specs, {"bar": RawValue.text("42", layer="env", key="FOO_BAR")})
    {'bar': 42, 'baz': None}
    >>> decode_fields("foo", specs, {})
    Traceback (most recent call last):
    ...
    lib_configure.domain.errors.DecodeError: invalid configuration: foo.bar: required field is missing
    """

    values: dict[str, Any] = {}
    problems: list[Problem] = []
    for spec in fields:
        entry = raw.get(spec.name, _ABSENT)
        if entry is _ABSENT:
            if spec.required:
                problems.append(Problem(namespace, spec.name, None, "required field is missing"))
            else:
                values[spec.name] = spec.fallback()
            continue
        raw_value = as_raw_value(entry)
        try:
            values[spec.name] = decode_value(spec.annotation, raw_value)
        except PydanticValidationError as exc:
            problems.append(Problem(namespace, spec.name, raw_value.key, _summarise(exc)))
        except (TypeError, ValueError) as exc:
            problems.append(Problem(namespace, spec.name, raw_value.key, str(exc)))
    if problems:
        raise DecodeError(problems)
    return values


def decode_value(annotation: Any, raw: RawValue) -> Any:
    """Decode one raw value into *annotation*.

    Examples
    --------
    >>> decode_value(list[int], RawValue.text("1,2,3", layer="env"))
    [1, 2, 3]
    >>> decode_value(list[int], RawValue.structured([1, 2], layer="manifest"))
    [1, 2]
    >>> decode_value(bytes, RawValue.text("0xcafe", layer="env"))
    b'\\xca\\xfe'
    """

    if raw.textual:
        if not isinstance(raw.value, str):
            raise TypeError(f"textual value must be a string, got {type(raw.value).__name__}")
        return _decode_text(annotation, raw.value)
    target = _strip_optional(annotation)
    if target in (int, float) and isinstance(raw.value, bool):
        raise ValueError(f"expected {target.__name__}, got boolean {raw.value!r}")
    return _adapter(annotation).validate_python(raw.value)


def as_raw_value(entry: object) -> RawValue:
    """Wrap plain values from custom sources as structured :class:`RawValue` objects."""

    if isinstance(entry, RawValue):
        return entry
    return RawValue.structured(entry, layer="custom")


def _decode_text(annotation: Any, text: str) -> Any:
    """Apply the string parsing rules for *annotation* before delegating to pydantic."""

    annotation = _strip_optional(annotation)
    if annotation is bool:
        return _parse_bool(text)
    if annotation in (bytes, bytearray):
        return annotation(_parse_hex(text))
    origin = get_origin(annotation) or annotation
    if _is_structured_only(annotation, origin):
        raise ValueError("mappings and nested records cannot be read from a text value")
    if origin in _SEQUENCE_TYPES:
        items = _decode_items(annotation, origin, text.split(","))
        return _adapter(annotation).validate_python(items)
    return _adapter(annotation).validate_python(text)


def _decode_items(annotation: Any, origin: Any, parts: list[str]) -> list[Any]:
    """Decode the comma separated *parts* of a textual sequence element by element."""

    args = get_args(annotation)
    if origin is tuple and args and args[-1] is not Ellipsis:
        if len(args) != len(parts):
            raise ValueError(f"expected {len(args)} comma separated values, got {len(parts)}")
        return [_decode_text(arg, part) for arg, part in zip(args, parts)]
    element = args[0] if args else str
    return [_decode_text(element, part) for part in parts]


def _strip_optional(annotation: Any) -> Any:
    """Return ``T`` for ``Optional[T]`` / ``T | None``; other annotations unchanged."""

    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
        return Union[tuple(members)]
    return annotation


def _is_structured_only(annotation: Any, origin: Any) -> bool:
    if origin in _MAPPING_TYPES:
        return True
    if dataclasses.is_dataclass(annotation):
        return True
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _parse_bool(text: str) -> bool:
    """Parse the accepted boolean spellings.

    >>> _parse_bool("TRUE"), _parse_bool("0")
    (True, False)
    """

    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean {text!r}; expected one of 0, 1, true, false")


def _parse_hex(text: str) -> bytes:
    digits = text[2:] if text.startswith("0x") else text
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise ValueError(f"invalid hex bytes {text!r}") from exc


@lru_cache(maxsize=256)
def _adapter(annotation: Any) -> TypeAdapter[Any]:
    return TypeAdapter(annotation)


def _summarise(exc: PydanticValidationError) -> str:
    return "; ".join(error["msg"] for error in exc.errors())

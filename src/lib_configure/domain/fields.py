"""Field descriptors and raw values exchanged between sources and the decoder.

Purpose
-------
Keep the two value objects every layer agrees on free of I/O: the description
of one record field (:class:`FieldSpec`) and one raw value produced by a
source (:class:`RawValue`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final


class _NoDefault:
    """Marker for a field that declares no fallback value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Final = _NoDefault()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Describe one configurable field of a record.

    Attributes
    ----------
    name:
        Attribute name on the record; sources derive their external key from it.
    annotation:
        Resolved type annotation used by the decoder.
    required:
        ``True`` when the record declares no default; absence is then a
        :class:`~lib_configure.domain.errors.DecodeError`.
    default / default_factory:
        Declared fallback for optional fields (:data:`NO_DEFAULT` if none).
    doc:
        Optional human readable description used by generated help text.
    """

    name: str
    annotation: Any
    required: bool = True
    default: Any = NO_DEFAULT
    default_factory: Any = NO_DEFAULT
    doc: str | None = None

    def fallback(self) -> Any:
        """Return the declared default for an optional field.

        Examples
        --------
        >>> FieldSpec("retries", int, required=False, default=3).fallback()
        3
        >>> FieldSpec("tags", list, required=False, default_factory=list).fallback()
        []
        >>> FieldSpec("cert", str, required=False).fallback() is None
        True
        """

        if self.default is not NO_DEFAULT:
            return self.default
        if self.default_factory is not NO_DEFAULT:
            return self.default_factory()
        return None


@dataclass(frozen=True, slots=True)
class RawValue:
    """A value found by a source, before decoding.

    Attributes
    ----------
    value:
        The raw payload (a ``str`` for textual sources, any structured value
        otherwise).
    textual:
        ``True`` when the medium only carries text (environment variables) so
        the decoder applies string parsing rules.
    layer:
        Name of the layer that produced the value (``"env"``, ``"manifest"``...).
    key:
        External key inside that layer (``"FOO_BAR"``, ``"tool.foo.bar"``).
    """

    value: Any
    textual: bool = False
    layer: str = "custom"
    key: str | None = None

    @classmethod
    def text(cls, value: str, *, layer: str, key: str | None = None) -> RawValue:
        """Build a textual raw value."""

        return cls(value, True, layer, key)

    @classmethod
    def structured(cls, value: Any, *, layer: str, key: str | None = None) -> RawValue:
        """Build a structured raw value."""

        return cls(value, False, layer, key)

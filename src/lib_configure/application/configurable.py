"""Generation protocol for configuration records.

Purpose
-------
Give every configuration record a ``generate`` (build fresh from the active
source) and ``regenerate`` (refresh an existing instance in place) operation.
A record is a dataclass whose fields are exactly the values a component needs;
its namespace and ordered field descriptors are fixed when the class is
defined.

Contents
--------
* :class:`Configurable` – base class: ``class Cfg(Configurable, namespace="foo")``.
* :func:`configurable` – decorator alternative for classes that cannot inherit.
* :func:`setting` – ``dataclasses.field`` wrapper carrying documentation.
* :func:`record_fields` / :func:`record_namespace` – descriptor accessors.
* :func:`explain` – generate a record and report where each value came from.
* :func:`describe` – render help text listing the environment variables.

System Role
-----------
Sits between the registry (which source) and the decoder (which types). It
owns the all-or-nothing guarantee of ``regenerate``: the candidate record is
fully built before a single field of the live record changes.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, ClassVar, Mapping, TypeVar, Union, get_args, get_origin

from ..adapters.env.default import env_var_name
from ..domain.errors import ConfigureError, SourceError, UsageError
from ..domain.fields import NO_DEFAULT, FieldSpec
from ..observability import log_error, log_info, make_event
from .decode import as_raw_value, decode_fields
from .registry import active_source

R = TypeVar("R")

_NAMESPACE_ATTR = "__config_namespace__"
_FIELDS_ATTR = "__config_fields__"


class Configurable:
    """Base class giving a dataclass record ``generate``/``regenerate``.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_configure.testing import StaticSource, isolated_registry
    >>> @dataclass
    ... class Foo(Configurable, namespace="foo"):
    ...     bar: int
    ...     baz: str | None = None
    >>> with isolated_registry(StaticSource({"foo": {"bar": 42}})):
    ...     Foo.generate()
    Foo(bar=42, baz=None)
    """

    __config_namespace__: ClassVar[str]

    def __init_subclass__(cls, namespace: str | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if namespace is not None:
            setattr(cls, _NAMESPACE_ATTR, namespace)
        elif not hasattr(cls, _NAMESPACE_ATTR):
            setattr(cls, _NAMESPACE_ATTR, _package_of(cls))

    @classmethod
    def generate(cls: type[R]) -> R:
        """Build a fresh record from the active source.

        Raises
        ------
        DecodeError
            A required field is absent or a value cannot become its declared type.
        SourceError
            The active source could not produce a mapping.
        """

        return _generate(cls)

    def regenerate(self) -> None:
        """Refresh every field of this record from the active source.

        All-or-nothing: when the lookup or decoding fails the record keeps its
        previous values and the error propagates.
        """

        _regenerate(self)


def configurable(namespace: str | type | None = None) -> Any:
    """Attach the generation protocol to *cls* (applying ``dataclass`` if needed).

    Usable as ``@configurable("name")`` or bare ``@configurable``; the bare form
    derives the namespace from the defining package.

    Examples
    --------
    >>> from lib_configure.testing import StaticSource, isolated_registry
    >>> @configurable("example")
    ... class Example:
    ...     socket_addr: str = "127.0.0.1:7878"
    ...     tls_cert: str | None = None
    >>> with isolated_registry(StaticSource({"example": {"tls_cert": "etc/certificate"}})):
    ...     Example.generate().tls_cert
    'etc/certificate'
    """

    if isinstance(namespace, type):
        return configurable()(namespace)

    def decorate(cls: type[R]) -> type[R]:
        if not dataclasses.is_dataclass(cls):
            cls = dataclasses.dataclass(cls)
        setattr(cls, _NAMESPACE_ATTR, namespace or _package_of(cls))
        cls.generate = classmethod(_generate)  # type: ignore[attr-defined]
        cls.regenerate = _regenerate  # type: ignore[attr-defined]
        return cls

    return decorate


def setting(
    *,
    doc: str | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a record field with documentation for :func:`describe`.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Server(Configurable, namespace="server"):
    ...     threads: int = setting(doc="Worker threads.", default=4)
    >>> record_fields(Server)[0].doc
    'Worker threads.'
    """

    metadata = {"doc": doc} if doc else {}
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata)


def record_namespace(cls: type) -> str:
    """Return the namespace fixed for record class *cls*."""

    try:
        return getattr(cls, _NAMESPACE_ATTR)
    except AttributeError:
        raise UsageError(f"{cls.__name__} is not a configurable record") from None


def record_fields(cls: type) -> tuple[FieldSpec, ...]:
    """Return the ordered field descriptors of record class *cls*.

    Descriptors are derived once from the dataclass fields and resolved type
    hints, then cached on the class. Fields excluded from ``__init__`` are not
    configurable.
    """

    cached = cls.__dict__.get(_FIELDS_ATTR)
    if cached is not None:
        return cached
    if not dataclasses.is_dataclass(cls):
        raise UsageError(f"{cls.__name__} must be a dataclass to be configurable")
    hints = typing.get_type_hints(cls)
    specs = tuple(_field_spec(field, hints[field.name]) for field in dataclasses.fields(cls) if field.init)
    setattr(cls, _FIELDS_ATTR, specs)
    return specs


def explain(cls: type[R]) -> tuple[R, dict[str, dict[str, str | None] | None]]:
    """Generate a record and report the layer and key that supplied each field.

    Fields that fell back to their declared default map to ``None``.
    """

    namespace = record_namespace(cls)
    raw = _fetch(namespace, record_fields(cls))
    origins: dict[str, dict[str, str | None] | None] = {}
    for spec in record_fields(cls):
        if spec.name in raw:
            value = as_raw_value(raw[spec.name])
            origins[spec.name] = {"layer": value.layer, "key": value.key}
        else:
            origins[spec.name] = None
    return _build(cls, namespace, raw), origins


def describe(cls: type) -> str:
    """Render help text listing the environment variables of record *cls*.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Foo(Configurable, namespace="foo"):
    ...     bar: int = setting(doc="Answer to everything.")
    ...     baz: str | None = None
    >>> print(describe(Foo))
    These environment variables can be used to configure foo.
    <BLANKLINE>
    - **FOO_BAR** (int): Answer to everything.
    - **FOO_BAZ** (str | None, optional)
    <BLANKLINE>
    Unset variables fall back to the [tool.foo] table of pyproject.toml.
    """

    namespace = record_namespace(cls)
    lines = [f"These environment variables can be used to configure {namespace}.", ""]
    for spec in record_fields(cls):
        label = _type_name(spec.annotation)
        if not spec.required:
            label += ", optional"
        entry = f"- **{env_var_name(namespace, spec.name)}** ({label})"
        lines.append(f"{entry}: {spec.doc}" if spec.doc else entry)
    lines.extend(["", f"Unset variables fall back to the [tool.{namespace}] table of pyproject.toml."])
    return "\n".join(lines)


def _generate(cls: type[R]) -> R:
    namespace = record_namespace(cls)
    record = _build(cls, namespace, _fetch(namespace, record_fields(cls)))
    log_info("configuration_generated", **make_event(namespace, None, {"record": cls.__name__}))
    return record


def _regenerate(record: Any) -> None:
    cls = type(record)
    namespace = record_namespace(cls)
    try:
        candidate = _build(cls, namespace, _fetch(namespace, record_fields(cls)))
    except ConfigureError as exc:
        log_error("configuration_rejected", **make_event(namespace, None, {"record": cls.__name__, "error": str(exc)}))
        raise
    # init=False fields without a default may be unset on the candidate; keep the live value.
    updates = {
        field.name: getattr(candidate, field.name)
        for field in dataclasses.fields(cls)
        if hasattr(candidate, field.name)
    }
    for name, value in updates.items():
        object.__setattr__(record, name, value)
    log_info("configuration_regenerated", **make_event(namespace, None, {"record": cls.__name__}))


def _fetch(namespace: str, fields: tuple[FieldSpec, ...]) -> Mapping[str, object]:
    source = active_source()
    try:
        raw = source.fetch(namespace, fields)
    except OSError as exc:
        raise SourceError(f"{type(source).__name__} failed for {namespace}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise SourceError(f"{type(source).__name__}.fetch returned {type(raw).__name__}, expected a mapping")
    return raw


def _build(cls: type[R], namespace: str, raw: Mapping[str, object]) -> R:
    values = decode_fields(namespace, record_fields(cls), raw)
    return cls(**values)


def _field_spec(field: dataclasses.Field[Any], annotation: Any) -> FieldSpec:
    default = NO_DEFAULT if field.default is dataclasses.MISSING else field.default
    factory = NO_DEFAULT if field.default_factory is dataclasses.MISSING else field.default_factory
    has_default = default is not NO_DEFAULT or factory is not NO_DEFAULT
    return FieldSpec(
        name=field.name,
        annotation=annotation,
        required=not has_default and not _is_optional(annotation),
        default=default,
        default_factory=factory,
        doc=field.metadata.get("doc"),
    )


def _is_optional(annotation: Any) -> bool:
    if annotation is None or annotation is type(None):
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        return type(None) in get_args(annotation)
    return False


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _package_of(cls: type) -> str:
    return cls.__module__.split(".")[0]

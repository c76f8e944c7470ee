"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by sources, the decoder, the registry,
and consuming applications. The hierarchy lives in the domain layer so every
outer layer can raise and catch it without import cycles.

Contents
--------
* :class:`ConfigureError` – umbrella base class for all library failures.
* :class:`SourceError` – a source could not produce a mapping at all.
* :class:`DecodeError` – a mapping was produced but could not become a record.
* :class:`UsageError` – the installation discipline was violated.
* :class:`InvalidFormat` – a file read by a source has malformed syntax.
* :class:`NotFound` – an optional file does not exist.
* :class:`Problem` – one field-level decoding failure carried by
  :class:`DecodeError`.

System Role
-----------
All three kinds propagate synchronously to whoever called ``generate`` or
``regenerate``. Nothing in the library logs-and-continues on the caller's
behalf.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class ConfigureError(Exception):
    """Base type for all exceptions emitted by ``lib_configure``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class SourceError(ConfigureError):
    """Raised when the underlying source failed to produce a mapping.

    Typical Sources
    ---------------
    Unreadable or malformed manifest files, structured files with invalid
    syntax, network failures or timeouts in custom remote sources. Never
    retried by the library.
    """


@dataclass(frozen=True, slots=True)
class Problem:
    """Describe why one field could not be decoded.

    Attributes
    ----------
    namespace:
        Namespace of the record being decoded.
    field:
        Field name on the record.
    key:
        External key the value came from (``FOO_BAR``, ``tool.foo.bar``) or
        ``None`` when the field was absent everywhere.
    reason:
        Human readable cause.
    """

    namespace: str
    field: str
    key: str | None
    reason: str

    def __str__(self) -> str:
        where = f" (from {self.key})" if self.key else ""
        return f"{self.namespace}.{self.field}{where}: {self.reason}"


class DecodeError(ConfigureError):
    """Raised when a required field is absent or a present value is malformed.

    What
    ----
    Carries every field-level :class:`Problem` found during a single decode so
    operators can fix all of them in one pass.

    Examples
    --------
    >>> err = DecodeError([Problem("foo", "bar", None, "required field is missing")])
    >>> str(err)
    'invalid configuration: foo.bar: required field is missing'
    """

    def __init__(self, problems: Iterable[Problem]) -> None:
        self.problems: tuple[Problem, ...] = tuple(problems)
        summary = "; ".join(str(problem) for problem in self.problems)
        super().__init__(f"invalid configuration: {summary}")


class UsageError(ConfigureError):
    """Signals a programmer error in how the registry is wired.

    Raised when a source is installed twice, installed after configuration was
    already resolved from the default source, or when the installed object does
    not satisfy the source contract. It is not meant to be caught and recovered
    from.
    """


class InvalidFormat(SourceError):
    """Raised when a file read by a source cannot be parsed into structured data.

    Why
    ----
    Distinguish malformed content (fatal) from missing files (absence).
    """


class NotFound(ConfigureError):
    """Represents a missing-but-optional resource such as an absent manifest.

    Sources catch it and report the affected fields as absent instead of
    failing the whole lookup.
    """

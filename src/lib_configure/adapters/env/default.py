"""Environment variable source.

Purpose
-------
Resolve record fields from process environment variables. It is the
highest-precedence layer of the default source.

Key behaviours
--------------
* The variable for field ``bar`` in namespace ``foo`` is ``FOO_BAR``: namespace
  and field name joined by ``_`` and converted to upper snake case
  (``my-lib``/``tlsCert`` ⇒ ``MY_LIB_TLS_CERT``).
* Present and non-empty variables become textual raw values; empty or unset
  variables are reported as absent.
* The environment is read on every call so external changes are visible to
  ``regenerate``.
"""

from __future__ import annotations

import os
import re
from typing import Mapping, Sequence

from ...domain.fields import FieldSpec, RawValue
from ...observability import log_debug, make_event

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z0-9]+")


def env_var_name(namespace: str, field: str) -> str:
    """Return the environment variable consulted for *field* in *namespace*.

    Examples
    --------
    >>> env_var_name('foo', 'bar')
    'FOO_BAR'
    >>> env_var_name('my-lib', 'tlsCert')
    'MY_LIB_TLS_CERT'
    >>> env_var_name('test', 'first_field')
    'TEST_FIRST_FIELD'
    """

    return "_".join(word.upper() for word in _WORD.findall(f"{namespace}_{field}"))


class EnvSource:
    """Look up each field of a record in the process environment."""

    layer = "env"

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the source with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`, read live.
        """

        self._environ = os.environ if environ is None else environ

    def fetch(self, namespace: str, fields: Sequence[FieldSpec]) -> dict[str, RawValue]:
        """Return textual raw values for fields whose variable is set and non-empty.

        Examples
        --------
        >>> source = EnvSource(environ={'FOO_BAR': '42', 'FOO_BAZ': ''})
        >>> found = source.fetch('foo', [FieldSpec('bar', int), FieldSpec('baz', str)])
        >>> sorted(found), found['bar'].value, found['bar'].key
        (['bar'], '42', 'FOO_BAR')
        """

        found: dict[str, RawValue] = {}
        for spec in fields:
            name = env_var_name(namespace, spec.name)
            value = self._environ.get(name)
            if value:
                found[spec.name] = RawValue.text(value, layer=self.layer, key=name)
        log_debug("env_lookup", **make_event(namespace, self.layer, {"keys": sorted(found)}))
        return found

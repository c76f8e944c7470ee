"""Public package surface of ``lib_configure``.

Libraries declare dataclass records with :class:`Configurable` and call
``generate``/``regenerate``; applications optionally call
:func:`install_source` once at startup to choose where values come from.
"""

from __future__ import annotations

from .adapters.env.default import EnvSource, env_var_name
from .adapters.file.default import FileSource
from .adapters.layered import DefaultSource, FallbackSource
from .adapters.manifest.pyproject import ManifestSource
from .application.configurable import (
    Configurable,
    configurable,
    describe,
    explain,
    record_fields,
    record_namespace,
    setting,
)
from .application.ports import ConfigSource
from .application.registry import Registry, active_source, install_source
from .domain.errors import ConfigureError, DecodeError, InvalidFormat, NotFound, Problem, SourceError, UsageError
from .domain.fields import FieldSpec, RawValue
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConfigSource",
    "Configurable",
    "ConfigureError",
    "DecodeError",
    "DefaultSource",
    "EnvSource",
    "FallbackSource",
    "FieldSpec",
    "FileSource",
    "InvalidFormat",
    "ManifestSource",
    "NotFound",
    "Problem",
    "RawValue",
    "Registry",
    "SourceError",
    "UsageError",
    "active_source",
    "bind_trace_id",
    "configurable",
    "describe",
    "env_var_name",
    "explain",
    "get_logger",
    "install_source",
    "record_fields",
    "record_namespace",
    "setting",
]

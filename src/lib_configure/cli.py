"""CLI adapter for ``lib_configure`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect how records resolve without writing Python: which
environment variable feeds which field, what a record currently resolves to,
and which layer supplied each value.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_env_var` – prints the environment variable for a namespace/field.
* :func:`cli_describe` – prints the generated help text of a record class.
* :func:`cli_show` – generates a record from the active source and prints JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. It goes through the same registry as every library, so it
shows exactly what the application would see with the default source.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from importlib import import_module, metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.env.default import env_var_name
from .application.configurable import describe, explain, record_namespace
from .domain.errors import UsageError

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_configure")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Inspect configuration records and the sources they resolve from",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_configure",
    message="lib_configure version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_configure")
    except metadata.PackageNotFoundError:
        click.echo("lib_configure (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_configure')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-var", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("namespace")
@click.argument("field")
def cli_env_var(namespace: str, field: str) -> None:
    """Print the environment variable consulted for FIELD in NAMESPACE.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-var", "foo", "bar"])
    >>> result.output.strip()
    'FOO_BAR'
    """

    click.echo(env_var_name(namespace, field))


@cli.command("describe", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
def cli_describe(target: str) -> None:
    """Print the environment variables of the record class TARGET (``module:Class``)."""

    click.echo(describe(_load_record(target)))


@cli.command("show", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.option(
    "--origin/--no-origin",
    default=False,
    help="Include the layer and key that supplied each field",
)
def cli_show(target: str, indent: Optional[int], origin: bool) -> None:
    """Generate the record class TARGET (``module:Class``) and print it as JSON.

    With ``--origin`` the output is ``{"config": ..., "origin": ...}`` where each
    field maps to its winning layer and external key, or ``null`` when the
    declared default was used.
    """

    record, origins = explain(_load_record(target))
    values = dataclasses.asdict(record)
    payload = {"config": values, "origin": origins} if origin else values
    click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), default=str))


def _load_record(target: str) -> type:
    """Import ``module:Class`` and ensure it names a configurable record."""

    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter("expected MODULE:CLASS", param_hint="TARGET")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import {module_name}: {exc}", param_hint="TARGET") from exc
    record_cls = module
    for part in attribute.split("."):
        try:
            record_cls = getattr(record_cls, part)
        except AttributeError as exc:
            raise click.BadParameter(f"{module_name} has no attribute {attribute}", param_hint="TARGET") from exc
    if not isinstance(record_cls, type) or not dataclasses.is_dataclass(record_cls):
        raise click.BadParameter(f"{target} is not a dataclass record", param_hint="TARGET")
    try:
        record_namespace(record_cls)
    except UsageError as exc:
        raise click.BadParameter(str(exc), param_hint="TARGET") from exc
    return record_cls


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_configure",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))

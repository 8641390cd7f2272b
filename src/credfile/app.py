"""Typer application factory and CLI entry point for credfile.

This module wires together the top-level Typer application and registers
the built-in sub-command groups (``netrc``, ``registry``, ``secrets``,
``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~credfile.exceptions.CredfileError` instances are reported on
stderr and mapped to their exit code; any other exception is written to a
crash log under the data directory.

See Also:
    :mod:`credfile.config`: Global configuration resolution.
    :mod:`credfile.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from credfile import __version__
from credfile.commands.config import config_app
from credfile.commands.netrc import netrc_app
from credfile.commands.registry import registry_app
from credfile.commands.secrets import secrets_app
from credfile.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="credfile",
    help="Generate and parse .netrc and registry authentication files.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.add_typer(netrc_app, name="netrc", help="Build and inspect .netrc auto-login files.")
app.add_typer(registry_app, name="registry", help="Build OCI registry authentication files.")
app.add_typer(secrets_app, name="secrets", help="Manage the named secret store.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"credfile {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library log records to stderr; DEBUG when verbose, WARNING otherwise.

    A no-op when the root logger already has handlers (e.g. under pytest).
    """
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~credfile.output.OutputManager` and
    logging from CLI flags, and stores shared options in the Typer context
    so that sub-commands can read them via ``ctx.obj``.
    """
    from credfile.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["force"] = force


def _configured_format() -> OutputFormat:
    """Return the output format stored in the global config.

    Falls back to ``AUTO`` when the config file cannot be loaded. Commands
    that read the config report that error themselves.
    """
    from credfile.config import load_global_config
    from credfile.exceptions import ConfigError
    from credfile.output import OutputFormat

    try:
        return OutputFormat(load_global_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from credfile.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``credfile`` console script.

    Unhandled :class:`~credfile.exceptions.CredfileError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from credfile.exceptions import CredfileError
        from credfile.output import error

        if isinstance(exc, CredfileError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)

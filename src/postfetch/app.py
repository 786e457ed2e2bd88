"""Typer application and CLI entry point for postfetch.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``posts``, ``fetch``, ``export``, ``cache``,
``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a signal handler, invokes the Typer app,
maps :class:`~postfetch.exceptions.PostfetchError` to its exit code, and
writes unexpected exceptions to a crash log under the data directory.

See Also:
    :mod:`postfetch.config`: Configuration resolution.
    :mod:`postfetch.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from postfetch import __version__
from postfetch.commands.cache import cache_app
from postfetch.commands.config import config_app
from postfetch.commands.export import export_command
from postfetch.commands.fetch import fetch_command
from postfetch.commands.posts import posts_app
from postfetch.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="postfetch",
    help="Cached JSONPlaceholder client with PDF, DOCX, and RTF export.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.add_typer(posts_app, name="posts", help="Read posts.")
app.command("fetch")(fetch_command)
app.command("export")(export_command)
app.add_typer(cache_app, name="cache", help="Response cache management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"postfetch {__version__}")
        raise typer.Exit()


def _resolve_output_format(name: str) -> Any:
    from postfetch.output import OutputFormat, warning

    try:
        return OutputFormat(name.lower())
    except ValueError:
        warning(f"Unknown output format '{name}' in config, using auto")
        return OutputFormat.AUTO


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
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Upstream base URL override."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Bypass the response cache."
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
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective configuration, installs the global
    :class:`~postfetch.output.OutputManager` and the logging handler, and
    stores shared state in ``ctx.obj`` for the sub-commands. Values already
    present in ``ctx.obj`` (such as a test ``transport``) are kept.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        base_url: Upstream base URL (highest precedence).
        no_cache: Disable the read-through cache for this invocation.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output and logging.
    """
    from postfetch.config import resolve_config
    from postfetch.exceptions import ConfigError
    from postfetch.output import OutputManager, configure_logging, set_output

    cli_format = "json" if json_output else "plain" if plain_output else None

    config = None
    config_problem = None
    try:
        config = resolve_config(
            cli_base_url=base_url, cli_no_cache=no_cache, cli_format=cli_format
        )
    except ConfigError as exc:
        config_problem = str(exc)

    fmt = _resolve_output_format(config.output.format if config else cli_format or "auto")
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose=verbose, no_color=no_color)

    if config_problem:
        from postfetch.output import warning

        warning(config_problem)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["base_url"] = base_url
    ctx.obj["no_cache"] = no_cache
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from postfetch.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``postfetch`` console script.

    Unhandled :class:`~postfetch.exceptions.PostfetchError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions
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
        from postfetch.exceptions import PostfetchError
        from postfetch.output import error

        if isinstance(exc, PostfetchError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

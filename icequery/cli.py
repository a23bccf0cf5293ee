"""IceQuery CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import QueryArgs
from .commands import cmd_query
from .constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_NET_NAME,
    DEFAULT_RECEIVE_TIMEOUT_MS,
    DEFAULT_SCHEDULER_PORT,
    EXIT_ARGUMENTS,
    SCHEDULER_HOST_ENV,
)
from .exceptions import IceQueryError
from .utils import looks_like_host

# Module logger
logger = logging.getLogger("icequery")

VERY_QUIET = logging.CRITICAL + 1


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for the CLI."""
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


def log_level_for(*, debug: bool, quiet: bool, very_quiet: bool) -> int:
    if very_quiet:
        return VERY_QUIET
    if debug:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def validate_scheduler(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None or value == "":
        return None
    if not looks_like_host(value):
        raise click.BadParameter(f"not a hostname or IP address: {value}")
    # socket.create_connection wants a bare IPv6 literal
    if value.startswith("[") and value.endswith("]"):
        return value[1:-1]
    return value


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("icequery"), prog_name="icequery")
@click.option(
    "--net-name",
    "-n",
    default=DEFAULT_NET_NAME,
    show_default=True,
    help="Icecream network name to look for.",
)
@click.option(
    "--connect-timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_CONNECT_TIMEOUT_MS,
    show_default=True,
    help="Scheduler discovery/connect timeout in milliseconds.",
)
@click.option(
    "--receive-timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_RECEIVE_TIMEOUT_MS,
    show_default=True,
    help="Wait for scheduler messages at most this many milliseconds per poll.",
)
@click.option(
    "--scheduler",
    "-s",
    envvar=SCHEDULER_HOST_ENV,
    callback=validate_scheduler,
    help=f"Scheduler host or IP; skips broadcast discovery (env: {SCHEDULER_HOST_ENV}).",
)
@click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    default=DEFAULT_SCHEDULER_PORT,
    show_default=True,
    help="Scheduler port.",
)
@click.option("--quiet", "-q", is_flag=True, help="Only report warnings and errors.")
@click.option(
    "--very-quiet",
    "-Q",
    is_flag=True,
    help="Print nothing on stderr; rely on the exit code.",
)
@click.option("--brief", "-b", is_flag=True, help="Print only the total core count.")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging to stderr.")
@click.option("--plain", is_flag=True, help="No borders or margins; single-space columns.")
@click.option("--ascii", "ascii_only", is_flag=True, help="Restrict output to 7-bit ASCII.")
@click.option(
    "--ascii-fallback",
    is_flag=True,
    help="With --ascii, print text unchanged if transliteration is unavailable.",
)
@click.option("--no-table", is_flag=True, help="Print only the summary line.")
@click.option("--no-offline", is_flag=True, help="Hide offline nodes.")
@click.option("--no-noremote", is_flag=True, help="Hide nodes that refuse remote jobs.")
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"], case_sensitive=False),
    default="auto",
    show_default=True,
    help="Colorize the table.",
)
def cli(
    net_name: str,
    connect_timeout: int,
    receive_timeout: int,
    scheduler: str | None,
    port: int,
    quiet: bool,
    very_quiet: bool,
    brief: bool,
    debug: bool,
    plain: bool,
    ascii_only: bool,
    ascii_fallback: bool,
    no_table: bool,
    no_offline: bool,
    no_noremote: bool,
    color: str,
):
    """IceQuery: list the worker nodes known to an icecream scheduler.

    Exit codes: 0 success, 1 invalid arguments, 2 connection error,
    3 no usable data, 4 ASCII transliteration unavailable.
    """
    if quiet and very_quiet:
        raise click.UsageError("--quiet and --very-quiet are mutually exclusive")

    setup_logging(log_level_for(debug=debug, quiet=quiet, very_quiet=very_quiet))

    args = QueryArgs(
        net_name=net_name,
        connect_timeout_ms=connect_timeout,
        receive_timeout_ms=receive_timeout,
        scheduler=scheduler,
        port=port,
        quiet=quiet,
        very_quiet=very_quiet,
        brief=brief,
        debug=debug,
        plain=plain,
        ascii=ascii_only,
        ascii_fallback=ascii_fallback,
        no_table=no_table,
        no_offline=no_offline,
        no_noremote=no_noremote,
        color=color.lower(),
    )
    cmd_query(args)


def main(argv: list[str] | None = None):
    """Main entry point for the CLI."""
    try:
        cli.main(args=argv, prog_name="icequery", standalone_mode=False)
    except click.Abort:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
    except click.ClickException as e:
        e.show()
        sys.exit(EXIT_ARGUMENTS)
    except IceQueryError as e:
        if logger.isEnabledFor(logging.ERROR):
            click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)

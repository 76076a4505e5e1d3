"""SARotate CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version
from pathlib import Path

import click

from .cli_types import RunArgs, ShowOrderArgs
from .commands import cmd_run, cmd_show_order
from .constants import DEFAULT_CONFIG_FILE, DEFAULT_LOG_FILE
from .exceptions import CommandFailureError, SARotateError, UserError
from .utils import ensure_parent_dir

# Module logger
logger = logging.getLogger("sarotate")


def setup_logging(debug: bool = False, log_file: Path | None = None) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    if not any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(handler)

    if log_file is None:
        return
    log_path = str(log_file.absolute())
    if any(
        isinstance(h, logging.FileHandler) and h.baseFilename == log_path for h in logger.handlers
    ):
        return
    ensure_parent_dir(log_file)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
    logger.addHandler(file_handler)


def config_option(func):
    """Decorator to add the config file option to a command."""
    return click.option(
        "--config",
        "-c",
        type=click.Path(dir_okay=False),
        default=DEFAULT_CONFIG_FILE,
        show_default=True,
        help="Path to the YAML config file.",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("sarotate"), prog_name="sarotate")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """SARotate: rotate Google service accounts on rclone remotes."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(debug=verbose)


@cli.command("run")
@config_option
@click.option(
    "--logfile",
    "-l",
    type=click.Path(dir_okay=False),
    default=DEFAULT_LOG_FILE,
    show_default=True,
    help="Also write log output to this file.",
)
@click.pass_context
def run(ctx: click.Context, config: str, logfile: str | None):
    """Swap service accounts on every configured remote until stopped.

    Stops cleanly on SIGINT or SIGTERM.
    """
    setup_logging(debug=ctx.obj.get("verbose", False), log_file=Path(logfile) if logfile else None)
    args = RunArgs(config=config, logfile=logfile)
    cmd_run(args)


@cli.command("show-order")
@config_option
@click.option(
    "--recover",
    is_flag=True,
    help="Ask rclone which account each remote uses and reorder accordingly.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit machine-readable JSON to stdout.",
)
def show_order(config: str, recover: bool, json_output: bool):
    """Print the service account usage order for each group.

    No swap commands are issued.
    """
    args = ShowOrderArgs(config=config, recover=recover, json=json_output)
    cmd_show_order(args)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except CommandFailureError as e:
        # Command already reported its error, just exit
        sys.exit(e.rc)
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except SARotateError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)

"""
Command-line interface for stubfetch.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from stubfetch.config import load_config
from stubfetch.__version__ import __version__
from stubfetch.context import StubFetchContext
from stubfetch.exceptions import ConfigError, StubFetchError
from stubfetch.utils.logger import get_logger, setup_logging
from stubfetch.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="STUBFETCH_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="STUBFETCH_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="stubfetch",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Download a PyPI package and its dependencies into one folder.

    \b
    Examples:
      stubfetch fetch micropython-esp32-stubs -r 1.26
      stubfetch -v fetch micropython-rp2-pico-stubs -r 1.20 --layout package

    Use ``stubfetch COMMAND --help`` for command-specific options.
    """
    # NO_COLOR must be settled before the first log record or console line
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    stubfetch_ctx = StubFetchContext()
    stubfetch_ctx.config_path = config or loaded_config.source_path
    stubfetch_ctx.color = color
    stubfetch_ctx.verbose = verbose
    stubfetch_ctx.config = loaded_config
    ctx.obj = stubfetch_ctx

    logger.debug("stubfetch v%s", __version__)
    logger.debug("Config path: %s", stubfetch_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from stubfetch.commands.fetch import fetch  # noqa: E402

cli.add_command(fetch)


def main() -> int:
    """Main entry point for the stubfetch CLI.

    Returns:
        Exit code:
            0   Success
            1   Root package not fetched, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except StubFetchError as exc:
        print_error(str(exc))
        logger.debug(
            "StubFetchError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())

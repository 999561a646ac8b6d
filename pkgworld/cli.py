"""
pkgworld command-line interface.

The ``pkgworld`` group loads configuration once, stores it on a
:class:`~pkgworld.context.PkgWorldContext` and hands that to the
``resolve`` and ``validate`` subcommands. :func:`main` is the console
script entry point and turns every failure into an exit code.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from pkgworld.config import load_config
from pkgworld.__version__ import __version__
from pkgworld.context import PkgWorldContext
from pkgworld.exceptions import ConfigError, PkgWorldError
from pkgworld.utils.logger import get_logger, setup_logging
from pkgworld.utils.console import print_error, print_warning

logger = get_logger("cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# -v enables progress messages, -vv resolver traces
_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="PKGWORLD_CONFIG",
    help="Configuration file (default: ./pkgworld.toml or [tool.pkgworld]).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Show progress (-v) or full resolver traces (-vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="PKGWORLD_COLOR",
    help="Colorize terminal output.",
)
@click.version_option(__version__, prog_name="pkgworld", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Resolve pkg-config packages into a flattened dependency world.

    \b
    Examples:
      pkgworld resolve "glib-2.0 >= 2.50" zlib
      pkgworld resolve --static --format simple libpng
      pkgworld -v validate gtk+-3.0
    """
    level = _VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS) - 1)]
    setup_logging(level=level, verbose=verbose >= 2)

    # rich and the log formatter both honor NO_COLOR
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(EXIT_FAILURE) from exc

    state = PkgWorldContext()
    state.config = config
    state.config_path = config_path or config.source_path
    state.verbose = verbose
    state.color = color
    ctx.obj = state

    logger.debug(
        "pkgworld %s, config=%s, verbosity=%d",
        __version__,
        state.config_path,
        verbose,
    )


from pkgworld.commands.resolve import resolve  # noqa: E402
from pkgworld.commands.validate import validate  # noqa: E402

cli.add_command(resolve)
cli.add_command(validate)


def main() -> int:
    """Run the CLI and return its exit code.

    ``0`` on success, ``1`` when a request cannot be resolved or pkgworld
    fails, ``2`` for usage errors and ``130`` on Ctrl+C.
    """
    try:
        cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except PkgWorldError as exc:
        print_error(str(exc))
        logger.debug("Error details: %r", exc, exc_info=True)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print_warning("Interrupted")
        return EXIT_INTERRUPTED
    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

"""Validate command implementation for pkgworld.

Checks that the requested atoms resolve to a complete dependency world
without printing it. Useful in build scripts::

    $ pkgworld validate "openssl >= 3.0" zlib && ./configure
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from pkgworld.exceptions import InternalDefectError
from pkgworld.commands.resolve import build_client
from pkgworld.core import DependencyQueue, validate_queue
from pkgworld.context import PkgWorldContext, pass_context
from pkgworld.utils import get_logger, print_error, print_success

logger = get_logger("commands.validate")


@click.command()
@click.argument("atoms", nargs=-1, required=True)
@click.option(
    "--max-depth",
    type=int,
    default=None,
    help="Maximum traversal depth (0 = unlimited, 1 = requested packages only).",
)
@click.option(
    "--static",
    "search_private",
    is_flag=True,
    help="Also walk Requires.private edges.",
)
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Additional .pc search directory (searched before configured ones).",
)
@click.option("--quiet", "-q", is_flag=True, help="Only set the exit code.")
@pass_context
def validate(
    ctx: PkgWorldContext,
    atoms: Tuple[str, ...],
    max_depth: Optional[int],
    search_private: bool,
    paths: Tuple[Path, ...],
    quiet: bool,
) -> None:
    """Check that ATOMS resolve to a complete dependency world.

    Exits:
        0 if every atom resolved, 1 otherwise.
    """
    client, depth = build_client(ctx, paths, search_private, max_depth)

    queue = DependencyQueue()
    for atom in atoms:
        queue.push(atom)

    try:
        ok = validate_queue(client, queue, depth)
    except InternalDefectError as exc:
        print_error(f"Internal resolver error, please report this: {exc}")
        logger.exception("Internal defect while validating %s", list(atoms))
        sys.exit(1)
    finally:
        queue.free()

    if not ok:
        if not quiet:
            print_error(f"Unable to resolve: {', '.join(atoms)}")
        sys.exit(1)

    if not quiet:
        print_success(f"Resolved: {', '.join(atoms)}")

"""Resolve command implementation for pkgworld.

Resolves the requested atoms into a flattened dependency world and prints
its public (``Requires``) and private (``Requires.private``) lists, most
frequently resolved packages first.

Typical usage::

    # Resolve two packages with the default search path
    $ pkgworld resolve "glib-2.0 >= 2.50" zlib

    # Walk Requires.private too, with an extra search directory
    $ pkgworld resolve --static --path ./pkgconfig libpng

    # Machine-readable output
    $ pkgworld resolve --format json gtk+-3.0 > world.json
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from pkgworld.models import Dependency, Package
from pkgworld.exceptions import InternalDefectError, PkgWorldError
from pkgworld.context import PkgWorldContext, pass_context
from pkgworld.core import Client, ClientFlags, DependencyQueue, apply_queue
from pkgworld.utils import (
    get_logger,
    get_raw_console,
    print_error,
    print_success,
    print_table,
)

logger = get_logger("commands.resolve")

#: Plain rows of the flattened world, keyed by list name.
WorldRows = Dict[str, List[Dict[str, Any]]]


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
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def resolve(
    ctx: PkgWorldContext,
    atoms: Tuple[str, ...],
    max_depth: Optional[int],
    search_private: bool,
    paths: Tuple[Path, ...],
    output_format: str,
) -> None:
    """Resolve ATOMS into a flattened dependency world.

    Each ATOM is a package name with an optional version constraint, for
    example ``zlib`` or ``"glib-2.0 >= 2.50"``.

    Exits:
        0 if every atom resolved, 1 otherwise.
    """
    client, depth = build_client(ctx, paths, search_private, max_depth)

    queue = DependencyQueue()
    for atom in atoms:
        queue.push(atom)

    rows: WorldRows = {}

    try:
        resolved = apply_queue(client, queue, _collect_rows, depth, rows)
    except InternalDefectError as exc:
        print_error(f"Internal resolver error, please report this: {exc}")
        logger.exception("Internal defect while resolving %s", list(atoms))
        sys.exit(1)
    except PkgWorldError as exc:
        print_error(str(exc))
        sys.exit(1)
    finally:
        queue.free()

    if not resolved:
        print_error(f"Unable to resolve: {', '.join(atoms)}")
        sys.exit(1)

    output_format = output_format.lower()
    if output_format == "json":
        _display_json(rows)
    elif output_format == "simple":
        _display_simple(rows)
    else:
        _display_table(rows)
        print_success(
            f"Resolved {len(rows['required'])} public and "
            f"{len(rows['requires_private'])} private dependencies"
        )


def build_client(
    ctx: PkgWorldContext,
    paths: Tuple[Path, ...],
    search_private: bool,
    max_depth: Optional[int],
) -> Tuple[Client, int]:
    """Create a client from the loaded configuration and CLI overrides.

    Returns:
        ``(client, max_depth)`` with CLI values taking precedence.
    """
    config = ctx.config
    search_paths = [str(p) for p in paths] + list(config.search_paths)

    flags = config.client_flags()
    if search_private:
        flags |= ClientFlags.SEARCH_PRIVATE

    depth = config.max_depth if max_depth is None else max_depth

    logger.debug("Search paths: %s", search_paths)
    client = Client.from_search_paths(search_paths, flags=flags)
    logger.info("Loaded %d package(s)", len(client.registry))

    return client, depth


def _collect_rows(client: Client, world: Package, rows: WorldRows, maxdepth: int) -> bool:
    """Continuation for :func:`apply_queue`: copy the world into plain rows."""
    rows["required"] = [_row(dep) for dep in world.required]
    rows["requires_private"] = [_row(dep) for dep in world.requires_private]
    logger.debug(
        "World resolved at depth %d: %d public, %d private",
        maxdepth,
        len(rows["required"]),
        len(rows["requires_private"]),
    )
    return True


def _row(dep: Dependency) -> Dict[str, Any]:
    match = dep.match
    return {
        "package": match.id,
        "name": match.display_name,
        "version": match.version or "",
        "atom": dep.to_string(),
        "hits": match.hits,
    }


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _display_table(rows: WorldRows) -> None:
    headers = ["Package", "Version", "Requested as", "Hits"]
    column_styles = {
        "Package": {"style": "package", "no_wrap": True},
        "Hits": {"justify": "right"},
    }

    for section, title in (
        ("required", "Requires"),
        ("requires_private", "Requires.private"),
    ):
        data = [
            {
                "Package": row["package"],
                "Version": row["version"],
                "Requested as": row["atom"],
                "Hits": row["hits"],
            }
            for row in rows[section]
        ]
        if not data:
            get_raw_console().print(f"[dim]{title}: (none)[/dim]")
            continue
        print_table(data, headers=headers, title=title, column_styles=column_styles)


def _display_simple(rows: WorldRows) -> None:
    console = get_raw_console()
    for section, suffix in (("required", ""), ("requires_private", " (private)")):
        for row in rows[section]:
            line = " ".join(part for part in (row["package"], row["version"]) if part)
            console.print(f"{line}{suffix}", highlight=False)


def _display_json(rows: WorldRows) -> None:
    click.echo(json.dumps(rows, indent=2))

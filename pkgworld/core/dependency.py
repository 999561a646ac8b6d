"""Dependency atom parser for pkgworld.

Parses pkg-config style dependency strings such as::

    glib-2.0 >= 2.50, gobject-2.0 zlib

into :class:`~pkgworld.models.Dependency` records. Atoms are separated by
commas and/or whitespace; each is a package name optionally followed by a
comparison operator (``<``, ``<=``, ``=``, ``==``, ``!=``, ``>=``, ``>``)
and a version.

The parser never fails loudly: an atom with an unknown operator or with an
operator but no version is dropped and the rest of the string is still
parsed.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Optional

from pkgworld.utils.logger import get_logger
from pkgworld.models import Comparator, Dependency, DependencyFlags, Package

if TYPE_CHECKING:
    from pkgworld.core.client import Client

logger = get_logger("dependency")

_TOKEN_RE = re.compile(r"(,)|([<>=!]+)|([^\s,<>=!]+)")


def parse_dependency_string(
    text: str,
    flags: DependencyFlags = DependencyFlags.NONE,
) -> List[Dependency]:
    """Parse a dependency string into records, in order of appearance.

    Args:
        text: Raw dependency list (``Requires:`` value or a CLI atom).
        flags: Flags stamped on every produced record.

    Returns:
        Parsed records; empty if nothing usable was found.
    """
    deps: List[Dependency] = []
    name: Optional[str] = None
    operator: Optional[str] = None
    # a stray operator swallows the version token that follows it
    discard_next = False

    def flush() -> None:
        nonlocal name, operator
        if name is not None and operator is None:
            deps.append(Dependency(package=name, flags=flags))
        elif name is not None:
            logger.debug("Dropping atom %r: operator %r without version", name, operator)
        name = None
        operator = None

    for comma, op_token, word in _TOKEN_RE.findall(text):
        if comma:
            flush()
            discard_next = False
        elif op_token:
            if name is None or operator is not None:
                logger.debug("Dropping stray operator %r in %r", op_token, text)
                name = None
                operator = None
                discard_next = True
                continue
            operator = op_token
        elif discard_next:
            discard_next = False
        elif operator is not None:
            comparator = Comparator.from_operator(operator)
            if comparator is None:
                logger.debug("Dropping atom %r: unknown operator %r", name, operator)
            else:
                deps.append(
                    Dependency(
                        package=name,
                        compare=comparator,
                        version=word,
                        flags=flags,
                    )
                )
            name = None
            operator = None
        else:
            flush()
            name = word

    flush()
    return deps


def parse_dependencies(
    client: Client,
    owner: Package,
    deps: List[Dependency],
    text: str,
    depth: int,
    flags: DependencyFlags = DependencyFlags.NONE,
) -> int:
    """Parse ``text`` and append the resulting records to ``deps``.

    Args:
        client: Resolve session, used for tracing.
        owner: Package the records are attached to.
        deps: Target list (``owner.required`` or ``owner.requires_private``).
        text: Dependency string.
        depth: Traversal depth the records are created at.
        flags: Flags stamped on every produced record.

    Returns:
        Number of records appended.
    """
    parsed = parse_dependency_string(text, flags)
    deps.extend(parsed)

    for dep in parsed:
        client.trace(
            "%s: added dependency %s at depth %d", owner.id, dep.to_string(), depth
        )

    return len(parsed)

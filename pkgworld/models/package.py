"""
Package data model for pkgworld.

This module defines the node type of the dependency graph. A
:class:`Package` is either a real package loaded from a ``.pc`` file or
a synthetic one, such as the per-resolve "world" root built by
:func:`create_world`.
"""

from __future__ import annotations

from enum import IntFlag
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pkgworld.models.dependency import Dependency
from pkgworld.constants import WORLD_PACKAGE_ID, WORLD_PACKAGE_NAME


class PackageFlags(IntFlag):
    """Property flags carried by a package node."""

    NONE = 0
    STATIC = 0x01
    VIRTUAL = 0x02
    # set while the traversal driver is below this node; breaks cycles
    SEEN = 0x04


@dataclass(eq=False)
class Package:
    """
    A node of the dependency graph.

    Packages compare by identity: two nodes with the same ``id`` loaded
    from different files are different nodes.

    Attributes:
        id: Stable identifier, normally the ``.pc`` file stem.
        realname: Display name (the ``Name:`` field).
        version: Version string, if known.
        description: Free-form description.
        flags: Package property flags.
        serial: Generation marker, the last client serial that visited
            this node.
        hits: How many times the matcher resolved a dependency to this
            node during the current resolve pass.
        required: Public dependencies (``Requires``).
        requires_private: Private dependencies (``Requires.private``).
        conflicts: Declared conflicts (``Conflicts``).
        provides: Alias atoms this package answers to (``Provides``).
        variables: Expanded ``.pc`` variables.
        fields: Remaining keyword fields (``Cflags``, ``Libs``, ...).
        filename: Source file, if loaded from disk.
    """

    id: str
    realname: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    flags: PackageFlags = PackageFlags.NONE
    serial: int = 0
    hits: int = 0
    required: List[Dependency] = field(default_factory=list)
    requires_private: List[Dependency] = field(default_factory=list)
    conflicts: List[Dependency] = field(default_factory=list)
    provides: List[Dependency] = field(default_factory=list)
    variables: Dict[str, str] = field(default_factory=dict, repr=False)
    fields: Dict[str, str] = field(default_factory=dict, repr=False)
    filename: Optional[str] = field(default=None, repr=False)

    @property
    def is_virtual(self) -> bool:
        return bool(self.flags & PackageFlags.VIRTUAL)

    @property
    def is_static(self) -> bool:
        return bool(self.flags & PackageFlags.STATIC)

    @property
    def display_name(self) -> str:
        """Return ``realname`` when set, else ``id``."""
        return self.realname or self.id

    def release(self) -> None:
        """Destroy every dependency record held by this package.

        Matched packages referenced by those records are left alone; they
        are owned by the registry, not by this node.
        """
        for deps in (
            self.required,
            self.requires_private,
            self.conflicts,
            self.provides,
        ):
            for dep in deps:
                dep.release()
            deps.clear()


def create_world() -> Package:
    """Build the synthetic root package for one resolve pass."""
    return Package(
        id=WORLD_PACKAGE_ID,
        realname=WORLD_PACKAGE_NAME,
        flags=PackageFlags.STATIC | PackageFlags.VIRTUAL,
    )

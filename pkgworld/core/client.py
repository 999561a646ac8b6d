"""Resolver session state for pkgworld.

A :class:`Client` is the session every resolve pass runs against. It owns
the :class:`~pkgworld.core.registry.PackageRegistry`, the behavior flags,
and the generation counter (``serial``) that the traversal driver and the
flattener use to recognise nodes already handled in the current pass.

A client is not thread-safe. Two resolve passes must never run against the
same client concurrently, or generation markers from one pass would be
misread by the other.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Iterable, Optional

from pkgworld.utils.logger import get_logger
from pkgworld.core.registry import PackageRegistry

logger = get_logger("client")

__all__ = ["Client", "ClientFlags", "ResolveFlags"]


class ClientFlags(IntFlag):
    """Behavior switches for a resolve session."""

    NONE = 0
    # walk Requires.private edges as well (pkg-config --static)
    SEARCH_PRIVATE = 0x01
    # report resolution errors in the log but not in the result
    SKIP_ERRORS = 0x02
    # do not fall back to Provides aliases when a name is not registered
    SKIP_PROVIDES = 0x04
    SKIP_CONFLICTS = 0x08


class ResolveFlags(IntFlag):
    """Result code of a traversal or resolve pass. ``OK`` is falsy."""

    OK = 0
    PACKAGE_NOT_FOUND = 0x01
    PACKAGE_VER_MISMATCH = 0x02
    PACKAGE_CONFLICT = 0x04
    DEPGRAPH_BREAK = 0x08


class Client:
    """Resolve session.

    Args:
        registry: Packages available to this session. A fresh empty
            registry is created when omitted.
        flags: Behavior switches.
    """

    def __init__(
        self,
        registry: Optional[PackageRegistry] = None,
        flags: ClientFlags = ClientFlags.NONE,
    ) -> None:
        self.registry: PackageRegistry = (
            registry if registry is not None else PackageRegistry()
        )
        self.flags: ClientFlags = flags
        self.serial: int = 0

    @classmethod
    def from_search_paths(
        cls,
        search_paths: Iterable[str],
        flags: ClientFlags = ClientFlags.NONE,
    ) -> "Client":
        """Create a client whose registry is loaded from ``.pc`` directories."""
        registry = PackageRegistry.from_search_paths(search_paths)
        return cls(registry=registry, flags=flags)

    def next_serial(self) -> int:
        """Advance and return the generation counter."""
        self.serial += 1
        return self.serial

    def reset_hits(self) -> None:
        """Zero the ``hits`` counter of every registered package."""
        for package in self.registry:
            package.hits = 0

    def has_flag(self, flag: ClientFlags) -> bool:
        return bool(self.flags & flag)

    def trace(self, message: str, *args: Any) -> None:
        """Emit a resolver trace message at DEBUG level."""
        logger.debug(message, *args)

    def __repr__(self) -> str:
        return (
            f"Client(packages={len(self.registry)}, "
            f"flags={self.flags!r}, serial={self.serial})"
        )

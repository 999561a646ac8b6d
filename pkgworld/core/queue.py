"""Dependency resolution queue for pkgworld.

This module turns a list of requested atoms into a single, deduplicated,
dependency-complete "world" graph:

1. **Queue**: :class:`DependencyQueue` holds the requested atoms in
   insertion order, duplicates included.
2. **Compile**: :func:`compile_queue` parses every atom into the
   ``required`` list of a synthetic world package.
3. **Collect**: the graph is walked from the world package and
   :func:`collect_dependents` copies every reached package's
   ``Requires`` and ``Requires.private`` into the world's lists.
4. **Flatten**: :func:`flatten_dependency_set` deduplicates each world
   list and orders it by how often each package was resolved.

:func:`apply_queue` runs the whole pipeline and hands the finished world
to a callback; :func:`validate_queue` only reports whether the queue is
resolvable. This module performs no I/O.

Typical usage::

    queue = DependencyQueue()
    queue.push("gtk+-3.0 >= 3.20")
    queue.push("zlib")

    if not validate_queue(client, queue, 0):
        raise SystemExit(1)
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, Set

from pkgworld.utils.logger import get_logger
from pkgworld.core.traverse import traverse
from pkgworld.constants import UNLIMITED_DEPTH
from pkgworld.exceptions import InternalDefectError
from pkgworld.core.matcher import verify_dependency
from pkgworld.core.dependency import parse_dependencies
from pkgworld.core.client import Client, ResolveFlags
from pkgworld.models import Dependency, Package, create_world

logger = get_logger("queue")

# Public API
__all__ = [
    "ApplyFunc",
    "DependencyQueue",
    "apply_queue",
    "collect_dependents",
    "compile_queue",
    "flatten_dependency_set",
    "queue_free",
    "queue_push",
    "validate_queue",
    "verify_queue",
]

#: Callback signature for :func:`apply_queue`:
#: ``func(client, world, data, maxdepth) -> bool``.
ApplyFunc = Callable[[Client, Package, Any, int], bool]


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


class DependencyQueue:
    """Ordered list of requested dependency atoms.

    Atoms are stored verbatim; syntax is only checked when the queue is
    compiled, and duplicates are resolved by flattening.
    """

    def __init__(self) -> None:
        self._atoms: List[str] = []

    def push(self, atom: str) -> None:
        """Append a requested atom, e.g. ``"libfoo >= 1.2"``."""
        self._atoms.append(str(atom))

    def free(self) -> None:
        """Release every queued atom."""
        self._atoms.clear()

    def __iter__(self) -> Iterator[str]:
        return iter(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def __repr__(self) -> str:
        return f"DependencyQueue({self._atoms!r})"


def queue_push(queue: DependencyQueue, atom: str) -> None:
    """Push a requested atom onto ``queue``."""
    queue.push(atom)


def queue_free(queue: DependencyQueue) -> None:
    """Release every atom held by ``queue``."""
    queue.free()


# ---------------------------------------------------------------------------
# Compile & collect
# ---------------------------------------------------------------------------


def compile_queue(client: Client, world: Package, queue: DependencyQueue) -> bool:
    """Compile the queued atoms into ``world.required``.

    Atoms are parsed in insertion order at depth 0. Malformed atoms add
    nothing.

    Args:
        client: Resolve session.
        world: Root of the dependency graph.
        queue: Requested atoms.

    Returns:
        True if ``world.required`` is non-empty afterwards.
    """
    for atom in queue:
        parse_dependencies(client, world, world.required, atom, 0)

    return bool(world.required)


def collect_dependents(client: Client, package: Package, world: Package) -> None:
    """Traversal visitor copying ``package``'s dependencies into ``world``.

    The world package itself is skipped, otherwise it would copy its own
    freshly collected records back into itself.
    """
    if package is world:
        return

    for dep in package.required:
        world.required.append(dep.copy())

    for dep in package.requires_private:
        world.requires_private.append(dep.copy())


# ---------------------------------------------------------------------------
# Flatten
# ---------------------------------------------------------------------------


def flatten_dependency_set(client: Client, deps: List[Dependency]) -> None:
    """Deduplicate ``deps`` in place and order it by descending hits.

    A record is kept if it resolves to a package and neither that package
    nor a record with the same atom name was already kept by this call.
    Survivors are stable-sorted by their package's ``hits``, so ties keep
    their original order. Rejected records are released.

    The caller is expected to have advanced ``client.serial`` for this
    call; kept packages are stamped with it.

    Raises:
        InternalDefectError: A record resolved to a package but has no
            ``match``.
    """
    kept: List[Dependency] = []
    kept_packages: Set[Package] = set()
    kept_names: Set[str] = set()
    rejected: List[Dependency] = []

    for dep in deps:
        package, _ = verify_dependency(client, dep)
        if package is None:
            rejected.append(dep)
            continue

        if package in kept_packages:
            rejected.append(dep)
            continue

        if dep.match is None:
            client.trace("unmatched dependency <%s>", dep.package)
            raise InternalDefectError(
                "Dependency resolved without a match", package=dep.package
            )

        # two aliases of one virtual package may not share a node yet
        client.trace("dedup %s against %d kept record(s)", dep.package, len(kept))
        if dep.package in kept_names:
            client.trace("skipping %s, already kept", dep.package)
            rejected.append(dep)
            continue

        package.serial = client.serial
        kept_packages.add(package)
        kept_names.add(dep.package)
        kept.append(dep)
        client.trace("added %s to dependency table", dep.package)

    kept = sorted(kept, key=lambda d: d.match.hits, reverse=True)

    deps[:] = kept

    for slot, dep in enumerate(deps):
        client.trace(
            "slot %d: dep %s matched to %s hits %d",
            slot,
            dep.package,
            dep.match.id,
            dep.match.hits,
        )

    for dep in rejected:
        dep.release()


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def verify_queue(
    client: Client,
    world: Package,
    queue: DependencyQueue,
    maxdepth: int,
) -> ResolveFlags:
    """Compile, collect and flatten ``queue`` into ``world``.

    Args:
        client: Resolve session.
        world: Root of the dependency graph; filled in place.
        queue: Requested atoms.
        maxdepth: Traversal depth budget; negative means unlimited.

    Returns:
        ``ResolveFlags.OK`` on success, ``DEPGRAPH_BREAK`` if nothing was
        requested, or the traversal's error flags unchanged.
    """
    # hits order the flattened lists, so they only count this pass
    client.reset_hits()

    if not compile_queue(client, world, queue):
        logger.debug("No dependencies compiled from %d atom(s)", len(queue))
        return ResolveFlags.DEPGRAPH_BREAK

    result = traverse(client, world, collect_dependents, world, maxdepth)
    if result != ResolveFlags.OK:
        return result

    client.next_serial()
    client.trace("flattening requires deps")
    flatten_dependency_set(client, world.required)

    client.next_serial()
    client.trace("flattening requires.private deps")
    flatten_dependency_set(client, world.requires_private)

    return ResolveFlags.OK


def _normalize_depth(maxdepth: int) -> int:
    # 0 means "not set"; a depth of 1 stops right below the world package
    return UNLIMITED_DEPTH if maxdepth == 0 else maxdepth


def apply_queue(
    client: Client,
    queue: DependencyQueue,
    func: ApplyFunc,
    maxdepth: int,
    data: Any = None,
) -> bool:
    """Resolve ``queue`` and feed the flattened world to ``func``.

    The world package is released before returning, whatever happens; the
    callback must not keep a reference to it.

    Args:
        client: Resolve session.
        queue: Requested atoms.
        func: Callback receiving ``(client, world, data, maxdepth)``.
        maxdepth: Traversal depth budget; 0 is treated as unlimited.
        data: Opaque value handed to ``func``.

    Returns:
        False if resolution failed, otherwise the callback's result.
    """
    world = create_world()
    maxdepth = _normalize_depth(maxdepth)

    try:
        result = verify_queue(client, world, queue, maxdepth)
        if result != ResolveFlags.OK:
            logger.debug("Resolution failed: %r", result)
            return False

        return bool(func(client, world, data, maxdepth))
    finally:
        world.release()


def validate_queue(client: Client, queue: DependencyQueue, maxdepth: int) -> bool:
    """Return whether ``queue`` resolves to a complete world graph."""
    world = create_world()
    maxdepth = _normalize_depth(maxdepth)

    try:
        return verify_queue(client, world, queue, maxdepth) == ResolveFlags.OK
    finally:
        world.release()

"""Graph traversal driver for pkgworld.

:func:`traverse` walks the dependency graph depth-first from a root
package, in list order, calling a visitor once per package reached. It is
the only place packages are resolved while walking, so it is also where
resolution errors are reported.

Depth semantics: the root is visited at ``maxdepth``; each edge costs one
unit; a node reached with a budget of 0 is not visited. A negative budget
never reaches 0 and therefore means "unlimited". Records a visitor appends
to the list being walked are walked as well, at that list's depth.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from pkgworld.utils.logger import get_logger
from pkgworld.models import Dependency, Package, PackageFlags
from pkgworld.core.matcher import find_package, verify_dependency
from pkgworld.core.client import Client, ClientFlags, ResolveFlags

logger = get_logger("traverse")

#: Visitor signature: ``visitor(client, package, data)``.
TraverseFunc = Callable[[Client, Package, Any], None]


def traverse(
    client: Client,
    root: Package,
    func: Optional[TraverseFunc],
    data: Any,
    maxdepth: int,
) -> ResolveFlags:
    """Walk the graph below ``root``, calling ``func`` on every package.

    A virtual root starts a new pass: the client serial is advanced so
    that nodes stamped by earlier passes are visited again. The root
    itself is never stamped.

    Args:
        client: Resolve session.
        root: Package to start from.
        func: Visitor, or None to only resolve.
        data: Opaque value handed to the visitor.
        maxdepth: Depth budget; negative means unlimited.

    Returns:
        Accumulated :class:`ResolveFlags`; ``OK`` if every edge resolved.
    """
    if root.is_virtual:
        client.next_serial()

    return _traverse_node(client, root, func, data, maxdepth, is_root=True)


def _traverse_node(
    client: Client,
    node: Package,
    func: Optional[TraverseFunc],
    data: Any,
    maxdepth: int,
    *,
    is_root: bool = False,
) -> ResolveFlags:
    if maxdepth == 0:
        return ResolveFlags.OK

    if not is_root:
        if node.serial == client.serial:
            return ResolveFlags.OK
        node.serial = client.serial

    client.trace("%s: level %d, serial %d", node.id, maxdepth, client.serial)

    if func is not None:
        func(client, node, data)

    eflags = ResolveFlags.OK

    if not client.has_flag(ClientFlags.SKIP_CONFLICTS):
        eflags |= _walk_conflicts(client, node)
        if eflags:
            return eflags

    eflags |= _walk_list(client, node, node.required, func, data, maxdepth)
    if eflags:
        return eflags

    if client.has_flag(ClientFlags.SEARCH_PRIVATE):
        eflags |= _walk_list(client, node, node.requires_private, func, data, maxdepth)

    return eflags


def _walk_list(
    client: Client,
    parent: Package,
    deps: List[Dependency],
    func: Optional[TraverseFunc],
    data: Any,
    maxdepth: int,
) -> ResolveFlags:
    eflags = ResolveFlags.OK

    # the visitor may append to this very list (the world node collects
    # into its own lists); appended records are walked too
    index = 0
    while index < len(deps):
        dep = deps[index]
        index += 1
        if not dep.package:
            continue

        package, local_flags = verify_dependency(client, dep)
        if local_flags:
            _report_graph_error(client, parent, dep, local_flags)
            if not client.has_flag(ClientFlags.SKIP_ERRORS):
                eflags |= local_flags
            continue

        if package.flags & PackageFlags.SEEN:
            client.trace("%s: cycle through %s, skipping", parent.id, package.id)
            continue

        package.flags |= PackageFlags.SEEN
        try:
            eflags |= _traverse_node(client, package, func, data, maxdepth - 1)
        finally:
            package.flags &= ~PackageFlags.SEEN

    return eflags


def _walk_conflicts(client: Client, node: Package) -> ResolveFlags:
    """Check ``node``'s declared conflicts against its own requirements."""
    eflags = ResolveFlags.OK

    for conflict in node.conflicts:
        for dep in node.required:
            if dep.package != conflict.package:
                continue

            package = find_package(client, dep)
            if package is None:
                continue

            if conflict.compare.satisfies(package.version, conflict.version):
                logger.warning(
                    "Version '%s' of '%s' conflicts with '%s' due to satisfying "
                    "conflict rule '%s'.",
                    package.version,
                    package.id,
                    node.id,
                    conflict.to_string(),
                )
                eflags |= ResolveFlags.PACKAGE_CONFLICT

    return eflags


def _report_graph_error(
    client: Client,
    parent: Package,
    dep: Dependency,
    flags: ResolveFlags,
) -> None:
    log = client.trace if client.has_flag(ClientFlags.SKIP_ERRORS) else logger.warning

    if flags & ResolveFlags.PACKAGE_NOT_FOUND:
        log(
            "Package '%s', required by '%s', not found",
            dep.package,
            parent.id,
        )
    elif flags & ResolveFlags.PACKAGE_VER_MISMATCH:
        found = client.registry.find(dep.package)
        log(
            "Package dependency requirement '%s' could not be satisfied "
            "(found version %s), required by '%s'",
            dep.to_string(),
            found.version if found is not None else "unknown",
            parent.id,
        )

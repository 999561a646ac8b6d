"""Dependency matcher for pkgworld.

:func:`verify_dependency` answers "which registered package does this
dependency record refer to, and does it satisfy the record's version
constraint". Every successful resolution bumps the package's ``hits``
counter; the flattener uses that count to order the final world lists.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pkgworld.models import Dependency, Package
from pkgworld.core.client import Client, ClientFlags, ResolveFlags


def find_package(client: Client, dep: Dependency) -> Optional[Package]:
    """Locate the package ``dep`` names, falling back to ``Provides`` aliases."""
    package = client.registry.find(dep.package)
    if package is not None:
        return package

    if client.has_flag(ClientFlags.SKIP_PROVIDES):
        return None

    return client.registry.scan_providers(dep)


def verify_dependency(
    client: Client, dep: Dependency
) -> Tuple[Optional[Package], ResolveFlags]:
    """Resolve ``dep`` against the client's registry.

    On success ``dep.match`` is set to the resolved package and the
    package's ``hits`` counter is incremented.

    Args:
        client: Resolve session.
        dep: Dependency record to resolve.

    Returns:
        ``(package, ResolveFlags.OK)`` on success, otherwise ``(None, flags)``
        with ``PACKAGE_NOT_FOUND`` or ``PACKAGE_VER_MISMATCH``.
    """
    package = find_package(client, dep)
    if package is None:
        client.trace("%s: no package found", dep.package)
        return None, ResolveFlags.PACKAGE_NOT_FOUND

    have = package.version
    if package.id != dep.package:
        # resolved through an alias: check the version the alias declares
        for provided in package.provides:
            if provided.package == dep.package and provided.version:
                have = provided.version
                break

    if not dep.compare.satisfies(have, dep.version):
        client.trace(
            "%s: version %s does not satisfy %s",
            package.id,
            have,
            dep.to_string(),
        )
        return None, ResolveFlags.PACKAGE_VER_MISMATCH

    dep.match = package
    package.hits += 1
    client.trace("%s: matched %s (hits %d)", dep.to_string(), package.id, package.hits)
    return package, ResolveFlags.OK

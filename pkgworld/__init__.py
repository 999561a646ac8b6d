"""
pkgworld: world-graph dependency resolution for pkg-config style metadata.

pkgworld compiles a list of requested package atoms (``libfoo >= 1.2``)
into a single deduplicated "world" graph holding everything the requested
packages transitively need, split into public (``Requires``) and private
(``Requires.private``) link requirements.

Typical usage::

    from pkgworld import Client, DependencyQueue, apply_queue

    client = Client.from_search_paths(["/usr/lib/pkgconfig"])
    queue = DependencyQueue()
    queue.push("zlib >= 1.2")

    def show(client, world, data, maxdepth):
        for dep in world.required:
            print(dep.package, dep.match.version)
        return True

    apply_queue(client, queue, show, 0, None)
"""

from __future__ import annotations

from pkgworld.__version__ import __version__
from pkgworld.core import (
    Client,
    ClientFlags,
    DependencyQueue,
    PackageRegistry,
    ResolveFlags,
    apply_queue,
    compile_queue,
    validate_queue,
    verify_queue,
)
from pkgworld.models import Comparator, Dependency, Package, PackageFlags

__author__ = "pkgworld Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency world-graph resolution for pkg-config metadata."

__all__ = [
    "__version__",
    "Client",
    "ClientFlags",
    "Comparator",
    "Dependency",
    "DependencyQueue",
    "Package",
    "PackageFlags",
    "PackageRegistry",
    "ResolveFlags",
    "apply_queue",
    "compile_queue",
    "validate_queue",
    "verify_queue",
]

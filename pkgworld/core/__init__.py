"""
Core functionality exports for pkgworld.

Importing from here keeps user-facing imports clean and stable:

    from pkgworld.core import Client, DependencyQueue, apply_queue
"""

from __future__ import annotations

from pkgworld.core.registry import PackageRegistry
from pkgworld.core.client import Client, ClientFlags, ResolveFlags
from pkgworld.core.traverse import traverse
from pkgworld.core.matcher import find_package, verify_dependency
from pkgworld.core.pcfile import load_pc_file, parse_pc_string
from pkgworld.core.dependency import parse_dependencies, parse_dependency_string
from pkgworld.core.queue import (
    DependencyQueue,
    apply_queue,
    collect_dependents,
    compile_queue,
    flatten_dependency_set,
    queue_free,
    queue_push,
    validate_queue,
    verify_queue,
)

__all__ = [
    "Client",
    "ClientFlags",
    "DependencyQueue",
    "PackageRegistry",
    "ResolveFlags",
    "apply_queue",
    "collect_dependents",
    "compile_queue",
    "find_package",
    "flatten_dependency_set",
    "load_pc_file",
    "parse_dependencies",
    "parse_dependency_string",
    "parse_pc_string",
    "queue_free",
    "queue_push",
    "traverse",
    "validate_queue",
    "verify_dependency",
]

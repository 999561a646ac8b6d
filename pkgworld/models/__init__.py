"""
Unified data model exports for pkgworld.

Example:
    >>> from pkgworld.models import Package, Dependency, Comparator
"""

from __future__ import annotations

from pkgworld.models.dependency import Comparator, Dependency, DependencyFlags
from pkgworld.models.package import Package, PackageFlags, create_world

__all__ = [
    "Comparator",
    "Dependency",
    "DependencyFlags",
    "Package",
    "PackageFlags",
    "create_world",
]

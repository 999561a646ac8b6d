"""Package registry for pkgworld.

The registry owns every real :class:`~pkgworld.models.Package` a client
can resolve to. Dependency records only ever hold non-owning references to
registry packages, so releasing a world graph never touches them.

Typical usage::

    registry = PackageRegistry.from_search_paths(["/usr/lib/pkgconfig"])
    zlib = registry.find("zlib")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Union

from pkgworld.models import Dependency, Package
from pkgworld.core.pcfile import load_pc_file
from pkgworld.exceptions import FileOperationError, ParseError
from pkgworld.utils import find_pc_files, get_logger

logger = get_logger("registry")


class PackageRegistry:
    """Owning store of packages keyed by identifier.

    The first package registered under an identifier wins; later ones are
    ignored, the same way earlier search directories shadow later ones.
    """

    def __init__(self) -> None:
        self._packages: Dict[str, Package] = {}

    @classmethod
    def from_search_paths(
        cls, search_paths: Iterable[Union[str, Path]]
    ) -> "PackageRegistry":
        """Build a registry from ``.pc`` files in the given directories."""
        registry = cls()
        for directory in search_paths:
            registry.load_directory(directory)
        return registry

    def add(self, package: Package) -> bool:
        """Register a package.

        Returns:
            True if the package was added, False if the identifier was
            already taken.
        """
        if package.id in self._packages:
            logger.debug(
                "Ignoring %s from %s: already registered",
                package.id,
                package.filename or "<memory>",
            )
            return False
        self._packages[package.id] = package
        return True

    def find(self, name: str) -> Optional[Package]:
        """Return the package registered as ``name``, if any."""
        return self._packages.get(name)

    def scan_providers(self, dep: Dependency) -> Optional[Package]:
        """Return the first package whose ``Provides`` satisfies ``dep``."""
        for package in self._packages.values():
            for provided in package.provides:
                if provided.package != dep.package:
                    continue
                have = provided.version or package.version
                if dep.compare.satisfies(have, dep.version):
                    logger.debug(
                        "%s provided by %s (%s)", dep.package, package.id, have
                    )
                    return package
        return None

    def load_directory(self, directory: Union[str, Path]) -> int:
        """Load every ``.pc`` file in ``directory``.

        Unreadable or malformed files are logged and skipped so that one
        broken file does not hide the rest of the directory.

        Returns:
            Number of packages added.
        """
        added = 0
        for path in find_pc_files(directory):
            try:
                package = load_pc_file(path)
            except (FileOperationError, ParseError) as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue
            if self.add(package):
                added += 1

        logger.debug("Loaded %d package(s) from %s", added, directory)
        return added

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

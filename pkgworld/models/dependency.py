"""
Dependency record data model for pkgworld.

A :class:`Dependency` is one edge of the dependency graph: the atom that
was requested (``libfoo >= 1.2``) plus, once the matcher has resolved it,
a reference to the :class:`~pkgworld.models.package.Package` it matched.
The reference is non-owning; packages belong to the
:class:`~pkgworld.core.registry.PackageRegistry`.
"""

from __future__ import annotations

from enum import Enum, IntFlag
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pkgworld.utils.version_utils import compare_versions

if TYPE_CHECKING:
    from pkgworld.models.package import Package


class Comparator(Enum):
    """Version comparison operator attached to a dependency atom."""

    ANY = "(any)"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_EQUAL = "<="
    GREATER_THAN_EQUAL = ">="
    EQUAL = "="
    NOT_EQUAL = "!="

    @classmethod
    def from_operator(cls, operator: str) -> Optional["Comparator"]:
        """Return the comparator for an operator token, or None if unknown.

        ``==`` is accepted as a synonym for ``=``.
        """
        if operator == "==":
            return cls.EQUAL
        for comparator in cls:
            if comparator is not cls.ANY and comparator.value == operator:
                return comparator
        return None

    def satisfies(self, have: Optional[str], want: Optional[str]) -> bool:
        """Check whether version ``have`` satisfies ``self`` against ``want``.

        Args:
            have: Version of the candidate package.
            want: Version requested by the atom.

        Returns:
            True if the constraint holds. ``ANY`` always holds.
        """
        if self is Comparator.ANY:
            return True

        result = compare_versions(have, want)

        if self is Comparator.LESS_THAN:
            return result < 0
        if self is Comparator.GREATER_THAN:
            return result > 0
        if self is Comparator.LESS_THAN_EQUAL:
            return result <= 0
        if self is Comparator.GREATER_THAN_EQUAL:
            return result >= 0
        if self is Comparator.EQUAL:
            return result == 0
        return result != 0


class DependencyFlags(IntFlag):
    """Property flags carried by a dependency record."""

    NONE = 0
    PRIVATE = 0x1


@dataclass
class Dependency:
    """
    A single requested or declared dependency.

    Attributes:
        package: Atom name as written (``libfoo``), also the textual
            identity used to deduplicate aliases during flattening.
        compare: Version comparator.
        version: Requested version, or None for ``ANY``.
        flags: Dependency property flags.
        match: Package this record resolved to. Non-owning.
    """

    package: str
    compare: Comparator = Comparator.ANY
    version: Optional[str] = None
    flags: DependencyFlags = DependencyFlags.NONE
    match: Optional["Package"] = field(default=None, repr=False, compare=False)

    @property
    def hits(self) -> int:
        """Resolution count of the matched package, 0 while unresolved."""
        return self.match.hits if self.match is not None else 0

    @property
    def is_private(self) -> bool:
        return bool(self.flags & DependencyFlags.PRIVATE)

    def copy(self) -> "Dependency":
        """Return an independent record sharing the same ``match``."""
        return Dependency(
            package=self.package,
            compare=self.compare,
            version=self.version,
            flags=self.flags,
            match=self.match,
        )

    def release(self) -> None:
        """Drop the back-reference to the matched package."""
        self.match = None

    def to_string(self) -> str:
        """Render the atom in pkg-config syntax, e.g. ``libfoo >= 1.2``."""
        if self.compare is Comparator.ANY or self.version is None:
            return self.package
        return f"{self.package} {self.compare.value} {self.version}"

    def __str__(self) -> str:
        return self.to_string()

"""Shared fixtures for pkgworld tests."""

from __future__ import annotations

import logging
from typing import Callable, Generator

import pytest

from pkgworld.core import Client, ClientFlags, PackageRegistry
from pkgworld.core.dependency import parse_dependency_string
from pkgworld.models import DependencyFlags, Package
from pkgworld.utils.console import reconfigure_console


@pytest.fixture(autouse=True)
def reset_pkgworld_logging() -> Generator[None, None, None]:
    """Undo any ``setup_logging`` call so caplog keeps seeing records."""
    yield
    root_logger = logging.getLogger("pkgworld")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    reconfigure_console()


@pytest.fixture
def make_package() -> Callable[..., Package]:
    """Return a factory building in-memory packages from dependency strings."""

    def _make(
        package_id: str,
        version: str = "1.0",
        *,
        requires: str = "",
        requires_private: str = "",
        provides: str = "",
        conflicts: str = "",
    ) -> Package:
        return Package(
            id=package_id,
            realname=package_id,
            version=version,
            required=parse_dependency_string(requires),
            requires_private=parse_dependency_string(
                requires_private, DependencyFlags.PRIVATE
            ),
            provides=parse_dependency_string(provides),
            conflicts=parse_dependency_string(conflicts),
        )

    return _make


@pytest.fixture
def make_client() -> Callable[..., Client]:
    """Return a factory building a client over the given packages."""

    def _make(*packages: Package, flags: ClientFlags = ClientFlags.NONE) -> Client:
        registry = PackageRegistry()
        for package in packages:
            registry.add(package)
        return Client(registry=registry, flags=flags)

    return _make

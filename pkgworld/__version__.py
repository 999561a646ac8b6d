"""Version of the pkgworld distribution.

``__version__`` is read by ``pyproject.toml`` consumers and by
``pkgworld --version``; keep it a valid PEP 440 string.
"""

from __future__ import annotations

from packaging.version import Version

__version__ = "0.1.0.dev0"

#: Parsed form of :data:`__version__`, e.g. for ``VERSION_INFO.is_devrelease``.
VERSION_INFO = Version(__version__)

VERSION_STRING = f"pkgworld {__version__}"

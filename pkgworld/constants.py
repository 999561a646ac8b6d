"""
Centralized constants for pkgworld.

This module defines immutable configuration values used across pkgworld,
including the synthetic world package identity, pkg-config file conventions,
configuration defaults, and logging formats. All values are intended to be
treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# World package
# ---------------------------------------------------------------------------

#: Identifier of the synthetic root package built for every resolve pass.
WORLD_PACKAGE_ID: Final[str] = "virtual:world"

#: Display name of the synthetic root package.
WORLD_PACKAGE_NAME: Final[str] = "virtual world package"

# ---------------------------------------------------------------------------
# Traversal depth
# ---------------------------------------------------------------------------

#: Depth value meaning "no limit" for the traversal driver.
UNLIMITED_DEPTH: Final[int] = -1

# ---------------------------------------------------------------------------
# pkg-config files
# ---------------------------------------------------------------------------

#: File extension of package metadata files.
PC_FILE_SUFFIX: Final[str] = ".pc"

#: Environment variable holding additional search directories.
PKG_CONFIG_PATH_ENV: Final[str] = "PKG_CONFIG_PATH"

#: Builtin variable expanded to the directory containing the ``.pc`` file.
PCFILEDIR_VARIABLE: Final[str] = "pcfiledir"

#: Keyword fields understood by the ``.pc`` loader.
PC_FIELDS: Final[Sequence[str]] = (
    "Name",
    "Description",
    "Version",
    "URL",
    "Requires",
    "Requires.private",
    "Conflicts",
    "Provides",
    "Cflags",
    "Cflags.private",
    "Libs",
    "Libs.private",
)

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Default maximum traversal depth (0 is normalized to unlimited).
DEFAULT_MAX_DEPTH: Final[int] = 0

#: Whether ``Requires.private`` edges are walked by default.
DEFAULT_SEARCH_PRIVATE: Final[bool] = False

#: Whether ``Provides`` aliases are ignored by default.
DEFAULT_SKIP_PROVIDES: Final[bool] = False

#: Whether resolution errors are tolerated by default.
DEFAULT_SKIP_ERRORS: Final[bool] = False

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading ``.pc`` files.
MAX_FILE_SIZE: Final[int] = 1 * 1024 * 1024  # 1 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

"""
Shared helpers for pkgworld: console output, logging, ``.pc`` file access
and version comparison.
"""

from __future__ import annotations

from pkgworld.utils.filesystem import find_pc_files, safe_read_file
from pkgworld.utils.version_utils import compare_versions
from pkgworld.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)
from pkgworld.utils.console import (
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

__all__ = [
    "compare_versions",
    "disable_logging",
    "find_pc_files",
    "get_logger",
    "get_raw_console",
    "is_logging_configured",
    "print_error",
    "print_success",
    "print_table",
    "print_warning",
    "reconfigure_console",
    "safe_read_file",
    "setup_logging",
]

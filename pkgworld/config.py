"""Configuration for pkgworld.

Settings come from, in increasing precedence:

1. built-in defaults;
2. a TOML file, the first found of
   - the path given with ``--config`` (or ``PKGWORLD_CONFIG``),
   - ``pkgworld.toml`` in the working directory (``[pkgworld]`` table),
   - ``pyproject.toml`` in the working directory (``[tool.pkgworld]`` table);
3. ``PKG_CONFIG_PATH``, whose entries are appended to ``search_paths``;
4. command-line options, applied by the commands themselves.

Example ``pkgworld.toml``::

    [pkgworld]
    max_depth = 0
    search_private = true
    search_paths = ["/opt/local/lib/pkgconfig"]
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pkgworld.exceptions import ConfigError
from pkgworld.core.client import ClientFlags
from pkgworld.utils.logger import get_logger
from pkgworld.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_SEARCH_PRIVATE,
    DEFAULT_SKIP_ERRORS,
    DEFAULT_SKIP_PROVIDES,
    PKG_CONFIG_PATH_ENV,
)

logger = get_logger("config")

CONFIG_FILENAME = "pkgworld.toml"
PYPROJECT_FILENAME = "pyproject.toml"

_FLAG_OPTIONS: Tuple[Tuple[str, ClientFlags], ...] = (
    ("search_private", ClientFlags.SEARCH_PRIVATE),
    ("skip_provides", ClientFlags.SKIP_PROVIDES),
    ("skip_errors", ClientFlags.SKIP_ERRORS),
)


@dataclass
class PkgWorldConfig:
    """Validated pkgworld settings.

    Attributes:
        max_depth: Traversal depth budget; ``0`` means unlimited and ``1``
            resolves the requested packages only.
        search_private: Walk ``Requires.private`` edges (static linking).
        skip_provides: Do not resolve names through ``Provides`` aliases.
        skip_errors: Log resolution errors but keep resolving.
        search_paths: ``.pc`` directories, searched in order.
        source_path: File the settings were read from, if any.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    search_private: bool = DEFAULT_SEARCH_PRIVATE
    skip_provides: bool = DEFAULT_SKIP_PROVIDES
    skip_errors: bool = DEFAULT_SKIP_ERRORS
    search_paths: List[str] = field(default_factory=list)

    source_path: Optional[Path] = field(default=None, repr=False)

    def client_flags(self) -> ClientFlags:
        """Return the :class:`ClientFlags` matching the boolean options."""
        flags = ClientFlags.NONE
        for option, flag in _FLAG_OPTIONS:
            if getattr(self, option):
                flags |= flag
        return flags

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "max_depth": self.max_depth,
            **{option: getattr(self, option) for option, _ in _FLAG_OPTIONS},
            "search_paths": list(self.search_paths),
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Locate the configuration file.

    Args:
        explicit_path: Path given by the user; it must exist.

    Returns:
        The file to load, or ``None`` when only defaults apply.

    Raises:
        ConfigError: ``explicit_path`` does not exist.
    """
    if explicit_path is not None:
        if not explicit_path.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        return explicit_path.resolve()

    candidate = Path.cwd() / CONFIG_FILENAME
    if candidate.is_file():
        return candidate

    candidate = Path.cwd() / PYPROJECT_FILENAME
    if candidate.is_file() and _has_tool_table(candidate):
        return candidate

    return None


def _has_tool_table(pyproject: Path) -> bool:
    # a broken pyproject.toml belongs to some other tool; fall back to defaults
    try:
        document = _read_toml(pyproject)
    except ConfigError as exc:
        logger.debug("Ignoring %s: %s", pyproject, exc)
        return False
    return "pkgworld" in document.get("tool", {})


def load_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> PkgWorldConfig:
    """Discover, read and validate the configuration.

    Args:
        config_path: Explicit file; auto-discovered when ``None``.
        environ: Environment providing ``PKG_CONFIG_PATH``; defaults to
            :data:`os.environ`.

    Raises:
        ConfigError: The file is unreadable, not TOML, or has unknown keys
            or mistyped values.
    """
    path = discover_config_file(config_path)

    if path is None:
        config = PkgWorldConfig()
    else:
        logger.info("Reading configuration from %s", path)
        document = _read_toml(path)
        if path.name == PYPROJECT_FILENAME:
            table = document.get("tool", {}).get("pkgworld", {})
        else:
            table = document.get("pkgworld", {})
        config = _parse_section(table, config_path=str(path))
        config.source_path = path

    env = os.environ if environ is None else environ
    for entry in env.get(PKG_CONFIG_PATH_ENV, "").split(os.pathsep):
        if entry and entry not in config.search_paths:
            config.search_paths.append(entry)

    logger.debug("Effective configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}", config_path=str(path)
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read {path}: {exc}", config_path=str(path)
        ) from exc


def _parse_section(section: Mapping[str, Any], *, config_path: str) -> PkgWorldConfig:
    """Build a :class:`PkgWorldConfig` from a ``[pkgworld]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type.
    """
    config = PkgWorldConfig()
    known = {"max_depth", "search_paths"} | {option for option, _ in _FLAG_OPTIONS}

    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            config_path=config_path,
        )

    def invalid(option: str, expected: str) -> ConfigError:
        actual = type(section[option]).__name__
        return ConfigError(
            f"{option} must be {expected}, got {actual}",
            config_path=config_path,
            option=option,
        )

    if "max_depth" in section:
        value = section["max_depth"]
        # TOML booleans are Python bools, which are ints too
        if isinstance(value, bool) or not isinstance(value, int):
            raise invalid("max_depth", "an integer")
        config.max_depth = value

    for option, _ in _FLAG_OPTIONS:
        if option in section:
            if not isinstance(section[option], bool):
                raise invalid(option, "a boolean")
            setattr(config, option, section[option])

    if "search_paths" in section:
        value = section["search_paths"]
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise invalid("search_paths", "a list of strings")
        config.search_paths = list(value)

    return config

"""pkg-config ``.pc`` file loader for pkgworld.

Parses package metadata files of the form::

    prefix=/usr
    libdir=${prefix}/lib

    Name: libfoo
    Version: 1.2.3
    Requires: glib-2.0 >= 2.50
    Requires.private: zlib
    Libs: -L${libdir} -lfoo

into :class:`~pkgworld.models.Package` objects. The package identifier is
the file stem (``libfoo.pc`` -> ``libfoo``).

Supported syntax:

- ``name=value`` variable definitions, expanded with ``${name}``
- ``Field: value`` keyword definitions
- ``#`` comments (``\\#`` for a literal hash)
- backslash line continuations
- the builtin ``pcfiledir`` variable (directory of the file)
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pkgworld.utils import get_logger, safe_read_file
from pkgworld.exceptions import ParseError
from pkgworld.core.dependency import parse_dependency_string
from pkgworld.constants import PC_FIELDS, PC_FILE_SUFFIX, PCFILEDIR_VARIABLE
from pkgworld.models import Dependency, DependencyFlags, Package

logger = get_logger("pcfile")

_VARIABLE_RE = re.compile(r"\$\{([A-Za-z0-9_.]+)\}")
_KEY_RE = re.compile(r"^([A-Za-z0-9_.]+)\s*([=:])\s*(.*)$")

_REQUIRED_FIELDS = ("Name", "Version")


def load_pc_file(path: Union[str, Path]) -> Package:
    """Read and parse a ``.pc`` file.

    Raises:
        FileOperationError: The file cannot be read.
        ParseError: The file is malformed.
    """
    pc_path = Path(path)
    content = safe_read_file(pc_path)
    return parse_pc_string(
        content,
        package_id=pc_path.stem if pc_path.suffix == PC_FILE_SUFFIX else pc_path.name,
        source_path=str(pc_path),
        pcfiledir=str(pc_path.parent),
    )


def parse_pc_string(
    content: str,
    *,
    package_id: str,
    source_path: Optional[str] = None,
    pcfiledir: Optional[str] = None,
) -> Package:
    """Parse the text of a ``.pc`` file into a :class:`Package`.

    Args:
        content: File contents.
        package_id: Identifier to register the package under.
        source_path: Path used in error messages and ``Package.filename``.
        pcfiledir: Value of the builtin ``pcfiledir`` variable.

    Returns:
        The parsed package.

    Raises:
        ParseError: A required field (``Name``, ``Version``) is missing.
    """
    variables: Dict[str, str] = {}
    if pcfiledir is not None:
        variables[PCFILEDIR_VARIABLE] = pcfiledir

    fields: Dict[str, str] = {}

    for line_number, line in _logical_lines(content):
        match = _KEY_RE.match(line)
        if match is None:
            logger.warning(
                "%s:%d: ignoring malformed line %r",
                source_path or package_id,
                line_number,
                line,
            )
            continue

        key, separator, raw_value = match.groups()
        value = _expand(raw_value.strip(), variables)

        if separator == "=":
            variables[key] = value
            continue

        if key in fields:
            logger.warning(
                "%s:%d: duplicate field %s, keeping the first",
                source_path or package_id,
                line_number,
                key,
            )
            continue
        if key not in PC_FIELDS:
            logger.debug("%s: unknown field %s", source_path or package_id, key)
        fields[key] = value

    for required in _REQUIRED_FIELDS:
        if required not in fields:
            raise ParseError(
                f"Package file is missing required field '{required}'",
                file_path=source_path,
            )

    return Package(
        id=package_id,
        realname=fields.get("Name"),
        version=fields.get("Version"),
        description=fields.get("Description"),
        required=_deps(fields, "Requires"),
        requires_private=_deps(fields, "Requires.private", DependencyFlags.PRIVATE),
        conflicts=_deps(fields, "Conflicts"),
        provides=_deps(fields, "Provides"),
        variables=variables,
        fields=fields,
        filename=source_path,
    )


def _deps(
    fields: Dict[str, str],
    key: str,
    flags: DependencyFlags = DependencyFlags.NONE,
) -> List[Dependency]:
    value = fields.get(key)
    if not value:
        return []
    return parse_dependency_string(value, flags)


def _logical_lines(content: str) -> List[Tuple[int, str]]:
    """Join continuations, strip comments, drop blank lines.

    Returns:
        ``(first_line_number, text)`` pairs.
    """
    lines: List[Tuple[int, str]] = []
    buffer = ""
    start = 0

    for number, raw in enumerate(content.splitlines(), start=1):
        if not buffer:
            start = number

        if raw.endswith("\\") and not raw.endswith("\\\\"):
            buffer += raw[:-1]
            continue

        text = _strip_comment(buffer + raw).strip()
        buffer = ""
        if text:
            lines.append((start, text))

    if buffer:
        text = _strip_comment(buffer).strip()
        if text:
            lines.append((start, text))

    return lines


def _strip_comment(line: str) -> str:
    """Remove a trailing ``#`` comment, honoring ``\\#`` escapes."""
    out: List[str] = []
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\" and index + 1 < len(line) and line[index + 1] == "#":
            out.append("#")
            index += 2
            continue
        if char == "#":
            break
        out.append(char)
        index += 1
    return "".join(out)


def _expand(value: str, variables: Dict[str, str]) -> str:
    """Expand ${name} references; unknown variables expand to an empty string.

    Variables are expanded when defined, so a single pass is enough.
    """
    return _VARIABLE_RE.sub(lambda m: variables.get(m.group(1), ""), value)

"""
Filesystem access for ``.pc`` metadata.

Only two operations touch the disk: listing the ``.pc`` files of a search
directory and reading one of them. Both report failures as
:class:`~pkgworld.exceptions.FileOperationError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from pkgworld.utils.logger import get_logger
from pkgworld.exceptions import FileOperationError
from pkgworld.constants import MAX_FILE_SIZE, PC_FILE_SUFFIX

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Return the text of ``file_path``.

    Args:
        file_path: File to read.
        max_size: Refuse files larger than this many bytes; ``None`` for no
            limit.
        encoding: Text encoding of the file.

    Raises:
        FileOperationError: The path is missing, not a regular file, too
            large, unreadable or not decodable.
    """
    path = Path(file_path)

    if not path.is_file():
        reason = "File not found" if not path.exists() else "Not a file"
        raise FileOperationError(
            f"{reason}: {path}", file_path=str(path), operation="read"
        )

    try:
        size = path.stat().st_size
        if max_size is not None and size > max_size:
            raise FileOperationError(
                f"File too large: {size} bytes (limit {max_size})",
                file_path=str(path),
                operation="read",
            )
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def find_pc_files(directory: PathLike) -> List[Path]:
    """List the ``.pc`` files directly inside ``directory``, sorted by name.

    Subdirectories are not searched, the same as pkg-config treats
    ``PKG_CONFIG_PATH`` entries. A directory that does not exist yields an
    empty list.
    """
    root = Path(directory).expanduser()
    if not root.is_dir():
        logger.debug("Search directory %s does not exist", root)
        return []

    try:
        found = [entry for entry in root.iterdir() if entry.suffix == PC_FILE_SUFFIX]
    except OSError as exc:
        raise FileOperationError(
            f"Failed to scan directory: {exc}",
            file_path=str(root),
            operation="scan",
            original_error=exc,
        ) from exc

    return sorted(entry for entry in found if entry.is_file())

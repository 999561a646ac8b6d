"""
Exceptions raised by pkgworld.

Resolution outcomes (a missing package, an unsatisfied version, an empty
world) are not exceptions; they travel as
:class:`~pkgworld.core.client.ResolveFlags`. The classes below cover what
the resolver cannot express as a result code: unreadable files, malformed
``.pc`` metadata, bad configuration and internal defects.

Every exception carries a ``details`` mapping of whichever context fields
were supplied, and renders as ``message (key=value, ...)``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def _present(**fields: Any) -> Dict[str, Any]:
    """Keep only the fields that were actually supplied."""
    return {key: value for key, value in fields.items() if value is not None}


class PkgWorldError(Exception):
    """Root of the pkgworld exception hierarchy.

    Args:
        message: Human-readable description.
        details: Extra context shown after the message.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class ParseError(PkgWorldError):
    """A ``.pc`` file is structurally unusable (e.g. it lacks ``Version``)."""

    __slots__ = ("line_number", "line_content", "file_path")

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            _present(file=file_path, line=line_number, content=line_content),
        )
        self.line_number = line_number
        self.line_content = line_content
        self.file_path = file_path


class FileOperationError(PkgWorldError):
    """Reading a ``.pc`` file or scanning a search directory failed.

    ``operation`` is ``"read"`` or ``"scan"``; ``original_error`` keeps the
    underlying :class:`OSError` or :class:`UnicodeDecodeError`.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            _present(
                path=file_path,
                operation=operation,
                cause=str(original_error) if original_error is not None else None,
            ),
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(PkgWorldError):
    """The configuration file is missing, not valid TOML, or has bad values."""

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(config=config_path, option=option))
        self.config_path = config_path
        self.option = option


class InternalDefectError(PkgWorldError):
    """The resolver reached a state correct code never produces.

    Raised when the flattener sees a record that resolved to a package but
    carries no ``match``. It signals a bug in pkgworld, not bad input.
    """

    __slots__ = ("package",)

    def __init__(self, message: str, *, package: Optional[str] = None) -> None:
        super().__init__(message, _present(package=package))
        self.package = package

"""Per-invocation state shared between the ``pkgworld`` group and its commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from pkgworld.config import PkgWorldConfig


class PkgWorldContext:
    """State the ``pkgworld`` group hands down to ``resolve`` and ``validate``.

    ``config`` always holds a usable configuration: defaults until the
    group callback replaces it with the loaded file.
    """

    __slots__ = ("config", "config_path", "verbose", "color")

    def __init__(self) -> None:
        self.config: PkgWorldConfig = PkgWorldConfig()
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True


pass_context = click.make_pass_decorator(PkgWorldContext, ensure=True)

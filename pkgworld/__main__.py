"""Allow ``python -m pkgworld`` as an alias for the ``pkgworld`` script."""

from __future__ import annotations

import sys


def main() -> int:
    from pkgworld.cli import main as run_cli

    return run_cli()


if __name__ == "__main__":
    sys.exit(main())

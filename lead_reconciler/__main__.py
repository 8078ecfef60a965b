"""Package entry point for ``python -m lead_reconciler``."""
from __future__ import annotations

import sys

from . import cli

PROG = "python -m lead_reconciler"


def main(argv: list[str] | None = None) -> int:
    """Run the CLI, printing usage when no command is given."""

    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        cli.build_parser(prog=PROG).print_help()
        return 2

    return cli.main(argv, prog=PROG)


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())

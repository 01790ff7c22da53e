"""Entry point for the makecadb CLI."""

from __future__ import annotations

import sys

from cadb.app import build_main


def main() -> None:
    sys.exit(build_main())


if __name__ == "__main__":
    main()

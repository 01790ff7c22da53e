"""Entry point for the searchcadb CLI."""

from __future__ import annotations

import sys

from cadb.app import search_main


def main() -> None:
    sys.exit(search_main())


if __name__ == "__main__":
    main()

"""Command-line entry points for building and searching databases."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import List, Optional

from cadb import config
from cadb.errors import BuildError
from cadb.logging_config import configure_logging
from cadb.services.builder import build_database
from cadb.services.commands import CommandInterpreter, SearchSession

logger = logging.getLogger(__name__)


def _add_logging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Write logs to this file instead of stderr",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help="Log debugging detail",
    )


def _parse_build_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=config.BUILD_APP_NAME,
        description=(
            "Creates a C-alpha distance matrix database for use with "
            f"{config.SEARCH_APP_NAME}. PDB files are read from pdbdir; output "
            "is to standard output or to the specified outfile."
        ),
    )
    parser.add_argument("pdbdir", help="Directory of PDB files")
    parser.add_argument("outfile", nargs="?", default=None, help="Database file to write")
    parser.add_argument(
        "-d",
        dest="ndist",
        type=int,
        default=config.DEFAULT_NDIST,
        help=f"Number of distances (default: {config.DEFAULT_NDIST})",
    )
    parser.add_argument(
        "-l",
        dest="limit",
        type=int,
        default=0,
        help="Limit the maximum number of PDB files read",
    )
    _add_logging_args(parser)
    return parser.parse_args(argv[1:])


def _parse_search_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=config.SEARCH_APP_NAME,
        description=(
            "Searches a C-alpha distance database for loop conformations. "
            "Usage is keyword driven; issue the HELP command for the list "
            "of keywords."
        ),
    )
    parser.add_argument("infile", nargs="?", default=None, help="Control file (default: stdin)")
    parser.add_argument("outfile", nargs="?", default=None, help="Results file (default: stdout)")
    _add_logging_args(parser)
    return parser.parse_args(argv[1:])


def build_main(argv: Optional[List[str]] = None) -> int:
    """Run the database builder.

    Parameters
    ----------
    argv
        Full argument vector; ``sys.argv`` when omitted.

    Returns
    -------
    int
        Process exit status.
    """

    args = _parse_build_args(sys.argv if argv is None else argv)
    configure_logging(args.log_file, verbose=args.verbose)
    logger.debug("Building database from %s", args.pdbdir)
    try:
        with ExitStack() as stack:
            if args.outfile:
                out = stack.enter_context(open(args.outfile, "w", encoding="utf-8"))
            else:
                out = sys.stdout
            build_database(args.pdbdir, out, args.ndist, limit=args.limit)
    except (BuildError, OSError) as exc:
        logger.error("%s", exc)
        sys.stderr.write(f"{config.BUILD_APP_NAME}: {exc}\n")
        return 1
    return 0


def search_main(argv: Optional[List[str]] = None) -> int:
    """Run the keyword-driven loop search.

    Parameters
    ----------
    argv
        Full argument vector; ``sys.argv`` when omitted.

    Returns
    -------
    int
        0 on success, 1 when a file cannot be opened or the search was
        aborted.
    """

    args = _parse_search_args(sys.argv if argv is None else argv)
    configure_logging(args.log_file, verbose=args.verbose)
    session = SearchSession()
    try:
        with ExitStack() as stack:
            stack.callback(session.close)
            if args.infile:
                source = stack.enter_context(open(args.infile, "r", encoding="utf-8"))
            else:
                source = sys.stdin
            if args.outfile:
                out = stack.enter_context(open(args.outfile, "w", encoding="utf-8"))
            else:
                out = sys.stdout
            interactive = source.isatty()
            interpreter = CommandInterpreter(session, out=out, err=sys.stderr)
            ok = interpreter.run(source, interactive=interactive)
    except OSError as exc:
        logger.error("%s", exc)
        sys.stderr.write(f"{config.SEARCH_APP_NAME}: {exc}\n")
        return 1
    logger.debug("Search session finished ok=%s", ok)
    return 0 if ok else 1

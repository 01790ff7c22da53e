"""Logging configuration helpers."""

from __future__ import annotations

import logging
import sys
import warnings
from typing import Optional

# PDB parser notices about absent element columns or chain IDs.
_PDB_PARSER_WARNINGS = (
    r"Element information is missing",
    r"Invalid elements found in the PDB file",
    r"Found missing chainIDs",
)


def configure_logging(log_file: Optional[str], verbose: bool = False) -> None:
    """Configure application logging.

    Parameters
    ----------
    log_file
        Optional path to a log file. When omitted, logs to stderr so that
        stdout stays free for database and candidate output.
    verbose
        Log at DEBUG level instead of WARNING.

    Returns
    -------
    None
        This function does not return a value.
    """

    handler_error = None
    handlers = []
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as exc:
            handler_error = exc
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        handlers=handlers,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("MDAnalysis").setLevel(logging.ERROR)
    logging.getLogger("MDAnalysis.topology").setLevel(logging.ERROR)
    logging.getLogger("MDAnalysis.coordinates").setLevel(logging.ERROR)
    logging.getLogger("MDAnalysis.guesser").setLevel(logging.ERROR)
    for message in _PDB_PARSER_WARNINGS:
        warnings.filterwarnings(
            "ignore",
            message=message,
            category=UserWarning,
            module=r"MDAnalysis\.topology\.PDBParser",
        )
    if handler_error is not None:
        logging.getLogger(__name__).warning(
            "Failed to open log file '%s': %s", log_file, handler_error
        )

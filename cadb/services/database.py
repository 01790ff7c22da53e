"""Reading and writing the CA distance database."""

from __future__ import annotations

import logging
import os
import time
from typing import IO, Iterator, Optional

import numpy as np

from cadb.config import (
    COMMENT_MARKER,
    DATE_KEY,
    HEADER_MARKER,
    NDIST_KEY,
    PDBDIR_KEY,
)
from cadb.errors import DatabaseError
from cadb.model.state import DatabaseHeader, DistanceRecord

logger = logging.getLogger(__name__)


def write_header(out: IO[str], pdb_dir: str, ndist: int, timestamp: Optional[str] = None) -> None:
    """Write the ``!`` header lines of a database.

    Parameters
    ----------
    out
        Output text stream.
    pdb_dir
        Directory the structures were read from.
    ndist
        Neighbor count used for every record.
    timestamp
        Creation date; the current local time when omitted.

    Returns
    -------
    None
        This function does not return a value.
    """

    if timestamp is None:
        timestamp = time.ctime()
    out.write(f"{HEADER_MARKER}{PDBDIR_KEY} {pdb_dir}\n")
    out.write(f"{HEADER_MARKER}{NDIST_KEY}  {ndist}\n")
    out.write(f"{HEADER_MARKER}{DATE_KEY}   {timestamp}\n")


def write_record(out: IO[str], record: DistanceRecord) -> None:
    out.write(record.to_line())
    out.write("\n")


def parse_header_line(line: str, header: DatabaseHeader) -> None:
    """Store one ``!KEY value`` line into ``header``.

    Raises
    ------
    DatabaseError
        If the NDIST value is not a positive integer.
    """

    body = line[len(HEADER_MARKER) :].strip()
    if not body:
        return
    parts = body.split(None, 1)
    key = parts[0].upper()
    value = parts[1].strip() if len(parts) > 1 else ""
    # "!NDIST20" with no separating space
    if key.startswith(NDIST_KEY) and key[len(NDIST_KEY) :].isdigit():
        key, value = NDIST_KEY, key[len(NDIST_KEY) :]
    header.fields[key] = value
    if key == NDIST_KEY:
        try:
            ndist = int(value.split()[0])
        except (IndexError, ValueError) as exc:
            raise DatabaseError("bad_header", "Invalid NDIST header", line) from exc
        if ndist < 1:
            raise DatabaseError("bad_header", "NDIST must be at least 1", line)
        header.ndist = ndist


def parse_record(line: str, ndist: int) -> DistanceRecord:
    """Parse a record line into a DistanceRecord.

    Parameters
    ----------
    line
        Identifier followed by ``2 * ndist`` distances.
    ndist
        Neighbor count from the header.

    Returns
    -------
    DistanceRecord
        Parsed record.

    Raises
    ------
    ValueError
        If the token count is wrong or a distance is not a number.
    """

    tokens = line.split()
    if not tokens:
        raise ValueError("empty record")
    expected = 2 * ndist
    values = tokens[1:]
    if len(values) != expected:
        raise ValueError(f"expected {expected} distances, found {len(values)}")
    distances = np.array([float(value) for value in values], dtype=float)
    return DistanceRecord(identifier=tokens[0], distances=distances)


class DatabaseReader:
    """Streaming reader over a database text stream.

    The header is consumed on construction; iterating yields one record
    per data line, in file order, skipping malformed lines.

    Attributes
    ----------
    header
        Header fields read before the first data line.
    skipped
        Number of malformed record lines skipped so far.
    """

    def __init__(self, handle: IO[str], name: Optional[str] = None) -> None:
        self._handle = handle
        self.name = name or getattr(handle, "name", "<stream>")
        self.header = DatabaseHeader()
        self.skipped = 0
        self._line_no = 0
        self._pending: Optional[str] = None
        self._read_header()

    @property
    def ndist(self) -> int:
        return self.header.ndist

    def _read_header(self) -> None:
        for raw in self._handle:
            self._line_no += 1
            line = raw.strip()
            if not line or line.startswith(COMMENT_MARKER):
                continue
            if line.startswith(HEADER_MARKER):
                parse_header_line(line, self.header)
                continue
            self._pending = line
            break
        if self.header.ndist is None:
            raise DatabaseError(
                "missing_ndist", "Database has no NDIST header before its records", self.name
            )
        logger.debug("Database %s: NDIST=%d", self.name, self.header.ndist)

    def _lines(self) -> Iterator[str]:
        if self._pending is not None:
            line, self._pending = self._pending, None
            yield line
        for raw in self._handle:
            self._line_no += 1
            yield raw.strip()

    def __iter__(self) -> Iterator[DistanceRecord]:
        ndist = self.header.ndist
        for line in self._lines():
            if not line or line.startswith(HEADER_MARKER) or line.startswith(COMMENT_MARKER):
                continue
            try:
                record = parse_record(line, ndist)
            except ValueError as exc:
                self.skipped += 1
                logger.warning(
                    "Skipping malformed record at %s:%d: %s", self.name, self._line_no, exc
                )
                continue
            yield record

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "DatabaseReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_database(path: str) -> DatabaseReader:
    """Open a database file and read its header.

    Parameters
    ----------
    path
        Path to a database written by the builder.

    Returns
    -------
    DatabaseReader
        Reader positioned at the first record.

    Raises
    ------
    DatabaseError
        If the file is missing, unreadable or lacks an NDIST header.
    """

    if not os.path.exists(path):
        raise DatabaseError("file_not_found", "database file not found", path)
    try:
        handle = open(path, "r", encoding="utf-8")
    except OSError as exc:
        raise DatabaseError("open_failed", "Failed to open database", f"{path}: {exc}") from exc
    try:
        return DatabaseReader(handle, name=path)
    except Exception:
        handle.close()
        raise

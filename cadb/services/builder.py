"""CA distance matrix construction."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import IO, Iterator, Optional, Sequence

import numpy as np

from cadb.config import SENTINEL_DISTANCE
from cadb.errors import BuildError, StructureError
from cadb.model.state import DistanceRecord, Residue
from cadb.services.database import write_header, write_record
from cadb.services.structures import (
    iter_structure_files,
    load_ca_residues,
    structure_id_from_path,
)

logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Counts collected while building a database.

    Attributes
    ----------
    files_scanned
        Directory entries attempted.
    structures_written
        Structures that produced at least one record.
    structures_skipped
        Structures that failed to load or had no CA atoms.
    records_written
        Total records written.
    """

    files_scanned: int = 0
    structures_written: int = 0
    structures_skipped: int = 0
    records_written: int = 0


def chain_starts(chains: Sequence[str]) -> np.ndarray:
    """Return, for each position, the index where its chain run begins.

    A new run starts whenever the chain label differs from the previous one.
    """

    first = np.zeros(len(chains), dtype=int)
    start = 0
    for idx in range(1, len(chains)):
        if chains[idx] != chains[idx - 1]:
            start = idx
        first[idx] = start
    return first


def compute_distance_matrix(residues: Sequence[Residue], ndist: int) -> np.ndarray:
    """Compute forward and backward CA distances for one structure.

    Column ``k - 1`` holds the distance to the residue ``k`` positions
    later in the same chain; column ``ndist + k - 1`` the distance to the
    residue ``k`` positions earlier, no further back than the start of the
    chain. Missing neighbors get the sentinel value.

    Parameters
    ----------
    residues
        CA residues in chain and sequence order.
    ndist
        Number of neighbors in each direction.

    Returns
    -------
    numpy.ndarray
        Array of shape ``(len(residues), 2 * ndist)``.
    """

    if ndist < 1:
        raise BuildError("invalid_input", "Number of distances must be at least 1", ndist)
    natoms = len(residues)
    matrix = np.full((natoms, 2 * ndist), SENTINEL_DISTANCE, dtype=float)
    if natoms == 0:
        return matrix
    coords = np.array([residue.coords for residue in residues], dtype=float)
    chains = np.array([residue.chain for residue in residues], dtype=object)
    first_atom = chain_starts(list(chains))
    index = np.arange(natoms)

    for k in range(1, ndist + 1):
        if k >= natoms:
            break
        # forward: i -> i + k, same chain label
        gaps = np.linalg.norm(coords[k:] - coords[:-k], axis=1)
        same = chains[k:] == chains[:-k]
        matrix[:-k, k - 1] = np.where(same, gaps, SENTINEL_DISTANCE)
        # backward: i -> i - k, not before the chain start
        within = (index[k:] - k) >= first_atom[k:]
        matrix[k:, ndist + k - 1] = np.where(within, gaps, SENTINEL_DISTANCE)
    return matrix


def iter_distance_records(residues: Sequence[Residue], ndist: int) -> Iterator[DistanceRecord]:
    """Yield one DistanceRecord per residue, in input order."""
    matrix = compute_distance_matrix(residues, ndist)
    for residue, row in zip(residues, matrix):
        yield DistanceRecord(identifier=residue.identifier, distances=row)


def process_structure(out: IO[str], path: str, ndist: int) -> int:
    """Write the records for one structure file.

    Parameters
    ----------
    out
        Output text stream.
    path
        Structure file path.
    ndist
        Number of neighbors in each direction.

    Returns
    -------
    int
        Number of records written; 0 when the file has no CA atoms.

    Raises
    ------
    StructureError
        If the file cannot be read.
    """

    structure_id = structure_id_from_path(path)
    residues = load_ca_residues(path, structure_id=structure_id)
    if not residues:
        return 0
    count = 0
    for record in iter_distance_records(residues, ndist):
        write_record(out, record)
        count += 1
    return count


def build_database(
    pdb_dir: str,
    out: IO[str],
    ndist: int,
    limit: int = 0,
    timestamp: Optional[str] = None,
) -> BuildSummary:
    """Build a distance database from every structure in a directory.

    Structures that fail to load or contain no CA atoms are skipped; the
    rest of the directory is still processed.

    Parameters
    ----------
    pdb_dir
        Directory of PDB files.
    out
        Output text stream for the database.
    ndist
        Number of neighbors in each direction.
    limit
        Maximum number of files to scan; 0 scans everything.
    timestamp
        Optional creation date for the header.

    Returns
    -------
    BuildSummary
        Counts of scanned, written and skipped structures.

    Raises
    ------
    BuildError
        If ``ndist`` is invalid or the directory cannot be listed.
    """

    if ndist < 1:
        raise BuildError("invalid_input", "Number of distances must be at least 1", ndist)
    if limit < 0:
        raise BuildError("invalid_input", "File limit must not be negative", limit)
    if not os.path.isdir(pdb_dir):
        raise BuildError("file_not_found", "Structure directory not found", pdb_dir)
    summary = BuildSummary()
    write_header(out, pdb_dir, ndist, timestamp=timestamp)
    try:
        paths = iter_structure_files(pdb_dir, limit=limit)
        for path in paths:
            summary.files_scanned += 1
            try:
                written = process_structure(out, path, ndist)
            except StructureError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                summary.structures_skipped += 1
                continue
            if not written:
                logger.warning("Skipping %s: no CA atoms", path)
                summary.structures_skipped += 1
                continue
            summary.structures_written += 1
            summary.records_written += written
    except OSError as exc:
        raise BuildError("build_failed", "Failed to build database", f"{pdb_dir}: {exc}") from exc
    logger.info(
        "Database built: files=%d structures=%d skipped=%d records=%d",
        summary.files_scanned,
        summary.structures_written,
        summary.structures_skipped,
        summary.records_written,
    )
    return summary

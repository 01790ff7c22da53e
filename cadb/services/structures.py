"""Structure file loading utilities."""

from __future__ import annotations

import logging
import os
from typing import Iterator, List, Optional

import MDAnalysis as mda
from MDAnalysis.exceptions import NoDataError

from cadb.config import ACCEPTED_ALTLOCS, CA_SELECTION, STRUCTURE_EXTENSIONS
from cadb.errors import StructureError
from cadb.model.state import Residue

logger = logging.getLogger(__name__)


def _safe_attr(atoms, attr: str) -> Optional[List[object]]:
    try:
        values = getattr(atoms, attr)
    except (AttributeError, NoDataError):
        return None
    return list(values)


def structure_id_from_path(path: str) -> str:
    """Derive a structure identifier from a file name.

    ``/data/pdb/pdb1abc.ent`` and ``1ABC.pdb.gz`` both give ``1abc``.

    Parameters
    ----------
    path
        Path to the structure file.

    Returns
    -------
    str
        Lower-case structure identifier.
    """

    stem = os.path.basename(path)
    stripped = True
    while stripped:
        stripped = False
        for ext in STRUCTURE_EXTENSIONS:
            if stem.lower().endswith(ext) and len(stem) > len(ext):
                stem = stem[: -len(ext)]
                stripped = True
    stem = stem.lower()
    if len(stem) == 7 and stem.startswith("pdb"):
        stem = stem[3:]
    return stem


def iter_structure_files(pdb_dir: str, limit: int = 0) -> Iterator[str]:
    """Yield the regular files of a structure directory.

    Entries come in directory enumeration order, which is not sorted.

    Parameters
    ----------
    pdb_dir
        Directory to scan.
    limit
        Maximum number of files to yield; 0 means no limit.

    Yields
    ------
    str
        Path of each file.
    """

    count = 0
    with os.scandir(pdb_dir) as entries:
        for entry in entries:
            if limit and count >= limit:
                break
            if not entry.is_file():
                continue
            count += 1
            yield entry.path


def load_ca_residues(path: str, structure_id: Optional[str] = None) -> List[Residue]:
    """Read a PDB file and return its CA atoms in file order.

    Only ``ATOM`` records named CA are kept, alternate locations other
    than blank or ``A`` are dropped and only the first model is read.

    Parameters
    ----------
    path
        Path to a PDB-format file.
    structure_id
        Identifier to attach to each residue; derived from the file name
        when omitted.

    Returns
    -------
    list of Residue
        CA residues, possibly empty.

    Raises
    ------
    StructureError
        If the file is missing or cannot be parsed.
    """

    if not os.path.exists(path):
        raise StructureError("file_not_found", "structure file not found", path)
    if structure_id is None:
        structure_id = structure_id_from_path(path)
    try:
        universe = mda.Universe(path, topology_format="PDB", format="PDB")
        atoms = universe.select_atoms(CA_SELECTION)
    except Exception as exc:
        raise StructureError("load_failed", "Failed to read structure", f"{path}: {exc}") from exc

    natoms = len(atoms)
    if natoms == 0:
        return []
    chains = _safe_attr(atoms, "chainIDs")
    resids = _safe_attr(atoms, "resids") or [atom.resid for atom in atoms]
    icodes = _safe_attr(atoms, "icodes")
    altlocs = _safe_attr(atoms, "altLocs")
    positions = atoms.positions

    residues: List[Residue] = []
    for idx in range(natoms):
        if altlocs is not None and str(altlocs[idx]) not in ACCEPTED_ALTLOCS:
            continue
        chain = str(chains[idx]) if chains is not None else " "
        insert = str(icodes[idx]) if icodes is not None else " "
        residues.append(
            Residue(
                structure_id=structure_id,
                chain=chain or " ",
                resnum=int(resids[idx]),
                insert=insert or " ",
                coords=(
                    float(positions[idx][0]),
                    float(positions[idx][1]),
                    float(positions[idx][2]),
                ),
            )
        )
    logger.debug("Read %d CA atoms from %s", len(residues), path)
    return residues

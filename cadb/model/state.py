"""Dataclasses for residues, database records and constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from cadb.config import BLANK_CHAIN_MARKER, DISTANCE_FORMAT


@dataclass(frozen=True)
class Residue:
    """A CA atom standing in for one residue.

    Attributes
    ----------
    structure_id
        Identifier derived from the structure file name.
    chain
        Chain label, ``" "`` when blank.
    resnum
        Residue number.
    insert
        Insertion code, ``" "`` when blank.
    coords
        Cartesian coordinates of the CA atom.
    """

    structure_id: str
    chain: str
    resnum: int
    insert: str
    coords: Tuple[float, float, float]

    @property
    def identifier(self) -> str:
        return residue_identifier(self.structure_id, self.chain, self.resnum, self.insert)


def residue_identifier(structure_id: str, chain: str, resnum: int, insert: str = " ") -> str:
    """Format the database identifier of a residue.

    Parameters
    ----------
    structure_id
        Structure identifier.
    chain
        Chain label; blank chains are written as ``-``.
    resnum
        Residue number.
    insert
        Insertion code; blank codes are omitted.

    Returns
    -------
    str
        Identifier of the form ``<structure>.<chain>.<resnum><insert>``.
    """

    chain_marker = (chain or " ").strip() or BLANK_CHAIN_MARKER
    insert_code = (insert or "").strip()
    return f"{structure_id}.{chain_marker}.{resnum}{insert_code}"


def chain_prefix(identifier: str) -> str:
    """Return the structure and chain part of an identifier."""
    return identifier.rsplit(".", 1)[0]


@dataclass(frozen=True)
class DistanceRecord:
    """One database line: a residue identifier and its neighbor distances.

    Attributes
    ----------
    identifier
        Residue identifier.
    distances
        Vector of ``2 * ndist`` distances; the forward block comes first,
        then the backward block.
    """

    identifier: str
    distances: np.ndarray

    @property
    def ndist(self) -> int:
        return len(self.distances) // 2

    @property
    def forward(self) -> np.ndarray:
        return self.distances[: self.ndist]

    @property
    def backward(self) -> np.ndarray:
        return self.distances[self.ndist :]

    @property
    def prefix(self) -> str:
        return chain_prefix(self.identifier)

    def to_line(self) -> str:
        """Format the record as a database line (without newline)."""
        values = " ".join(DISTANCE_FORMAT % value for value in self.distances)
        return f"{self.identifier} {values}"


@dataclass(frozen=True)
class Constraint:
    """A distance bound on one column of a distance block.

    Attributes
    ----------
    column
        1-based column within the forward (DP) or backward (DM) block.
    minimum
        Lower bound, inclusive.
    maximum
        Upper bound, inclusive.
    """

    column: int
    minimum: float
    maximum: float

    def is_satisfied(self, block: np.ndarray) -> bool:
        """Test the constraint against a forward or backward block.

        Sentinel distances are negative and never satisfy a constraint,
        whatever the bounds are.
        """
        value = float(block[self.column - 1])
        if value < 0.0:
            return False
        return self.minimum <= value <= self.maximum


@dataclass
class DatabaseHeader:
    """Header fields read from the ``!`` lines of a database.

    Attributes
    ----------
    ndist
        Neighbor count used when the database was built.
    fields
        All header fields keyed by name.
    """

    ndist: Optional[int] = None
    fields: Dict[str, str] = field(default_factory=dict)

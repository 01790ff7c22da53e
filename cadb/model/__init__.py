"""Model package exports."""

from cadb.model.candidates import CandidateIndex
from cadb.model.ring import KeyRing
from cadb.model.state import Constraint, DatabaseHeader, DistanceRecord, Residue

__all__ = [
    "CandidateIndex",
    "Constraint",
    "DatabaseHeader",
    "DistanceRecord",
    "KeyRing",
    "Residue",
]

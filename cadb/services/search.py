"""Sliding-window loop search over a distance database."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Optional, Sequence

from cadb.errors import SearchError
from cadb.model.candidates import CandidateIndex
from cadb.model.ring import KeyRing
from cadb.model.state import Constraint, DistanceRecord, chain_prefix

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Counters collected during one search run.

    Attributes
    ----------
    records
        Records processed.
    inserted
        Records that passed the DP constraints.
    revoked
        Candidates removed by the DM constraints.
    window_checks
        Same-chain windows on which DM constraints were evaluated.
    """

    records: int = 0
    inserted: int = 0
    revoked: int = 0
    window_checks: int = 0


def constraints_satisfied(block, constraints: Sequence[Constraint]) -> bool:
    """Return True when every constraint holds on a distance block."""
    for constraint in constraints:
        if not constraint.is_satisfied(block):
            return False
    return True


def validate_constraints(constraints: Sequence[Constraint], ndist: int, kind: str) -> None:
    """Check that every constraint column lies within ``1..ndist``.

    Raises
    ------
    SearchError
        If a column is out of range or the bounds are inverted.
    """

    for constraint in constraints:
        if constraint.column < 1 or constraint.column > ndist:
            raise SearchError(
                "invalid_constraint",
                f"{kind} column must be between 1 and {ndist}",
                constraint.column,
            )
        if constraint.minimum > constraint.maximum:
            logger.warning(
                "%s %d has minimum %.2f above maximum %.2f and can never match",
                kind,
                constraint.column,
                constraint.minimum,
                constraint.maximum,
            )


class SearchEngine:
    """Streams distance records and keeps the set of loop-start candidates.

    A record that meets every DP (forward) constraint becomes a candidate.
    The record ``loop_length`` positions later in the same chain closes
    that window: if it breaks any DM (backward) constraint, the candidate
    at the start of the window is revoked.

    Attributes
    ----------
    loop_length
        Loop length ``L``; also the ring capacity.
    ndist
        Neighbor count of the database.
    candidates
        Live candidate index.
    stats
        Counters for the current run.
    """

    def __init__(
        self,
        loop_length: int,
        ndist: int,
        positive: Optional[Sequence[Constraint]] = None,
        negative: Optional[Sequence[Constraint]] = None,
    ) -> None:
        if loop_length < 1:
            raise SearchError("invalid_input", "Loop length must be at least 1", loop_length)
        if ndist < 1:
            raise SearchError("invalid_input", "Number of distances must be at least 1", ndist)
        self.loop_length = loop_length
        self.ndist = ndist
        self.positive = list(positive or [])
        self.negative = list(negative or [])
        validate_constraints(self.positive, ndist, "DP")
        validate_constraints(self.negative, ndist, "DM")
        self.candidates = CandidateIndex()
        self.stats = SearchStats()
        self._ring = KeyRing(loop_length)

    def feed(self, record: DistanceRecord) -> None:
        """Process the next record in database order."""
        if record.ndist != self.ndist:
            raise SearchError(
                "invalid_record",
                f"Record has {len(record.distances)} distances, expected {2 * self.ndist}",
                record.identifier,
            )
        identifier = record.identifier
        self.stats.records += 1
        start_id = self._ring.push(identifier)

        if constraints_satisfied(record.forward, self.positive):
            if self.candidates.insert(identifier):
                self.stats.inserted += 1

        if start_id is None or chain_prefix(start_id) != record.prefix:
            return
        self.stats.window_checks += 1
        if not constraints_satisfied(record.backward, self.negative):
            if self.candidates.delete(start_id):
                self.stats.revoked += 1

    def run(self, records: Iterable[DistanceRecord]) -> CandidateIndex:
        """Consume every record and return the surviving candidates.

        Parameters
        ----------
        records
            Records in database order.

        Returns
        -------
        CandidateIndex
            Candidates left once the stream is exhausted.
        """

        for record in records:
            self.feed(record)
        logger.info(
            "Search finished: records=%d inserted=%d revoked=%d candidates=%d",
            self.stats.records,
            self.stats.inserted,
            self.stats.revoked,
            len(self.candidates),
        )
        return self.candidates

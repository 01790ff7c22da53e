"""Transient set of loop-start candidates."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)


class CandidateIndex:
    """Set of residue identifiers believed to start a loop.

    The index lives for one search run. Enumeration follows first
    insertion order so that results are reproducible.
    """

    def __init__(self) -> None:
        self._keys: Dict[str, None] = {}

    def insert(self, identifier: str) -> bool:
        """Add ``identifier`` unless it is already present.

        Parameters
        ----------
        identifier
            Residue identifier.

        Returns
        -------
        bool
            True when the identifier was newly added.
        """

        if identifier in self._keys:
            return False
        self._keys[identifier] = None
        logger.debug("Stored key: %s", identifier)
        return True

    def delete(self, identifier: str) -> bool:
        """Remove ``identifier`` if present; absent keys are ignored.

        Returns
        -------
        bool
            True when the identifier was present and removed.
        """

        if identifier not in self._keys:
            return False
        del self._keys[identifier]
        logger.debug("Removed key: %s", identifier)
        return True

    def enumerate_all(self) -> List[str]:
        """Return every identifier currently present, in insertion order."""
        return list(self._keys)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

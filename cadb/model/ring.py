"""Fixed-capacity ring of recently seen residue identifiers."""

from __future__ import annotations

from typing import List, Optional


class KeyRing:
    """Cyclic buffer holding the last ``capacity`` identifiers.

    Attributes
    ----------
    capacity
        Number of slots, equal to the loop length.
    position
        Slot that the next key is written to. Once the ring has cycled,
        this slot holds the key written ``capacity`` pushes ago.
    cycled
        True once every slot has been written at least once.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"ring capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.position = 0
        self.cycled = False
        self._slots: List[Optional[str]] = [None] * capacity

    def push(self, key: str) -> Optional[str]:
        """Store ``key`` and return the key pushed ``capacity`` calls earlier.

        Parameters
        ----------
        key
            Identifier of the record being processed.

        Returns
        -------
        str or None
            The evicted identifier, or None while the ring is still filling.
        """

        evicted = self._slots[self.position] if self.cycled else None
        self._slots[self.position] = key
        self.position += 1
        if self.position >= self.capacity:
            self.position = 0
            self.cycled = True
        return evicted

    def __len__(self) -> int:
        return self.capacity if self.cycled else self.position

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple, Union

from .primes import smallest_prime_at_least

logger = logging.getLogger("probeset")

DEFAULT_MIN_CAPACITY = 2


class SlotState(str, Enum):
    EMPTY = "empty"
    TOMBSTONE = "tombstone"
    OCCUPIED = "occupied"


class _Tombstone:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<tombstone>"


_TOMBSTONE = _Tombstone()


class _Occupied:
    __slots__ = ("element",)

    def __init__(self, element: Any) -> None:
        self.element = element

    def __repr__(self) -> str:
        return f"Occupied({self.element!r})"


# A slot is ``None`` (empty), ``_TOMBSTONE`` or an ``_Occupied`` entry.
Slot = Optional[Union[_Tombstone, _Occupied]]


def slot_state(slot: Slot) -> SlotState:
    if slot is None:
        return SlotState.EMPTY
    if slot is _TOMBSTONE:
        return SlotState.TOMBSTONE
    return SlotState.OCCUPIED


def home_slot(key: Any, capacity: int) -> int:
    return abs(hash(key)) % capacity


def probe_sequence(key: Any, capacity: int) -> Iterator[int]:
    """Yield ``(h0 + i*i) % capacity`` for ``i = 0, 1, 2, ...`` without end."""

    start = home_slot(key, capacity)
    i = 0
    while True:
        yield (start + i * i) % capacity
        i += 1


def _probe(slots: List[Slot], key: Any, stop_on_tombstone: bool) -> int:
    """Return the first slot index where probing for ``key`` must stop.

    The walk stops on an empty slot, on an occupied slot holding an element
    equal to ``key``, or on a tombstone when ``stop_on_tombstone`` is set.
    Termination relies on the table keeping fewer than half of its (prime
    number of) cells non-empty.
    """

    for idx in probe_sequence(key, len(slots)):
        slot = slots[idx]
        if slot is None:
            return idx
        if slot is _TOMBSTONE:
            if stop_on_tombstone:
                return idx
            continue
        if slot.element == key:
            return idx
    raise AssertionError("unreachable")  # pragma: no cover


class ProbeSet:
    """Hash set with open addressing, quadratic probing and lazy deletion.

    Elements act as their own keys: ``find`` and ``delete`` accept any object
    equal to a stored element, and ``find`` hands back the stored one.
    Mutating the set while a traversal is in progress is unsupported; the
    traversal keeps reading the live slots and may skip or repeat elements.
    """

    __slots__ = ("_slots", "_occupied_cells")

    def __init__(self, expected_count: int = 0, *, min_capacity: int = DEFAULT_MIN_CAPACITY) -> None:
        capacity = smallest_prime_at_least(max(expected_count * 2, min_capacity))
        self._slots: List[Slot] = [None] * capacity
        self._occupied_cells = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def occupied_cells(self) -> int:
        """Occupied plus tombstoned cells."""
        return self._occupied_cells

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: Any) -> bool:
        return self.find(key) is not None

    def __iter__(self) -> "Traversal":
        return self.traversal()

    def __repr__(self) -> str:
        return f"ProbeSet(capacity={self.capacity}, count={self.count()}, occupied_cells={self._occupied_cells})"

    def insert(self, element: Any) -> bool:
        if element is None:
            return False
        idx = _probe(self._slots, element, True)
        slot = self._slots[idx]
        if slot is None:
            self._slots[idx] = _Occupied(element)
            self._occupied_cells += 1
            if self._occupied_cells >= self.capacity // 2:
                self._rehash(smallest_prime_at_least(self.capacity * 2))
            return True
        if slot is _TOMBSTONE:
            # Reclaimed tombstones were already counted in occupied_cells.
            self._slots[idx] = _Occupied(element)
            return True
        return False

    def _rehash(self, new_capacity: int) -> None:
        old_capacity = self.capacity
        new_slots: List[Slot] = [None] * new_capacity
        moved = 0
        for slot in self._slots:
            if isinstance(slot, _Occupied):
                new_slots[_probe(new_slots, slot.element, True)] = slot
                moved += 1
        self._slots = new_slots
        self._occupied_cells = moved
        logger.debug("Rehashed %d -> %d slots (live=%d)", old_capacity, new_capacity, moved)

    def find(self, key: Any) -> Optional[Any]:
        if key is None:
            return None
        slot = self._slots[_probe(self._slots, key, False)]
        if isinstance(slot, _Occupied):
            return slot.element
        return None

    def delete(self, key: Any) -> bool:
        if key is None:
            return False
        idx = _probe(self._slots, key, False)
        if isinstance(self._slots[idx], _Occupied):
            self._slots[idx] = _TOMBSTONE
            return True
        return False

    def clear(self) -> None:
        self._slots = [None] * self.capacity
        self._occupied_cells = 0

    def count(self) -> int:
        return sum(1 for slot in self._slots if isinstance(slot, _Occupied))

    def is_empty(self) -> bool:
        for slot in self._slots:
            if isinstance(slot, _Occupied):
                return False
        return True

    def tombstone_count(self) -> int:
        return sum(1 for slot in self._slots if slot is _TOMBSTONE)

    def load_factor(self) -> float:
        return self._occupied_cells / self.capacity

    def slots(self) -> Iterator[Tuple[int, SlotState, Optional[Any]]]:
        """Yield ``(index, state, element)`` for every cell, empty ones included."""

        for idx, slot in enumerate(self._slots):
            element = slot.element if isinstance(slot, _Occupied) else None
            yield idx, slot_state(slot), element

    def traversal(self) -> "Traversal":
        return Traversal(self)


class Traversal:
    """Forward-only cursor over the occupied slots of a :class:`ProbeSet`."""

    __slots__ = ("_table", "_cursor")

    def __init__(self, table: ProbeSet) -> None:
        self._table = table
        self._cursor = self._next_occupied(0)

    def _next_occupied(self, index: int) -> int:
        slots = self._table._slots  # pylint: disable=protected-access
        while index < len(slots) and not isinstance(slots[index], _Occupied):
            index += 1
        return index

    def has_next(self) -> bool:
        return self._cursor < len(self._table._slots)  # pylint: disable=protected-access

    def __iter__(self) -> "Traversal":
        return self

    def __next__(self) -> Any:
        # Re-seek in case the cursor's slot changed under a concurrent mutation.
        self._cursor = self._next_occupied(self._cursor)
        if not self.has_next():
            raise StopIteration
        slot = self._table._slots[self._cursor]  # pylint: disable=protected-access
        self._cursor = self._next_occupied(self._cursor + 1)
        return slot.element


__all__ = [
    "DEFAULT_MIN_CAPACITY",
    "ProbeSet",
    "SlotState",
    "Traversal",
    "home_slot",
    "probe_sequence",
    "slot_state",
]

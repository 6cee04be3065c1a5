# File: src/parkledger/domain/ordering.py
"""
Ordering of parking logs

One stable merge sort serves both report kinds:
- vehicle histories, ordered by lot name then entry time
- lot billing, ordered by exit time then lot name
"""

from enum import Enum
from typing import Any, Callable, Iterable, List, Tuple

from .models import ParkingLog


class SortOrder(Enum):
    """Comparison keys understood by sort_logs"""
    BY_LOT_THEN_ENTRY = "lot_then_entry"
    BY_EXIT_THEN_LOT = "exit_then_lot"


def _lot_then_entry(log: ParkingLog) -> Tuple[Any, ...]:
    return (log.lot_name, log.entry)


def _exit_then_lot(log: ParkingLog) -> Tuple[Any, ...]:
    # Open sessions sort after every recorded exit
    if log.exit is None:
        return (1, log.lot_name)
    return (0, log.exit, log.lot_name)


_SORT_KEYS = {
    SortOrder.BY_LOT_THEN_ENTRY: _lot_then_entry,
    SortOrder.BY_EXIT_THEN_LOT: _exit_then_lot,
}

SortKey = Callable[[ParkingLog], Tuple[Any, ...]]


def sort_logs(logs: Iterable[ParkingLog], order: SortOrder) -> List[ParkingLog]:
    """
    Merge sort logs into a new list.
    Stable: logs with equal keys keep their input order.
    """
    try:
        key = _SORT_KEYS[order]
    except KeyError:
        raise ValueError(f"Unknown sort order: {order!r}") from None
    return _merge_sort(list(logs), key)


def _merge_sort(logs: List[ParkingLog], key: SortKey) -> List[ParkingLog]:
    if len(logs) <= 1:
        return logs

    first_half, second_half = _split(logs)
    return _merge(_merge_sort(first_half, key), _merge_sort(second_half, key), key)


def _split(logs: List[ParkingLog]) -> Tuple[List[ParkingLog], List[ParkingLog]]:
    """First half takes the middle element when the length is odd"""
    middle = (len(logs) + 1) // 2
    return logs[:middle], logs[middle:]


def _merge(left: List[ParkingLog], right: List[ParkingLog], key: SortKey) -> List[ParkingLog]:
    merged: List[ParkingLog] = []
    i = j = 0

    while i < len(left) and j < len(right):
        # Ties go to the left run
        if key(right[j]) < key(left[i]):
            merged.append(right[j])
            j += 1
        else:
            merged.append(left[i])
            i += 1

    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged

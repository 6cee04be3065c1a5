# File: src/parkledger/domain/log_table.py
"""
Log Hash Table for the Parking Ledger

Each lot owns one LogTable holding every stay recorded in that lot.

Storage layout:
1. Arena - a list owning the ParkingLog records; a record's index is its handle
2. Buckets - a prime-sized list of chains, each chain a deque of handles

Records are keyed by a djb2 hash of the plate with separators removed, so
"AA-00-BB" and "AA00BB" land in the same bucket. The table grows to the
next prime above twice its capacity when appends push the load factor past
the threshold; it never shrinks.
"""

from collections import deque
from typing import Callable, Deque, Iterator, List, Optional, Tuple
import logging

from .models import ParkingLog, PLATE_SEPARATOR


INITIAL_CAPACITY = 53
LOAD_FACTOR_THRESHOLD = 0.75
DJB2_SEED = 5381

# Chains hold arena handles, never records
Chain = Deque[int]

_HASH_MASK = 0xFFFFFFFF


# ============================================================================
# HASHING AND PRIMES
# ============================================================================

def plate_hash(plate: str, capacity: int) -> int:
    """
    Bucket index of a plate for a table of the given capacity.

    djb2 over every character except the plate separator, wrapped to
    32 bits.
    """
    if capacity <= 0:
        raise ValueError(f"Capacity must be positive, got: {capacity}")

    value = DJB2_SEED
    for char in plate:
        if char != PLATE_SEPARATOR:
            value = (value * 33 + ord(char)) & _HASH_MASK
    return value % capacity


def is_prime(number: int) -> bool:
    if number <= 1:
        return False
    if number <= 3:
        return True
    if number % 2 == 0 or number % 3 == 0:
        return False

    # Divisors of the form 6k +/- 1 up to sqrt(number)
    divisor = 5
    while divisor * divisor <= number:
        if number % divisor == 0 or number % (divisor + 2) == 0:
            return False
        divisor += 6
    return True


def next_prime(number: int) -> int:
    """
    First prime found scanning odd numbers upward from number.
    Even inputs start at number + 1, so next_prime(2) is 3.
    """
    if number <= 1:
        return 2
    if number % 2 == 0:
        number += 1
    while not is_prime(number):
        number += 2
    return number


# ============================================================================
# LOG TABLE
# ============================================================================

class LogTable:
    """
    Hash table of parking logs keyed by plate.

    Resize policy: the load factor is only checked after an insert that
    appends to an existing chain. An insert that starts a new chain never
    triggers growth, whatever the load factor. Pass
    resize_on_every_insert=True to check after every insert instead.
    """

    def __init__(
        self,
        initial_capacity: int = INITIAL_CAPACITY,
        load_factor_threshold: float = LOAD_FACTOR_THRESHOLD,
        resize_on_every_insert: bool = False
    ):
        if initial_capacity <= 0:
            raise ValueError(f"Initial capacity must be positive, got: {initial_capacity}")
        if load_factor_threshold <= 0:
            raise ValueError(f"Load factor threshold must be positive, got: {load_factor_threshold}")

        self._capacity = next_prime(initial_capacity)
        self._buckets: List[Chain] = [deque() for _ in range(self._capacity)]
        self._logs: List[ParkingLog] = []
        self.load_factor_threshold = load_factor_threshold
        self.resize_on_every_insert = resize_on_every_insert
        self._logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def capacity(self) -> int:
        """Number of buckets (always prime)"""
        return self._capacity

    @property
    def count(self) -> int:
        """Number of logs ever inserted"""
        return len(self._logs)

    @property
    def load_factor(self) -> float:
        return self.count / self._capacity

    def __len__(self) -> int:
        return self.count

    # ========================================================================
    # INSERTION AND LOOKUP
    # ========================================================================

    def insert(self, log: ParkingLog) -> int:
        """
        Store a log and return its handle.
        The log joins the tail of its bucket's chain.
        """
        handle = len(self._logs)
        self._logs.append(log)

        index = self.bucket_index_of(log.plate)
        chain = self._buckets[index]
        started_chain = not chain
        chain.append(handle)

        self._logger.debug(
            f"Inserted log {handle} for {log.plate} in bucket {index} "
            f"(load factor {self.load_factor:.2f})"
        )

        if started_chain and not self.resize_on_every_insert:
            return handle

        if self.load_factor > self.load_factor_threshold:
            self.resize()
        return handle

    def get(self, handle: int) -> ParkingLog:
        return self._logs[handle]

    def bucket_index_of(self, plate: str) -> int:
        """Bucket a plate maps to at the current capacity"""
        return plate_hash(plate, self._capacity)

    def find_open_session(self, plate: str) -> Optional[ParkingLog]:
        """Return the log of plate that has no exit yet, or None"""
        for handle in self._buckets[self.bucket_index_of(plate)]:
            log = self._logs[handle]
            if log.plate == plate and log.is_open:
                return log
        return None

    def logs_for_plate(self, plate: str) -> List[ParkingLog]:
        """All logs of plate, in chain order"""
        chain = self._buckets[self.bucket_index_of(plate)]
        return [self._logs[handle] for handle in chain if self._logs[handle].plate == plate]

    # ========================================================================
    # TRAVERSAL
    # ========================================================================

    def __iter__(self) -> Iterator[ParkingLog]:
        """Bucket index ascending, then chain order"""
        for chain in self._buckets:
            for handle in chain:
                yield self._logs[handle]

    def for_each(self, visitor: Callable[[ParkingLog], None]) -> None:
        for log in self:
            visitor(log)

    def iter_buckets(self) -> Iterator[Tuple[int, List[ParkingLog]]]:
        """(bucket index, logs in chain order) for every non-empty bucket"""
        for index, chain in enumerate(self._buckets):
            if chain:
                yield index, [self._logs[handle] for handle in chain]

    # ========================================================================
    # GROWTH AND TEARDOWN
    # ========================================================================

    def resize(self) -> None:
        """
        Grow to the next prime at or above 2 * capacity + 1.

        Handles are pushed onto the head of their new chain, so rehashing
        reverses the local order of each source chain. The new buckets are
        built aside and swapped in with one assignment.
        """
        new_capacity = next_prime(self._capacity * 2 + 1)
        new_buckets: List[Chain] = [deque() for _ in range(new_capacity)]

        for chain in self._buckets:
            for handle in chain:
                new_index = plate_hash(self._logs[handle].plate, new_capacity)
                new_buckets[new_index].appendleft(handle)

        old_capacity = self._capacity
        self._buckets, self._capacity = new_buckets, new_capacity
        self._logger.debug(f"Resized log table from {old_capacity} to {new_capacity} buckets")

    def clear(self) -> None:
        """Drop every log; used when the owning lot is removed"""
        self._logs = []
        self._buckets = [deque() for _ in range(self._capacity)]

    def __repr__(self) -> str:
        return f"LogTable(capacity={self._capacity}, count={self.count})"

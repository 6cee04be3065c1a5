# File: src/parkledger/domain/aggregates.py
"""
Aggregate Root for the Parking Ledger

ParkingLot owns its tariff, its occupancy counter and the LogTable with
every stay recorded in it. All changes to a lot's logs go through the lot.

Invariants:
- 0 <= available_spots <= capacity
- occupied spots equal the number of open logs in the table
"""

from typing import List, Optional
import logging

from .billing import lot_billing
from .log_table import INITIAL_CAPACITY, LOAD_FACTOR_THRESHOLD, LogTable
from .models import ParkingLog, Tariff, Timestamp
from .strategies import DEFAULT_PRICING, PricingStrategy


class ParkingLot:
    """
    Aggregate Root: A named lot with a fixed number of spots
    Enforces occupancy rules for entries and exits
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        tariff: Tariff,
        pricing: PricingStrategy = DEFAULT_PRICING,
        initial_table_capacity: int = INITIAL_CAPACITY,
        load_factor_threshold: float = LOAD_FACTOR_THRESHOLD,
        resize_on_every_insert: bool = False
    ):
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got: {capacity}")
        if not tariff.is_valid:
            raise ValueError(f"Invalid tariff: {tariff}")

        self.name = name
        self.capacity = capacity
        self.tariff = tariff
        self.pricing = pricing
        self.available_spots = capacity
        self.logs = LogTable(
            initial_capacity=initial_table_capacity,
            load_factor_threshold=load_factor_threshold,
            resize_on_every_insert=resize_on_every_insert
        )
        self._logger = logging.getLogger(self.__class__.__name__)
        self._logger.info(f"Created ParkingLot: {self.name} ({self.capacity} spots, {self.tariff})")

    # ========================================================================
    # OCCUPANCY
    # ========================================================================

    @property
    def occupied_spots(self) -> int:
        return self.capacity - self.available_spots

    @property
    def is_full(self) -> bool:
        return self.available_spots <= 0

    def has_vehicle(self, plate: str) -> bool:
        """A plate is inside when it has a log without exit"""
        return self.logs.find_open_session(plate) is not None

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    def register_entry(self, plate: str, timestamp: Timestamp) -> ParkingLog:
        """
        Open a stay for plate
        Raises: ValueError if the lot is full or the plate is already inside
        """
        if self.is_full:
            raise ValueError(f"Parking lot {self.name} is full")
        if self.has_vehicle(plate):
            raise ValueError(f"Vehicle {plate} is already inside {self.name}")

        log = ParkingLog(plate=plate, lot_name=self.name, entry=timestamp)
        self.logs.insert(log)
        self.available_spots -= 1

        self._logger.info(f"Vehicle {plate} entered {self.name} at {timestamp} "
                          f"({self.available_spots} spots left)")
        return log

    def register_exit(self, plate: str, timestamp: Timestamp) -> ParkingLog:
        """
        Close the open stay of plate
        Raises: ValueError if the plate is not inside
        """
        log = self.logs.find_open_session(plate)
        if log is None:
            raise ValueError(f"Vehicle {plate} is not inside {self.name}")

        log.close(timestamp)
        self.available_spots += 1

        self._logger.info(f"Vehicle {plate} left {self.name} at {timestamp}")
        return log

    def cost_of(self, log: ParkingLog):
        """Cost of a closed stay under this lot's tariff"""
        return self.pricing.calculate_cost(self.tariff, log.entry, log.exit)

    def history_of(self, plate: str) -> List[ParkingLog]:
        """Snapshots of every stay of plate in this lot"""
        return [log.snapshot() for log in self.logs.logs_for_plate(plate)]

    def billing(self, on_date: Optional[Timestamp] = None):
        """Per-stay charges for on_date, or per-day totals since creation"""
        return lot_billing(self.logs, self.tariff, on_date, self.pricing)

    def close(self) -> None:
        """Release the lot's logs"""
        self.logs.clear()
        self._logger.info(f"Closed ParkingLot: {self.name}")

    def __str__(self) -> str:
        return f"ParkingLot {self.name} ({self.available_spots}/{self.capacity} free)"

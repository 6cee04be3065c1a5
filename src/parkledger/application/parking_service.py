# File: src/parkledger/application/parking_service.py
"""
Parking Ledger Application Service

This module implements the application service layer. It owns the lot
registry and validates every request before it reaches a lot.

Responsibilities:
1. Keep the registry of lots (creation order, unique names, bounded size)
2. Validate plates, tariffs and timestamps of incoming requests
3. Enforce the global rules: a plate is inside at most one lot, and
   entries and exits arrive in chronological order
4. Convert domain results into DTOs for the presentation layer

Each failed check raises a ParkingServiceError whose message is the text
shown to the operator.
"""

from decimal import Decimal
from typing import Dict, List, Optional
import logging

from ..config import AppConfig
from ..domain.aggregates import ParkingLot
from ..domain.models import LicensePlate, Tariff, Timestamp
from ..domain.ordering import SortOrder, sort_logs
from ..domain.strategies import DEFAULT_PRICING, PricingStrategy
from .dtos import (
    BillingReportDTO, DayTotalDTO, EntryReceiptDTO, ExitReceiptDTO,
    LotStatusDTO, StayChargeDTO, VehicleLogDTO
)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for parking service errors"""
    pass


class NoSuchLotError(ParkingServiceError):
    """Exception when a lot name is not registered"""

    def __init__(self, name: str):
        super().__init__(f"{name}: no such parking.")
        self.name = name


class LotAlreadyExistsError(ParkingServiceError):
    """Exception when a lot name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"{name}: parking already exists.")
        self.name = name


class InvalidCapacityError(ParkingServiceError):
    """Exception for a non-positive lot capacity"""

    def __init__(self, capacity: int):
        super().__init__(f"{capacity}: invalid capacity.")
        self.capacity = capacity


class InvalidCostError(ParkingServiceError):
    """Exception for a tariff breaking the rate ordering"""

    def __init__(self):
        super().__init__("invalid cost.")


class TooManyLotsError(ParkingServiceError):
    """Exception when the registry is full"""

    def __init__(self):
        super().__init__("too many parks.")


class LotFullError(ParkingServiceError):
    """Exception when a lot has no free spot"""

    def __init__(self, name: str):
        super().__init__(f"{name}: parking is full.")
        self.name = name


class InvalidPlateError(ParkingServiceError):
    """Exception for a malformed license plate"""

    def __init__(self, plate: str):
        super().__init__(f"{plate}: invalid licence plate.")
        self.plate = plate


class InvalidVehicleEntryError(ParkingServiceError):
    """Exception when a vehicle already inside a lot tries to enter"""

    def __init__(self, plate: str):
        super().__init__(f"{plate}: invalid vehicle entry.")
        self.plate = plate


class InvalidVehicleExitError(ParkingServiceError):
    """Exception when a vehicle not inside the lot tries to leave it"""

    def __init__(self, plate: str):
        super().__init__(f"{plate}: invalid vehicle exit.")
        self.plate = plate


class InvalidDateError(ParkingServiceError):
    """Exception for an impossible or out-of-order date"""

    def __init__(self):
        super().__init__("invalid date.")


class NoEntriesFoundError(ParkingServiceError):
    """Exception when a plate has no recorded stay"""

    def __init__(self, plate: str):
        super().__init__(f"{plate}: no entries found in any parking.")
        self.plate = plate


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for the parking ledger
    Coordinates the lot registry and the lots' log tables
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        pricing: PricingStrategy = DEFAULT_PRICING
    ):
        self.config = config or AppConfig()
        self.pricing = pricing
        self._lots: Dict[str, ParkingLot] = {}
        self._last_timestamp: Optional[Timestamp] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def last_timestamp(self) -> Optional[Timestamp]:
        """Timestamp of the latest accepted entry or exit"""
        return self._last_timestamp

    @property
    def lot_count(self) -> int:
        return len(self._lots)

    def get_lot(self, name: str) -> ParkingLot:
        lot = self._lots.get(name)
        if lot is None:
            raise NoSuchLotError(name)
        return lot

    # ========================================================================
    # LOT REGISTRY
    # ========================================================================

    def create_lot(
        self,
        name: str,
        capacity: int,
        rate_first_hour: Decimal,
        rate_after_first_hour: Decimal,
        daily_cap: Decimal
    ) -> LotStatusDTO:
        """Register a new lot"""
        if name in self._lots:
            raise LotAlreadyExistsError(name)

        if capacity <= 0:
            raise InvalidCapacityError(capacity)

        tariff = Tariff(rate_first_hour, rate_after_first_hour, daily_cap)
        if not tariff.is_valid:
            raise InvalidCostError()

        if len(self._lots) >= self.config.max_lots:
            raise TooManyLotsError()

        lot = ParkingLot(
            name=name,
            capacity=capacity,
            tariff=tariff,
            pricing=self.pricing,
            initial_table_capacity=self.config.initial_table_capacity,
            load_factor_threshold=self.config.load_factor_threshold,
            resize_on_every_insert=self.config.resize_on_every_insert
        )
        self._lots[name] = lot
        return LotStatusDTO.from_lot(lot)

    def list_lots(self) -> List[LotStatusDTO]:
        """Lots in creation order"""
        return [LotStatusDTO.from_lot(lot) for lot in self._lots.values()]

    def remove_lot(self, name: str) -> List[str]:
        """
        Remove a lot and every log it holds
        Returns: Names of the remaining lots, sorted alphabetically
        """
        lot = self._lots.pop(name, None)
        if lot is None:
            raise NoSuchLotError(name)

        lot.close()
        self.logger.info(f"Removed lot {name}")
        return sorted(self._lots)

    # ========================================================================
    # VEHICLE MOVEMENTS
    # ========================================================================

    def register_entry(self, lot_name: str, plate: str, timestamp: Timestamp) -> EntryReceiptDTO:
        """Record a vehicle entering a lot"""
        lot = self.get_lot(lot_name)
        if lot.is_full:
            raise LotFullError(lot_name)

        license_plate = self._validate_plate(plate)
        if self.is_vehicle_parked(license_plate.value):
            raise InvalidVehicleEntryError(plate)

        self._check_movement_time(timestamp)

        lot.register_entry(license_plate.value, timestamp)
        self._last_timestamp = timestamp

        return EntryReceiptDTO(
            lot_name=lot.name,
            plate=license_plate.value,
            available_spots=lot.available_spots
        )

    def register_exit(self, lot_name: str, plate: str, timestamp: Timestamp) -> ExitReceiptDTO:
        """Record a vehicle leaving a lot and charge the stay"""
        lot = self.get_lot(lot_name)

        license_plate = self._validate_plate(plate)
        if not lot.has_vehicle(license_plate.value):
            raise InvalidVehicleExitError(plate)

        self._check_movement_time(timestamp)

        log = lot.register_exit(license_plate.value, timestamp)
        self._last_timestamp = timestamp

        return ExitReceiptDTO(
            lot_name=lot.name,
            plate=log.plate,
            entry_time=str(log.entry),
            exit_time=str(log.exit),
            amount=lot.cost_of(log)
        )

    def is_vehicle_parked(self, plate: str) -> bool:
        """Check whether plate is inside any lot"""
        return any(lot.has_vehicle(plate) for lot in self._lots.values())

    # ========================================================================
    # REPORTS
    # ========================================================================

    def vehicle_history(self, plate: str) -> List[VehicleLogDTO]:
        """Every stay of a plate across all lots, by lot name then entry time"""
        license_plate = self._validate_plate(plate)

        stays = []
        for lot in self._lots.values():
            stays.extend(lot.history_of(license_plate.value))

        if not stays:
            raise NoEntriesFoundError(plate)

        return [VehicleLogDTO.from_log(log) for log in sort_logs(stays, SortOrder.BY_LOT_THEN_ENTRY)]

    def lot_billing(self, lot_name: str, on_date: Optional[Timestamp] = None) -> BillingReportDTO:
        """
        Billing of a lot
        With on_date: one line per stay that ended that day.
        Without: one total per exit date since the lot was created.
        """
        lot = self.get_lot(lot_name)

        if on_date is None:
            days = [DayTotalDTO.from_total(total) for total in lot.billing()]
            return BillingReportDTO(lot_name=lot.name, days=days)

        if not on_date.is_valid or self._is_after_last_movement(on_date):
            raise InvalidDateError()

        stays = [StayChargeDTO.from_charge(charge) for charge in lot.billing(on_date)]
        return BillingReportDTO(lot_name=lot.name, on_date=on_date.format_date(), stays=stays)

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    def _validate_plate(self, plate: str) -> LicensePlate:
        try:
            return LicensePlate(plate)
        except ValueError as e:
            self.logger.debug(f"Rejected plate {plate!r}: {e}")
            raise InvalidPlateError(plate) from e

    def _check_movement_time(self, timestamp: Timestamp) -> None:
        if not timestamp.is_valid:
            raise InvalidDateError()
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            raise InvalidDateError()

    def _is_after_last_movement(self, day: Timestamp) -> bool:
        # Before any movement, every date lies in the future
        if self._last_timestamp is None:
            return True
        return day.start_of_day() > self._last_timestamp

# File: src/parkledger/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Ledger

Output DTOs carry service results to the presentation layer:
- LotStatusDTO - one lot in the registry listing
- EntryReceiptDTO / ExitReceiptDTO - results of vehicle movements
- VehicleLogDTO - one line of a vehicle's history
- StayChargeDTO / DayTotalDTO / BillingReportDTO - lot billing

DTO Principles:
- Immutable (frozen models)
- Timestamps travel pre-formatted, amounts as Decimal
- No business logic, only data
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import json

from pydantic import BaseModel, ConfigDict, Field

from ..domain.models import DayTotal, ParkingLog, StayCharge
from ..domain.aggregates import ParkingLot


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        frozen=True
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        return self.model_dump(exclude_none=exclude_none, **kwargs)

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        """Create DTO from JSON string"""
        return cls(**json.loads(json_str))


# ============================================================================
# LOT DTOs
# ============================================================================

class LotStatusDTO(BaseDTO):
    """DTO for a lot's occupancy"""
    name: str
    capacity: int = Field(gt=0)
    available_spots: int = Field(ge=0)

    @classmethod
    def from_lot(cls, lot: ParkingLot) -> 'LotStatusDTO':
        return cls.model_validate(lot)


# ============================================================================
# MOVEMENT DTOs
# ============================================================================

class EntryReceiptDTO(BaseDTO):
    """DTO for an accepted vehicle entry"""
    lot_name: str
    plate: str
    available_spots: int = Field(ge=0)


class ExitReceiptDTO(BaseDTO):
    """DTO for an accepted vehicle exit"""
    lot_name: str
    plate: str
    entry_time: str
    exit_time: str
    amount: Decimal = Field(ge=0)


class VehicleLogDTO(BaseDTO):
    """DTO for one stay in a vehicle's history"""
    lot_name: str
    entry_time: str
    exit_time: Optional[str] = None

    @classmethod
    def from_log(cls, log: ParkingLog) -> 'VehicleLogDTO':
        return cls(
            lot_name=log.lot_name,
            entry_time=str(log.entry),
            exit_time=None if log.is_open else str(log.exit)
        )


# ============================================================================
# BILLING DTOs
# ============================================================================

class StayChargeDTO(BaseDTO):
    """DTO for the charge of one stay"""
    plate: str
    exit_time: str
    amount: Decimal = Field(ge=0)

    @classmethod
    def from_charge(cls, charge: StayCharge) -> 'StayChargeDTO':
        return cls(plate=charge.plate, exit_time=charge.exit.format_time(), amount=charge.amount)


class DayTotalDTO(BaseDTO):
    """DTO for one day of revenue"""
    date: str
    total: Decimal = Field(ge=0)

    @classmethod
    def from_total(cls, day_total: DayTotal) -> 'DayTotalDTO':
        return cls(date=day_total.date.format_date(), total=day_total.total)


class BillingReportDTO(BaseDTO):
    """
    DTO for a lot's billing
    `stays` is filled for a single date, `days` for the report since creation
    """
    lot_name: str
    on_date: Optional[str] = None
    stays: List[StayChargeDTO] = Field(default_factory=list)
    days: List[DayTotalDTO] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.stays and not self.days

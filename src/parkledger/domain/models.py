# File: src/parkledger/domain/models.py
"""
Domain Models for the Parking Ledger

This module contains:
1. Value Objects: LicensePlate, Timestamp, Tariff, StayCharge, DayTotal
2. Entities: ParkingLog, one vehicle stay in one lot

Timestamps use the operator's fixed calendar: every year has 365 days and
February always has 28, so 29 February never validates.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple
from decimal import Decimal
import re


# ============================================================================
# CALENDAR CONSTANTS
# ============================================================================

DAYS_IN_MONTH: Tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
DAYS_IN_YEAR = 365
MINUTES_IN_HOUR = 60
MINUTES_IN_DAY = 24 * MINUTES_IN_HOUR

PLATE_LENGTH = 8
PLATE_SEPARATOR = "-"

_DATE_PATTERN = re.compile(r'^(\d{1,2})-(\d{1,2})-(\d{1,4})$')
_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{1,2})$')


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)
class LicensePlate:
    """
    Value Object: License plate in the XX-XX-XX format

    Each pair is either two uppercase letters or two digits, and a plate
    carries at least one pair of each kind.
    """
    value: str

    def __post_init__(self):
        """Validate license plate after initialization"""
        if not self.value or len(self.value) != PLATE_LENGTH:
            raise ValueError(f"License plate must be {PLATE_LENGTH} characters, got: {self.value}")

        if self.value[2] != PLATE_SEPARATOR or self.value[5] != PLATE_SEPARATOR:
            raise ValueError(f"License plate pairs must be separated by '-': {self.value}")

        letter_pairs = 0
        digit_pairs = 0
        for pair in self.value.split(PLATE_SEPARATOR):
            if re.fullmatch(r'[0-9]{2}', pair):
                digit_pairs += 1
            elif re.fullmatch(r'[A-Z]{2}', pair):
                letter_pairs += 1
            else:
                raise ValueError(f"Invalid plate pair '{pair}' in: {self.value}")

        if not letter_pairs or not digit_pairs:
            raise ValueError(f"License plate needs a letter pair and a digit pair: {self.value}")

    @property
    def normalized(self) -> str:
        """Plate without separators; plate_hash skips the same characters"""
        return self.value.replace(PLATE_SEPARATOR, "")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Timestamp:
    """
    Value Object: Date and time with minute precision

    Field order gives the total order (year, month, day, hour, minute).
    Construction does not validate; callers check `is_valid`.
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    @classmethod
    def parse(cls, date_text: str, time_text: str = "00:00") -> 'Timestamp':
        """
        Parse "DD-MM-YYYY" and "HH:MM".
        Malformed text yields a timestamp of zeros, which never validates.
        """
        date_match = _DATE_PATTERN.match(date_text.strip())
        time_match = _TIME_PATTERN.match(time_text.strip())
        if not date_match or not time_match:
            return cls(year=0, month=0, day=0)

        day, month, year = (int(part) for part in date_match.groups())
        hour, minute = (int(part) for part in time_match.groups())
        return cls(year=year, month=month, day=day, hour=hour, minute=minute)

    @property
    def is_valid(self) -> bool:
        """Check calendar ranges"""
        if not 1 <= self.month <= 12:
            return False
        if not 1 <= self.day <= DAYS_IN_MONTH[self.month - 1]:
            return False
        return 0 <= self.hour <= 23 and 0 <= self.minute <= 59

    @property
    def date_key(self) -> Tuple[int, int, int]:
        return (self.year, self.month, self.day)

    def same_date(self, other: 'Timestamp') -> bool:
        """Date-only equality, ignoring hour and minute"""
        return self.date_key == other.date_key

    def start_of_day(self) -> 'Timestamp':
        return replace(self, hour=0, minute=0)

    def to_minutes(self) -> int:
        """Absolute minutes since the calendar origin"""
        days = (self.year - 1) * DAYS_IN_YEAR + self.day - 1
        days += sum(DAYS_IN_MONTH[:self.month - 1])
        return days * MINUTES_IN_DAY + self.hour * MINUTES_IN_HOUR + self.minute

    def minutes_until(self, later: 'Timestamp') -> int:
        return later.to_minutes() - self.to_minutes()

    def format_date(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year}"

    def format_time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return f"{self.format_date()} {self.format_time()}"


@dataclass(frozen=True)
class Tariff:
    """
    Value Object: Quarter-hour rates and the daily maximum of a lot

    A usable tariff satisfies
    0 < rate_first_hour < rate_after_first_hour < daily_cap.
    """
    rate_first_hour: Decimal
    rate_after_first_hour: Decimal
    daily_cap: Decimal

    def __post_init__(self):
        """Store every rate as a Decimal"""
        for name in ("rate_first_hour", "rate_after_first_hour", "daily_cap"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

    @property
    def is_valid(self) -> bool:
        rates = (self.rate_first_hour, self.rate_after_first_hour, self.daily_cap)
        if not all(rate.is_finite() for rate in rates):
            return False
        return Decimal('0') < self.rate_first_hour < self.rate_after_first_hour < self.daily_cap

    def __str__(self) -> str:
        return (f"{self.rate_first_hour:.2f}/{self.rate_after_first_hour:.2f} "
                f"per quarter, {self.daily_cap:.2f} per day")


@dataclass(frozen=True)
class StayCharge:
    """Value Object: Charge for one completed stay"""
    plate: str
    exit: Timestamp
    amount: Decimal


@dataclass(frozen=True)
class DayTotal:
    """Value Object: Revenue of all stays that ended on one date"""
    date: Timestamp
    total: Decimal


# ============================================================================
# ENTITIES
# ============================================================================

@dataclass
class ParkingLog:
    """
    Entity: One vehicle stay in one lot

    `exit` stays None while the vehicle is inside. A log is closed once
    and never reopened.
    """
    plate: str
    lot_name: str
    entry: Timestamp
    exit: Optional[Timestamp] = None

    @property
    def is_open(self) -> bool:
        return self.exit is None

    def close(self, exit_time: Timestamp) -> None:
        if not self.is_open:
            raise ValueError(f"Log for {self.plate} in {self.lot_name} is already closed")
        self.exit = exit_time

    def snapshot(self) -> 'ParkingLog':
        """Independent copy for reports"""
        return replace(self)

    def __str__(self) -> str:
        if self.is_open:
            return f"{self.plate} @ {self.lot_name}: {self.entry}"
        return f"{self.plate} @ {self.lot_name}: {self.entry} -> {self.exit}"

# File: src/parkledger/domain/strategies.py
"""
Pricing Strategies for the Parking Ledger

A pricing strategy turns one stay (entry and exit timestamps) into a cost
under a lot's tariff. Strategies are stateless and trust their inputs:
tariffs are validated by the lot registry and exit never precedes entry.

Tiered quarter-hour pricing:
1. Every complete 24 hour period costs the daily cap
2. The first hour of the remainder is charged per started quarter hour
   at the first-hour rate
3. Each further started quarter hour is charged at the later rate
4. The quarter-hour charge of the remainder never exceeds the daily cap
"""

from abc import ABC, abstractmethod
from decimal import Decimal
import logging

from .models import Tariff, Timestamp, MINUTES_IN_DAY, MINUTES_IN_HOUR


QUARTER_HOUR_MINUTES = 15
FIRST_HOUR_QUARTERS = MINUTES_IN_HOUR // QUARTER_HOUR_MINUTES


# ============================================================================
# STRATEGY INTERFACE
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for stay cost calculation
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_cost(self, tariff: Tariff, entry: Timestamp, exit_time: Timestamp) -> Decimal:
        """
        Calculate the cost of a stay
        Returns: Non-negative amount
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Pricing", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Pricing"


# ============================================================================
# CONCRETE STRATEGIES
# ============================================================================

class TieredQuarterHourPricing(PricingStrategy):
    """
    Quarter-hour tiers with a daily cap
    A started quarter hour is charged in full; a zero-length stay is free.
    """

    def calculate_cost(self, tariff: Tariff, entry: Timestamp, exit_time: Timestamp) -> Decimal:
        minutes = entry.minutes_until(exit_time)
        days, remainder = divmod(minutes, MINUTES_IN_DAY)

        first_hour_quarters = min(FIRST_HOUR_QUARTERS, _started_quarters(remainder))
        later_quarters = _started_quarters(remainder - MINUTES_IN_HOUR)

        quarters_charge = (tariff.rate_first_hour * first_hour_quarters +
                           tariff.rate_after_first_hour * later_quarters)
        quarters_charge = min(quarters_charge, tariff.daily_cap)

        cost = quarters_charge + tariff.daily_cap * days
        self.logger.debug(
            f"{minutes} minutes: {days} days, {first_hour_quarters} + {later_quarters} quarters -> {cost}"
        )
        return cost


def _started_quarters(minutes: int) -> int:
    """Quarter hours begun within minutes, zero when minutes <= 0"""
    if minutes <= 0:
        return 0
    return -(-minutes // QUARTER_HOUR_MINUTES)


DEFAULT_PRICING = TieredQuarterHourPricing()


def calculate_cost(tariff: Tariff, entry: Timestamp, exit_time: Timestamp) -> Decimal:
    """Cost of one stay under the default tiered pricing"""
    return DEFAULT_PRICING.calculate_cost(tariff, entry, exit_time)

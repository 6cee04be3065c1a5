# File: src/parkledger/domain/billing.py
"""
Billing aggregation over a lot's completed stays

Reports are built from snapshots of the lot's logs, sorted by exit time:
- for one date, a charge line per stay that ended that day
- since creation, one revenue total per exit date
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from .log_table import LogTable
from .models import DayTotal, ParkingLog, StayCharge, Tariff, Timestamp
from .ordering import SortOrder, sort_logs
from .strategies import DEFAULT_PRICING, PricingStrategy


def collect_completed_logs(table: LogTable, on_date: Optional[Timestamp] = None) -> List[ParkingLog]:
    """Snapshots of closed logs, optionally only those that exited on on_date"""
    completed = []
    for log in table:
        if log.is_open:
            continue
        if on_date is not None and not log.exit.same_date(on_date):
            continue
        completed.append(log.snapshot())
    return completed


def emit_daily_bills(
    sorted_logs: Sequence[ParkingLog],
    tariff: Tariff,
    pricing: PricingStrategy = DEFAULT_PRICING
) -> List[StayCharge]:
    """One charge per stay, in the given order"""
    return [
        StayCharge(plate=log.plate, exit=log.exit,
                   amount=pricing.calculate_cost(tariff, log.entry, log.exit))
        for log in sorted_logs
    ]


def emit_full_bills(
    sorted_logs: Sequence[ParkingLog],
    tariff: Tariff,
    pricing: PricingStrategy = DEFAULT_PRICING
) -> List[DayTotal]:
    """Fold consecutive stays with the same exit date into one total"""
    totals: List[DayTotal] = []
    if not sorted_logs:
        return totals

    current_date = sorted_logs[0].exit.start_of_day()
    running = Decimal('0')

    for log in sorted_logs:
        if not log.exit.same_date(current_date):
            totals.append(DayTotal(date=current_date, total=running))
            current_date = log.exit.start_of_day()
            running = Decimal('0')
        running += pricing.calculate_cost(tariff, log.entry, log.exit)

    # The last group has no following boundary
    totals.append(DayTotal(date=current_date, total=running))
    return totals


def lot_billing(
    table: LogTable,
    tariff: Tariff,
    on_date: Optional[Timestamp] = None,
    pricing: PricingStrategy = DEFAULT_PRICING
):
    """
    Billing report of one lot.
    Returns: List[StayCharge] when on_date is given, else List[DayTotal]
    """
    exits = sort_logs(collect_completed_logs(table, on_date), SortOrder.BY_EXIT_THEN_LOT)
    if on_date is not None:
        return emit_daily_bills(exits, tariff, pricing)
    return emit_full_bills(exits, tariff, pricing)

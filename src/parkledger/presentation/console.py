# File: src/parkledger/presentation/console.py
"""
Console presentation of service results

Turns DTOs into the lines printed for the operator. Amounts always print
with two decimals.
"""

from decimal import Decimal
from typing import Iterable, List

from ..application.dtos import (
    BillingReportDTO, EntryReceiptDTO, ExitReceiptDTO,
    LotStatusDTO, VehicleLogDTO
)


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


class ConsoleView:
    """Formats service results as console lines"""

    def lot_lines(self, lots: Iterable[LotStatusDTO]) -> List[str]:
        return [f"{lot.name} {lot.capacity} {lot.available_spots}" for lot in lots]

    def entry_line(self, receipt: EntryReceiptDTO) -> str:
        return f"{receipt.lot_name} {receipt.available_spots}"

    def exit_line(self, receipt: ExitReceiptDTO) -> str:
        return (f"{receipt.plate} {receipt.entry_time} {receipt.exit_time} "
                f"{format_amount(receipt.amount)}")

    def history_lines(self, history: Iterable[VehicleLogDTO]) -> List[str]:
        lines = []
        for stay in history:
            if stay.exit_time is None:
                lines.append(f"{stay.lot_name} {stay.entry_time}")
            else:
                lines.append(f"{stay.lot_name} {stay.entry_time} {stay.exit_time}")
        return lines

    def billing_lines(self, report: BillingReportDTO) -> List[str]:
        if report.on_date is not None:
            return [f"{stay.plate} {stay.exit_time} {format_amount(stay.amount)}"
                    for stay in report.stays]
        return [f"{day.date} {format_amount(day.total)}" for day in report.days]

    def name_lines(self, names: Iterable[str]) -> List[str]:
        return list(names)

    def error_line(self, error: Exception) -> str:
        return str(error)

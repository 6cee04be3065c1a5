# File: src/parkledger/application/commands.py
"""
Command Pattern Implementation for the Parking Ledger

Every input line is one command. The first token selects the command,
the remaining tokens are its arguments; lot names containing spaces are
written between double quotes.

Command Types:
    q                                   quit
    p                                   list lots
    p <name> <capacity> <r1> <r2> <max> create a lot
    e <name> <plate> <DD-MM-YYYY> <HH:MM>  vehicle entry
    s <name> <plate> <DD-MM-YYYY> <HH:MM>  vehicle exit
    v <plate>                           vehicle history
    f <name> [<DD-MM-YYYY>]             lot billing
    r <name>                            remove a lot

Lines starting with any other token are ignored.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional, Type
import logging
import shlex

from ..domain.models import Timestamp
from ..presentation.console import ConsoleView
from .parking_service import ParkingService, ParkingServiceError


class CommandSyntaxError(ParkingServiceError):
    """Exception for a line whose arguments cannot be parsed"""

    def __init__(self, line: str):
        super().__init__(f"invalid command: {line.strip()}")
        self.line = line


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    Subclasses parse their arguments in parse_arguments and raise
    ValueError when the arguments do not fit.
    """

    keyword: str = ""
    terminates: bool = False

    def __init__(self, arguments: List[str]):
        self.arguments = arguments
        self.logger = logging.getLogger(self.__class__.__name__)
        self.parse_arguments(arguments)

    def parse_arguments(self, arguments: List[str]) -> None:
        if arguments:
            raise ValueError(f"{self.keyword} takes no arguments")

    @abstractmethod
    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        """
        Execute the command using the provided service

        Returns: Output lines
        """
        pass

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")


@dataclass
class CommandResult:
    """Outcome of one processed line"""
    command_type: Optional[str]
    success: bool
    output: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    stop: bool = False


def _parse_decimal(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not a number: {text}") from None
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {text}")
    return value


def tokenize(line: str) -> List[str]:
    """
    Split a line on whitespace. Only double quotes group words;
    single quotes and backslashes are ordinary characters.
    """
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.quotes = '"'
    lexer.escape = ''
    lexer.commenters = ''
    return list(lexer)


# ============================================================================
# REGISTRY COMMANDS
# ============================================================================

class QuitCommand(Command):
    """Stop processing input"""
    keyword = "q"
    terminates = True

    def parse_arguments(self, arguments: List[str]) -> None:
        # Trailing text after q is ignored
        pass

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        return []


class LotsCommand(Command):
    """List lots, or create one when all five lot parameters are given"""
    keyword = "p"

    def parse_arguments(self, arguments: List[str]) -> None:
        self.name: Optional[str] = None
        if not arguments:
            return
        if len(arguments) != 5:
            raise ValueError("p expects a name, a capacity and three rates")

        self.name = arguments[0]
        self.capacity = int(arguments[1])
        self.rates = [_parse_decimal(value) for value in arguments[2:]]

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        if self.name is None:
            return view.lot_lines(service.list_lots())

        service.create_lot(self.name, self.capacity, *self.rates)
        return []


class RemoveLotCommand(Command):
    """Remove a lot and print the remaining lot names"""
    keyword = "r"

    def parse_arguments(self, arguments: List[str]) -> None:
        if len(arguments) != 1:
            raise ValueError("r expects a lot name")
        self.name = arguments[0]

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        return view.name_lines(service.remove_lot(self.name))


# ============================================================================
# PARKING COMMANDS
# ============================================================================

class _MovementCommand(Command):
    """Shared parsing of entry and exit commands"""

    def parse_arguments(self, arguments: List[str]) -> None:
        if len(arguments) != 4:
            raise ValueError(f"{self.keyword} expects a lot name, a plate, a date and a time")
        self.lot_name, self.plate = arguments[0], arguments[1]
        self.timestamp = Timestamp.parse(arguments[2], arguments[3])


class EntryCommand(_MovementCommand):
    """Vehicle enters a lot"""
    keyword = "e"

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        receipt = service.register_entry(self.lot_name, self.plate, self.timestamp)
        return [view.entry_line(receipt)]


class ExitCommand(_MovementCommand):
    """Vehicle leaves a lot"""
    keyword = "s"

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        receipt = service.register_exit(self.lot_name, self.plate, self.timestamp)
        return [view.exit_line(receipt)]


# ============================================================================
# REPORT COMMANDS
# ============================================================================

class VehicleHistoryCommand(Command):
    """Print every stay of a plate"""
    keyword = "v"

    def parse_arguments(self, arguments: List[str]) -> None:
        if len(arguments) != 1:
            raise ValueError("v expects a plate")
        self.plate = arguments[0]

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        return view.history_lines(service.vehicle_history(self.plate))


class BillingCommand(Command):
    """Print a lot's billing, for one date or since creation"""
    keyword = "f"

    def parse_arguments(self, arguments: List[str]) -> None:
        if len(arguments) not in (1, 2):
            raise ValueError("f expects a lot name and an optional date")
        self.lot_name = arguments[0]
        self.on_date = Timestamp.parse(arguments[1]) if len(arguments) == 2 else None

    def execute(self, service: ParkingService, view: ConsoleView) -> List[str]:
        return view.billing_lines(service.lot_billing(self.lot_name, self.on_date))


# ============================================================================
# COMMAND FACTORY
# ============================================================================

class CommandFactory:
    """Creates commands from input lines"""

    command_classes: Dict[str, Type[Command]] = {
        command_class.keyword: command_class
        for command_class in (
            QuitCommand, LotsCommand, RemoveLotCommand,
            EntryCommand, ExitCommand,
            VehicleHistoryCommand, BillingCommand
        )
    }

    @classmethod
    def create_command(cls, line: str) -> Optional[Command]:
        """
        Create the command for one line

        Returns: Command instance, or None for blank lines and unknown keywords
        Raises: CommandSyntaxError if the arguments cannot be parsed
        """
        try:
            tokens = tokenize(line)
        except ValueError:
            raise CommandSyntaxError(line) from None

        if not tokens:
            return None

        command_class = cls.command_classes.get(tokens[0])
        if command_class is None:
            logging.getLogger(cls.__name__).debug(f"Ignoring unknown command: {tokens[0]}")
            return None

        try:
            return command_class(tokens[1:])
        except ValueError as e:
            logging.getLogger(cls.__name__).debug(f"Cannot parse {line.strip()!r}: {e}")
            raise CommandSyntaxError(line) from e


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes input lines one at a time

    Service errors are reported as output and processing continues;
    any other exception propagates.
    """

    def __init__(self, service: Optional[ParkingService] = None, view: Optional[ConsoleView] = None):
        self.service = service or ParkingService()
        self.view = view or ConsoleView()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.processed_count = 0
        self.failed_count = 0

    def process_line(self, line: str) -> CommandResult:
        """Parse and execute one line"""
        try:
            command = CommandFactory.create_command(line)
            if command is None:
                return CommandResult(command_type=None, success=True)

            self.processed_count += 1
            output = command.execute(self.service, self.view)
            return CommandResult(
                command_type=command.get_description(),
                success=True,
                output=output,
                stop=command.terminates
            )

        except ParkingServiceError as e:
            self.failed_count += 1
            self.logger.warning(f"Rejected {line.strip()!r}: {e}")
            return CommandResult(
                command_type=None,
                success=False,
                output=[self.view.error_line(e)],
                error_message=str(e)
            )

    def run(self, lines: Iterable[str]) -> Iterator[str]:
        """Yield output lines until input ends or a quit command arrives"""
        for line in lines:
            result = self.process_line(line)
            yield from result.output
            if result.stop:
                self.logger.info(f"Quit after {self.processed_count} commands "
                                 f"({self.failed_count} rejected)")
                return

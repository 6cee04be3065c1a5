# File: tests/integration/test_command_processor.py
"""
Integration tests for command processing: input lines through the command
factory, the service and the console view to output lines.
"""

import unittest
from unittest.mock import patch
import io
import os
import sys
import tempfile
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from parkledger.application.commands import (
    BillingCommand, CommandFactory, CommandProcessor, CommandSyntaxError,
    EntryCommand, LotsCommand, QuitCommand, tokenize
)
from parkledger.config import AppConfig
from parkledger.main import build_parser, load_config, main, run

SESSION = """\
p Saldanha 200 0.20 0.30 12.00
p "CC Colombo" 400 0.25 0.40 20.00
p
e Saldanha AA-00-AA 01-03-2024 08:34
s Saldanha AA-00-AA 01-03-2024 10:59
e "CC Colombo" AA-00-AA 02-03-2024 09:00
v AA-00-AA
f Saldanha
f Saldanha 01-03-2024
f Saldanha 03-03-2024
r Saldanha
q
p
"""

SESSION_OUTPUT = [
    "Saldanha 200 200",
    "CC Colombo 400 400",
    "Saldanha 199",
    "AA-00-AA 01-03-2024 08:34 01-03-2024 10:59 2.60",
    "CC Colombo 399",
    "CC Colombo 02-03-2024 09:00",
    "Saldanha 01-03-2024 08:34 01-03-2024 10:59",
    "01-03-2024 2.60",
    "AA-00-AA 10:59 2.60",
    "invalid date.",
    "CC Colombo",
]


# ============================================================================
# COMMAND FACTORY
# ============================================================================

class TestCommandFactory(unittest.TestCase):
    """Test line parsing into commands"""

    def test_keywords(self):
        self.assertIsInstance(CommandFactory.create_command("q"), QuitCommand)
        self.assertIsInstance(CommandFactory.create_command("p"), LotsCommand)
        self.assertIsInstance(
            CommandFactory.create_command("e Lot AA-00-AA 01-03-2024 08:00"), EntryCommand
        )

    def test_quoted_names(self):
        command = CommandFactory.create_command('f "CC Colombo" 01-03-2024')
        self.assertIsInstance(command, BillingCommand)
        self.assertEqual(command.lot_name, "CC Colombo")
        self.assertEqual(command.on_date.date_key, (2024, 3, 1))

    def test_blank_and_unknown_lines(self):
        for line in ("", "   \n", "x whatever", "help"):
            with self.subTest(line=line):
                self.assertIsNone(CommandFactory.create_command(line))

    def test_malformed_arguments(self):
        for line in ("p Lot ten 0.25 0.30 15", "p Lot 10 abc 0.30 15", "p Lot 10",
                     "e Lot AA-00-AA 01-03-2024", "v", "f", "r", 'p "unterminated'):
            with self.subTest(line=line):
                with self.assertRaises(CommandSyntaxError) as context:
                    CommandFactory.create_command(line)
                self.assertEqual(str(context.exception), f"invalid command: {line}")

    def test_non_finite_rates(self):
        """NaN and infinite rates are syntax errors, not tariffs"""
        for line in ("p A 10 nan 2 3", "p A 10 sNaN 2 3", "p A 10 1 2 Infinity", "p A 10 -inf 2 3"):
            with self.subTest(line=line):
                with self.assertRaises(CommandSyntaxError):
                    CommandFactory.create_command(line)

    def test_only_double_quotes_group(self):
        self.assertEqual(tokenize('p "CC Colombo" 400'), ["p", "CC Colombo", "400"])
        self.assertEqual(tokenize("p O'Hara 10"), ["p", "O'Hara", "10"])
        self.assertEqual(tokenize("p 'Two Words' 10"), ["p", "'Two", "Words'", "10"])
        self.assertEqual(tokenize("p C:\\Lot #1"), ["p", "C:\\Lot", "#1"])

    def test_descriptions(self):
        self.assertEqual(CommandFactory.create_command("q").get_description(), "Quit")
        self.assertEqual(CommandFactory.create_command("p").get_description(), "Lots")


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class TestCommandProcessor(unittest.TestCase):
    """Test line processing and error reporting"""

    def setUp(self):
        self.processor = CommandProcessor()
        self.processor.process_line("p Saldanha 2 0.25 0.30 15.00")

    def output_of(self, line):
        return self.processor.process_line(line).output

    def test_full_session(self):
        processor = CommandProcessor()
        self.assertEqual(list(processor.run(io.StringIO(SESSION))), SESSION_OUTPUT)
        self.assertEqual(processor.processed_count, 12)
        self.assertEqual(processor.failed_count, 1)

    def test_quit_stops_processing(self):
        result = self.processor.process_line("q trailing text")
        self.assertTrue(result.stop)
        self.assertEqual(list(self.processor.run(["q", "p"])), [])

    def test_service_errors_become_output(self):
        cases = [
            ("e Nowhere AA-00-AA 01-03-2024 08:00", "Nowhere: no such parking."),
            ("p Saldanha 5 0.25 0.30 15", "Saldanha: parking already exists."),
            ("p Bad 0 0.25 0.30 15", "0: invalid capacity."),
            ("p Bad 10 0.30 0.25 15", "invalid cost."),
            ("e Saldanha aa-00-aa 01-03-2024 08:00", "aa-00-aa: invalid licence plate."),
            ("e Saldanha AA-00-AA 29-02-2024 08:00", "invalid date."),
            ("s Saldanha BB-11-BB 01-03-2024 08:00", "BB-11-BB: invalid vehicle exit."),
            ("v ZZ-99-ZZ", "ZZ-99-ZZ: no entries found in any parking."),
            ("r Nowhere", "Nowhere: no such parking."),
        ]
        for line, expected in cases:
            with self.subTest(line=line):
                result = self.processor.process_line(line)
                self.assertFalse(result.success)
                self.assertEqual(result.output, [expected])
                self.assertEqual(result.error_message, expected)

    def test_syntax_errors_become_output(self):
        result = self.processor.process_line("p Bad ten 0.25 0.30 15")
        self.assertFalse(result.success)
        self.assertEqual(result.output, ["invalid command: p Bad ten 0.25 0.30 15"])

    def test_unknown_lines_are_silent(self):
        result = self.processor.process_line("z Saldanha")
        self.assertTrue(result.success)
        self.assertEqual(result.output, [])
        self.assertIsNone(result.command_type)

    def test_entry_full_and_reentry(self):
        self.assertEqual(self.output_of("e Saldanha AA-00-AA 01-03-2024 08:00"), ["Saldanha 1"])
        self.assertEqual(self.output_of("e Saldanha AA-00-AA 01-03-2024 08:10"),
                         ["AA-00-AA: invalid vehicle entry."])
        self.assertEqual(self.output_of("e Saldanha BB-11-BB 01-03-2024 08:20"), ["Saldanha 0"])
        self.assertEqual(self.output_of("e Saldanha CC-22-CC 01-03-2024 08:30"),
                         ["Saldanha: parking is full."])
        self.assertEqual(self.output_of("p"), ["Saldanha 2 0"])

    def test_multi_day_exit_amount(self):
        self.output_of("e Saldanha AA-00-AA 01-03-2024 08:00")
        # One full day at the cap plus 45 minutes
        self.assertEqual(self.output_of("s Saldanha AA-00-AA 02-03-2024 08:45"),
                         ["AA-00-AA 01-03-2024 08:00 02-03-2024 08:45 15.75"])

    def test_daily_billing_orders_by_exit(self):
        self.output_of("e Saldanha AA-00-AA 01-03-2024 08:00")
        self.output_of("e Saldanha BB-11-BB 01-03-2024 08:30")
        self.output_of("s Saldanha BB-11-BB 01-03-2024 09:00")
        self.output_of("s Saldanha AA-00-AA 01-03-2024 09:30")
        self.assertEqual(self.output_of("f Saldanha 01-03-2024"),
                         ["BB-11-BB 09:00 0.50", "AA-00-AA 09:30 1.60"])
        self.assertEqual(self.output_of("f Saldanha"), ["01-03-2024 2.10"])

    def test_non_finite_rates_do_not_stop_processing(self):
        lines = [
            "p A 10 nan 2 3",
            "p A 10 1 2 Infinity",
            "p B 10 0.25 0.30 15",
            "p",
        ]
        self.assertEqual(list(CommandProcessor().run(lines)), [
            "invalid command: p A 10 nan 2 3",
            "invalid command: p A 10 1 2 Infinity",
            "B 10 10",
        ])

    def test_names_with_apostrophe_and_backslash(self):
        lines = [
            "p O'Hara 10 0.25 0.30 15.00",
            "p C:\\Lot 5 0.25 0.30 15.00",
            "p",
            "e O'Hara AA-00-AA 01-03-2024 08:00",
            "s O'Hara AA-00-AA 01-03-2024 09:30",
            "f O'Hara",
            "f O'Hara 01-03-2024",
        ]
        self.assertEqual(list(CommandProcessor().run(lines)), [
            "O'Hara 10 10",
            "C:\\Lot 5 5",
            "O'Hara 9",
            "AA-00-AA 01-03-2024 08:00 01-03-2024 09:30 1.60",
            "01-03-2024 1.60",
            "AA-00-AA 09:30 1.60",
        ])

    def test_billing_before_any_movement(self):
        self.assertEqual(self.output_of("f Saldanha"), [])
        self.assertEqual(self.output_of("f Saldanha 01-03-2024"), ["invalid date."])


# ============================================================================
# CONSOLE ENTRY POINT
# ============================================================================

class TestMainEntryPoint(unittest.TestCase):
    """Test configuration loading and the console runner"""

    def test_run_writes_lines(self):
        sink = io.StringIO()
        self.assertEqual(run(AppConfig(), io.StringIO(SESSION), sink), 0)
        self.assertEqual(sink.getvalue(), "\n".join(SESSION_OUTPUT) + "\n")

    def test_run_respects_lot_limit(self):
        sink = io.StringIO()
        script = "p A 1 0.25 0.30 15\np B 1 0.25 0.30 15\n"
        run(AppConfig(max_lots=1), io.StringIO(script), sink)
        self.assertEqual(sink.getvalue(), "too many parks.\n")

    def test_flags_override_environment(self):
        args = build_parser().parse_args(["--max-lots", "3", "--eager-resize", "--log-level", "error"])
        with patch.dict(os.environ, {"PARKLEDGER_MAX_LOTS": "7", "PARKLEDGER_LOAD_FACTOR_THRESHOLD": "0.5"}):
            config = load_config(args)
        self.assertEqual(config.max_lots, 3)
        self.assertEqual(config.load_factor_threshold, 0.5)
        self.assertTrue(config.resize_on_every_insert)
        self.assertEqual(config.log_level, "ERROR")

    def test_main_reads_command_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = Path(directory) / "commands.txt"
            path.write_text(SESSION)
            with patch("sys.stdout", new_callable=io.StringIO) as stdout:
                self.assertEqual(main([str(path), "--log-level", "CRITICAL"]), 0)
        self.assertEqual(stdout.getvalue().splitlines(), SESSION_OUTPUT)

    def test_main_rejects_bad_configuration(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main(["--max-lots", "0"])


if __name__ == "__main__":
    unittest.main()

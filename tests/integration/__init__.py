"""
Integration tests for the Parking Ledger

These tests drive the application service, the command processor and the
console entry point together, from input lines to printed output.
"""

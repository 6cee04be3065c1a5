"""
Parking Ledger

In-memory management of a small set of parking lots: vehicle entries and
exits, per-vehicle histories and per-lot billing under quarter-hour tariffs.
"""

__version__ = "1.0.0"

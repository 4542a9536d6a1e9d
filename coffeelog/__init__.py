"""Coffee Log: record coffee-consumption events and edit them afterwards."""

__version__ = "0.1.0"

"""Custom exception hierarchy for the analytics engine.

The aggregation functions themselves degrade silently on bad trade data;
these exceptions are raised only at the configuration and loading edges.
"""


class CompassError(Exception):
    """Base exception for all trade-compass errors."""


# --- Configuration ---
class ConfigError(CompassError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(CompassError):
    """Trade data could not be obtained."""


class TradeLoadError(DataError):
    """A trade file is unreadable or not a list of trade objects."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load trades from {path}: {reason}")

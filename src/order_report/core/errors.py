"""Custom exception hierarchy for the order report pipeline."""

from __future__ import annotations

from decimal import Decimal


class OrderReportError(Exception):
    """Base exception for all order report errors."""


# --- Configuration ---
class ConfigError(OrderReportError):
    """Invalid or missing configuration."""


# --- Input ---
class InputError(OrderReportError):
    """The input document could not be turned into orders."""


class InputFileError(InputError):
    """Input path is missing, not a regular file, or unreadable."""


class ParseError(InputError):
    """Malformed JSON, or a record with the wrong shape or field types."""


# --- Entities ---
class ValidationError(OrderReportError):
    """An Item or Order field breaks a business rule."""


# --- Aggregation ---
class AggregationError(OrderReportError):
    """Aggregation engine failure."""


class PriceConsistencyError(AggregationError):
    """The same product was seen at two different unit prices."""

    def __init__(self, product: str, found: Decimal, previous: Decimal):
        self.product = product
        self.found = found
        self.previous = previous
        super().__init__(
            f"Price mismatch for product '{product}': "
            f"found ${found:.2f} but previously had ${previous:.2f}"
        )


# --- Output ---
class ReportWriteError(OrderReportError):
    """A report file could not be written."""

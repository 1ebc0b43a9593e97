"""Errors raised by the chart service."""


class ChartError(Exception):
    """Base class for chart aggregation errors."""


class InvalidDateRange(ChartError, ValueError):
    """Raised when the requested range ends before it starts."""

    def __init__(self, start_date, end_date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"start_date {start_date} is after end_date {end_date}")

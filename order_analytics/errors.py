"""
Error types raised at the order analytics boundary.

Thin-data conditions are never errors: they come back as structured
``insufficient_data`` results. Exceptions are reserved for input that cannot
be turned into an order record at all.
"""


class OrderAnalyticsError(Exception):
    """Base class for order analytics errors."""


class InvalidInputError(OrderAnalyticsError, ValueError):
    """Raised when an order record or optimization parameter is rejected."""

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"order #{index}: {message}"
        super().__init__(message)

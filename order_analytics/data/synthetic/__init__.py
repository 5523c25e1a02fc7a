"""
Synthetic data generation for order analytics.

Generates realistic foundry order books:
- Completed order history with growth and seasonality
- Pending orders with spread-out delivery dates

Use for:
- System testing and demos
- Checking forecast behaviour on known patterns
"""

from .order_generator import OrderBookGenerator

__all__ = [
    "OrderBookGenerator",
]

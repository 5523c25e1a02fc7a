"""Data sources for order analytics."""

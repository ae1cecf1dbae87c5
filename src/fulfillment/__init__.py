"""Inventory and fulfillment transaction engine."""

__version__ = "1.0.0"

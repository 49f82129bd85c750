"""Incremental Java compilation driver."""

__version__ = "1.0.0"

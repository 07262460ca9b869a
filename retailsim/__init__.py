"""Retail store simulation: promotions, basket pricing and order lifecycle."""

__version__ = "0.1.0"

"""Crosswatch - 200-day moving average crossover alerts."""

__version__ = "0.1.0"

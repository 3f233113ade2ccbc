"""Forza Horizon tuning calculator: tune generation, prediction and optimization."""

__version__ = "0.1.0"

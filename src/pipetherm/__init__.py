"""Steady-state thermal field engine for buried pipelines."""

__version__ = "0.1.0"

"""Declarative Gmail filters: rules, filter generation, diffing and export."""

__version__ = "0.1.0"
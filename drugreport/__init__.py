"""NAFDAC drug lookup, side effect reconciliation and report generation."""

__version__ = "1.0.0"

"""Declarative inventory reconciliation for automation controllers."""

__version__ = "0.1.0"

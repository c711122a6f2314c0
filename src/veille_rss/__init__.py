"""Veille RSS: Angular and Java technology watch over RSS/Atom feeds."""

__version__ = "0.1.0"

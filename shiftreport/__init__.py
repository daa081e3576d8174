"""Shift-lead report rendering and delivery service."""

__version__ = "1.0.0"

"""Shared exception types for the shift-report pipeline."""

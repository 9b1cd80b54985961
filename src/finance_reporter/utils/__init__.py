"""Shared helpers for dates, money and logging."""

"""Shared helpers: logging, dates, phone numbers and background tasks."""

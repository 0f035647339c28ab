"""Billing disputes for counted calls."""

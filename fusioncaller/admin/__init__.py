"""Admin endpoints for plans, privileges, trials and disputes."""

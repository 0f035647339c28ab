"""Service token authentication."""

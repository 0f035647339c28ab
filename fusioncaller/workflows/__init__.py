"""Workflow automations triggered by call and lead events."""

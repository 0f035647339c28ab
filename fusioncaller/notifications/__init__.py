"""SMS notifications and post-call side effects."""

"""Usage counting, plan allowances and Stripe overage charges."""

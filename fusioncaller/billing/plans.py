"""Subscription plans and their monthly outbound call allowances."""

from enum import Enum

UNLIMITED = -1


class Plan(str, Enum):
    STARTER = "starter"
    GROWTH = "growth"
    PRO = "pro"


# Billable outbound calls included per month
PLAN_OUTBOUND_LIMITS: dict[str, int] = {
    Plan.STARTER.value: 0,
    Plan.GROWTH.value: 500,
    Plan.PRO.value: 2500,
}


def outbound_limit(plan: str | None) -> int:
    """Monthly allowance for a plan. Unknown or missing plans get 0."""
    if not plan:
        return 0
    return PLAN_OUTBOUND_LIMITS.get(plan, 0)

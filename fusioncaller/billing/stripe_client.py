"""
Stripe overage charges.

The Stripe SDK is synchronous, so calls run in a worker thread.
"""

import asyncio
import math
from dataclasses import dataclass

import stripe

from fusioncaller.billing.config import StripeSettings, get_stripe_settings
from fusioncaller.exceptions import BillingError
from fusioncaller.utils.logger import logger


@dataclass
class OverageCharge:
    invoice_item_id: str
    amount_cents: int
    minutes: int


class OverageCharger:
    """Creates Stripe invoice items for calls beyond the plan allowance."""

    def __init__(self, settings: StripeSettings | None = None):
        self._settings = settings or get_stripe_settings()

    @property
    def enabled(self) -> bool:
        return bool(self._settings.api_key)

    def price_cents(self, duration_seconds: int | None) -> tuple[int, int]:
        """
        Price a call by started minute.

        Returns:
            tuple[int, int]: (billed minutes, amount in cents)
        """
        minutes = max(1, math.ceil((duration_seconds or 0) / 60))
        return minutes, minutes * self._settings.overage_cents_per_minute

    async def charge(
        self,
        customer_id: str,
        organization_id: str,
        call_id: str,
        duration_seconds: int | None,
        direction: str,
    ) -> OverageCharge:
        """
        Add an overage invoice item to the customer's next invoice.

        Args:
            customer_id: Stripe customer ID
            organization_id: Organization UUID
            call_id: Call record ID
            duration_seconds: Call duration
            direction: Call direction

        Returns:
            OverageCharge: Created invoice item

        Raises:
            BillingError: If Stripe is not configured or the request fails
        """
        if not self.enabled:
            raise BillingError("Stripe is not configured", "STRIPE_NOT_CONFIGURED")

        minutes, amount_cents = self.price_cents(duration_seconds)

        try:
            invoice_item = await asyncio.to_thread(
                stripe.InvoiceItem.create,
                api_key=self._settings.api_key,
                customer=customer_id,
                amount=amount_cents,
                currency=self._settings.currency,
                description=f"Vapi {direction} call ({minutes} min) - Overage charge",
                metadata={
                    "organization_id": organization_id,
                    "call_id": call_id,
                    "call_direction": direction,
                    "call_duration_seconds": str(duration_seconds or 0),
                    "call_minutes": str(minutes),
                    "is_overage": "true",
                },
                idempotency_key=f"overage-{call_id}",
            )
        except stripe.StripeError as e:
            logger.error(
                "[Billing] Stripe invoice item creation failed",
                organization_id=organization_id,
                call_id=call_id,
                error=str(e),
            )
            raise BillingError(f"Stripe error: {str(e)}", "STRIPE_ERROR") from e

        logger.info(
            "[Billing] Overage charged",
            organization_id=organization_id,
            call_id=call_id,
            amount_cents=amount_cents,
            invoice_item_id=invoice_item.id,
        )
        return OverageCharge(
            invoice_item_id=invoice_item.id, amount_cents=amount_cents, minutes=minutes
        )

"""
Webhook processing pipeline.

resolve tenant -> access check -> record call -> lead + campaign contact
-> usage billing -> commit -> background side effects.
"""

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.billing.usage import BillingResult, UsageBiller
from fusioncaller.db.calls.model import Call
from fusioncaller.integrations.vapi.call_control import VapiCallControl, get_call_control
from fusioncaller.notifications.notifier import CallSnapshot, Notifier
from fusioncaller.utils.logger import logger
from fusioncaller.webhook.access import ORGANIZATION_NOT_FOUND, AccessChecker, AccessResult
from fusioncaller.webhook.constants import UNIDENTIFIED_ORG_REASON, CallDirection
from fusioncaller.webhook.leads import LeadExtractor, LeadOutcome
from fusioncaller.webhook.recorder import CallRecorder
from fusioncaller.webhook.schemas import (
    AccessCheckResponse,
    WebhookErrorResponse,
    WebhookEvent,
    WebhookSuccessResponse,
)
from fusioncaller.webhook.tenant_resolver import TenantResolver

ACCESS_DENIED = "Access denied"
INTERNAL_ERROR = "Internal server error"


@dataclass
class WebhookResult:
    """HTTP status and body for a processed webhook."""

    status_code: int
    body: dict[str, Any]


def _success(call_id: str | None, reason: str | None = None) -> WebhookResult:
    body = WebhookSuccessResponse(call_id=call_id, reason=reason).model_dump(
        by_alias=True, exclude_none=True
    )
    return WebhookResult(HTTPStatus.OK, body)


class WebhookService:
    """Processes one provider webhook delivery."""

    def __init__(
        self,
        session: AsyncSession,
        call_control: VapiCallControl | None = None,
        notifier: Notifier | None = None,
        biller: UsageBiller | None = None,
    ):
        self.session = session
        self.resolver = TenantResolver(session)
        self.access = AccessChecker(session)
        self.recorder = CallRecorder(session)
        self.leads = LeadExtractor(session)
        self.biller = biller or UsageBiller(session)
        self.call_control = call_control or get_call_control()
        self.notifier = notifier or Notifier()

    async def handle(self, payload: dict[str, Any]) -> WebhookResult:
        """
        Process a webhook body.

        Unexpected errors are logged and answered with a generic 500.

        Args:
            payload: Raw JSON body

        Returns:
            WebhookResult: Status code and response body
        """
        try:
            return await self._process(WebhookEvent.from_payload(payload))
        except Exception:
            logger.exception("[Webhook] Failed to process webhook")
            await self.session.rollback()
            return WebhookResult(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": INTERNAL_ERROR})

    async def _process(self, event: WebhookEvent) -> WebhookResult:
        logger.info(
            "[Webhook] Event received",
            event_type=event.event_type,
            provider_call_id=event.provider_call_id,
            raw_status=event.raw_status,
        )

        resolution = await self.resolver.resolve(event)
        direction = resolution.direction

        if not resolution.resolved:
            call, _ = await self.recorder.record(event, None, direction)
            await self.session.commit()
            return _success(call.id, UNIDENTIFIED_ORG_REASON)

        organization_id = resolution.organization_id

        if not event.is_intermediate:
            access = await self.access.check(organization_id)
            if not access.has_access:
                return await self._reject(event, organization_id, direction, access)

        call, is_new = await self.recorder.record(event, organization_id, direction)

        outcome = await self.leads.extract(event, call, organization_id, direction, is_new)
        if event.is_terminal:
            await self.leads.update_campaign_contact(event, call, organization_id, outcome)

        billing = await self.biller.bill_call(
            call, organization_id, direction, event.raw_status, outcome.lead_status
        )

        await self.session.commit()

        if event.is_terminal:
            self.notifier.call_finished(
                self._snapshot(call, organization_id, direction, outcome, billing)
            )

        logger.info(
            "[Webhook] Event processed",
            call_id=call.id,
            organization_id=organization_id,
            direction=direction.value,
            status=call.status,
            new_call=is_new,
        )
        return _success(call.id)

    async def _reject(
        self,
        event: WebhookEvent,
        organization_id: str,
        direction: CallDirection,
        access: AccessResult,
    ) -> WebhookResult:
        reason = access.reason
        missing = access.organization_missing
        call = await self.recorder.record_blocked(
            event, None if missing else organization_id, direction, reason
        )
        await self.session.commit()

        if event.provider_call_id:
            termination = await self.call_control.terminate_call(event.provider_call_id)
            logger.warning(
                "[Webhook] Call blocked",
                call_id=call.id,
                organization_id=organization_id,
                reason=reason,
                termination_attempted=termination.attempted,
                terminated=termination.terminated,
            )

        body = WebhookErrorResponse(
            error=ORGANIZATION_NOT_FOUND if missing else ACCESS_DENIED,
            message=reason,
        ).model_dump()
        status_code = HTTPStatus.NOT_FOUND if missing else HTTPStatus.FORBIDDEN
        return WebhookResult(status_code, body)

    @staticmethod
    def _snapshot(
        call: Call,
        organization_id: str,
        direction: CallDirection,
        outcome: LeadOutcome,
        billing: BillingResult,
    ) -> CallSnapshot:
        lead_data = dict(outcome.lead_data)
        if not lead_data.get("phone"):
            lead_data["phone"] = (
                call.to_number if direction == CallDirection.OUTBOUND else call.from_number
            )
        return CallSnapshot(
            organization_id=organization_id,
            call_id=call.id,
            direction=direction.value,
            call_status=call.status,
            duration_seconds=call.duration_seconds,
            lead_id=outcome.lead_id,
            lead_status=outcome.lead_status,
            lead_created=outcome.created,
            lead_status_changed=outcome.status_changed,
            stored_lead_status=outcome.stored_status,
            has_appointment=outcome.has_appointment,
            appointment_id=outcome.appointment_id,
            lead_data=lead_data,
            overage=billing.overage,
        )

    async def check_access(self, payload: dict[str, Any]) -> AccessCheckResponse:
        """
        Pre-call access check. Unlike the webhook this fails closed.

        Args:
            payload: Raw JSON body

        Returns:
            AccessCheckResponse: Whether the call may proceed
        """
        try:
            event = WebhookEvent.from_payload(payload)
            resolution = await self.resolver.resolve(event)
            if not resolution.resolved:
                logger.warning(
                    "[Access] Pre-call check could not identify organization",
                    provider_call_id=event.provider_call_id,
                )
                return AccessCheckResponse(
                    allowed=False, message="Unable to identify organization"
                )

            result = await self.access.check(resolution.organization_id)
        except Exception:
            logger.exception("[Access] Pre-call check failed")
            return AccessCheckResponse(allowed=False, message="Access check failed")

        if result.has_access:
            return AccessCheckResponse(allowed=True, reason=result.reason)
        return AccessCheckResponse(allowed=False, message=result.reason)

"""
Post-call side effects that run after the webhook response.

The webhook commits its transaction first, then hands a plain snapshot of the
call to the Notifier. Each side effect runs as a background task with its own
database session, so a slow SMS provider or a failing workflow never delays
or fails the webhook.
"""

from dataclasses import dataclass, field
from typing import Any

from fusioncaller.billing.stripe_client import OverageCharger
from fusioncaller.billing.usage import OverageRequest, UsageBiller
from fusioncaller.db.database import session_scope
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.notifications.client import TwilioSMSClient, get_sms_client
from fusioncaller.notifications.sms import (
    LeadData,
    NotificationType,
    determine_notification_type,
    send_lead_notification,
)
from fusioncaller.utils.logger import logger
from fusioncaller.utils.tasks import TaskRunner, get_task_runner
from fusioncaller.workflows.constants import TriggerType
from fusioncaller.workflows.engine import WorkflowEngine


@dataclass
class CallSnapshot:
    """Committed call state handed to background tasks."""

    organization_id: str
    call_id: str
    direction: str
    call_status: str
    duration_seconds: int | None = None
    lead_id: str | None = None
    lead_status: str = "new"
    lead_created: bool = False
    lead_status_changed: bool = False
    stored_lead_status: str | None = None
    has_appointment: bool = False
    appointment_id: str | None = None
    lead_data: dict[str, Any] = field(default_factory=dict)
    overage: OverageRequest | None = None

    def workflow_context(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "call_id": self.call_id,
            "lead_id": self.lead_id,
            "direction": self.direction,
            "call_status": self.call_status,
            "lead_status": self.lead_status,
            "duration_seconds": self.duration_seconds,
            **{k: v for k, v in self.lead_data.items() if v is not None},
        }


class Notifier:
    """Schedules SMS notifications, workflows and overage charges."""

    def __init__(
        self,
        runner: TaskRunner | None = None,
        sms_client: TwilioSMSClient | None = None,
        charger: OverageCharger | None = None,
    ):
        self.runner = runner or get_task_runner()
        self.sms_client = sms_client or get_sms_client()
        self.charger = charger

    def call_finished(self, snapshot: CallSnapshot) -> None:
        """
        Schedule every side effect of a finished call.

        Args:
            snapshot: Committed call state
        """
        notification_type = determine_notification_type(
            snapshot.direction, snapshot.lead_status, snapshot.has_appointment
        )
        if notification_type is not None:
            self.runner.spawn(
                self.send_notification(snapshot, notification_type),
                name=f"sms-{snapshot.call_id}",
            )

        self.runner.spawn(self.run_workflows(snapshot), name=f"workflows-{snapshot.call_id}")

        if snapshot.overage is not None:
            self.runner.spawn(
                self.charge_overage(snapshot.overage), name=f"overage-{snapshot.call_id}"
            )

    async def send_notification(
        self, snapshot: CallSnapshot, notification_type: NotificationType
    ) -> None:
        async with session_scope() as session:
            org = await OrganizationRepository(session).get_by_id(snapshot.organization_id)
            if org is None:
                return
            result = await send_lead_notification(
                org,
                notification_type,
                LeadData.model_validate(
                    {k: v for k, v in snapshot.lead_data.items() if v is not None}
                ),
                self.sms_client,
            )

        if result.success:
            logger.info(
                "[Notifier] SMS notification sent",
                organization_id=snapshot.organization_id,
                call_id=snapshot.call_id,
                notification_type=notification_type.value,
            )
        else:
            logger.info(
                "[Notifier] SMS not sent",
                organization_id=snapshot.organization_id,
                call_id=snapshot.call_id,
                notification_type=notification_type.value,
                reason=result.error,
            )

    async def run_workflows(self, snapshot: CallSnapshot) -> None:
        """Fire call and lead triggers for the organization's workflows."""
        context = snapshot.workflow_context()
        triggers: list[tuple[TriggerType, dict[str, Any]]] = [
            (TriggerType.CALL_COMPLETED, context)
        ]
        if snapshot.lead_created:
            triggers.append((TriggerType.NEW_LEAD, context))
        if snapshot.lead_status_changed:
            triggers.append(
                (
                    TriggerType.LEAD_STATUS_CHANGED,
                    {**context, "new_status": snapshot.stored_lead_status},
                )
            )
        if snapshot.appointment_id:
            triggers.append(
                (
                    TriggerType.APPOINTMENT_BOOKED,
                    {**context, "appointment_id": snapshot.appointment_id},
                )
            )

        # One transaction per trigger so a failure keeps earlier triggers' records
        for trigger_type, trigger_context in triggers:
            async with session_scope() as session:
                engine = WorkflowEngine(session, sms_client=self.sms_client)
                await engine.trigger_workflows(
                    snapshot.organization_id, trigger_type.value, trigger_context
                )

    async def charge_overage(self, request: OverageRequest) -> None:
        async with session_scope() as session:
            await UsageBiller(session, charger=self.charger).charge_overage(request)

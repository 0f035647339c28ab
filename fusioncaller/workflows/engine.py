"""
Workflow automation engine.

Runs an organization's enabled workflows for a trigger event and executes
their actions in order. Each run is recorded as a WorkflowExecution.
"""

from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.leads.repository import LeadRepository
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.db.workflows.model import Workflow
from fusioncaller.db.workflows.repository import WorkflowRepository
from fusioncaller.exceptions import NotificationError, WorkflowActionError
from fusioncaller.notifications.client import TwilioSMSClient, get_sms_client
from fusioncaller.utils.logger import logger
from fusioncaller.workflows.config import get_workflow_settings
from fusioncaller.workflows.constants import ActionType, TriggerType


def trigger_matches(workflow: Workflow, trigger_type: str, context: dict[str, Any]) -> bool:
    """
    Check a workflow's trigger config against the event context.

    Args:
        workflow: Workflow to check
        trigger_type: Event that fired
        context: Event data

    Returns:
        bool: True if the workflow should run
    """
    config = workflow.trigger_config or {}

    if trigger_type == TriggerType.LEAD_STATUS_CHANGED.value:
        return config.get("status") == context.get("new_status")

    if trigger_type == TriggerType.LEAD_SCORE_THRESHOLD.value:
        threshold = config.get("threshold")
        score = context.get("score")
        if threshold is None or score is None:
            return False
        return score >= threshold

    return True


class WorkflowEngine:
    """Loads and runs workflows for an organization."""

    def __init__(
        self,
        session: AsyncSession,
        sms_client: TwilioSMSClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.session = session
        self.workflows = WorkflowRepository(session)
        self.leads = LeadRepository(session)
        self.organizations = OrganizationRepository(session)
        self.sms_client = sms_client or get_sms_client()
        self.http_client = http_client
        self.settings = get_workflow_settings()

    async def trigger_workflows(
        self, organization_id: str, trigger_type: str, context: dict[str, Any]
    ) -> int:
        """
        Run every enabled workflow of the organization for a trigger.

        A failing workflow is recorded as failed and does not stop the
        remaining ones.

        Args:
            organization_id: Organization whose workflows run
            trigger_type: Event that fired
            context: Event data passed to actions

        Returns:
            int: Number of workflows that ran
        """
        if not self.settings.enabled:
            return 0

        workflows = await self.workflows.list_enabled(organization_id, trigger_type)
        ran = 0
        for workflow in workflows:
            try:
                matched = trigger_matches(workflow, trigger_type, context)
            except Exception:
                logger.exception(
                    "[Workflows] Trigger config could not be evaluated",
                    workflow_id=workflow.id,
                    organization_id=organization_id,
                )
                continue
            if not matched:
                continue
            await self._run(workflow, trigger_type, context)
            ran += 1

        if ran:
            logger.info(
                "[Workflows] Workflows triggered",
                organization_id=organization_id,
                trigger_type=trigger_type,
                count=ran,
            )
        return ran

    async def _run(self, workflow: Workflow, trigger_type: str, context: dict[str, Any]) -> None:
        execution = await self.workflows.start_execution(
            workflow,
            trigger_event=trigger_type,
            trigger_data=context,
            lead_id=context.get("lead_id"),
            call_id=context.get("call_id"),
        )

        error = None
        try:
            # Writes made by a failing workflow are undone, the execution row stays
            async with self.session.begin_nested():
                for action in workflow.actions or []:
                    if not isinstance(action, dict):
                        raise WorkflowActionError(
                            f"Invalid action entry: {action!r}", "INVALID_ACTION"
                        )
                    await self.execute_action(workflow, action, context)
        except WorkflowActionError as e:
            error = e.message
            logger.error(
                "[Workflows] Workflow failed",
                workflow_id=workflow.id,
                organization_id=workflow.organization_id,
                error=e.message,
                error_code=e.error_code,
            )
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.exception(
                "[Workflows] Workflow crashed",
                workflow_id=workflow.id,
                organization_id=workflow.organization_id,
            )

        await self.workflows.finish_execution(execution, error)
        await self.workflows.record_run(workflow.id)

    async def execute_action(
        self, workflow: Workflow, action: dict[str, Any], context: dict[str, Any]
    ) -> None:
        """
        Execute one workflow action.

        Raises:
            WorkflowActionError: If the action fails
        """
        action_type = action.get("type")
        config = action.get("config") or {}

        if action_type == ActionType.UPDATE_LEAD_STATUS.value:
            await self._update_lead_status(config, context)
        elif action_type == ActionType.SEND_SMS.value:
            await self._send_sms(workflow.organization_id, config, context)
        elif action_type == ActionType.WEBHOOK.value:
            await self._post_webhook(config, context)
        else:
            logger.info(
                "[Workflows] Action type not supported, skipping",
                workflow_id=workflow.id,
                action_type=action_type,
            )

    async def _update_lead_status(self, config: dict[str, Any], context: dict[str, Any]) -> None:
        lead_id = context.get("lead_id")
        status = config.get("status")
        if not lead_id or not status:
            raise WorkflowActionError(
                "update_lead_status needs a lead and a status", "MISSING_LEAD_OR_STATUS"
            )
        if await self.leads.set_status(lead_id, status) is None:
            raise WorkflowActionError(f"Lead not found: {lead_id}", "LEAD_NOT_FOUND")

    async def _send_sms(
        self, organization_id: str, config: dict[str, Any], context: dict[str, Any]
    ) -> None:
        org = await self.organizations.get_by_id(organization_id)
        if org is None or not org.notification_phone:
            raise WorkflowActionError(
                "No notification phone number configured", "NO_NOTIFICATION_PHONE"
            )

        message = config.get("message") or "Workflow notification"
        try:
            message = message.format(**{k: v for k, v in context.items() if v is not None})
        except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
            logger.warning(
                "[Workflows] SMS template not filled, sending as written",
                organization_id=organization_id,
                error=str(e),
            )

        try:
            await self.sms_client.send_sms(org.notification_phone, message)
        except NotificationError as e:
            raise WorkflowActionError(e.message, "SMS_FAILED") from e

    async def _post_webhook(self, config: dict[str, Any], context: dict[str, Any]) -> None:
        url = config.get("url")
        if not url:
            raise WorkflowActionError("webhook action needs a url", "MISSING_URL")

        try:
            if self.http_client is not None:
                response = await self.http_client.post(url, json=context)
            else:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.settings.webhook_timeout)
                ) as client:
                    response = await client.post(url, json=context)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WorkflowActionError(
                f"Webhook returned {e.response.status_code}", "WEBHOOK_FAILED"
            ) from e
        except httpx.HTTPError as e:
            raise WorkflowActionError(f"Webhook request failed: {e}", "WEBHOOK_FAILED") from e

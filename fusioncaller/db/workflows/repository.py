"""
Repository for workflow lookups and execution records.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.workflows.model import Workflow, WorkflowExecution
from fusioncaller.workflows.constants import ExecutionStatus


class WorkflowRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_enabled(self, organization_id: str, trigger_type: str) -> list[Workflow]:
        result = await self.session.execute(
            select(Workflow)
            .where(Workflow.organization_id == organization_id)
            .where(Workflow.enabled.is_(True))
            .where(Workflow.trigger_type == trigger_type)
            .order_by(Workflow.created_at)
        )
        return list(result.scalars().all())

    async def start_execution(
        self,
        workflow: Workflow,
        trigger_event: str,
        trigger_data: dict[str, Any],
        lead_id: str | None = None,
        call_id: str | None = None,
    ) -> WorkflowExecution:
        execution = WorkflowExecution(
            workflow_id=workflow.id,
            organization_id=workflow.organization_id,
            trigger_event=trigger_event,
            trigger_data=trigger_data,
            status=ExecutionStatus.RUNNING.value,
            lead_id=lead_id,
            call_id=call_id,
        )
        self.session.add(execution)
        await self.session.flush()
        return execution

    async def finish_execution(
        self, execution: WorkflowExecution, error: str | None = None
    ) -> None:
        """Mark an execution completed, or failed when ``error`` is set."""
        execution.status = (
            ExecutionStatus.FAILED.value if error else ExecutionStatus.COMPLETED.value
        )
        execution.error = error
        await self.session.flush()

    async def record_run(self, workflow_id: str) -> None:
        await self.session.execute(
            update(Workflow)
            .where(Workflow.id == workflow_id)
            .values(
                execution_count=Workflow.execution_count + 1,
                last_executed_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )

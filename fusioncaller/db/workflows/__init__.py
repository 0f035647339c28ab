"""Workflow models."""

from fusioncaller.db.workflows.model import Workflow, WorkflowExecution
from fusioncaller.db.workflows.repository import WorkflowRepository

__all__ = ["Workflow", "WorkflowExecution", "WorkflowRepository"]

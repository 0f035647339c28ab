from enum import Enum


class TriggerType(str, Enum):
    """Events that start a workflow."""

    CALL_COMPLETED = "call_completed"
    NEW_LEAD = "new_lead"
    LEAD_STATUS_CHANGED = "lead_status_changed"
    APPOINTMENT_BOOKED = "appointment_booked"
    LEAD_SCORE_THRESHOLD = "lead_score_threshold"


class ActionType(str, Enum):
    """Workflow action types."""

    UPDATE_LEAD_STATUS = "update_lead_status"
    SEND_SMS = "send_sms"
    WEBHOOK = "webhook"
    SEND_EMAIL = "send_email"
    CREATE_TASK = "create_task"
    ASSIGN_TO_TEAM = "assign_to_team"
    ADD_TAG = "add_tag"
    SCHEDULE_FOLLOWUP = "schedule_followup"


class ExecutionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

"""
Domain exceptions.

Each error carries a machine-readable ``error_code`` that routers surface in
HTTP error details.
"""


class FusionCallerError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, error_code: str | None = None):
        """
        Initialize the error.

        Args:
            message: Human-readable error message
            error_code: Optional machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class OrganizationNotFoundError(FusionCallerError):
    """Raised when an organization does not exist."""

    def __init__(self, organization_id: str):
        super().__init__(
            f"Organization not found: {organization_id}", "ORGANIZATION_NOT_FOUND"
        )
        self.organization_id = organization_id


class TrialError(FusionCallerError):
    """Raised when a trial action is not allowed in the current state."""

    pass


class VapiCallControlError(FusionCallerError):
    """Raised when a provider call-control request fails."""

    def __init__(
        self, message: str, error_code: str | None = None, status_code: int | None = None
    ):
        super().__init__(message, error_code)
        self.status_code = status_code


class BillingError(FusionCallerError):
    """Raised when usage counting or an overage charge fails."""

    pass


class NotificationError(FusionCallerError):
    """Raised when an SMS notification cannot be sent."""

    pass


class DisputeError(FusionCallerError):
    """Raised when a dispute cannot be submitted or reviewed."""

    pass


class WorkflowActionError(FusionCallerError):
    """Raised when a workflow action fails."""

    pass

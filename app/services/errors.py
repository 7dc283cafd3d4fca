"""
Domain errors for the triage pipeline.

Services raise these; the HTTP layer maps them to status codes.
Normalization never raises (defaults are resolved locally).
"""


class TriageError(Exception):
    """Base class for all triage pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceError(TriageError):
    """A collaborating service (store or model) failed or is unreachable."""


class StoreError(ServiceError):
    """Firestore list/delete failed."""


class PermissionDeniedError(StoreError):
    """Firestore rejected the operation for lack of rights."""


class AIServiceError(ServiceError):
    """The generative model request failed."""


class AIUnavailableError(ServiceError):
    """No model provider is configured."""


class MalformedResponseError(TriageError):
    """The model returned a response that does not match the requested schema."""


class PreconditionError(TriageError):
    """The request was rejected before any network call."""


class ReportNotFoundError(TriageError):
    """The report id is not in the working set."""


class OperationInProgressError(TriageError):
    """The same operation is already in flight for this resource."""

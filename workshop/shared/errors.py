"""Domain errors shared by every workshop service.

Services raise these instead of HTTPException so they can be called from the
worker and scripts as well as from routers; ``main.py`` maps them to responses.
"""


class WorkshopError(Exception):
    """Base class for user-visible workshop errors."""

    status_code = 500
    kind = "WorkshopError"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.kind


class Unauthenticated(WorkshopError):
    status_code = 401
    kind = "Unauthenticated"


class AuthorizationError(WorkshopError):
    status_code = 403
    kind = "AuthorizationError"


class ValidationError(WorkshopError):
    status_code = 400
    kind = "ValidationError"


class NotFoundError(WorkshopError):
    status_code = 404
    kind = "NotFoundError"


class ConflictError(WorkshopError):
    status_code = 409
    kind = "ConflictError"


class SlotUnavailableError(WorkshopError):
    """The requested slot is missing, already taken, or its day is blocked."""

    status_code = 409
    kind = "SlotUnavailableError"


class DependencyError(WorkshopError):
    """The identity provider, database or mail relay failed."""

    status_code = 502
    kind = "DependencyError"

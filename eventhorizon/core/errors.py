"""Error hierarchy for the registration service.

Every error carries the HTTP status and a machine-readable code; the handlers
in ``eventhorizon.core.error_handlers`` turn them into JSON responses.
"""


class EventHorizonError(Exception):
    """Base exception for all service errors."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


# ---------- 400-level ----------
class ValidationFailedError(EventHorizonError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(EventHorizonError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class PermissionDeniedError(EventHorizonError):
    status_code = 403
    code = "PERMISSION_DENIED"

    def __init__(self, message: str = "You are not allowed to perform this action"):
        super().__init__(message)


class NotFoundError(EventHorizonError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: int | str):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


# ---------- 409 state conflicts ----------
class ConflictError(EventHorizonError):
    status_code = 409
    code = "CONFLICT"


class CapacityExceededError(ConflictError):
    code = "CAPACITY_EXCEEDED"

    def __init__(self, event_id: int, requested: int, remaining: int):
        super().__init__(
            f"Event {event_id} is over capacity: requested {requested}, {remaining} remaining."
        )
        self.event_id = event_id
        self.requested = requested
        self.remaining = remaining


class RegistrationClosedError(ConflictError):
    code = "REGISTRATION_CLOSED"


class DuplicateRegistrationError(ConflictError):
    code = "DUPLICATE_REGISTRATION"

    def __init__(self, event_id: int, user_id: int):
        super().__init__(f"User {user_id} is already registered for event {event_id}.")


class HasDependentsError(ConflictError):
    code = "HAS_DEPENDENTS"


class LockUnavailableError(ConflictError):
    code = "EVENT_BUSY"

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} is busy, please try again.")
        self.event_id = event_id

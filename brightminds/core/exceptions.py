"""Domain error types raised by the service layer.

Each error carries the HTTP status and machine-readable code used by the
exception handler in ``brightminds.main`` to build the ``ErrorResponse``
envelope. Services never raise ``HTTPException`` directly.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all business and store failures"""

    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(DomainError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(DomainError):
    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(f"{resource} not found with {field}: {value}")
        self.resource = resource
        self.field = field
        self.value = value


class UserNotFoundError(NotFoundError):
    def __init__(self, value: str, field: str = "ID"):
        super().__init__("User", field, value)


class ClassroomNotFoundError(NotFoundError):
    def __init__(self, value: str, field: str = "ID"):
        super().__init__("Classroom", field, value)


class AssignedGameNotFoundError(NotFoundError):
    def __init__(self, assigned_game_id: str, classroom_id: str):
        super().__init__(
            "Assigned game", "ID", f"{assigned_game_id} in classroom {classroom_id}"
        )


class GameNotFoundError(NotFoundError):
    def __init__(self, value: str):
        super().__init__("Game", "library ID", value)


class AttemptNotFoundError(NotFoundError):
    def __init__(self, value: str):
        super().__init__("Student game attempt", "ID", value)


class InvalidRoleError(DomainError):
    """User exists but has the wrong role for the operation"""

    status_code = 400
    code = "INVALID_ROLE"


class ForbiddenError(DomainError):
    """Caller is not the owning teacher"""

    status_code = 403
    code = "FORBIDDEN"


class AttemptLimitExceededError(DomainError):
    status_code = 409
    code = "ATTEMPT_LIMIT_EXCEEDED"

    def __init__(self, max_attempts: int):
        super().__init__(f"Maximum attempts ({max_attempts}) reached for this game.")
        self.max_attempts = max_attempts


class AlreadyExistsError(DomainError):
    status_code = 409
    code = "ALREADY_EXISTS"


class InternalError(DomainError):
    status_code = 500
    code = "INTERNAL_ERROR"


class MappingError(InternalError):
    """A stored record exists but does not have the expected shape"""

    code = "MAPPING_ERROR"


class LevelingInvariantError(InternalError):
    code = "LEVELING_INVARIANT"


class TransientStoreError(InternalError):
    """Store transaction failed or kept conflicting; safe for the client to retry"""

    status_code = 503
    code = "TRANSIENT_STORE_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

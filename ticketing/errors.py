"""Error taxonomy for ticket issuance and lookup."""

from enum import Enum


class ErrorCode(Enum):
    IDENTITY_CONFLICT = "IDENTITY_CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    CODE_GENERATION_FAILED = "CODE_GENERATION_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    UPSTREAM_AUTH_FAILED = "UPSTREAM_AUTH_FAILED"


class TicketingError(Exception):
    """Base error carrying a code, a user-safe message and an HTTP status."""

    code = ErrorCode.STORE_UNAVAILABLE
    status_code = 500
    message = "Server error"

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class IdentityConflict(TicketingError):
    code = ErrorCode.IDENTITY_CONFLICT
    status_code = 400
    message = "User already exists"


class StoreUnavailable(TicketingError):
    code = ErrorCode.STORE_UNAVAILABLE
    message = "Document store unavailable"


class CodeGenerationFailed(TicketingError):
    code = ErrorCode.CODE_GENERATION_FAILED
    message = "Failed to generate ticket code"


class PersistenceFailed(TicketingError):
    code = ErrorCode.PERSISTENCE_FAILED
    message = "Failed to save ticket"


class NotificationFailed(TicketingError):
    """Raised by the notifier; caught by the workflow and never surfaced."""

    code = ErrorCode.NOTIFICATION_FAILED
    message = "Failed to send email"


class TicketNotFound(TicketingError):
    code = ErrorCode.TICKET_NOT_FOUND
    status_code = 404
    message = "Ticket not found"


class UpstreamAuthFailed(TicketingError):
    code = ErrorCode.UPSTREAM_AUTH_FAILED
    status_code = 400
    message = "Failed to get user info"


class DuplicateUser(Exception):
    """Raised by a store when the unique email constraint rejects an insert."""

    def __init__(self, email: str):
        super().__init__(f"User with email {email} already exists")
        self.email = email

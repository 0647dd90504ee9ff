"""Persona exception hierarchy.

Every domain error carries a stable ``kind`` (surfaced to API callers in the
failure envelope) and the HTTP status the API layer answers with.
"""

from __future__ import annotations


class PersonaError(Exception):
    """Base exception for all Persona errors."""

    kind = "Error"
    status_code = 500


class NotFoundError(PersonaError):
    """Entity absent from the durable store."""

    kind = "NotFound"
    status_code = 404


class SessionExpiredError(NotFoundError):
    """In-progress wizard record evicted, expired or never created."""

    kind = "SessionExpired"

    def __init__(self, temp_id: str) -> None:
        self.temp_id = temp_id
        super().__init__(
            f"Temporary entity data for {temp_id!r} not found or expired. Please start over."
        )


class DuplicateIdentifierError(PersonaError):
    """Unique-constraint violation on identificationNumber or inquiryId."""

    kind = "DuplicateIdentifier"
    status_code = 409

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Entity with this {field} already exists: {value!r}")


class InvalidTransitionError(PersonaError):
    """Status change would violate the terminal-state invariant."""

    kind = "InvalidTransition"
    status_code = 400

    def __init__(self, entity_id: str, current: str, target: str) -> None:
        self.entity_id = entity_id
        self.current = current
        self.target = target
        super().__init__(f"Cannot move entity {entity_id!r} from {current} to {target}")


class AlreadyApprovedError(PersonaError):
    kind = "AlreadyApproved"
    status_code = 400

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity {entity_id!r} is already approved")


class AlreadyRejectedError(PersonaError):
    kind = "AlreadyRejected"
    status_code = 400

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity {entity_id!r} is already rejected")


class MissingReasonError(PersonaError):
    kind = "MissingReason"
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Rejection reason is required")


class InvalidStateError(PersonaError):
    """Edit attempted on an APPROVED or REJECTED entity."""

    kind = "InvalidState"
    status_code = 400

    def __init__(self, entity_id: str, current: str, attempted_action: str) -> None:
        self.entity_id = entity_id
        self.current = current
        self.attempted_action = attempted_action
        super().__init__(
            f"Cannot {attempted_action} entity {entity_id!r} that has been {current.lower()}"
        )


class ValidationError(PersonaError):
    """Input or accumulated wizard data does not form a valid entity."""

    kind = "ValidationError"
    status_code = 422


class StorageError(PersonaError):
    """Durable store or document store operation failed."""

    kind = "StorageFailure"
    status_code = 503


class CacheError(StorageError):
    """Redis cache operation failed."""


class NotificationError(PersonaError):
    """Notification delivery failed."""

    kind = "NotificationFailure"

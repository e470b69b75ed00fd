class PassdeskError(Exception):
    """Base class for domain errors surfaced to API clients.

    Each subclass carries a stable ``kind`` and the HTTP status the API maps it to.
    """

    kind = "error"
    status_code = 400
    default_detail = "Request could not be processed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInputError(PassdeskError):
    kind = "validation_error"
    status_code = 400
    default_detail = "Invalid input."


class ForeignOccurrenceError(InvalidInputError):
    """Raised when an occurrence id does not belong to the target event."""

    default_detail = "One or more occurrences do not belong to this event."


class InvalidStatusError(InvalidInputError):
    default_detail = "Unknown registration status."


class InvalidStatusTransitionError(InvalidInputError):
    """Raised when a registration cannot move from its current status to the requested one."""

    default_detail = "This status change is not allowed."


class AmbiguousPassQueryError(InvalidInputError):
    default_detail = "The query matches more than one pass."


class PassNotFoundError(PassdeskError):
    kind = "not_found"
    status_code = 404
    default_detail = "Pass not found."


class ConflictError(PassdeskError):
    kind = "conflict"
    status_code = 409
    default_detail = "The request conflicts with the current state."


class CapacityExceededError(ConflictError):
    kind = "capacity_exceeded"
    default_detail = "This event is fully booked."


class DuplicateOccurrenceTimeError(ConflictError):
    kind = "duplicate_occurrence_time"
    default_detail = "Two occurrences of the same event cannot start at the same time."


class OccurrenceInUseError(ConflictError):
    """Raised when a schedule edit would drop sessions that registrants picked."""

    kind = "occurrence_in_use"
    default_detail = "Some occurrences have registrations and cannot be removed."


class RegistrationRaceError(ConflictError):
    """Raised when a concurrent admission wrote the same registration first. Safe to retry."""

    default_detail = "A concurrent registration was detected. Please retry."


class TransientStoreError(PassdeskError):
    kind = "transient_store_error"
    status_code = 409
    default_detail = "The pass could not be allocated right now. Please retry."

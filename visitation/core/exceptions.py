"""
Typed failures raised by the visit-scheduling engine.
The HTTP layer maps each kind to a status code in visitation.main.
"""


class SchedulingError(Exception):
    """Base class for every failure the scheduler surfaces to callers."""

    error_code = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResourceNotFound(SchedulingError):
    """Referenced appointment, custodied person, visitor or status does not exist."""

    error_code = "resource_not_found"


class DisallowedTime(SchedulingError):
    """Proposed timestamp is outside the visiting window."""

    error_code = "disallowed_time"


class SchedulingConflict(SchedulingError):
    """Daily limit exceeded or the timestamp overlaps another appointment."""

    error_code = "scheduling_conflict"


class InvalidOperation(SchedulingError):
    """Mutation not allowed in the appointment's current status."""

    error_code = "invalid_operation"


class ValidationError(SchedulingError):
    """Malformed input, detected before any business rule runs."""

    error_code = "validation_error"

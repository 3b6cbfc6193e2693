"""
Appointment status transitions.
"""
from typing import Dict, FrozenSet

from visitation.core.exceptions import InvalidOperation
from visitation.models.status import AppointmentStatus

INITIAL_STATUS = AppointmentStatus.SCHEDULED

TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELED: frozenset(),
}


class StatusStateMachine:
    """Validates status changes against the transition table."""

    def __init__(self, transitions: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = TRANSITIONS):
        self.transitions = transitions

    @property
    def initial(self) -> AppointmentStatus:
        return INITIAL_STATUS

    def can_transition(self, current: AppointmentStatus, target: AppointmentStatus) -> bool:
        return target in self.transitions.get(current, frozenset())

    def is_terminal(self, status: AppointmentStatus) -> bool:
        return not self.transitions.get(status)

    def validate(self, current: AppointmentStatus, target: AppointmentStatus) -> None:
        """
        Raises:
            InvalidOperation: If `target` is not reachable from `current` in one step
        """
        if not self.can_transition(current, target):
            raise InvalidOperation(
                f"Cannot change appointment status from {current.value} to {target.value}"
            )

"""
Appointment Scheduler
Creates, reschedules and cancels visit appointments.

Every mutation runs in a single transaction: the custodied person and visitor
rows involved are locked before any limit or conflict read, and nothing is
written unless every check passes.
"""
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple
import logging
import threading

from sqlalchemy.orm import Session

from visitation.core.config import Settings, settings as default_settings
from visitation.core.exceptions import (
    DisallowedTime,
    InvalidOperation,
    ResourceNotFound,
    SchedulingConflict,
    ValidationError,
)
from visitation.models import Appointment, AppointmentStatus, CustodiedPerson, Status, Visitor
from visitation.repositories import AppointmentCriteria, AppointmentRepository, ReferenceRepository
from visitation.services.conflict_detector import ConflictDetector
from visitation.services.daily_limit import DailyLimitPolicy
from visitation.services.status_machine import StatusStateMachine
from visitation.services.visit_window import VisitWindowPolicy, get_window_policy

logger = logging.getLogger(__name__)

# SQLite ignores SELECT ... FOR UPDATE, so mutations on it are serialized in-process
_sqlite_write_lock = threading.Lock()


def _local_naive(value: datetime) -> datetime:
    """Scheduled timestamps are stored as naive local time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class AppointmentScheduler:
    """
    Orchestrates the visiting window, daily limit, conflict and status rules
    over one database session.
    """

    def __init__(
        self,
        db: Session,
        window_policy: Optional[VisitWindowPolicy] = None,
        conflict_detector: Optional[ConflictDetector] = None,
        daily_limit: Optional[DailyLimitPolicy] = None,
        state_machine: Optional[StatusStateMachine] = None,
        clock: Callable[[], datetime] = datetime.now,
        max_notes_length: int = 500,
        allow_past: bool = False,
    ):
        self.db = db
        self.window_policy = window_policy or get_window_policy("midweek")
        self.conflict_detector = conflict_detector or ConflictDetector()
        self.daily_limit = daily_limit or DailyLimitPolicy()
        self.state_machine = state_machine or StatusStateMachine()
        self.clock = clock
        self.max_notes_length = max_notes_length
        self.allow_past = allow_past

    @classmethod
    def from_settings(cls, db: Session, config: Settings = default_settings, **overrides) -> "AppointmentScheduler":
        """Build a scheduler whose rules come from application settings."""
        options = dict(
            window_policy=get_window_policy(config.visit_window_policy),
            conflict_detector=ConflictDetector(timedelta(minutes=config.conflict_window_minutes)),
            daily_limit=DailyLimitPolicy(config.daily_visit_limit),
            max_notes_length=config.max_notes_length,
            allow_past=config.allow_past_appointments,
        )
        options.update(overrides)
        return cls(db, **options)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        custodied_person_id: int,
        visitor_id: int,
        scheduled_at: datetime,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Schedule a new visit.

        Raises:
            ValidationError: Malformed input
            DisallowedTime: Outside the visiting window
            ResourceNotFound: Unknown custodied person or visitor
            SchedulingConflict: Daily limit reached or overlapping appointment
        """
        self._require_id(custodied_person_id, "custodied_person_id")
        self._require_id(visitor_id, "visitor_id")
        scheduled_at = self._require_timestamp(scheduled_at)
        self._check_not_past(scheduled_at)
        self._check_notes(notes)
        self._check_window(scheduled_at)

        with self._transaction():
            ReferenceRepository.lock_parties(self.db, [custodied_person_id], [visitor_id])
            custodied_person = self._resolve_custodied_person(custodied_person_id)
            visitor = self._resolve_visitor(visitor_id)

            self._check_daily_limit(custodied_person_id, scheduled_at)
            self._check_conflicts(custodied_person_id, visitor_id, scheduled_at)

            now = self.clock()
            appointment = Appointment(
                custodied_person=custodied_person,
                visitor=visitor,
                scheduled_at=scheduled_at,
                status=self._resolve_status_code(self.state_machine.initial),
                notes=notes,
                created_at=now,
                updated_at=now,
            )
            AppointmentRepository.add(self.db, appointment)

        logger.info(
            f"[Scheduler] Created appointment {appointment.id} for custodied person "
            f"{custodied_person_id} and visitor {visitor_id} at {scheduled_at:%Y-%m-%d %H:%M}"
        )
        return appointment

    def update(
        self,
        appointment_id: int,
        custodied_person_id: int,
        visitor_id: int,
        scheduled_at: datetime,
        notes: Optional[str] = None,
        status_id: Optional[int] = None,
    ) -> Appointment:
        """
        Replace the parties, time, note and optionally the status of an appointment.

        Limit and conflict checks only run when a field they depend on changed,
        and always ignore the appointment being updated.

        Raises:
            ValidationError: Malformed input
            ResourceNotFound: Unknown appointment, custodied person, visitor or status
            InvalidOperation: Appointment is canceled or completed, or illegal status change
            DisallowedTime: Outside the visiting window
            SchedulingConflict: Daily limit reached or overlapping appointment
        """
        self._require_id(appointment_id, "appointment_id")
        self._require_id(custodied_person_id, "custodied_person_id")
        self._require_id(visitor_id, "visitor_id")
        if status_id is not None:
            self._require_id(status_id, "status_id")
        scheduled_at = self._require_timestamp(scheduled_at)
        self._check_notes(notes)

        with self._transaction():
            appointment = self._load(appointment_id)
            current = appointment.status.value
            if current == AppointmentStatus.CANCELED:
                self._reject(InvalidOperation(f"Appointment {appointment_id} is canceled and cannot be changed"))
            if current == AppointmentStatus.COMPLETED:
                self._reject(InvalidOperation(f"Appointment {appointment_id} is completed and cannot be changed"))

            self._check_window(scheduled_at)

            custodied_changed = appointment.custodied_person_id != custodied_person_id
            visitor_changed = appointment.visitor_id != visitor_id
            time_changed = appointment.scheduled_at != scheduled_at
            if time_changed:
                self._check_not_past(scheduled_at)

            ReferenceRepository.lock_parties(
                self.db,
                [appointment.custodied_person_id, custodied_person_id],
                [appointment.visitor_id, visitor_id],
            )
            if custodied_changed:
                appointment.custodied_person = self._resolve_custodied_person(custodied_person_id)
            if visitor_changed:
                appointment.visitor = self._resolve_visitor(visitor_id)

            if custodied_changed or time_changed:
                self._check_daily_limit(custodied_person_id, scheduled_at, exclude_id=appointment.id)
            if custodied_changed or visitor_changed or time_changed:
                self._check_conflicts(custodied_person_id, visitor_id, scheduled_at, exclude_id=appointment.id)

            if status_id is not None:
                new_status = self._resolve_status(status_id)
                if new_status.id != appointment.status_id:
                    self._validate_transition(appointment.id, current, new_status.value)
                    appointment.status = new_status

            appointment.scheduled_at = scheduled_at
            appointment.notes = notes
            appointment.updated_at = self.clock()
            self.db.flush()

        logger.info(f"[Scheduler] Updated appointment {appointment.id}")
        return appointment

    def cancel(self, appointment_id: int) -> Appointment:
        """
        Cancel an appointment. Canceling twice fails.

        Raises:
            ResourceNotFound: Unknown appointment
            InvalidOperation: Already canceled or completed
        """
        self._require_id(appointment_id, "appointment_id")

        with self._transaction():
            appointment = self._load(appointment_id)
            current = appointment.status.value
            if current == AppointmentStatus.CANCELED:
                self._reject(InvalidOperation(f"Appointment {appointment_id} is already canceled"))
            if current == AppointmentStatus.COMPLETED:
                self._reject(InvalidOperation(f"Appointment {appointment_id} is completed and cannot be canceled"))
            self._validate_transition(appointment.id, current, AppointmentStatus.CANCELED)

            appointment.status = self._resolve_status_code(AppointmentStatus.CANCELED)
            appointment.updated_at = self.clock()
            self.db.flush()

        logger.info(f"[Scheduler] Canceled appointment {appointment.id}")
        return appointment

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, appointment_id: int) -> Appointment:
        appointment = AppointmentRepository.get_by_id(self.db, appointment_id)
        if appointment is None:
            raise ResourceNotFound(f"Appointment not found with ID: {appointment_id}")
        return appointment

    def list(self, criteria: Optional[AppointmentCriteria] = None) -> List[Appointment]:
        criteria = self._check_range(criteria or AppointmentCriteria())
        return AppointmentRepository.find(self.db, criteria)

    def list_page(
        self,
        criteria: Optional[AppointmentCriteria] = None,
        page: int = 0,
        page_size: int = 10,
    ) -> Tuple[int, List[Appointment]]:
        if page < 0:
            raise ValidationError("page must not be negative")
        if page_size < 1:
            raise ValidationError("page_size must be at least 1")
        criteria = self._check_range(criteria or AppointmentCriteria())
        return AppointmentRepository.find_page(self.db, criteria, page, page_size)

    def list_for_custodied_person(self, custodied_person_id: int) -> List[Appointment]:
        return AppointmentRepository.find(self.db, AppointmentCriteria(custodied_person_id=custodied_person_id))

    def list_for_visitor(self, visitor_id: int) -> List[Appointment]:
        return AppointmentRepository.find(self.db, AppointmentCriteria(visitor_id=visitor_id))

    def list_for_status(self, status_id: int) -> List[Appointment]:
        self._resolve_status(status_id)
        return AppointmentRepository.find(self.db, AppointmentCriteria(status_id=status_id))

    def list_for_date(self, day: date) -> List[Appointment]:
        return AppointmentRepository.find(self.db, AppointmentCriteria.for_dates(day, day))

    def list_between(self, starts_at: datetime, ends_at: datetime) -> List[Appointment]:
        criteria = self._check_range(AppointmentCriteria(starts_at=starts_at, ends_at=ends_at))
        return AppointmentRepository.find(self.db, criteria)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self):
        serialize = self.db.get_bind().dialect.name == "sqlite"
        if serialize:
            _sqlite_write_lock.acquire()
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        finally:
            if serialize:
                _sqlite_write_lock.release()

    def _reject(self, error: Exception):
        logger.warning(f"[Scheduler] {type(error).__name__}: {error}")
        raise error

    @staticmethod
    def _check_range(criteria: AppointmentCriteria) -> AppointmentCriteria:
        if criteria.starts_at is not None and criteria.ends_at is not None and criteria.starts_at > criteria.ends_at:
            raise ValidationError("Range start must not be after range end")
        return criteria

    @staticmethod
    def _require_id(value, field: str) -> None:
        if value is None:
            raise ValidationError(f"{field} is required")
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"{field} must be a positive integer")

    @staticmethod
    def _require_timestamp(value) -> datetime:
        if value is None:
            raise ValidationError("scheduled_at is required")
        if not isinstance(value, datetime):
            raise ValidationError("scheduled_at must be a date and time")
        return _local_naive(value)

    def _check_not_past(self, scheduled_at: datetime) -> None:
        if not self.allow_past and scheduled_at < self.clock():
            raise ValidationError("Appointment date must be in the present or future")

    def _check_notes(self, notes: Optional[str]) -> None:
        if notes is not None and len(notes) > self.max_notes_length:
            raise ValidationError(f"notes must be at most {self.max_notes_length} characters")

    def _check_window(self, scheduled_at: datetime) -> None:
        if not self.window_policy.is_permitted(scheduled_at):
            self._reject(DisallowedTime(
                f"Visits are only allowed on {self.window_policy.describe()}; "
                f"{scheduled_at:%A %Y-%m-%d %H:%M} is outside the visiting window"
            ))

    def _check_daily_limit(self, custodied_person_id: int, scheduled_at: datetime,
                           exclude_id: Optional[int] = None) -> None:
        if not self.daily_limit.allows(self.db, custodied_person_id, scheduled_at.date(), exclude_id):
            self._reject(SchedulingConflict(
                f"Custodied person {custodied_person_id} already reached the limit of "
                f"{self.daily_limit.cap} visits on {scheduled_at:%Y-%m-%d}"
            ))

    def _check_conflicts(self, custodied_person_id: int, visitor_id: int, scheduled_at: datetime,
                         exclude_id: Optional[int] = None) -> None:
        if self.conflict_detector.has_custodied_conflict(self.db, custodied_person_id, scheduled_at, exclude_id):
            self._reject(SchedulingConflict(
                f"Custodied person {custodied_person_id} already has a visit close to "
                f"{scheduled_at:%Y-%m-%d %H:%M}"
            ))
        if self.conflict_detector.has_visitor_conflict(self.db, visitor_id, scheduled_at, exclude_id):
            self._reject(SchedulingConflict(
                f"Visitor {visitor_id} already has a visit close to {scheduled_at:%Y-%m-%d %H:%M}"
            ))

    def _validate_transition(self, appointment_id: int, current: AppointmentStatus,
                             target: AppointmentStatus) -> None:
        try:
            self.state_machine.validate(current, target)
        except InvalidOperation as error:
            logger.warning(f"[Scheduler] Appointment {appointment_id}: {error}")
            raise

    def _load(self, appointment_id: int) -> Appointment:
        appointment = AppointmentRepository.get_by_id(self.db, appointment_id, for_update=True)
        if appointment is None:
            raise ResourceNotFound(f"Appointment not found with ID: {appointment_id}")
        return appointment

    def _resolve_custodied_person(self, custodied_person_id: int) -> CustodiedPerson:
        custodied_person = ReferenceRepository.get_custodied_person(self.db, custodied_person_id)
        if custodied_person is None:
            raise ResourceNotFound(f"Custodied person not found with ID: {custodied_person_id}")
        return custodied_person

    def _resolve_visitor(self, visitor_id: int) -> Visitor:
        visitor = ReferenceRepository.get_visitor(self.db, visitor_id)
        if visitor is None:
            raise ResourceNotFound(f"Visitor not found with ID: {visitor_id}")
        return visitor

    def _resolve_status(self, status_id: int) -> Status:
        status = ReferenceRepository.get_status(self.db, status_id)
        if status is None:
            raise ResourceNotFound(f"Status not found with ID: {status_id}")
        return status

    def _resolve_status_code(self, code: AppointmentStatus) -> Status:
        status = ReferenceRepository.get_status_by_code(self.db, code)
        if status is None:
            raise ResourceNotFound(f"Status {code.value} not found")
        return status

from datetime import timedelta

import pytest

from visitation.models import Appointment, AppointmentStatus, Status
from visitation.services.conflict_detector import ConflictDetector
from visitation.services.daily_limit import DailyLimitPolicy

from conftest import NOW, WEDNESDAY, THURSDAY, at


def add_appointment(db, custodied_person_id, visitor_id, when, status=AppointmentStatus.SCHEDULED):
    status_row = db.query(Status).filter(Status.code == status.value).one()
    appointment = Appointment(
        custodied_person_id=custodied_person_id,
        visitor_id=visitor_id,
        scheduled_at=when,
        status_id=status_row.id,
        created_at=NOW,
        updated_at=NOW,
    )
    db.add(appointment)
    db.commit()
    return appointment


@pytest.mark.parametrize(
    ('offset_minutes', 'expected'),
    [(-60, True), (-30, True), (0, True), (59, True), (60, True), (61, False), (-61, False), (180, False)],
)
def test_custodied_conflict_window_is_inclusive(db, refs, offset_minutes: int, expected: bool) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11))
    proposed = at(WEDNESDAY, 11) + timedelta(minutes=offset_minutes)

    assert ConflictDetector().has_custodied_conflict(db, refs.c1, proposed) is expected


def test_custodied_conflict_ignores_canceled(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11), AppointmentStatus.CANCELED)

    assert not ConflictDetector().has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11, 30))


def test_custodied_conflict_is_scoped_to_person(db, refs) -> None:
    add_appointment(db, refs.c2, refs.v1, at(WEDNESDAY, 11))

    assert not ConflictDetector().has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11))


def test_custodied_conflict_excludes_given_id(db, refs) -> None:
    existing = add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11))
    detector = ConflictDetector()

    assert detector.has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11, 30))
    assert not detector.has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11, 30), exclude_id=existing.id)


def test_visitor_conflict_counts_canceled(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11), AppointmentStatus.CANCELED)

    assert ConflictDetector().has_visitor_conflict(db, refs.v1, at(WEDNESDAY, 11, 30))


def test_visitor_conflict_excludes_given_id(db, refs) -> None:
    existing = add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11))

    assert not ConflictDetector().has_visitor_conflict(db, refs.v1, at(WEDNESDAY, 11), exclude_id=existing.id)


def test_conflicts_are_returned_in_time_order(db, refs) -> None:
    later = add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11, 45))
    earlier = add_appointment(db, refs.c1, refs.v2, at(WEDNESDAY, 10, 30))

    conflicts = ConflictDetector().custodied_conflicts(db, refs.c1, at(WEDNESDAY, 11))

    assert [a.id for a in conflicts] == [earlier.id, later.id]


def test_conflict_window_is_configurable(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 11))
    detector = ConflictDetector(window=timedelta(minutes=15))

    assert not detector.has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11, 30))
    assert detector.has_custodied_conflict(db, refs.c1, at(WEDNESDAY, 11, 15))


def test_daily_limit_counts_all_statuses(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 9), AppointmentStatus.CANCELED)
    add_appointment(db, refs.c1, refs.v2, at(WEDNESDAY, 14))
    policy = DailyLimitPolicy()

    assert policy.count(db, refs.c1, WEDNESDAY.date()) == 2
    assert not policy.allows(db, refs.c1, WEDNESDAY.date())


def test_daily_limit_is_per_day_and_per_person(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 9))
    add_appointment(db, refs.c1, refs.v2, at(WEDNESDAY, 14))
    policy = DailyLimitPolicy()

    assert policy.allows(db, refs.c1, THURSDAY.date())
    assert policy.allows(db, refs.c2, WEDNESDAY.date())


def test_daily_limit_excludes_appointment_being_updated(db, refs) -> None:
    first = add_appointment(db, refs.c1, refs.v1, at(WEDNESDAY, 9))
    add_appointment(db, refs.c1, refs.v2, at(WEDNESDAY, 14))

    assert DailyLimitPolicy().allows(db, refs.c1, WEDNESDAY.date(), exclude_id=first.id)


def test_daily_limit_counts_whole_day(db, refs) -> None:
    add_appointment(db, refs.c1, refs.v1, WEDNESDAY.replace(hour=0, minute=0))
    add_appointment(db, refs.c1, refs.v2, WEDNESDAY.replace(hour=23, minute=59, second=59))

    assert DailyLimitPolicy().count(db, refs.c1, WEDNESDAY.date()) == 2


def test_daily_limit_rejects_non_positive_cap() -> None:
    with pytest.raises(ValueError):
        DailyLimitPolicy(cap=0)

from datetime import date, datetime

from visitation.repositories import AppointmentCriteria, AppointmentRepository
from visitation.models import AppointmentStatus

from conftest import THURSDAY, WEDNESDAY, at


def test_empty_criteria_has_no_clauses() -> None:
    criteria = AppointmentCriteria()

    assert criteria.clauses() == []
    assert not criteria.is_range


def test_criteria_for_dates_spans_whole_days() -> None:
    criteria = AppointmentCriteria.for_dates(date(2026, 1, 7), date(2026, 1, 8), visitor_id=3)

    assert criteria.starts_at == datetime(2026, 1, 7, 0, 0)
    assert criteria.ends_at == datetime(2026, 1, 8, 23, 59, 59)
    assert criteria.visitor_id == 3
    assert criteria.is_range
    assert len(criteria.clauses()) == 3


def test_generic_listing_is_newest_first(scheduler, db, refs) -> None:
    early = scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 10))
    late = scheduler.create(refs.c2, refs.v2, at(THURSDAY, 10))

    listed = AppointmentRepository.find(db, AppointmentCriteria())

    assert [a.id for a in listed] == [late.id, early.id]


def test_range_listing_is_oldest_first(scheduler, db, refs) -> None:
    early = scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 10))
    late = scheduler.create(refs.c2, refs.v2, at(THURSDAY, 10))

    listed = AppointmentRepository.find(db, AppointmentCriteria.for_dates(WEDNESDAY.date(), THURSDAY.date()))

    assert [a.id for a in listed] == [early.id, late.id]


def test_filters_combine(scheduler, db, refs) -> None:
    target = scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 10))
    scheduler.create(refs.c1, refs.v2, at(THURSDAY, 10))
    scheduler.create(refs.c2, refs.v3, at(WEDNESDAY, 13))

    criteria = AppointmentCriteria.for_dates(
        WEDNESDAY.date(), WEDNESDAY.date(), custodied_person_id=refs.c1,
    )

    assert [a.id for a in AppointmentRepository.find(db, criteria)] == [target.id]


def test_status_filter(scheduler, db, refs) -> None:
    kept = scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 10))
    canceled = scheduler.create(refs.c2, refs.v2, at(WEDNESDAY, 13))
    scheduler.cancel(canceled.id)

    listed = scheduler.list(AppointmentCriteria(status_id=kept.status_id))

    assert [a.id for a in listed] == [kept.id]
    assert listed[0].status.value is AppointmentStatus.SCHEDULED


def test_find_page_reports_total(scheduler, db, refs) -> None:
    scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 9))
    scheduler.create(refs.c1, refs.v2, at(WEDNESDAY, 14))
    newest = scheduler.create(refs.c2, refs.v3, at(THURSDAY, 10))

    total, first_page = AppointmentRepository.find_page(db, AppointmentCriteria(), page=0, page_size=2)
    _, second_page = AppointmentRepository.find_page(db, AppointmentCriteria(), page=1, page_size=2)

    assert total == 3
    assert first_page[0].id == newest.id
    assert len(first_page) == 2
    assert len(second_page) == 1


def test_list_helpers(scheduler, refs) -> None:
    a = scheduler.create(refs.c1, refs.v1, at(WEDNESDAY, 10))
    b = scheduler.create(refs.c2, refs.v1, at(THURSDAY, 10))

    assert [x.id for x in scheduler.list_for_custodied_person(refs.c1)] == [a.id]
    assert [x.id for x in scheduler.list_for_visitor(refs.v1)] == [b.id, a.id]
    assert [x.id for x in scheduler.list_for_date(THURSDAY.date())] == [b.id]
    assert [x.id for x in scheduler.list_between(at(WEDNESDAY, 0), at(THURSDAY, 23))] == [a.id, b.id]

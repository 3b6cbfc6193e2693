from datetime import datetime, time

import pytest

from visitation.services.visit_window import (
    ExtendedWindowPolicy,
    MidweekWindowPolicy,
    VisitWindowPolicy,
    get_window_policy,
)


@pytest.mark.parametrize(
    ('when', 'expected'),
    [
        (datetime(2026, 1, 7, 9, 0), True),     # Wednesday, opening time
        (datetime(2026, 1, 7, 15, 0), True),    # Wednesday, closing time
        (datetime(2026, 1, 8, 12, 30), True),   # Thursday
        (datetime(2026, 1, 7, 8, 59), False),
        (datetime(2026, 1, 7, 15, 0, 1), False),
        (datetime(2026, 1, 6, 10, 0), False),   # Tuesday
        (datetime(2026, 1, 9, 10, 0), False),   # Friday
        (datetime(2026, 1, 5, 10, 0), False),   # Monday
        (datetime(2026, 1, 11, 10, 0), False),  # Sunday
    ],
)
def test_midweek_policy(when: datetime, expected: bool) -> None:
    assert MidweekWindowPolicy().is_permitted(when) is expected


@pytest.mark.parametrize(
    ('when', 'expected'),
    [
        (datetime(2026, 1, 6, 9, 0), True),     # Tuesday
        (datetime(2026, 1, 10, 17, 0), True),   # Saturday, closing time
        (datetime(2026, 1, 11, 16, 59), True),  # Sunday
        (datetime(2026, 1, 5, 10, 0), False),   # Monday
        (datetime(2026, 1, 9, 17, 1), False),
        (datetime(2026, 1, 9, 8, 30), False),
    ],
)
def test_extended_policy(when: datetime, expected: bool) -> None:
    assert ExtendedWindowPolicy().is_permitted(when) is expected


def test_policy_is_callable() -> None:
    policy = MidweekWindowPolicy()

    assert policy(datetime(2026, 1, 7, 10, 0))
    assert not policy(datetime(2026, 1, 5, 10, 0))


def test_get_window_policy_by_name() -> None:
    assert isinstance(get_window_policy('midweek'), MidweekWindowPolicy)
    assert isinstance(get_window_policy(' Extended '), ExtendedWindowPolicy)


def test_get_window_policy_rejects_unknown_name() -> None:
    with pytest.raises(ValueError):
        get_window_policy('weekends')


def test_custom_policy_rejects_inverted_hours() -> None:
    with pytest.raises(ValueError):
        VisitWindowPolicy(frozenset({2}), time(15, 0), time(9, 0))


def test_describe_lists_days_and_hours() -> None:
    assert MidweekWindowPolicy().describe() == 'Wednesday, Thursday between 09:00 and 15:00'

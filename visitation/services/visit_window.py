"""
Visiting window policies.

Exactly one policy is active at a time; it is chosen by the
VISIT_WINDOW_POLICY setting and handed to the scheduler.
"""
from datetime import datetime, time
from typing import FrozenSet

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)


class VisitWindowPolicy:
    """
    A set of weekdays plus an inclusive time-of-day range.
    """

    name = "custom"

    def __init__(self, allowed_weekdays: FrozenSet[int], opens_at: time, closes_at: time):
        if opens_at > closes_at:
            raise ValueError("opens_at must not be later than closes_at")
        self.allowed_weekdays = frozenset(allowed_weekdays)
        self.opens_at = opens_at
        self.closes_at = closes_at

    def is_permitted(self, when: datetime) -> bool:
        if when.weekday() not in self.allowed_weekdays:
            return False
        time_of_day = when.time()
        return self.opens_at <= time_of_day <= self.closes_at

    def __call__(self, when: datetime) -> bool:
        return self.is_permitted(when)

    def describe(self) -> str:
        days = ", ".join(_WEEKDAY_NAMES[d] for d in sorted(self.allowed_weekdays))
        return f"{days} between {self.opens_at:%H:%M} and {self.closes_at:%H:%M}"

    def __repr__(self):
        return f"<{type(self).__name__}({self.describe()})>"


class MidweekWindowPolicy(VisitWindowPolicy):
    """Wednesday and Thursday, 09:00 to 15:00 inclusive."""

    name = "midweek"

    def __init__(self):
        super().__init__(frozenset({WEDNESDAY, THURSDAY}), time(9, 0), time(15, 0))


class ExtendedWindowPolicy(VisitWindowPolicy):
    """Every day except Monday, 09:00 to 17:00 inclusive."""

    name = "extended"

    def __init__(self):
        super().__init__(
            frozenset({TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY}),
            time(9, 0),
            time(17, 0),
        )


_WEEKDAY_NAMES = {
    MONDAY: "Monday",
    TUESDAY: "Tuesday",
    WEDNESDAY: "Wednesday",
    THURSDAY: "Thursday",
    FRIDAY: "Friday",
    SATURDAY: "Saturday",
    SUNDAY: "Sunday",
}

_POLICIES = {
    MidweekWindowPolicy.name: MidweekWindowPolicy,
    ExtendedWindowPolicy.name: ExtendedWindowPolicy,
}


def get_window_policy(name: str) -> VisitWindowPolicy:
    """
    Build the policy registered under `name`.

    Raises:
        ValueError: If no policy is registered under that name
    """
    try:
        return _POLICIES[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown visit window policy: {name}") from None

import logging
from datetime import date, timedelta
from typing import NamedTuple

log = logging.getLogger(__name__)

MAX_DAYS_AHEAD = 365


class Allocation(NamedTuple):
    date: str
    exists: bool


class DateAllocator:
    """Chooses the calendar date a new game is generated for.

    ``taken`` is any callable answering whether an ISO date already has a
    game, typically ``GameStore.exists``. ``Allocation.exists`` is only set
    for an explicitly requested date that is already taken, which callers
    treat as "nothing to do".
    """

    def __init__(self, taken, today=date.today, max_days: int = MAX_DAYS_AHEAD):
        self.taken = taken
        self.today = today
        self.max_days = max_days

    def next_available(self, requested: str | None = None) -> Allocation:
        if requested:
            requested = date.fromisoformat(requested).isoformat()
            return Allocation(requested, self.taken(requested))

        start = self.today()
        for offset in range(self.max_days):
            candidate = (start + timedelta(days=offset)).isoformat()
            if not self.taken(candidate):
                return Allocation(candidate, False)

        log.warning(f"No free date in the next {self.max_days} days, "
                    f"overwriting {start.isoformat()}")
        return Allocation(start.isoformat(), False)

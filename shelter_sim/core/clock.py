"""Time system for the simulation: days and weeks."""

DAYS_PER_WEEK = 7


class SimClock:
    """Manages simulation time."""

    def __init__(self, start_day: int = 1) -> None:
        self.day: int = start_day

    @property
    def week(self) -> int:
        return (self.day - 1) // DAYS_PER_WEEK + 1

    @property
    def day_of_week(self) -> int:
        return (self.day - 1) % DAYS_PER_WEEK

    def advance(self) -> None:
        """Advance the clock by one day."""
        self.day += 1

    def in_range(self, min_day=None, max_day=None) -> bool:
        """Inclusive day window; a missing bound is open."""
        if min_day is not None and self.day < min_day:
            return False
        if max_day is not None and self.day > max_day:
            return False
        return True

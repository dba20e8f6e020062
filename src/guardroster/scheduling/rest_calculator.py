"""Rest-interval calculation between consecutive shifts."""

from collections import OrderedDict
from datetime import date, datetime, timedelta

from guardroster.domain.models import ShiftType

DEFAULT_CACHE_CAPACITY = 1000


def shift_end(shift_date: date, shift_type: ShiftType) -> datetime:
    """Actual end instant of a shift starting on shift_date.

    Only an end time earlier than the start time moves to the next day, so
    an 08:00-08:00 guard ends at 08:00 on its own date.
    """
    end = datetime.combine(shift_date, shift_type.end)
    if shift_type.wraps_overnight:
        end += timedelta(days=1)
    return end


def shift_start(shift_date: date, shift_type: ShiftType) -> datetime:
    """Actual start instant of a shift on shift_date."""
    return datetime.combine(shift_date, shift_type.start)


def hours_between(
    last_date: date,
    last_shift_type: ShiftType,
    current_date: date,
    current_shift_type: ShiftType,
) -> float:
    """Hours from the end of the last shift to the start of the current one.

    Negative when the shifts overlap.
    """
    delta = shift_start(current_date, current_shift_type) - shift_end(
        last_date, last_shift_type
    )
    return delta.total_seconds() / 3600


class RestIntervalCalculator:
    """Memoizing wrapper around :func:`hours_between`.

    The same (date pair, type pair) combinations recur across candidates
    within a run, so results are cached in a bounded LRU dict. One
    instance belongs to one generation run.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY):
        self.capacity = capacity
        self._cache: OrderedDict[tuple[date, date, str, str], float] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def hours_between(
        self,
        last_date: date,
        last_shift_type: ShiftType,
        current_date: date,
        current_shift_type: ShiftType,
    ) -> float:
        key = (last_date, current_date, last_shift_type.id, current_shift_type.id)
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            self._cache.move_to_end(key)
            return cached

        self.misses += 1
        result = hours_between(last_date, last_shift_type, current_date, current_shift_type)
        self._cache[key] = result
        if len(self._cache) > self.capacity:
            self._cache.popitem(last=False)
        return result

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0

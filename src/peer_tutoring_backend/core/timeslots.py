'''
The canonical timeslot catalog.

Every slot code has the literal form <DAY>_P<period>, e.g. "MON_P1" or
"FRI_P7": five school days with seven periods each. The table is built once
at import time and is only ever read afterwards.
'''
from datetime import date, datetime, time, timedelta
from typing import Iterable, NamedTuple, Optional

DAYS = ("MON", "TUE", "WED", "THU", "FRI")
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
PERIODS = 7

# (start, end) of each period, index 0 = P1
PERIOD_TIMES = (
    (time(9, 0), time(9, 50)),
    (time(9, 55), time(10, 45)),
    (time(11, 5), time(11, 55)),
    (time(12, 0), time(12, 50)),
    (time(14, 5), time(14, 55)),
    (time(15, 0), time(15, 50)),
    (time(16, 0), time(17, 15)),
)

TIMESLOT_SEPARATOR = "_P"


class TimeslotInfo(NamedTuple):
    """A single entry of the catalog."""
    code: str
    day: str
    day_name: str
    period: int
    start: time
    end: time

    @property
    def label(self) -> str:
        return f"{self.day_name}, P{self.period}"

    @property
    def time_range(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


def _build_catalog() -> dict[str, TimeslotInfo]:
    catalog = {}
    for day_index, day in enumerate(DAYS):
        for period in range(1, PERIODS + 1):
            code = f"{day}{TIMESLOT_SEPARATOR}{period}"
            start, end = PERIOD_TIMES[period - 1]
            catalog[code] = TimeslotInfo(code, day, DAY_NAMES[day_index], period, start, end)
    return catalog

_CATALOG = _build_catalog()

ALL_CODES: tuple[str, ...] = tuple(_CATALOG)
ALL_CODES_SET: frozenset[str] = frozenset(ALL_CODES)


def all_slots() -> list[TimeslotInfo]:
    """Returns every slot in canonical order (MON_P1 ... FRI_P7)."""
    return list(_CATALOG.values())


def label(code: str) -> str:
    """
    Returns the human-readable label for a slot code, e.g. "Tuesday, P2".
    Unknown codes are returned unchanged.
    """
    info = _CATALOG.get(code)
    return info.label if info else code


def is_valid(code: Optional[str]) -> bool:
    return code is not None and code in ALL_CODES_SET


def filter_valid(codes: Optional[Iterable[str]]) -> set[str]:
    """Keeps only the valid codes. None or empty input gives an empty set."""
    if not codes:
        return set()
    return {code for code in codes if is_valid(code)}


def parse(code: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Splits a code strictly as <DAY>_P<period>.
    Returns (day_offset_from_monday, period) or None for any other shape.
    """
    if not code:
        return None
    parts = code.split(TIMESLOT_SEPARATOR)
    if len(parts) != 2:
        return None

    day, period_str = parts
    if not period_str.isdigit():
        return None
    period = int(period_str)
    if period < 1 or period > PERIODS:
        return None
    if day not in DAYS:
        return None
    return DAYS.index(day), period


def _slot_datetime(week_start: Optional[date], code: Optional[str], use_end: bool) -> Optional[datetime]:
    if week_start is None:
        return None
    parsed = parse(code)
    if parsed is None:
        return None
    day_offset, period = parsed
    start, end = PERIOD_TIMES[period - 1]
    return datetime.combine(week_start + timedelta(days=day_offset), end if use_end else start)


def start_time(week_start: Optional[date], code: Optional[str]) -> Optional[datetime]:
    """Start of the period within the week anchored at `week_start` (a Monday)."""
    return _slot_datetime(week_start, code, use_end=False)


def end_time(week_start: Optional[date], code: Optional[str]) -> Optional[datetime]:
    """
    Calculates the exact end date-time for a slot within a specific week.

    `week_start` must be the Monday of the week. Returns None if either
    input is malformed.

    Example: week_start=2025-01-20, code="TUE_P2" -> 2025-01-21 10:45
    """
    return _slot_datetime(week_start, code, use_end=True)

# Textual aliases a user might type for a day or a clock time, used to
# match free-text autocomplete queries like "tmrw 930" or "fri 9pm".
import re
from datetime import date, datetime, time, timedelta
from typing import NamedTuple

from scrimbot.core.clock import local_today, to_local
from scrimbot.core.constants import DEFAULT_TIMES, SCHEDULE_DAYS

QUERY_PATTERN = re.compile(r"^([a-z]+)?\s*(\d[a-z0-9]*)?$")


class DateTimeQuery(NamedTuple):
    raw: str
    day: str
    time: str


def split_datetime_query(query: str | None) -> DateTimeQuery:
    raw = (query or "").strip().lower()

    match = QUERY_PATTERN.match(raw)
    if not match:
        return DateTimeQuery(raw, "", "")

    return DateTimeQuery(raw, match.group(1) or "", match.group(2) or "")


def day_aliases(d: date, today: date) -> tuple[str, ...]:
    weekday = d.strftime("%A").lower()

    if d == today:
        return (weekday, "today", "tdy")
    if d == today + timedelta(days=1):
        return (weekday, "tomorrow", "tmrw")
    return (weekday,)


def time_aliases(t: time) -> tuple[str, ...]:
    hour = t.hour % 12 or 12
    meridiems = ("pm", "p.m.") if t.hour >= 12 else ("am", "a.m.")

    stems = [f"{hour}:{t.minute:02}", f"{hour}{t.minute:02}"]
    if t.minute == 0:
        stems.append(f"{hour}")

    return tuple(
        f"{stem}{space}{meridiem}"
        for stem in stems
        for meridiem in meridiems
        for space in (" ", "")
    )


def _any_prefix(aliases, token: str) -> bool:
    return any(alias.startswith(token) for alias in aliases)


def matches_day(d: date, token: str, today: date) -> bool:
    return _any_prefix(day_aliases(d, today), token)


def matches_time(t: time, token: str) -> bool:
    return _any_prefix(time_aliases(t), token)


def matches_datetime(dt: datetime, query: DateTimeQuery, now: datetime | None = None) -> bool:
    local = to_local(dt)
    today = local_today(now)
    return matches_day(local.date(), query.day, today) and matches_time(
        local.time(), query.time
    )


def day_choices(now: datetime | None = None):
    today = local_today(now)
    for offset in range(SCHEDULE_DAYS):
        d = today + timedelta(days=offset)
        yield d, day_aliases(d, today)


TIME_CHOICES = [
    (time(hour, minute), time_aliases(time(hour, minute)))
    for hour in range(24)
    for minute in (0, 30)
]

DEFAULT_TIME_CHOICES = DEFAULT_TIMES

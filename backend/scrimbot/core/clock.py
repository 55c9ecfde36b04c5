# Time helpers. Everything is stored in UTC and shown in the schedule time zone.
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from scrimbot.core.config import settings


def schedule_tz() -> ZoneInfo:
    return ZoneInfo(settings.SCHEDULE_TIMEZONE)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are assumed to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime) -> datetime:
    return ensure_utc(dt).astimezone(schedule_tz())


def local_datetime(d: date, t: time) -> datetime:
    return datetime.combine(d, t, tzinfo=schedule_tz()).astimezone(timezone.utc)


def local_today(now: datetime | None = None) -> date:
    return to_local(now or now_utc()).date()


def time_string(t: time) -> str:
    hour = t.hour % 12 or 12
    suffix = "PM" if t.hour >= 12 else "AM"
    return f"{hour}:{t.minute:02} {suffix}"


def date_string(d: date) -> str:
    return f"{d:%A}, {d:%B} {d.day}"


def relative_string(dt: datetime, now: datetime | None = None) -> str:
    local = to_local(dt)
    today = local_today(now)

    if local.date() == today:
        day = "Today"
    elif local.date() == today + timedelta(days=1):
        day = "Tomorrow"
    elif local.date() == today - timedelta(days=1):
        day = "Yesterday"
    else:
        day = f"{local:%a} {local.month}/{local.day}"

    return f"{day} {time_string(local.time())}"

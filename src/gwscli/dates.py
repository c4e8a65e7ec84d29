"""
Loose natural language date/time handling for the calendar tool.

resolve_datetime() takes whatever the user typed for --start and a
reference instant and returns an aware datetime.  It is pure: the same
text and reference always give the same answer.

Heuristics worth knowing about:
    - a bare hour between 1 and 7 with no am/pm is taken as pm
      (nobody books a 3am meeting)
    - naming today's weekday means the same day next week
"""
import datetime
import re
from zoneinfo import ZoneInfo

# sunday first, matching the day numbering the distances are computed in
WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

DEFAULT_HOUR = 9
DEFAULT_DURATION_MINUTES = 60

_time_re = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)
_duration_re = re.compile(r"(-?\d+)\s*(h|hr|hour|m|min)?", re.IGNORECASE)
_whitespace_re = re.compile(r"\s+")

_DATE_FORMATS = [
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%b %d %Y %H:%M",
    "%b %d %Y",
    "%B %d %Y %H:%M",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
]


def parse_standard(text: str, tz: ZoneInfo|datetime.tzinfo|None = None) -> datetime.datetime|None:
    """
    Try the input as an ordinary date string: ISO 8601 first, then a few
    common layouts.  A naive result is placed in tz.  None if nothing fits.
    """
    s = text.strip()
    if not s:
        return None
    dt = None
    try:
        dt = datetime.datetime.fromisoformat(s.replace("Z", "+00:00") if s.endswith("Z") else s)
    except ValueError:
        for f in _DATE_FORMATS:
            try:
                dt = datetime.datetime.strptime(s, f)
                break
            except ValueError:
                continue
    if dt is None:
        return None
    if dt.tzinfo is None and tz is not None:
        dt = dt.replace(tzinfo=tz)
    return dt


def js_weekday(d: datetime.date) -> int:
    """Day number with sunday as 0"""
    return (d.weekday() + 1) % 7


def days_until(target: int, today: int) -> int:
    """Distance to the next occurrence of target, strictly in the future"""
    diff = (target - today + 7) % 7
    return 7 if diff == 0 else diff


def parse_time_of_day(text: str) -> tuple[int, int]|None:
    """
    (hour, minute) from the first H[:MM][am|pm] in the text.
    The hour may come back above 23 for silly input, the caller rolls it over.
    """
    m = _time_re.search(text)
    if not m:
        return None
    hours = int(m.group(1))
    minutes = int(m.group(2)) if m.group(2) else 0
    meridiem = m.group(3).lower() if m.group(3) else None
    if meridiem == "pm" and hours < 12:
        hours += 12
    elif meridiem == "am" and hours == 12:
        hours = 0
    elif meridiem is None and 1 <= hours <= 7:
        hours += 12
    return (hours, minutes)


def resolve_datetime(text: str, now: datetime.datetime) -> datetime.datetime:
    """
    Turn "tomorrow 2pm", "friday 10:30", "next week" or an ISO string into
    a datetime.  now is the reference instant and supplies the zone for
    anything that isn't explicit about it.
    """
    direct = parse_standard(text, now.tzinfo)
    if direct is not None:
        return direct

    lower = _whitespace_re.sub(" ", text.lower()).strip()
    day = now
    if "today" in lower:
        pass
    elif "tomorrow" in lower or "tmr" in lower or "tmrw" in lower:
        day = now + datetime.timedelta(days=1)
    elif "next week" in lower:
        day = now + datetime.timedelta(days=7)
    else:
        for i, name in enumerate(WEEKDAYS):
            if name in lower:
                day = now + datetime.timedelta(days=days_until(i, js_weekday(now)))
                break

    hm = parse_time_of_day(text)
    hours, minutes = hm if hm is not None else (DEFAULT_HOUR, 0)
    base = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return base + datetime.timedelta(hours=hours, minutes=minutes)


def parse_duration(text: str|None) -> int:
    """
    Duration in minutes from "2h", "90m", "1 hour", "45 min".
    A bare number is hours.  Anything unparsable means an hour.
    """
    if not text:
        return DEFAULT_DURATION_MINUTES
    m = _duration_re.search(str(text))
    if not m:
        return DEFAULT_DURATION_MINUTES
    value = int(m.group(1))
    unit = (m.group(2) or "h").lower()
    return value if unit.startswith("m") else value * 60


def format_time(dt: datetime.datetime, tz: ZoneInfo|None = None) -> str:
    """9:00 AM style, in tz if given"""
    d = dt.astimezone(tz) if tz is not None and dt.tzinfo is not None else dt
    hour = d.hour % 12 or 12
    return f"{hour}:{d.minute:02d} {'PM' if d.hour >= 12 else 'AM'}"


def format_date(d: datetime.date) -> str:
    """Mon, Jan 15 style"""
    return f"{d.strftime('%a')}, {d.strftime('%b')} {d.day}"


def parse_api_datetime(value: str, tz: ZoneInfo|None = None) -> datetime.datetime|datetime.date:
    """
    Calendar and Drive hand back RFC 3339 strings, all-day events just a date.
    Returned in tz when given.
    """
    if len(value) == 10:
        return datetime.date.fromisoformat(value)
    dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00") if value.endswith("Z") else value)
    if tz is not None and dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return dt

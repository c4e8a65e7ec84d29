from dataclasses import dataclass, field
from typing import List, Tuple
import datetime
import re
from zoneinfo import ZoneInfo

from .resources import GoogleWorkSpaceResourceBase
from .dates import (DEFAULT_DURATION_MINUTES, format_date, format_time, parse_api_datetime,
                    parse_duration, resolve_datetime)

CALENDAR_ID = "primary"

WORKDAY_START = datetime.time(9, 0)
WORKDAY_END = datetime.time(18, 0)

_iso_start_re = re.compile(r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}(?::\d{2})?)([+-]\d{2}:\d{2}|Z)?")


@dataclass
class EventDateTime(GoogleWorkSpaceResourceBase):
    """
    Class for facilitating dealing with Event start/stop dicts.
    They use distinct fields to signal all-day ('date') vs specific
    day/time ('dateTime') so easier to carry both here and work out
    at runtime what is needed.
    A naive dateTime is wall clock time in timeZone, which is how new
    events are sent.
    """
    date: datetime.date|str|None = field(default=None)
    dateTime: datetime.datetime|str|None = field(default=None)
    timeZone: ZoneInfo|str|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def __bool__(self) -> bool:
        return bool(self.date) or bool(self.dateTime)

    def __str__(self) -> str:
        s = "<empty>"
        if self.dateTime:
            s = self.dateTime.isoformat()
        elif self.date:
            s = self.date.isoformat()
        if self.timeZone:
            s = f'{s}:{str(self.timeZone)}'
        return s

    def fixup(self) -> None:
        if self.date is not None and not isinstance(self.date, datetime.date):
            self.date = datetime.date.fromisoformat(str(self.date))
        if self.dateTime is not None and not isinstance(self.dateTime, datetime.datetime):
            self.dateTime = parse_api_datetime(str(self.dateTime))
        if self.dateTime is not None:
            self.dateTime = self.dateTime.replace(microsecond=0)
        if self.timeZone is not None and not isinstance(self.timeZone, ZoneInfo):
            self.timeZone = ZoneInfo(str(self.timeZone))
        # 'date' means all-day, can't have 'date' and 'dateTime' so one has to take precedence
        if self.dateTime and self.date:
            self.date = None

    def value(self) -> datetime.date|datetime.datetime|None:
        return self.dateTime if self.dateTime else self.date

    def to_base(self) -> dict|None:
        """
        Strings as GWS wants them, and only the fields that are set.
        """
        self.fixup()
        base = {'date': self.date.isoformat() if self.date else None,
                'dateTime': self.dateTime.isoformat() if self.dateTime else None,
                'timeZone': str(self.timeZone) if self.timeZone else None}
        for k in ['date', 'dateTime', 'timeZone']:
            if base[k] is None:
                del base[k]
        return None if not base else base


@dataclass
class Event(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/calendar/api/v3/reference/events#resource-representations
    The parts of an event the gcal tool reads or writes.
    """
    id: str|None = field(default=None)
    status: str|None = field(default=None)
    htmlLink: str|None = field(default=None)
    summary: str|None = field(default=None)
    description: str|None = field(default=None)
    location: str|None = field(default=None)
    start: EventDateTime|dict|None = field(default=None)
    end: EventDateTime|dict|None = field(default=None)
    recurrence: List[str]|None = field(default=None)
    recurringEventId: str|None = field(default=None)
    attendees: List[dict]|None = field(default=None)
    reminders: dict|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if self.start is not None and not isinstance(self.start, EventDateTime):
            self.start = EventDateTime(**dict(self.start))
        if self.end is not None and not isinstance(self.end, EventDateTime):
            self.end = EventDateTime(**dict(self.end))

    def __bool__(self) -> bool:
        return bool(self.id)

    def __str__(self) -> str:
        return f"{self.summary}<{self.id}>({self.start}-->{self.end})" if self else "<empty>"

    def all_day(self) -> bool:
        """
        Is this an all-day event?  That is, is it just date components and not datetime?
        """
        return self.start is not None and self.start.dateTime is None and self.start.date is not None

    def duration(self) -> datetime.timedelta:
        """end - start for timed events, zero otherwise"""
        if self.start is None or self.end is None or self.all_day():
            return datetime.timedelta(0)
        return self.end.dateTime - self.start.dateTime

    def attendee_emails(self) -> List[str]:
        return [a.get('email', '') for a in self.attendees or []]


def parse_attendees(value: str) -> List[dict]:
    """'a@x.com, b@y.com' -> [{'email': 'a@x.com'}, {'email': 'b@y.com'}]"""
    return [{'email': e.strip()} for e in str(value).split(",") if e.strip()]


def recurrence_rule(freq: str, count: int|str = 10) -> List[str]:
    return [f"RRULE:FREQ={str(freq).upper()};COUNT={count}"]


def reminder_overrides(popup: int|None = None, email: int|None = None) -> dict|None:
    overrides = []
    if popup is not None:
        overrides.append({'method': "popup", 'minutes': popup})
    if email is not None:
        overrides.append({'method': "email", 'minutes': email})
    if not overrides:
        return None
    return {'useDefault': False, 'overrides': overrides}


@dataclass
class FormattedEvent():
    """An event ready for printing, all strings"""
    id: str
    title: str
    date: str
    time: str
    location: str = ""
    attendees: str = ""
    description: str = ""
    link: str = ""


def format_event(event: Event|dict, tz: ZoneInfo|None = None) -> FormattedEvent:
    """
    date as 'Mon, Jan 15', time as '9:00 AM - 10:00 AM' or 'All day',
    both in tz.
    """
    e = event if isinstance(event, Event) else Event.from_response(event)
    date = time = ""
    if e.start and e.start.dateTime:
        start = e.start.dateTime
        if tz is not None and start.tzinfo is not None:
            start = start.astimezone(tz)
        date = format_date(start)
        time = format_time(start, tz)
        if e.end and e.end.dateTime:
            time += " - " + format_time(e.end.dateTime, tz)
    elif e.start and e.start.date:
        date = format_date(e.start.date)
        time = "All day"
    return FormattedEvent(id=e.id or "",
                          title=e.summary or "(No title)",
                          date=date,
                          time=time,
                          location=e.location or "",
                          attendees=", ".join(e.attendee_emails()),
                          description=e.description or "",
                          link=e.htmlLink or "")


def wall_clock(dt: datetime.datetime, tz: ZoneInfo|datetime.tzinfo|None = None) -> datetime.datetime:
    """
    The naive local time of dt in tz, to the minute.  New events are sent
    as wall clock time plus an explicit timeZone.
    """
    d = dt.astimezone(tz) if tz is not None and dt.tzinfo is not None else dt
    return d.replace(tzinfo=None, second=0, microsecond=0)


def event_window(start: str, end: str|None, duration: str|None,
                 now: datetime.datetime) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Start and end wall clock times for a new event.
    An ISO start ('2024-01-15T14:00+07:00') is taken at face value, any
    offset is dropped since the time is meant in the event's own zone.
    Anything else goes through the natural language resolver against now.
    The end is --end when given, otherwise start plus the duration.
    """
    m = _iso_start_re.match(start.strip())
    if m:
        s = datetime.datetime.fromisoformat(f"{m.group(1)}T{m.group(2)}").replace(second=0)
    else:
        s = wall_clock(resolve_datetime(start, now), now.tzinfo)
    if end:
        e = wall_clock(resolve_datetime(end, now), now.tzinfo)
    else:
        e = s + datetime.timedelta(minutes=parse_duration(duration))
    return (s, e)


def reschedule(event: dict, new_start: datetime.datetime) -> dict:
    """
    Move a raw event dict to new_start keeping its length.  Events with
    no usable length (all-day ones) get the default hour.  Everything else
    in the dict is left alone so an update doesn't lose fields.
    """
    duration = Event.from_response(event).duration()
    if duration <= datetime.timedelta(0):
        duration = datetime.timedelta(minutes=DEFAULT_DURATION_MINUTES)
    for k, t in [('start', new_start), ('end', new_start + duration)]:
        d = dict(event.get(k) or {})
        d.pop('date', None)
        d['dateTime'] = t.isoformat()
        event[k] = d
    return event


def event_day(event: dict, tz: ZoneInfo|None = None) -> datetime.date|None:
    """The calendar day an event starts on, in tz"""
    e = Event.from_response(event)
    v = e.start.value() if e.start else None
    if isinstance(v, datetime.datetime):
        return v.astimezone(tz).date() if tz is not None and v.tzinfo is not None else v.date()
    return v


def day_bounds(day: datetime.datetime) -> Tuple[datetime.datetime, datetime.datetime]:
    """Midnight to the last millisecond of the same day"""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return (start, start.replace(hour=23, minute=59, second=59, microsecond=999000))


def workday_bounds(day: datetime.datetime) -> Tuple[datetime.datetime, datetime.datetime]:
    start = day.replace(hour=WORKDAY_START.hour, minute=WORKDAY_START.minute, second=0, microsecond=0)
    end = day.replace(hour=WORKDAY_END.hour, minute=WORKDAY_END.minute, second=0, microsecond=0)
    return (start, end)


def free_slots(busy: List[dict], start: datetime.datetime, end: datetime.datetime) -> List[Tuple[datetime.datetime, datetime.datetime]]:
    """
    Gaps between the busy periods of a freebusy response within start..end.
    Busy periods come back sorted and may overlap the window edges.
    """
    slots = []
    current = start
    for b in busy:
        bs = parse_api_datetime(b['start'])
        be = parse_api_datetime(b['end'])
        if current < bs:
            slots.append((current, min(bs, end)))
        current = max(current, be)
    if current < end:
        slots.append((current, end))
    return [(s, e) for s, e in slots if s < e]

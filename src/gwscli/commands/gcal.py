"""
gcal: Google Calendar from the command line.
Events live on the primary calendar unless a calendar id is given.
"""
from dataclasses import dataclass, field
from typing import List, Self
import datetime

from loguru import logger

from ..calendar import (CALENDAR_ID, Event, EventDateTime, day_bounds, event_day, event_window,
                        format_event, free_slots, parse_attendees, recurrence_rule, reminder_overrides,
                        reschedule, workday_bounds)
from ..cli import CommandSet, Context, require
from ..dates import format_time, parse_api_datetime, resolve_datetime
from ..drive import format_date
from ..flags import Flags, parse_int

HELP = """
Google Calendar CLI

EVENTS:
  gcal list [days]              List events for next N days
  gcal today                    Today's events
  gcal tomorrow                 Tomorrow's events
  gcal week                     This week's events
  gcal get <eventId>            Get event details

  gcal create "Title" --start "time" [options]
    --end "time"                End time
    --duration 1h               Duration (30m, 2h, etc)
    --timezone "tz"             Event time zone
    --location "place"          Location
    --description "text"        Description
    --attendees "a@b.com,..."   Invite attendees
    --repeat DAILY|WEEKLY|MONTHLY
    --count N                   Repeat count
    --reminder 15               Popup reminder (minutes before)
    --email-reminder 60         Email reminder (minutes before)
    --notify                    Send email invites to attendees

  gcal quick "text"             Quick add with natural language
  gcal update <id> [options]    Update event
  gcal move <id> --start "time" Move event to new time
  gcal delete <id>              Delete event
  gcal cancel <id>              Delete and notify attendees

RECURRING EVENTS:
  gcal create "Title" --repeat DAILY|WEEKLY|MONTHLY --count 10
  gcal instances <eventId>      List instances of recurring event
  gcal update-instance <eventId> --instance "2024-01-15" [options]
                                Modify single occurrence

AVAILABILITY:
  gcal busy [date]              Show busy times
  gcal free [date]              Show free slots (9am-6pm)
  gcal freebusy <email> --date  Check someone's availability

CALENDARS:
  gcal calendars                List all calendars
  gcal create-calendar "Name"   Create new calendar
    --description "desc"        Calendar description
    --timezone "tz"             Timezone
  gcal delete-calendar <id>     Delete a calendar

SHARING:
  gcal share <calId> --email "user@email.com" --role reader|writer|owner
  gcal unshare <calId> --email "user@email.com"
  gcal permissions [calId]      List calendar permissions
"""

DEFAULT_DAYS = 7

commands = CommandSet("gcal", HELP)


@dataclass
class CreateOptions():
    title: str = field(default="New Event")
    start: str = field(default="tomorrow 9am")
    end: str|None = field(default=None)
    duration: str|None = field(default=None)
    timezone: str|None = field(default=None)
    location: str|None = field(default=None)
    description: str|None = field(default=None)
    attendees: str|None = field(default=None)
    repeat: str|None = field(default=None)
    count: str = field(default="10")
    reminder: int|None = field(default=None)
    email_reminder: int|None = field(default=None)
    notify: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        return cls(title=flags.text("title", "name") or flags.positional(0) or "New Event",
                   start=flags.text("start", "time", "when", "at", default="tomorrow 9am"),
                   end=flags.text("end"),
                   duration=flags.text("duration"),
                   timezone=flags.text("timezone", "tz"),
                   location=flags.text("location", "place", "where"),
                   description=flags.text("description", "desc", "notes"),
                   attendees=flags.text("attendees", "guests", "invite", "invites"),
                   repeat=flags.text("repeat"),
                   count=flags.text("count", default="10"),
                   reminder=flags.int_value("reminder"),
                   email_reminder=flags.int_value("email-reminder"),
                   notify=flags.flag("notify"))


@dataclass
class UpdateOptions():
    event_id: str
    title: str|None = field(default=None)
    start: str|None = field(default=None)
    location: str|None = field(default=None)
    description: str|None = field(default=None)
    attendees: str|None = field(default=None)
    notify: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags, usage: str = "Usage: gcal update <eventId> --title 'New Title' --start 'new time'") -> Self:
        return cls(event_id=require(flags.positional(0), usage),
                   title=flags.text("title"),
                   start=flags.text("start"),
                   location=flags.text("location"),
                   description=flags.text("description"),
                   attendees=flags.text("attendees"),
                   notify=flags.flag("notify"))

    def apply(self, event: dict, now: datetime.datetime) -> dict:
        """Change the raw event dict in place"""
        if self.title:
            event['summary'] = self.title
        if self.location:
            event['location'] = self.location
        if self.description:
            event['description'] = self.description
        if self.start:
            reschedule(event, resolve_datetime(self.start, now))
        if self.attendees:
            event['attendees'] = (event.get('attendees') or []) + parse_attendees(self.attendees)
        return event


@dataclass
class InstanceOptions():
    event_id: str
    instance: str
    update: UpdateOptions

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = "Usage: gcal update-instance <recurringEventId> --instance '2024-01-15' [--title 'New'] [--start 'time']"
        return cls(event_id=require(flags.positional(0), usage),
                   instance=require(flags.text("instance"), usage),
                   update=UpdateOptions.from_flags(flags, usage))

    def day(self, now: datetime.datetime) -> datetime.date:
        try:
            return datetime.date.fromisoformat(self.instance)
        except ValueError:
            return resolve_datetime(self.instance, now).date()


@dataclass
class ShareOptions():
    calendar_id: str
    email: str
    role: str = field(default="reader")

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = ("Usage: gcal share <calendarId> --email 'user@email.com' [--role reader|writer|owner]\n"
                 "Roles: reader (see events), writer (edit events), owner (full control)")
        return cls(calendar_id=flags.positional(0) or CALENDAR_ID,
                   email=require(flags.text("email"), usage),
                   role=flags.text("role", default="reader"))


def _list_events(ctx: Context, start: datetime.datetime, end: datetime.datetime, limit: int|None = None) -> List[dict]:
    args = {'calendarId': CALENDAR_ID,
            'timeMin': start.isoformat(),
            'timeMax': end.isoformat(),
            'singleEvents': True,
            'orderBy': "startTime"}
    if limit:
        args['maxResults'] = limit
    logger.debug(f"events.list {args}")
    return ctx.calendar().events().list(**args).execute().get('items', [])


def _print_slots(slots: List[tuple], ctx: Context) -> None:
    for s, e in slots:
        print(f"  {format_time(s, ctx.tz)} - {format_time(e, ctx.tz)}")


def _busy(ctx: Context, calendar_id: str, start: datetime.datetime, end: datetime.datetime) -> dict:
    body = {'timeMin': start.isoformat(),
            'timeMax': end.isoformat(),
            'items': [{'id': calendar_id}]}
    response = ctx.calendar().freebusy().query(body=body).execute()
    return response.get('calendars', {}).get(calendar_id, {})


def _day(ctx: Context, text: str|None) -> datetime.datetime:
    now = ctx.now()
    return resolve_datetime(text, now) if text else now


@commands.command("list", "ls", "show", "check")
def list_events(ctx: Context, flags: Flags) -> None:
    days = parse_int(flags.positional(0, "")) or DEFAULT_DAYS
    now = ctx.now()
    events = _list_events(ctx, now, now + datetime.timedelta(days=days), limit=50)
    if not events:
        print(f"No events in the next {days} days.")
        return
    print(f"\nEvents (next {days} days):\n")
    for e in events:
        f = format_event(e, ctx.tz)
        print(f"* {f.date} | {f.time}")
        print(f"  {f.title}" + (f" @ {f.location}" if f.location else ""))
        if f.attendees:
            print(f"  Attendees: {f.attendees}")
        print(f"  ID: {f.id}\n")


def _day_events(ctx: Context, offset: int, label: str) -> None:
    start, _ = day_bounds(ctx.now() + datetime.timedelta(days=offset))
    events = _list_events(ctx, start, start + datetime.timedelta(days=1))
    if not events:
        print(f"No events {label.lower()}.")
        return
    print(f"\n{label.capitalize()}'s Events:\n")
    for e in events:
        f = format_event(e, ctx.tz)
        print(f"* {f.time} - {f.title}")


@commands.command("today")
def today(ctx: Context, flags: Flags) -> None:
    _day_events(ctx, 0, "today")


@commands.command("tomorrow")
def tomorrow(ctx: Context, flags: Flags) -> None:
    _day_events(ctx, 1, "tomorrow")


@commands.command("week")
def week(ctx: Context, flags: Flags) -> None:
    list_events(ctx, Flags(positionals=[str(DEFAULT_DAYS)]))


@commands.command("get")
def get(ctx: Context, flags: Flags) -> None:
    event_id = require(flags.positional(0), "Usage: gcal get <eventId>")
    response = ctx.calendar().events().get(calendarId=CALENDAR_ID, eventId=event_id).execute()
    f = format_event(response, ctx.tz)
    print(f"\n{f.title}")
    print(f"  Date: {f.date}")
    print(f"  Time: {f.time}")
    if f.location:
        print(f"  Location: {f.location}")
    if f.attendees:
        print(f"  Attendees: {f.attendees}")
    if f.description:
        print(f"  Description: {f.description}")
    print(f"  Link: {f.link}")


@commands.command("create", "add", "new", "schedule", "meeting", "event")
def create(ctx: Context, flags: Flags) -> None:
    opts = CreateOptions.from_flags(flags)
    tz = opts.timezone or ctx.settings.timezone
    start, end = event_window(opts.start, opts.end, opts.duration, ctx.now())
    event = Event(summary=opts.title,
                  start=EventDateTime(dateTime=start, timeZone=tz),
                  end=EventDateTime(dateTime=end, timeZone=tz),
                  location=opts.location,
                  description=opts.description,
                  attendees=parse_attendees(opts.attendees) if opts.attendees else None,
                  recurrence=recurrence_rule(opts.repeat, opts.count) if opts.repeat else None,
                  reminders=reminder_overrides(opts.reminder, opts.email_reminder))
    response = ctx.calendar().events().insert(calendarId=CALENDAR_ID,
                                              body=event.trim(),
                                              sendUpdates="all" if opts.notify else "none").execute()
    print(f"\nEvent created: {response.get('summary')}")
    print(f"  When: {start.isoformat()} ({tz})")
    print(f"  Link: {response.get('htmlLink')}")
    print(f"  ID: {response.get('id')}")


@commands.command("quick")
def quick(ctx: Context, flags: Flags) -> None:
    text = require(" ".join(flags.positionals), "Usage: gcal quick 'Lunch with Sam tomorrow at noon'")
    response = ctx.calendar().events().quickAdd(calendarId=CALENDAR_ID, text=text).execute()
    print(f"\nEvent created: {response.get('summary')}")
    print(f"  Link: {response.get('htmlLink')}")
    print(f"  ID: {response.get('id')}")


def _update(ctx: Context, opts: UpdateOptions) -> dict:
    events = ctx.calendar().events()
    event = events.get(calendarId=CALENDAR_ID, eventId=opts.event_id).execute()
    opts.apply(event, ctx.now())
    return events.update(calendarId=CALENDAR_ID,
                         eventId=opts.event_id,
                         body=event,
                         sendUpdates="all" if opts.notify else "none").execute()


@commands.command("update")
def update(ctx: Context, flags: Flags) -> None:
    response = _update(ctx, UpdateOptions.from_flags(flags))
    print(f"\nEvent updated: {response.get('summary')}")


@commands.command("move")
def move(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gcal move <eventId> --start 'new time'"
    opts = UpdateOptions(event_id=require(flags.positional(0), usage),
                         start=require(flags.text("start"), usage))
    response = _update(ctx, opts)
    print(f"\nEvent updated: {response.get('summary')}")


def _delete(ctx: Context, event_id: str, notify: bool) -> None:
    ctx.calendar().events().delete(calendarId=CALENDAR_ID,
                                   eventId=event_id,
                                   sendUpdates="all" if notify else "none").execute()
    print("\nEvent deleted.")


@commands.command("delete", "rm", "remove")
def delete(ctx: Context, flags: Flags) -> None:
    _delete(ctx, require(flags.positional(0), "Usage: gcal delete <eventId>"), flags.flag("notify"))


@commands.command("cancel")
def cancel(ctx: Context, flags: Flags) -> None:
    _delete(ctx, require(flags.positional(0), "Usage: gcal cancel <eventId>"), True)


@commands.command("busy")
def busy(ctx: Context, flags: Flags) -> None:
    start, end = day_bounds(_day(ctx, flags.positional(0)))
    periods = _busy(ctx, CALENDAR_ID, start, end).get('busy', [])
    if not periods:
        print("\nNo busy times - you're free all day!")
        return
    print(f"\nBusy times ({ctx.settings.timezone}):\n")
    _print_slots([(parse_api_datetime(b['start']), parse_api_datetime(b['end'])) for b in periods], ctx)


@commands.command("free", "availability")
def free(ctx: Context, flags: Flags) -> None:
    start, end = workday_bounds(_day(ctx, flags.positional(0)))
    slots = free_slots(_busy(ctx, CALENDAR_ID, start, end).get('busy', []), start, end)
    if not slots:
        print("\nNo free slots available.")
        return
    print(f"\nFree slots ({ctx.settings.timezone}):\n")
    _print_slots(slots, ctx)


@commands.command("freebusy")
def freebusy(ctx: Context, flags: Flags) -> None:
    email = require(flags.positional(0), "Usage: gcal freebusy <email> --date 'date'")
    start, _ = day_bounds(_day(ctx, flags.text("date")))
    result = _busy(ctx, email, start, start + datetime.timedelta(days=1))
    errors = result.get('errors')
    if errors:
        print(f"\nCannot check {email}: {errors[0].get('reason')}")
        return
    periods = result.get('busy', [])
    if not periods:
        print(f"\n{email} is free all day!")
        return
    print(f"\n{email} busy times ({ctx.settings.timezone}):\n")
    _print_slots([(parse_api_datetime(b['start']), parse_api_datetime(b['end'])) for b in periods], ctx)


@commands.command("calendars")
def calendars(ctx: Context, flags: Flags) -> None:
    method = ctx.calendar().calendarList().list
    page_token = None
    entries = []
    while True:
        response = method(pageToken=page_token).execute()
        entries += response.get('items', [])
        page_token = response.get('nextPageToken', None)
        if not page_token:
            break
    print("\nYour Calendars:\n")
    for c in entries:
        primary = " (primary)" if c.get('primary') else ""
        access = f" [{c['accessRole']}]" if c.get('accessRole') else ""
        print(f"* {c.get('summary')}{primary}{access}")
        print(f"  ID: {c.get('id')}\n")


@commands.command("create-calendar")
def create_calendar(ctx: Context, flags: Flags) -> None:
    name = require(flags.positional(0),
                   "Usage: gcal create-calendar 'Calendar Name' [--description 'desc'] [--timezone 'tz']")
    body = {'summary': name, 'timeZone': flags.text("timezone", default=ctx.settings.timezone)}
    if flags.text("description"):
        body['description'] = flags.text("description")
    response = ctx.calendar().calendars().insert(body=body).execute()
    print(f"\nCalendar created: {response.get('summary')}")
    print(f"  ID: {response.get('id')}")


@commands.command("delete-calendar")
def delete_calendar(ctx: Context, flags: Flags) -> None:
    calendar_id = require(flags.positional(0),
                          "Usage: gcal delete-calendar <calendarId>\nNote: Cannot delete primary calendar")
    if calendar_id == CALENDAR_ID:
        raise ValueError("Cannot delete primary calendar")
    ctx.calendar().calendars().delete(calendarId=calendar_id).execute()
    print("\nCalendar deleted.")


@commands.command("share")
def share(ctx: Context, flags: Flags) -> None:
    opts = ShareOptions.from_flags(flags)
    body = {'role': opts.role, 'scope': {'type': "user", 'value': opts.email}}
    ctx.calendar().acl().insert(calendarId=opts.calendar_id, body=body).execute()
    print(f"\nCalendar shared with {opts.email} as {opts.role}")


@commands.command("unshare")
def unshare(ctx: Context, flags: Flags) -> None:
    email = require(flags.text("email"), "Usage: gcal unshare <calendarId> --email 'user@email.com'")
    calendar_id = flags.positional(0) or CALENDAR_ID
    ctx.calendar().acl().delete(calendarId=calendar_id, ruleId=f"user:{email}").execute()
    print(f"\nRemoved {email} from calendar.")


@commands.command("permissions")
def permissions(ctx: Context, flags: Flags) -> None:
    calendar_id = flags.positional(0) or CALENDAR_ID
    rules = ctx.calendar().acl().list(calendarId=calendar_id).execute().get('items', [])
    print("\nCalendar Permissions:\n")
    for r in rules:
        scope = r.get('scope', {})
        who = "Anyone" if scope.get('type') == "default" else scope.get('value')
        print(f"* {who} - {r.get('role')}")


@commands.command("instances")
def instances(ctx: Context, flags: Flags) -> None:
    event_id = require(flags.positional(0), "Usage: gcal instances <recurringEventId>")
    items = ctx.calendar().events().instances(calendarId=CALENDAR_ID, eventId=event_id,
                                              maxResults=10).execute().get('items', [])
    if not items:
        print("No instances found.")
        return
    print("\nRecurring Event Instances:\n")
    for e in items:
        f = format_event(e, ctx.tz)
        print(f"* {f.date} | {f.time} - {f.title}")
        print(f"  Instance ID: {e.get('id')}\n")


@commands.command("update-instance")
def update_instance(ctx: Context, flags: Flags) -> None:
    opts = InstanceOptions.from_flags(flags)
    now = ctx.now()
    events = ctx.calendar().events()
    items = events.instances(calendarId=CALENDAR_ID, eventId=opts.event_id).execute().get('items', [])
    target = opts.day(now)
    instance = next((e for e in items if event_day(e, ctx.tz) == target), None)
    if instance is None:
        print(f"No instance found on {opts.instance}")
        return
    opts.update.apply(instance, now)
    response = events.update(calendarId=CALENDAR_ID, eventId=instance['id'], body=instance).execute()
    start = response.get('start', {})
    print(f"\nInstance updated: {response.get('summary')}")
    print(f"  Date: {format_date(start.get('dateTime') or start.get('date'), ctx.tz)}")


def main() -> None:
    commands.main()

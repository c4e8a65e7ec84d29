import pytest

from gwscli.commands.gcal import commands


def events(access):
    return access.calendar.events.return_value


def test_create(run, access, capsys):
    events(access).insert.return_value.execute.return_value = {'summary': "Team sync", 'htmlLink': "link", 'id': "e1"}
    assert(run(commands, "create", "Team sync", "--start", "tomorrow 2pm", "--duration", "30m",
               "--attendees", "a@x.com,b@x.com", "--repeat", "weekly", "--count", "4", "--reminder", "10") == 0)
    kwargs = events(access).insert.call_args.kwargs
    assert(kwargs['calendarId'] == "primary")
    assert(kwargs['sendUpdates'] == "none")
    body = kwargs['body']
    assert(body['summary'] == "Team sync")
    assert(body['start'] == {'dateTime': "2024-01-16T14:00:00", 'timeZone': "Asia/Bangkok"})
    assert(body['end'] == {'dateTime': "2024-01-16T14:30:00", 'timeZone': "Asia/Bangkok"})
    assert(body['attendees'] == [{'email': "a@x.com"}, {'email': "b@x.com"}])
    assert(body['recurrence'] == ["RRULE:FREQ=WEEKLY;COUNT=4"])
    assert(body['reminders'] == {'useDefault': False, 'overrides': [{'method': "popup", 'minutes': 10}]})
    out = capsys.readouterr().out
    assert("Event created: Team sync" in out)
    assert("When: 2024-01-16T14:00:00 (Asia/Bangkok)" in out)


def test_create_defaults(run, access):
    events(access).insert.return_value.execute.return_value = {}
    assert(run(commands, "add", "--notify", "--timezone", "UTC") == 0)
    kwargs = events(access).insert.call_args.kwargs
    assert(kwargs['sendUpdates'] == "all")
    assert(kwargs['body']['summary'] == "New Event")
    assert(kwargs['body']['start'] == {'dateTime': "2024-01-16T09:00:00", 'timeZone': "UTC"})
    assert('location' not in kwargs['body'])


def test_list(run, access, capsys):
    events(access).list.return_value.execute.return_value = {'items': [
        {'id': "e1", 'summary': "Standup", 'location': "Room 1",
         'start': {'dateTime': "2024-01-16T09:00:00+07:00"}, 'end': {'dateTime': "2024-01-16T09:15:00+07:00"}}]}
    assert(run(commands, "list", "3") == 0)
    kwargs = events(access).list.call_args.kwargs
    assert(kwargs['timeMin'] == "2024-01-15T10:00:00+07:00")
    assert(kwargs['timeMax'] == "2024-01-18T10:00:00+07:00")
    assert(kwargs['singleEvents'] is True)
    assert(kwargs['maxResults'] == 50)
    out = capsys.readouterr().out
    assert("Events (next 3 days):" in out)
    assert("* Tue, Jan 16 | 9:00 AM - 9:15 AM" in out)
    assert("  Standup @ Room 1" in out)


def test_list_empty(run, access, capsys):
    events(access).list.return_value.execute.return_value = {}
    assert(run(commands, "week") == 0)
    assert("No events in the next 7 days." in capsys.readouterr().out)


def test_today(run, access, capsys):
    events(access).list.return_value.execute.return_value = {'items': [
        {'summary': "Lunch", 'start': {'date': "2024-01-15"}, 'end': {'date': "2024-01-16"}}]}
    assert(run(commands, "today") == 0)
    kwargs = events(access).list.call_args.kwargs
    assert(kwargs['timeMin'] == "2024-01-15T00:00:00+07:00")
    assert(kwargs['timeMax'] == "2024-01-16T00:00:00+07:00")
    assert("* All day - Lunch" in capsys.readouterr().out)


def test_update_moves_and_keeps_fields(run, access, capsys):
    event = {'id': "e1", 'summary': "Old", 'colorId': "5",
             'start': {'dateTime': "2024-01-16T09:00:00+07:00"}, 'end': {'dateTime': "2024-01-16T10:30:00+07:00"}}
    events(access).get.return_value.execute.return_value = event
    events(access).update.return_value.execute.return_value = {'summary': "New"}
    assert(run(commands, "update", "e1", "--title", "New", "--start", "friday 3pm") == 0)
    body = events(access).update.call_args.kwargs['body']
    assert(body['summary'] == "New")
    assert(body['colorId'] == "5")
    assert(body['start']['dateTime'] == "2024-01-19T15:00:00+07:00")
    assert(body['end']['dateTime'] == "2024-01-19T16:30:00+07:00")
    assert("Event updated: New" in capsys.readouterr().out)


def test_move_requires_start(run, access, capsys):
    assert(run(commands, "move", "e1") == 0)
    assert("Usage: gcal move" in capsys.readouterr().out)
    events(access).update.assert_not_called()


def test_delete_and_cancel(run, access):
    assert(run(commands, "delete", "e1") == 0)
    events(access).delete.assert_called_with(calendarId="primary", eventId="e1", sendUpdates="none")
    assert(run(commands, "cancel", "e2") == 0)
    events(access).delete.assert_called_with(calendarId="primary", eventId="e2", sendUpdates="all")


def test_free(run, access, capsys):
    access.calendar.freebusy.return_value.query.return_value.execute.return_value = {
        'calendars': {'primary': {'busy': [{'start': "2024-01-15T03:00:00Z", 'end': "2024-01-15T04:00:00Z"}]}}}
    assert(run(commands, "free") == 0)
    body = access.calendar.freebusy.return_value.query.call_args.kwargs['body']
    assert(body['timeMin'] == "2024-01-15T09:00:00+07:00")
    assert(body['timeMax'] == "2024-01-15T18:00:00+07:00")
    assert(body['items'] == [{'id': "primary"}])
    out = capsys.readouterr().out
    assert("Free slots (Asia/Bangkok):" in out)
    assert("  9:00 AM - 10:00 AM" in out)
    assert("  11:00 AM - 6:00 PM" in out)


def test_busy_empty(run, access, capsys):
    access.calendar.freebusy.return_value.query.return_value.execute.return_value = {'calendars': {}}
    assert(run(commands, "busy", "tomorrow") == 0)
    assert("you're free all day" in capsys.readouterr().out)


def test_freebusy_error(run, access, capsys):
    access.calendar.freebusy.return_value.query.return_value.execute.return_value = {
        'calendars': {'sam@x.com': {'errors': [{'reason': "notFound"}]}}}
    assert(run(commands, "freebusy", "sam@x.com") == 0)
    assert("Cannot check sam@x.com: notFound" in capsys.readouterr().out)


def test_calendars_pages(run, access, capsys):
    pages = [{'items': [{'id': "primary", 'summary': "Me", 'primary': True, 'accessRole': "owner"}],
              'nextPageToken': "p2"},
             {'items': [{'id': "team", 'summary': "Team"}]}]
    access.calendar.calendarList.return_value.list.return_value.execute.side_effect = pages
    assert(run(commands, "calendars") == 0)
    out = capsys.readouterr().out
    assert("* Me (primary) [owner]" in out)
    assert("* Team" in out)
    assert(access.calendar.calendarList.return_value.list.call_args.kwargs == {'pageToken': "p2"})


def test_delete_primary_calendar_fails(run, access, capsys):
    assert(run(commands, "delete-calendar", "primary") == 1)
    assert("Cannot delete primary calendar" in capsys.readouterr().err)
    access.calendar.calendars.return_value.delete.assert_not_called()


def test_share(run, access, capsys):
    assert(run(commands, "share", "--email", "a@x.com", "--role", "writer") == 0)
    access.calendar.acl.return_value.insert.assert_called_with(
        calendarId="primary", body={'role': "writer", 'scope': {'type': "user", 'value': "a@x.com"}})
    assert(run(commands, "unshare", "team", "--email", "a@x.com") == 0)
    access.calendar.acl.return_value.delete.assert_called_with(calendarId="team", ruleId="user:a@x.com")


def test_update_instance(run, access, capsys):
    events(access).instances.return_value.execute.return_value = {'items': [
        {'id': "r1_a", 'summary': "Weekly", 'start': {'dateTime': "2024-01-15T09:00:00+07:00"},
         'end': {'dateTime': "2024-01-15T10:00:00+07:00"}},
        {'id': "r1_b", 'summary': "Weekly", 'start': {'dateTime': "2024-01-22T09:00:00+07:00"},
         'end': {'dateTime': "2024-01-22T10:00:00+07:00"}}]}
    events(access).update.return_value.execute.return_value = {
        'summary': "Moved", 'start': {'dateTime': "2024-01-22T09:00:00+07:00"}}
    assert(run(commands, "update-instance", "r1", "--instance", "2024-01-22", "--title", "Moved") == 0)
    kwargs = events(access).update.call_args.kwargs
    assert(kwargs['eventId'] == "r1_b")
    assert(kwargs['body']['summary'] == "Moved")
    assert("Instance updated: Moved" in capsys.readouterr().out)


def test_update_instance_missing(run, access, capsys):
    events(access).instances.return_value.execute.return_value = {'items': []}
    assert(run(commands, "update-instance", "r1", "--instance", "2024-03-01") == 0)
    assert("No instance found on 2024-03-01" in capsys.readouterr().out)

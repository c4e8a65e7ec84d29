import base64
import email

import pytest

from gwscli.commands.gmail import commands


def messages(access):
    return access.gmail.users.return_value.messages.return_value


def sent_message(call) -> email.message.Message:
    raw = call.kwargs['body']['raw'] if 'raw' in call.kwargs['body'] else call.kwargs['body']['message']['raw']
    return email.message_from_bytes(base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)))


def body_of(msg) -> str:
    return msg.get_payload(decode=True).decode("utf-8")


def b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def test_send(run, access, capsys):
    messages(access).send.return_value.execute.return_value = {'id': "m1"}
    assert(run(commands, "send", "--to", "a@x.com", "--subject", "Hi", "--body", "Hello there", "--cc", "c@x.com") == 0)
    msg = sent_message(messages(access).send.call_args)
    assert(msg["To"] == "a@x.com")
    assert(msg["Cc"] == "c@x.com")
    assert(msg["Subject"] == "Hi")
    assert(msg["From"] is None)
    assert(body_of(msg) == "Hello there")
    assert(messages(access).send.call_args.kwargs['userId'] == "me")
    out = capsys.readouterr().out
    assert("Email sent successfully!" in out)
    assert("Message ID: m1" in out)


def test_send_with_signature_and_name(run, access, gmail_config):
    gmail_config(signature="-- Sam", fromName="Sam Smith")
    access.gmail.users.return_value.getProfile.return_value.execute.return_value = {'emailAddress': "sam@x.com"}
    messages(access).send.return_value.execute.return_value = {'id': "m1"}
    assert(run(commands, "send", "--to", "a@x.com", "--body", "Hello") == 0)
    msg = sent_message(messages(access).send.call_args)
    assert(msg["From"] == "Sam Smith <sam@x.com>")
    assert(msg["Subject"] == "(No subject)")
    assert(body_of(msg) == "Hello\n\n-- Sam")


def test_send_blocked_by_placeholder(run, access, capsys):
    assert(run(commands, "send", "--to", "a@x.com", "--subject", "Hi", "--body", "Dear [Your Name]") == 1)
    err = capsys.readouterr().err
    assert("unfilled placeholders: [Your Name]" in err)
    messages(access).send.assert_not_called()


def test_send_forced(run, access):
    messages(access).send.return_value.execute.return_value = {'id': "m1"}
    assert(run(commands, "send", "--to", "a@x.com", "--body", "Dear [Your Name]", "--force") == 0)
    messages(access).send.assert_called_once()


def test_send_warn_only(run, access, gmail_config):
    gmail_config(blockOnPlaceholders=False)
    messages(access).send.return_value.execute.return_value = {'id': "m1"}
    assert(run(commands, "send", "--to", "a@x.com", "--body", "Hi {{name}}") == 0)
    messages(access).send.assert_called_once()


def test_send_requires_to(run, access, capsys):
    assert(run(commands, "send", "--body", "x") == 0)
    assert("Usage: gmail send" in capsys.readouterr().out)


def test_draft(run, access, capsys):
    drafts = access.gmail.users.return_value.drafts.return_value
    drafts.create.return_value.execute.return_value = {'id': "d1"}
    assert(run(commands, "draft", "--to", "a@x.com", "--subject", "Later", "--body", "Draft body") == 0)
    msg = sent_message(drafts.create.call_args)
    assert(msg["Subject"] == "Later")
    assert("Draft ID: d1" in capsys.readouterr().out)


def test_reply(run, access, capsys):
    messages(access).get.return_value.execute.return_value = {
        'threadId': "t1",
        'payload': {'headers': [{'name': "From", 'value': "Jane <jane@x.com>"},
                                {'name': "Subject", 'value': "Lunch"},
                                {'name': "Message-ID", 'value': "<abc@mail>"}]}}
    assert(run(commands, "reply", "m1", "--body", "Sounds good") == 0)
    call = messages(access).send.call_args
    assert(call.kwargs['body']['threadId'] == "t1")
    msg = sent_message(call)
    assert(msg["To"] == "jane@x.com")
    assert(msg["Subject"] == "Re: Lunch")
    assert(msg["In-Reply-To"] == "<abc@mail>")
    assert(msg["References"] == "<abc@mail>")
    assert("Reply sent!" in capsys.readouterr().out)


def test_forward(run, access, capsys):
    messages(access).get.return_value.execute.return_value = {
        'payload': {'headers': [{'name': "From", 'value': "Jane <jane@x.com>"},
                                {'name': "Subject", 'value': "Re: Plans"},
                                {'name': "Date", 'value': "Mon, 15 Jan 2024 09:00:00 +0700"}],
                    'body': {'data': b64("original")}}}
    assert(run(commands, "forward", "m1", "--to", "b@x.com", "--note", "FYI") == 0)
    msg = sent_message(messages(access).send.call_args)
    assert(msg["Subject"] == "Fwd: Re: Plans")
    text = body_of(msg)
    assert(text.startswith("FYI"))
    assert("---------- Forwarded message ---------" in text)
    assert(text.rstrip().endswith("original"))


def test_forward_guard_ignores_original(run, access):
    messages(access).get.return_value.execute.return_value = {
        'payload': {'headers': [{'name': "Subject", 'value': "Template"}],
                    'body': {'data': b64("Hello [Your Name]")}}}
    assert(run(commands, "forward", "m1", "--to", "b@x.com") == 0)
    messages(access).send.assert_called_once()


def test_forward_guard_ignores_original_subject(run, access):
    messages(access).get.return_value.execute.return_value = {
        'payload': {'headers': [{'name': "Subject", 'value': "Welcome {{first_name}}"}],
                    'body': {'data': b64("original")}}}
    assert(run(commands, "forward", "m1", "--to", "b@x.com") == 0)
    assert(run(commands, "forward", "m1", "--to", "b@x.com", "--note", "FYI, clean note") == 0)
    assert(messages(access).send.call_count == 2)
    assert(sent_message(messages(access).send.call_args)["Subject"] == "Fwd: Welcome {{first_name}}")


def test_forward_note_still_checked(run, access, capsys):
    messages(access).get.return_value.execute.return_value = {
        'payload': {'headers': [{'name': "Subject", 'value': "Plans"}], 'body': {'data': b64("original")}}}
    assert(run(commands, "forward", "m1", "--to", "b@x.com", "--note", "Hi [Your Name]") == 1)
    assert("[Your Name]" in capsys.readouterr().err)
    messages(access).send.assert_not_called()


def test_inbox_zero_limit_uses_default(run, access):
    messages(access).list.return_value.execute.return_value = {}
    assert(run(commands, "inbox", "--limit", "0") == 0)
    assert(messages(access).list.call_args.kwargs['maxResults'] == 10)


def test_inbox(run, access, capsys):
    messages(access).list.return_value.execute.return_value = {'messages': [{'id': "m1"}]}
    messages(access).get.return_value.execute.return_value = {
        'labelIds': ["UNREAD", "INBOX"],
        'payload': {'headers': [{'name': "From", 'value': "Jane Doe <jane@x.com>"},
                                {'name': "Subject", 'value': "Hello"},
                                {'name': "Date", 'value': "Mon, 15 Jan 2024 02:05:00 +0000"}]}}
    assert(run(commands, "inbox", "--limit", "5") == 0)
    kwargs = messages(access).list.call_args.kwargs
    assert(kwargs == {'userId': "me", 'maxResults': 5, 'q': "in:inbox"})
    out = capsys.readouterr().out
    assert("* Jan 15, 9:05 AM" in out)
    assert("  From: Jane Doe" in out)
    assert("  ID: m1" in out)


def test_unread_and_search(run, access, capsys):
    messages(access).list.return_value.execute.return_value = {}
    assert(run(commands, "unread") == 0)
    assert(messages(access).list.call_args.kwargs['q'] == "is:unread")
    assert("No messages found." in capsys.readouterr().out)
    assert(run(commands, "search", "from:jane") == 0)
    assert(messages(access).list.call_args.kwargs == {'userId': "me", 'maxResults': 20, 'q': "from:jane"})


def test_read_marks_read(run, access, capsys):
    messages(access).get.return_value.execute.return_value = {
        'payload': {'headers': [{'name': "From", 'value': "Jane"}, {'name': "Subject", 'value': "S"}],
                    'parts': [{'mimeType': "text/plain", 'body': {'data': b64("body text")}},
                              {'filename': "a.pdf", 'body': {'attachmentId': "x", 'size': 2048}}]}}
    assert(run(commands, "read", "m1") == 0)
    out = capsys.readouterr().out
    assert("From: Jane" in out)
    assert("body text" in out)
    assert("  * a.pdf (2 KB)" in out)
    messages(access).modify.assert_called_with(userId="me", id="m1", body={'removeLabelIds': ["UNREAD"]})


def test_read_no_mark(run, access):
    messages(access).get.return_value.execute.return_value = {'payload': {}}
    assert(run(commands, "read", "m1", "--no-mark") == 0)
    messages(access).modify.assert_not_called()


def test_label(run, access, capsys):
    assert(run(commands, "label", "m1", "--add", "Work,Urgent", "--remove", "INBOX") == 0)
    messages(access).modify.assert_called_with(userId="me", id="m1",
                                               body={'addLabelIds': ["Work", "Urgent"], 'removeLabelIds': ["INBOX"]})
    assert(run(commands, "label", "m1") == 0)
    assert("Usage: gmail label" in capsys.readouterr().out)


@pytest.mark.parametrize("command, body", [
    ("star", {'addLabelIds': ["STARRED"]}),
    ("unstar", {'removeLabelIds': ["STARRED"]}),
    ("archive", {'removeLabelIds': ["INBOX"]}),
    ("mark-read", {'removeLabelIds': ["UNREAD"]}),
    ("mark-unread", {'addLabelIds': ["UNREAD"]}),
])
def test_relabel(run, access, command, body):
    assert(run(commands, command, "m9") == 0)
    messages(access).modify.assert_called_with(userId="me", id="m9", body=body)


def test_delete_needs_confirm(run, access, capsys):
    assert(run(commands, "delete", "m1") == 0)
    assert("--confirm" in capsys.readouterr().out)
    messages(access).delete.assert_not_called()
    assert(run(commands, "delete", "m1", "--confirm") == 0)
    messages(access).delete.assert_called_with(userId="me", id="m1")


def test_labels(run, access, capsys):
    access.gmail.users.return_value.labels.return_value.list.return_value.execute.return_value = {'labels': [
        {'id': "INBOX", 'name': "INBOX", 'type': "system"},
        {'id': "Label_1", 'name': "Work", 'type': "user"}]}
    assert(run(commands, "labels") == 0)
    out = capsys.readouterr().out
    assert("  * INBOX" in out)
    assert("  * Work (ID: Label_1)" in out)

"""
gmail: read, search, send and organise mail.

Everything outgoing (send, reply, forward, draft) goes through the
placeholder guard and gets the configured signature.  --force or
--no-check sends despite a block.
"""
from dataclasses import dataclass, field
from typing import List, Self

from loguru import logger

from ..cli import CommandSet, Context, UsageError, require
from ..flags import Flags
from ..guard import apply_signature, enforce
from ..mail import (MAX_BODY_CHARS, build_raw_message, display_name, extract_body, find_attachments,
                    format_date, forward_body, get_header, prefixed, reply_address, sender_address)

HELP = """
Gmail CLI

INBOX & MESSAGES:
  gmail inbox [--limit 10]              List inbox messages
  gmail unread                          List unread messages
  gmail starred                         List starred messages
  gmail sent                            List sent messages
  gmail drafts                          List drafts

  gmail read <messageId> [--no-mark]    Read a message
  gmail search 'query'                  Search messages

COMPOSE & REPLY:
  gmail send --to 'email' --subject 'subj' --body 'message'
    [--cc 'email'] [--bcc 'email']

  gmail reply <messageId> --body 'reply message'
  gmail forward <messageId> --to 'email' [--note 'your note']
  gmail draft --to 'email' --subject 'subj' --body 'message'

  Outgoing mail is checked for unfilled placeholders ([Your Name],
  {{name}} and the like).  Add --force to send anyway.

ORGANIZE:
  gmail star <messageId>                Star a message
  gmail unstar <messageId>              Remove star
  gmail archive <messageId>             Archive (remove from inbox)
  gmail trash <messageId>               Move to trash
  gmail delete <messageId> --confirm    Permanently delete

  gmail mark-read <messageId>           Mark as read
  gmail mark-unread <messageId>         Mark as unread

  gmail labels                          List all labels
  gmail label <messageId> --add 'Label1' --remove 'Label2'

OTHER:
  gmail profile                         Show account info

SEARCH OPERATORS:
  from:sender@email.com                 From specific sender
  to:recipient@email.com                To specific recipient
  subject:keyword                       Subject contains
  has:attachment                        Has attachments
  is:unread, is:starred                 By status
  after:2026/01/01 before:2026/02/01    Date range
  label:LabelName                       By label
  filename:pdf                          Attachment type
"""

USER_ID = "me"
NO_SUBJECT = "(No subject)"

commands = CommandSet("gmail", HELP)


@dataclass
class ListOptions():
    limit: int = field(default=10)
    query: str = field(default="in:inbox")

    @classmethod
    def from_flags(cls, flags: Flags, query: str|None = None) -> Self:
        return cls(limit=flags.int_value("limit", "n") or 10,
                   query=query or flags.text("query", "q", default="in:inbox"))


@dataclass
class ComposeOptions():
    to: str
    subject: str = field(default=NO_SUBJECT)
    body: str = field(default="")
    cc: str|None = field(default=None)
    bcc: str|None = field(default=None)
    force: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags, usage: str) -> Self:
        return cls(to=require(flags.text("to") or flags.positional(0), usage),
                   subject=flags.text("subject", "s", default=NO_SUBJECT),
                   body=flags.text("body", "message", "m") or flags.positional(1) or "",
                   cc=flags.text("cc"),
                   bcc=flags.text("bcc"),
                   force=flags.flag("force", "no-check"))


@dataclass
class ReplyOptions():
    message_id: str
    body: str
    force: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = "Usage: gmail reply <messageId> --body 'Your reply message'"
        return cls(message_id=require(flags.positional(0), usage),
                   body=require(flags.text("body", "message", "m") or flags.positional(1), usage),
                   force=flags.flag("force", "no-check"))


@dataclass
class ForwardOptions():
    message_id: str
    to: str
    note: str = field(default="")
    force: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = "Usage: gmail forward <messageId> --to 'email@example.com' [--note 'Your note']"
        return cls(message_id=require(flags.positional(0), usage),
                   to=require(flags.text("to") or flags.positional(1), usage),
                   note=flags.text("note", "body", default=""),
                   force=flags.flag("force", "no-check"))


@dataclass
class LabelOptions():
    message_id: str
    add: List[str] = field(default_factory=list)
    remove: List[str] = field(default_factory=list)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = "Usage: gmail label <messageId> --add 'Label1,Label2' --remove 'Label3'"
        opts = cls(message_id=require(flags.positional(0), usage),
                   add=flags.text("add").split(",") if flags.text("add") else [],
                   remove=flags.text("remove").split(",") if flags.text("remove") else [])
        if not opts.add and not opts.remove:
            raise UsageError(usage)
        return opts


def _messages(ctx: Context):
    return ctx.gmail().users().messages()


def _modify(ctx: Context, message_id: str, add: List[str]|None = None, remove: List[str]|None = None) -> dict:
    body = {}
    if add is not None:
        body['addLabelIds'] = add
    if remove is not None:
        body['removeLabelIds'] = remove
    return _messages(ctx).modify(userId=USER_ID, id=message_id, body=body).execute()


def _sender(ctx: Context) -> str|None:
    """The From header when a display name is configured, None to let Gmail fill it in"""
    name = ctx.gmail_config.from_name
    if not name:
        return None
    email = ctx.gmail().users().getProfile(userId=USER_ID).execute().get('emailAddress', "")
    return sender_address(name, email)


def _outgoing(ctx: Context, subject: str|None, body: str, force: bool) -> str:
    """Guard check then signature, the body that actually goes out"""
    config = ctx.gmail_config
    result = enforce(config, subject, body, force)
    if result.overridden:
        logger.info(f"sending despite placeholders: {', '.join(result.placeholders)}")
    return apply_signature(body, config.signature)


def _list(ctx: Context, opts: ListOptions) -> None:
    messages = _messages(ctx).list(userId=USER_ID, maxResults=opts.limit, q=opts.query).execute().get('messages', [])
    if not messages:
        print("No messages found.")
        return
    print(f"\nInbox ({len(messages)} messages):\n")
    for m in messages:
        detail = _messages(ctx).get(userId=USER_ID, id=m['id'], format="metadata",
                                    metadataHeaders=["From", "Subject", "Date"]).execute()
        headers = detail.get('payload', {}).get('headers', [])
        unread = "*" if "UNREAD" in (detail.get('labelIds') or []) else " "
        print(f"{unread} {format_date(get_header(headers, 'Date'), ctx.tz)}")
        print(f"  From: {display_name(get_header(headers, 'From'))[:40]}")
        print(f"  {(get_header(headers, 'Subject') or NO_SUBJECT)[:60]}")
        print(f"  ID: {m['id']}\n")


@commands.command("inbox", "list", "ls", "mail")
def inbox(ctx: Context, flags: Flags) -> None:
    _list(ctx, ListOptions.from_flags(flags))


@commands.command("unread")
def unread(ctx: Context, flags: Flags) -> None:
    _list(ctx, ListOptions.from_flags(flags, query=f"is:unread {flags.text('query', 'q', default='')}".strip()))


@commands.command("starred")
def starred(ctx: Context, flags: Flags) -> None:
    _list(ctx, ListOptions.from_flags(flags, query="is:starred"))


@commands.command("sent")
def sent(ctx: Context, flags: Flags) -> None:
    _list(ctx, ListOptions.from_flags(flags, query="in:sent"))


@commands.command("search")
def search(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gmail search 'search terms'\n"
             "Examples:\n"
             "  gmail search 'from:someone@email.com'\n"
             "  gmail search 'subject:invoice'\n"
             "  gmail search 'has:attachment'\n"
             "  gmail search 'after:2026/01/01 before:2026/02/01'")
    query = require(flags.positional(0) or flags.text("query", "q"), usage)
    _list(ctx, ListOptions(limit=flags.int_value("limit", default=20), query=query))


@commands.command("drafts")
def drafts(ctx: Context, flags: Flags) -> None:
    api = ctx.gmail().users().drafts()
    items = api.list(userId=USER_ID, maxResults=flags.int_value("limit", default=10)).execute().get('drafts', [])
    if not items:
        print("No drafts found.")
        return
    print(f"\nDrafts ({len(items)}):\n")
    for d in items:
        detail = api.get(userId=USER_ID, id=d['id'], format="metadata").execute()
        headers = detail.get('message', {}).get('payload', {}).get('headers', [])
        print(f"* {(get_header(headers, 'Subject') or NO_SUBJECT)[:50]}")
        print(f"  To: {(get_header(headers, 'To') or '(No recipient)')[:40]}")
        print(f"  ID: {d['id']}\n")


@commands.command("read")
def read(ctx: Context, flags: Flags) -> None:
    message_id = require(flags.positional(0), "Usage: gmail read <messageId>")
    msg = _messages(ctx).get(userId=USER_ID, id=message_id, format="full").execute()
    payload = msg.get('payload', {})
    headers = payload.get('headers', [])
    print("\n" + "=" * 60)
    print("From: " + get_header(headers, "From"))
    print("To: " + get_header(headers, "To"))
    cc = get_header(headers, "Cc")
    if cc:
        print("Cc: " + cc)
    print("Date: " + get_header(headers, "Date"))
    print("Subject: " + get_header(headers, "Subject"))
    print("=" * 60 + "\n")

    body = extract_body(payload)
    print(body[:MAX_BODY_CHARS])
    if len(body) > MAX_BODY_CHARS:
        print(f"\n... (truncated, {len(body)} chars total)")

    attachments = find_attachments(payload.get('parts'))
    if attachments:
        print("\nAttachments:")
        for a in attachments:
            print(f"  * {a}")

    if not flags.flag("no-mark"):
        _modify(ctx, message_id, remove=["UNREAD"])


@commands.command("send", "compose", "new")
def send(ctx: Context, flags: Flags) -> None:
    opts = ComposeOptions.from_flags(flags, "Usage: gmail send --to 'email@example.com' --subject 'Subject' --body 'Message'")
    body = _outgoing(ctx, opts.subject, opts.body, opts.force)
    raw = build_raw_message(opts.to, opts.subject, body, cc=opts.cc, bcc=opts.bcc, sender=_sender(ctx))
    response = _messages(ctx).send(userId=USER_ID, body={'raw': raw}).execute()
    print("\nEmail sent successfully!")
    print(f"  To: {opts.to}")
    print(f"  Subject: {opts.subject}")
    print(f"  Message ID: {response.get('id')}")


@commands.command("reply")
def reply(ctx: Context, flags: Flags) -> None:
    opts = ReplyOptions.from_flags(flags)
    original = _messages(ctx).get(userId=USER_ID, id=opts.message_id, format="metadata",
                                  metadataHeaders=["From", "To", "Subject", "Message-ID"]).execute()
    headers = original.get('payload', {}).get('headers', [])
    to = reply_address(get_header(headers, "From"))
    subject = prefixed(get_header(headers, "Subject"), "Re: ")
    body = _outgoing(ctx, subject, opts.body, opts.force)
    raw = build_raw_message(to, subject, body, sender=_sender(ctx),
                            in_reply_to=get_header(headers, "Message-ID") or None)
    _messages(ctx).send(userId=USER_ID, body={'raw': raw, 'threadId': original.get('threadId')}).execute()
    print("\nReply sent!")
    print(f"  To: {to}")
    print(f"  Subject: {subject}")


@commands.command("forward")
def forward(ctx: Context, flags: Flags) -> None:
    opts = ForwardOptions.from_flags(flags)
    original = _messages(ctx).get(userId=USER_ID, id=opts.message_id, format="full").execute()
    payload = original.get('payload', {})
    headers = payload.get('headers', [])
    subject = prefixed(get_header(headers, "Subject"), "Fwd: ")
    # the guard sees the note only, not the original subject or body
    note = _outgoing(ctx, None, opts.note, opts.force) if opts.note else ctx.gmail_config.signature
    body = forward_body(note, headers, extract_body(payload))
    raw = build_raw_message(opts.to, subject, body, sender=_sender(ctx))
    _messages(ctx).send(userId=USER_ID, body={'raw': raw}).execute()
    print("\nMessage forwarded!")
    print(f"  To: {opts.to}")
    print(f"  Subject: {subject}")


@commands.command("draft")
def draft(ctx: Context, flags: Flags) -> None:
    opts = ComposeOptions.from_flags(flags, "Usage: gmail draft --to 'email@example.com' --subject 'Subject' --body 'Message'")
    body = _outgoing(ctx, opts.subject, opts.body, opts.force)
    raw = build_raw_message(opts.to, opts.subject, body, cc=opts.cc, bcc=opts.bcc, sender=_sender(ctx))
    response = ctx.gmail().users().drafts().create(userId=USER_ID, body={'message': {'raw': raw}}).execute()
    print("\nDraft created!")
    print(f"  To: {opts.to}")
    print(f"  Subject: {opts.subject}")
    print(f"  Draft ID: {response.get('id')}")


@commands.command("labels")
def labels(ctx: Context, flags: Flags) -> None:
    items = ctx.gmail().users().labels().list(userId=USER_ID).execute().get('labels', [])
    print("\nLabels:\n")
    print("System Labels:")
    for label in items:
        if label.get('type') == "system":
            print(f"  * {label.get('name')}")
    user = [label for label in items if label.get('type') == "user"]
    if user:
        print("\nCustom Labels:")
        for label in user:
            print(f"  * {label.get('name')} (ID: {label.get('id')})")


@commands.command("label")
def label(ctx: Context, flags: Flags) -> None:
    opts = LabelOptions.from_flags(flags)
    _modify(ctx, opts.message_id, add=opts.add, remove=opts.remove)
    print(f"\nLabels updated for message {opts.message_id}")
    if opts.add:
        print("  Added: " + ", ".join(opts.add))
    if opts.remove:
        print("  Removed: " + ", ".join(opts.remove))


def _relabel(name: str, message: str, add: List[str]|None = None, remove: List[str]|None = None):
    """A handler that adds and/or removes fixed labels on one message"""
    def handler(ctx: Context, flags: Flags) -> None:
        message_id = require(flags.positional(0), f"Usage: gmail {name} <messageId>")
        _modify(ctx, message_id, add=add, remove=remove)
        print(f"\n{message}")
    handler.__name__ = name.replace("-", "_")
    return commands.command(name)(handler)


star = _relabel("star", "Message starred.", add=["STARRED"])
unstar = _relabel("unstar", "Message unstarred.", remove=["STARRED"])
archive = _relabel("archive", "Message archived.", remove=["INBOX"])
mark_read = _relabel("mark-read", "Message marked as read.", remove=["UNREAD"])
mark_unread = _relabel("mark-unread", "Message marked as unread.", add=["UNREAD"])


@commands.command("trash")
def trash(ctx: Context, flags: Flags) -> None:
    message_id = require(flags.positional(0), "Usage: gmail trash <messageId>")
    _messages(ctx).trash(userId=USER_ID, id=message_id).execute()
    print("\nMessage moved to trash.")


@commands.command("delete")
def delete(ctx: Context, flags: Flags) -> None:
    message_id = require(flags.positional(0),
                         "Usage: gmail delete <messageId> --confirm\nWarning: This permanently deletes the message!")
    if not flags.flag("confirm"):
        print("Add --confirm to permanently delete this message.")
        return
    _messages(ctx).delete(userId=USER_ID, id=message_id).execute()
    print("\nMessage permanently deleted.")


@commands.command("profile")
def profile(ctx: Context, flags: Flags) -> None:
    response = ctx.gmail().users().getProfile(userId=USER_ID).execute()
    print("\nGmail Profile:")
    print(f"  Email: {response.get('emailAddress')}")
    print(f"  Total Messages: {response.get('messagesTotal')}")
    print(f"  Threads: {response.get('threadsTotal')}")


def main() -> None:
    commands.main()

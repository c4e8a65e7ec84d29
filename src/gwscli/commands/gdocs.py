"""
gdocs: Google Docs from the command line.

Edits that add content at the end (append, heading, bullets, table) read
the document first to find the end of the body, then send one batchUpdate.
"""
from dataclasses import dataclass, field
from typing import Self
import json

from ..cli import CommandSet, Context, require
from ..docs import (EXPORT_FORMATS, TextStyle, bullet_requests, document_url, end_index, extract_text,
                    heading_requests, insert_text, replace_all)
from ..drive import (DOCUMENT_MIME, copy_file, delete_file, export_file, extract_id, format_date, format_datetime,
                     list_files, quote, share_with_user)
from ..flags import Flags

HELP = """
Google Docs CLI

DOCUMENTS:
  gdocs list [--limit 20]               List your documents
  gdocs create "Title"                  Create new document
    [--content "Initial text"]          With initial content
  gdocs info <id>                       Get document details
  gdocs read <id>                       Read document content
  gdocs search "query"                  Search documents

EDITING:
  gdocs append <id> --text "Text"       Append text to end
  gdocs insert <id> --text "Text" --index 1   Insert at position
  gdocs replace <id> --find "old" --replace "new"
  gdocs heading <id> --text "Title" --level 1
  gdocs bullets <id> --items "A,B,C" [--numbered]
  gdocs table <id> --rows 3 --cols 3

FORMATTING:
  gdocs format <id> --start 1 --end 10 [options]
    --bold, --italic, --underline, --strike
    --size 14, --color red, --bg yellow
    --font "Arial"

EXPORT:
  gdocs export <id> --format pdf --output file.pdf
    Formats: pdf, docx, txt, html, rtf, odt

MANAGE:
  gdocs copy <id> --title "Copy Name"
  gdocs delete <id> --confirm
  gdocs share <id> --email "user@email.com" --role writer
"""

DEFAULT_READ_LIMIT = 5000

commands = CommandSet("gdocs", HELP)


def _document_id(flags: Flags) -> str|None:
    return extract_id(flags.positional(0), "document")


def _batch_update(ctx: Context, document_id: str, requests: list) -> dict:
    return ctx.docs().documents().batchUpdate(documentId=document_id, body={'requests': requests}).execute()


def _end_of(ctx: Context, document_id: str) -> int:
    return end_index(ctx.docs().documents().get(documentId=document_id).execute())


@dataclass
class FormatOptions():
    document_id: str
    start: int
    end: int
    style: TextStyle = field(default_factory=TextStyle)

    USAGE = ("Usage: gdocs format <documentId> --start 1 --end 10 [options]\n"
             "Options:\n"
             "  --bold          Make text bold\n"
             "  --italic        Make text italic\n"
             "  --underline     Underline text\n"
             "  --strike        Strikethrough\n"
             "  --size 14       Font size (pt)\n"
             "  --color red     Text color\n"
             "  --bg yellow     Background color\n"
             "  --font 'Arial'  Font family")

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        style = TextStyle(bold=True if flags.flag("bold") else None,
                          italic=True if flags.flag("italic") else None,
                          underline=True if flags.flag("underline") else None,
                          strikethrough=True if flags.flag("strike") else None,
                          fontSize=flags.int_value("size"),
                          fontFamily=flags.text("font"),
                          foregroundColor=flags.text("color"),
                          backgroundColor=flags.text("bg", "background"))
        return cls(document_id=require(_document_id(flags), cls.USAGE),
                   start=require(flags.int_value("start"), cls.USAGE),
                   end=require(flags.int_value("end"), cls.USAGE),
                   style=style)


@dataclass
class ExportOptions():
    document_id: str
    format: str = field(default="pdf")
    output: str|None = field(default=None)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        fmt = flags.text("format", "as", default="pdf").lower()
        return cls(document_id=require(_document_id(flags),
                                       "Usage: gdocs export <documentId> --format pdf|docx|txt|html --output file.pdf"),
                   format=fmt,
                   output=flags.text("output", "o", default=f"document.{fmt}"))


@commands.command("list", "ls")
def list_documents(ctx: Context, flags: Flags) -> None:
    files = list_files(ctx.drive(), f"mimeType='{DOCUMENT_MIME}'", limit=flags.int_value("limit", default=20) or 20)
    if not files:
        print("No documents found.")
        return
    print("\nYour Documents:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Modified: {format_date(f.get('modifiedTime'), ctx.tz)}")
        print(f"  Link: {f.get('webViewLink')}\n")


@commands.command("create", "new")
def create(ctx: Context, flags: Flags) -> None:
    title = flags.positional(0) or flags.text("title", default="Untitled Document")
    doc = ctx.docs().documents().create(body={'title': title}).execute()
    document_id = doc.get('documentId')
    print(f"\nDocument created: {doc.get('title')}")
    print(f"  ID: {document_id}")
    print(f"  Link: {document_url(document_id)}")
    content = flags.text("content", "body", "text")
    if content:
        _batch_update(ctx, document_id, [insert_text(content, 1)])
        print("  Content added.")


@commands.command("info")
def info(ctx: Context, flags: Flags) -> None:
    document_id = require(_document_id(flags), "Usage: gdocs info <documentId>")
    doc = ctx.docs().documents().get(documentId=document_id).execute()
    print(f"\n{doc.get('title')}")
    print(f"  ID: {doc.get('documentId')}")
    print(f"  Link: {document_url(doc.get('documentId'))}")
    f = ctx.drive().files().get(fileId=document_id, fields="createdTime,modifiedTime,owners,size").execute()
    print(f"  Created: {format_datetime(f.get('createdTime'), ctx.tz)}")
    print(f"  Modified: {format_datetime(f.get('modifiedTime'), ctx.tz)}")
    if f.get('owners'):
        print("  Owner: " + ", ".join(o.get('emailAddress', '') for o in f['owners']))


@commands.command("read", "get", "view")
def read(ctx: Context, flags: Flags) -> None:
    document_id = require(_document_id(flags), "Usage: gdocs read <documentId>")
    doc = ctx.docs().documents().get(documentId=document_id).execute()
    print("\n" + "=" * 60)
    print(doc.get('title'))
    print("=" * 60 + "\n")
    if flags.flag("raw"):
        print(json.dumps(doc.get('body'), indent=2))
        return
    text = extract_text(doc.get('body'))
    limit = flags.int_value("limit", default=DEFAULT_READ_LIMIT) or DEFAULT_READ_LIMIT
    print(text[:limit])
    if len(text) > limit:
        print(f"\n... (truncated, {len(text)} chars total)")


@commands.command("append", "add")
def append(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs append <documentId> --text 'Your text here'"
    document_id = require(_document_id(flags), usage)
    text = require(flags.text("text", "content") or flags.positional(1), usage)
    _batch_update(ctx, document_id, [insert_text("\n" + text, _end_of(ctx, document_id))])
    print("\nText appended to document.")


@commands.command("insert")
def insert(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs insert <documentId> --text 'Text' --index 1"
    document_id = require(_document_id(flags), usage)
    text = require(flags.text("text", "content") or flags.positional(1), usage)
    index = flags.int_value("index", "at") or 1
    _batch_update(ctx, document_id, [insert_text(text, index)])
    print(f"\nText inserted at index {index}")


@commands.command("replace")
def replace(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs replace <documentId> --find 'old text' --replace 'new text'"
    document_id = require(_document_id(flags), usage)
    find = require(flags.text("find") or flags.positional(1), usage)
    replacement = flags.text("replace", "with") or flags.positional(2) or ""
    response = _batch_update(ctx, document_id, [replace_all(find, replacement, match_case=flags.flag("case"))])
    replies = response.get('replies') or [{}]
    print(f"\nReplaced {replies[0].get('replaceAllText', {}).get('occurrencesChanged', 0)} occurrence(s).")


@commands.command("heading")
def heading(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs heading <documentId> --text 'Heading' --level 1"
    document_id = require(_document_id(flags), usage)
    text = require(flags.text("text") or flags.positional(1), usage)
    level = flags.int_value("level") or 1
    _batch_update(ctx, document_id, heading_requests(text, _end_of(ctx, document_id), level))
    print(f"\nHeading added (H{level})")


@commands.command("bullets")
def bullets(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs bullets <documentId> --items 'Item 1,Item 2,Item 3'"
    document_id = require(_document_id(flags), usage)
    items = [i.strip() for i in require(flags.text("items") or flags.positional(1), usage).split(",")]
    _batch_update(ctx, document_id, bullet_requests(items, _end_of(ctx, document_id), numbered=flags.flag("numbered")))
    print(f"\nBullet list added ({len(items)} items)")


@commands.command("table")
def table(ctx: Context, flags: Flags) -> None:
    document_id = require(_document_id(flags), "Usage: gdocs table <documentId> --rows 3 --cols 3")
    rows = flags.int_value("rows") or 3
    cols = flags.int_value("cols", "columns") or 3
    request = {'insertTable': {'location': {'index': _end_of(ctx, document_id)}, 'rows': rows, 'columns': cols}}
    _batch_update(ctx, document_id, [request])
    print(f"\nTable added ({rows}x{cols})")


@commands.command("format")
def format_text(ctx: Context, flags: Flags) -> None:
    opts = FormatOptions.from_flags(flags)
    _batch_update(ctx, opts.document_id, [opts.style.to_request(opts.start, opts.end)])
    print(f"\nFormatting applied to range {opts.start}-{opts.end}")


@commands.command("export")
def export(ctx: Context, flags: Flags) -> None:
    opts = ExportOptions.from_flags(flags)
    mime_type = EXPORT_FORMATS.get(opts.format)
    if mime_type is None:
        print("Supported formats: " + ", ".join(EXPORT_FORMATS))
        return
    p = export_file(ctx.drive(), opts.document_id, mime_type, opts.output)
    print(f"\nExported to: {p}")


@commands.command("copy")
def copy(ctx: Context, flags: Flags) -> None:
    document_id = require(_document_id(flags), "Usage: gdocs copy <documentId> --title 'New Document Name'")
    f = copy_file(ctx.drive(), document_id, name=flags.text("title", "name") or flags.positional(1))
    print("\nDocument copied!")
    print(f"  New ID: {f.get('id')}")
    print(f"  Link: {document_url(f.get('id'))}")


@commands.command("delete")
def delete(ctx: Context, flags: Flags) -> None:
    document_id = require(_document_id(flags), "Usage: gdocs delete <documentId> --confirm")
    if not flags.flag("confirm"):
        print("Add --confirm to delete this document.")
        return
    delete_file(ctx.drive(), document_id)
    print("\nDocument deleted.")


@commands.command("share")
def share(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdocs share <documentId> --email 'user@example.com' --role reader|writer|commenter"
    document_id = require(_document_id(flags), usage)
    email = require(flags.text("email") or flags.positional(1), usage)
    role = flags.text("role", default="reader")
    share_with_user(ctx.drive(), document_id, email, role, notify=flags.flag("notify"))
    print(f"\nShared with {email} as {role}")


@commands.command("search", "find")
def search(ctx: Context, flags: Flags) -> None:
    query = require(flags.positional(0) or flags.text("query", "q"), "Usage: gdocs search 'search terms'")
    files = list_files(ctx.drive(), f"mimeType='{DOCUMENT_MIME}' and fullText contains '{quote(query)}'",
                       limit=flags.int_value("limit", default=10) or 10)
    if not files:
        print(f"No documents found matching: {query}")
        return
    print("\nSearch Results:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Link: {f.get('webViewLink')}\n")


def main() -> None:
    commands.main()

"""
Gmail message helpers: headers, bodies, attachments and building the
base64url 'raw' payload the send and draft calls take.
"""
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.utils import formataddr, parseaddr, parsedate_to_datetime
from zoneinfo import ZoneInfo
import base64
import re

MAX_BODY_CHARS = 3000

_style_re = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_script_re = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_tag_re = re.compile(r"<[^>]+>")
_whitespace_re = re.compile(r"\s+")


def encode_base64url(data: str|bytes) -> str:
    """base64url without padding, as Gmail wants it"""
    b = data.encode("utf-8") if isinstance(data, str) else data
    return base64.urlsafe_b64encode(b).decode("ascii").rstrip("=")


def decode_base64url(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def get_header(headers: list[dict]|None, name: str) -> str:
    """Header value by case-insensitive name, empty string if absent"""
    n = name.lower()
    for h in headers or []:
        if str(h.get("name", "")).lower() == n:
            return h.get("value", "")
    return ""


def strip_html(html: str) -> str:
    s = _style_re.sub("", html)
    s = _script_re.sub("", s)
    s = _tag_re.sub(" ", s)
    return _whitespace_re.sub(" ", s).strip()


def extract_body(payload: dict|None) -> str:
    """
    Readable text of a message payload.  A body directly on the payload wins,
    then a text/plain part, then text/html with the markup stripped, then
    whatever the nested multiparts yield.
    """
    if not payload:
        return ""
    data = (payload.get("body") or {}).get("data")
    if data:
        return decode_base64url(data)
    parts = payload.get("parts") or []
    for p in parts:
        if p.get("mimeType") == "text/plain":
            d = (p.get("body") or {}).get("data")
            if d:
                return decode_base64url(d)
            break
    for p in parts:
        if p.get("mimeType") == "text/html":
            d = (p.get("body") or {}).get("data")
            if d:
                return strip_html(decode_base64url(d))
            break
    for p in parts:
        if p.get("parts"):
            nested = extract_body(p)
            if nested:
                return nested
    return ""


@dataclass
class Attachment():
    name: str
    id: str
    size: int

    def __str__(self) -> str:
        return f"{self.name} ({round(self.size / 1024)} KB)"


def find_attachments(parts: list[dict]|None) -> list[Attachment]:
    """Every named part with an attachment id, depth first"""
    found = []
    for p in parts or []:
        body = p.get("body") or {}
        if p.get("filename") and body.get("attachmentId"):
            found.append(Attachment(name=p["filename"], id=body["attachmentId"], size=int(body.get("size", 0))))
        if p.get("parts"):
            found.extend(find_attachments(p["parts"]))
    return found


def display_name(from_header: str) -> str:
    """'Jane Doe <jane@example.com>' -> 'Jane Doe'"""
    return _tag_re.sub("", from_header, count=1).strip()


def reply_address(from_header: str) -> str:
    """The bare address to reply to"""
    _, addr = parseaddr(from_header)
    return addr or from_header


def prefixed(subject: str, prefix: str) -> str:
    """'Re: ' or 'Fwd: ' once"""
    return subject if subject.startswith(prefix.strip()) else prefix + subject


def build_message(to: str, subject: str, body: str,
                  cc: str|None = None,
                  bcc: str|None = None,
                  sender: str|None = None,
                  in_reply_to: str|None = None) -> MIMEText:
    msg = MIMEText(body, "plain", "utf-8")
    if sender:
        msg["From"] = sender
    msg["To"] = to
    if cc:
        msg["Cc"] = cc
    if bcc:
        msg["Bcc"] = bcc
    msg["Subject"] = subject
    if in_reply_to:
        msg["In-Reply-To"] = in_reply_to
        msg["References"] = in_reply_to
    return msg


def build_raw_message(to: str, subject: str, body: str, **kwargs) -> str:
    """build_message() encoded for messages.send / drafts.create"""
    return encode_base64url(build_message(to, subject, body, **kwargs).as_bytes())


def forward_body(note: str, original_headers: list[dict], original_body: str) -> str:
    lines = []
    if note:
        lines += [note, ""]
    lines += ["---------- Forwarded message ---------",
              "From: " + get_header(original_headers, "From"),
              "Date: " + get_header(original_headers, "Date"),
              "Subject: " + get_header(original_headers, "Subject"),
              "",
              original_body]
    return "\r\n".join(lines)


def format_date(value: str, tz: ZoneInfo|None = None) -> str:
    """
    An RFC 2822 Date header as 'Jan 15, 9:05 AM' in tz.  Headers that
    don't parse are shown as they are.
    """
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return value
    if tz is not None and dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    hour = dt.hour % 12 or 12
    return f"{dt.strftime('%b')} {dt.day}, {hour}:{dt.minute:02d} {'PM' if dt.hour >= 12 else 'AM'}"


def sender_address(name: str|None, email: str) -> str:
    """'Jane Doe <jane@example.com>', just the address without a name"""
    return formataddr((name, email)) if name else email

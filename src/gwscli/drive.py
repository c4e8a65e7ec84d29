"""
Drive helpers shared by every tool: ids out of URLs, the display
formatting for files, and the list/share/export/copy calls that Docs,
Sheets and Slides all do through Drive.
"""
from pathlib import Path
from zoneinfo import ZoneInfo
import datetime
import io
import mimetypes
import re

from googleapiclient.discovery import Resource
from googleapiclient.http import MediaFileUpload, MediaIoBaseDownload
from loguru import logger

FOLDER_MIME = "application/vnd.google-apps.folder"
DOCUMENT_MIME = "application/vnd.google-apps.document"
SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"
PRESENTATION_MIME = "application/vnd.google-apps.presentation"
GOOGLE_APPS_PREFIX = "application/vnd.google-apps"

# --type filter for gdrive list, a trailing '/' means a prefix match
TYPE_FILTERS = {
    "folder": FOLDER_MIME,
    "doc": DOCUMENT_MIME,
    "sheet": SPREADSHEET_MIME,
    "slide": PRESENTATION_MIME,
    "pdf": "application/pdf",
    "image": "image/",
    "video": "video/",
    "audio": "audio/",
}

# what a Google native file becomes when downloaded: (mime, extension)
DOWNLOAD_EXPORTS = {
    DOCUMENT_MIME: ("application/pdf", ".pdf"),
    SPREADSHEET_MIME: ("text/csv", ".csv"),
    PRESENTATION_MIME: ("application/pdf", ".pdf"),
}

_id_patterns = {
    "file": [re.compile(r"/file/d/([a-zA-Z0-9-_]+)"),
             re.compile(r"/folders/([a-zA-Z0-9-_]+)"),
             re.compile(r"id=([a-zA-Z0-9-_]+)")],
    "document": [re.compile(r"/document/d/([a-zA-Z0-9-_]+)")],
    "spreadsheet": [re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")],
    "presentation": [re.compile(r"/presentation/d/([a-zA-Z0-9-_]+)")],
}


def extract_id(value: str|None, kind: str = "file") -> str|None:
    """
    The id out of a Docs/Sheets/Slides/Drive URL, or the input unchanged
    when it doesn't look like one (it's probably an id already).
    """
    if not value or value is True:
        return None
    for p in _id_patterns[kind]:
        m = p.search(value)
        if m:
            return m.group(1)
    return value


def format_size(size: int|str|None) -> str:
    """1536 -> '1.5 KB', nothing -> '-'"""
    if not size:
        return "-"
    n = float(size)
    if n == 0:
        return "-"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while n >= 1024 and i < len(units) - 1:
        n /= 1024
        i += 1
    return f"{n:.1f} {units[i]}"


def format_datetime(value: str|None, tz: ZoneInfo|None = None, with_year: bool = True) -> str:
    """RFC 3339 timestamp to 'Jan 15, 2024, 9:05 AM' in tz, '-' for nothing"""
    if not value:
        return "-"
    dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00") if value.endswith("Z") else value)
    if tz is not None and dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    hour = dt.hour % 12 or 12
    time = f"{hour}:{dt.minute:02d} {'PM' if dt.hour >= 12 else 'AM'}"
    day = f"{dt.strftime('%b')} {dt.day}"
    return f"{day}, {dt.year}, {time}" if with_year else f"{day}, {time}"


def format_date(value: str|None, tz: ZoneInfo|None = None) -> str:
    """Just the date part, 1/15/2024 style"""
    if not value:
        return "-"
    dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00") if value.endswith("Z") else value)
    if tz is not None and dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return f"{dt.month}/{dt.day}/{dt.year}"


def mime_icon(mime_type: str|None) -> str:
    if not mime_type:
        return "📄"
    for k, icon in [("folder", "📁"), ("document", "📝"), ("spreadsheet", "📊"),
                    ("presentation", "📽️"), ("image", "🖼️"), ("video", "🎬"),
                    ("audio", "🎵"), ("pdf", "📕"), ("zip", "📦"), ("archive", "📦")]:
        if k in mime_type:
            return icon
    return "📄"


def quote(value: str) -> str:
    """Escape a value for use inside '...' in a Drive query"""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def type_query(type_name: str) -> str:
    """The mimeType clause for a --type filter, empty if the type is unknown"""
    mime = TYPE_FILTERS.get(str(type_name).lower())
    if not mime:
        return ""
    if mime.endswith("/"):
        return f"mimeType contains '{mime}'"
    return f"mimeType = '{mime}'"


def list_files(service: Resource, q: str, limit: int = 20,
               fields: str = "files(id, name, mimeType, modifiedTime, webViewLink)",
               order_by: str = "modifiedTime desc") -> list[dict]:
    logger.debug(f"files.list q={q!r} limit={limit} orderBy={order_by}")
    response = service.files().list(q=q, pageSize=limit, fields=fields, orderBy=order_by).execute()
    return response.get('files', [])


def share_with_user(service: Resource, file_id: str, email: str, role: str = "reader", notify: bool = False) -> dict:
    return service.permissions().create(fileId=file_id,
                                        body={'type': "user", 'role': role, 'emailAddress': email},
                                        sendNotificationEmail=notify).execute()


def share_with_anyone(service: Resource, file_id: str, role: str = "reader") -> dict:
    return service.permissions().create(fileId=file_id, body={'type': "anyone", 'role': role}).execute()


def find_permission(permissions: list[dict], email: str|None = None, anyone: bool = False) -> dict|None:
    for p in permissions or []:
        if anyone and p.get('type') == "anyone":
            return p
        if email and not anyone and p.get('emailAddress') == email:
            return p
    return None


def export_file(service: Resource, file_id: str, mime_type: str, output: Path|str) -> Path:
    """
    Export a Google native file in another format and write it out.
    Drive caps exports at 10MB which is plenty for the documents these
    tools deal with.
    """
    content = service.files().export(fileId=file_id, mimeType=mime_type).execute()
    p = output if isinstance(output, Path) else Path(str(output))
    p.write_bytes(content if isinstance(content, bytes) else str(content).encode("utf-8"))
    logger.debug(f"exported {file_id} as {mime_type} -> {p}")
    return p


def download_file(service: Resource, file_id: str, output: Path|str) -> Path:
    """Binary download of an ordinary (non Google) file, in chunks"""
    p = output if isinstance(output, Path) else Path(str(output))
    request = service.files().get_media(fileId=file_id)
    with io.FileIO(str(p), 'wb') as fh:
        downloader = MediaIoBaseDownload(fh, request)
        done = False
        while not done:
            status, done = downloader.next_chunk()
            if status:
                logger.debug(f"download {file_id}: {int(status.progress() * 100)}%")
    return p


def upload_file(service: Resource, path: Path|str, name: str|None = None, folder_id: str = "root") -> dict:
    p = path if isinstance(path, Path) else Path(str(path))
    mime_type = mimetypes.guess_type(str(p))[0] or "application/octet-stream"
    media = MediaFileUpload(str(p), mimetype=mime_type, resumable=True)
    body = {'name': name or p.name, 'parents': [folder_id]}
    return service.files().create(body=body, media_body=media,
                                  fields="id, name, webViewLink, webContentLink").execute()


def copy_file(service: Resource, file_id: str, name: str|None = None, folder_id: str|None = None,
              fields: str = "id, name, webViewLink") -> dict:
    body = {}
    if name:
        body['name'] = name
    if folder_id:
        body['parents'] = [folder_id]
    return service.files().copy(fileId=file_id, body=body, fields=fields).execute()


def delete_file(service: Resource, file_id: str) -> None:
    """Permanent, no trash"""
    service.files().delete(fileId=file_id).execute()


def set_trashed(service: Resource, file_id: str, trashed: bool = True) -> dict:
    return service.files().update(fileId=file_id, body={'trashed': trashed}).execute()

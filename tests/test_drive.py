from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from gwscli.drive import (FOLDER_MIME, copy_file, export_file, extract_id, find_permission, format_date,
                          format_datetime, format_size, list_files, mime_icon, quote, share_with_anyone,
                          share_with_user, type_query, upload_file)

TZ = ZoneInfo("Asia/Bangkok")


@pytest.mark.parametrize("value, kind, expected", [
    ("https://docs.google.com/document/d/1AbC-d_E/edit", "document", "1AbC-d_E"),
    ("https://docs.google.com/spreadsheets/d/SHEET123/edit#gid=0", "spreadsheet", "SHEET123"),
    ("https://docs.google.com/presentation/d/PRES_9/edit", "presentation", "PRES_9"),
    ("https://drive.google.com/file/d/FILE1/view", "file", "FILE1"),
    ("https://drive.google.com/drive/folders/FOLDER2", "file", "FOLDER2"),
    ("https://drive.google.com/open?id=OPEN3", "file", "OPEN3"),
    ("plainId", "document", "plainId"),
])
def test_extract_id(value, kind, expected):
    assert(extract_id(value, kind) == expected)


def test_extract_id_nothing():
    assert(extract_id(None) is None)
    assert(extract_id("") is None)
    assert(extract_id(True) is None)


def test_format_size():
    assert(format_size(None) == "-")
    assert(format_size("0") == "-")
    assert(format_size(512) == "512.0 B")
    assert(format_size("1536") == "1.5 KB")
    assert(format_size(5 * 1024 * 1024) == "5.0 MB")


def test_format_dates():
    assert(format_datetime("2024-01-15T02:05:00.000Z", TZ) == "Jan 15, 2024, 9:05 AM")
    assert(format_datetime("2024-01-15T02:05:00.000Z", TZ, with_year=False) == "Jan 15, 9:05 AM")
    assert(format_datetime(None) == "-")
    assert(format_date("2024-01-14T20:00:00Z", TZ) == "1/15/2024")
    assert(format_date("") == "-")


def test_icons():
    assert(mime_icon(FOLDER_MIME) == "📁")
    assert(mime_icon("application/pdf") == "📕")
    assert(mime_icon("application/octet-stream") == "📄")
    assert(mime_icon(None) == "📄")


def test_queries():
    assert(quote("it's") == "it\\'s")
    assert(quote("a\\b") == "a\\\\b")
    assert(type_query("folder") == f"mimeType = '{FOLDER_MIME}'")
    assert(type_query("IMAGE") == "mimeType contains 'image/'")
    assert(type_query("bogus") == "")


def test_list_files():
    service = MagicMock()
    service.files.return_value.list.return_value.execute.return_value = {'files': [{'id': "1"}]}
    assert(list_files(service, "trashed = false", limit=5) == [{'id': "1"}])
    kwargs = service.files.return_value.list.call_args.kwargs
    assert(kwargs['q'] == "trashed = false")
    assert(kwargs['pageSize'] == 5)
    assert(kwargs['orderBy'] == "modifiedTime desc")


def test_share():
    service = MagicMock()
    share_with_user(service, "f1", "a@x.com", "writer")
    service.permissions.return_value.create.assert_called_with(
        fileId="f1", body={'type': "user", 'role': "writer", 'emailAddress': "a@x.com"}, sendNotificationEmail=False)
    share_with_anyone(service, "f1")
    service.permissions.return_value.create.assert_called_with(fileId="f1", body={'type': "anyone", 'role': "reader"})


def test_find_permission():
    perms = [{'id': "1", 'type': "user", 'emailAddress': "a@x.com"},
             {'id': "2", 'type': "anyone"}]
    assert(find_permission(perms, email="a@x.com")['id'] == "1")
    assert(find_permission(perms, anyone=True)['id'] == "2")
    assert(find_permission(perms, email="b@x.com") is None)
    assert(find_permission([], anyone=True) is None)


def test_export(tmp_path):
    service = MagicMock()
    service.files.return_value.export.return_value.execute.return_value = b"%PDF"
    p = export_file(service, "d1", "application/pdf", tmp_path / "out.pdf")
    assert(p.read_bytes() == b"%PDF")
    service.files.return_value.export.return_value.execute.return_value = "a,b"
    p = export_file(service, "s1", "text/csv", str(tmp_path / "out.csv"))
    assert(p.read_text() == "a,b")


def test_copy():
    service = MagicMock()
    copy_file(service, "f1", name="Copy", folder_id="folder")
    service.files.return_value.copy.assert_called_with(fileId="f1", body={'name': "Copy", 'parents': ["folder"]},
                                                       fields="id, name, webViewLink")
    copy_file(service, "f1")
    assert(service.files.return_value.copy.call_args.kwargs['body'] == {})


def test_upload(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("hello")
    service = MagicMock()
    with patch("gwscli.drive.MediaFileUpload") as media:
        upload_file(service, f)
    media.assert_called_with(str(f), mimetype="text/plain", resumable=True)
    body = service.files.return_value.create.call_args.kwargs['body']
    assert(body == {'name': "notes.txt", 'parents': ["root"]})

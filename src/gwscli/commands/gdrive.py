"""
gdrive: Google Drive files, folders, trash and sharing.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from loguru import logger

from ..cli import CommandSet, Context, require
from ..drive import (DOWNLOAD_EXPORTS, FOLDER_MIME, GOOGLE_APPS_PREFIX, copy_file, delete_file, download_file,
                     export_file, extract_id, find_permission, format_datetime, format_size, list_files, mime_icon,
                     quote, set_trashed, share_with_anyone, share_with_user, type_query, upload_file)
from ..flags import Flags

HELP = """
Google Drive CLI

FILES & FOLDERS:
  gdrive list [--folder <id>] [--type folder|doc|sheet|image]
  gdrive search 'query'                 Search files by name
  gdrive info <fileId>                  Get file details

  gdrive mkdir 'Folder Name' [--in <parentId>]
  gdrive upload <file> [--to <folderId>] [--name 'newName']
  gdrive download <fileId> [--output <filename>]

  gdrive move <fileId> --to <folderId>
  gdrive copy <fileId> [--name 'name'] [--to <folderId>]
  gdrive rename <fileId> --name 'New Name'
  gdrive delete <fileId>                Move to trash
  gdrive delete <fileId> --permanent --confirm

TRASH:
  gdrive trash <fileId>                 Move to trash
  gdrive untrash <fileId>               Restore from trash
  gdrive list-trash                     List trashed files
  gdrive empty-trash --confirm          Empty trash

SHARING:
  gdrive share <fileId> --email 'user@example.com' --role reader|writer
  gdrive share <fileId> --anyone        Make public
  gdrive unshare <fileId> --email 'user@example.com'
  gdrive unshare <fileId> --anyone      Remove public access
  gdrive permissions <fileId>           List who has access

STORAGE:
  gdrive quota                          Check storage usage

FILE TYPES (for --type filter):
  folder, doc, sheet, slide, pdf, image, video, audio
"""

ROOT_FOLDER = "root"

commands = CommandSet("gdrive", HELP)


def _file_id(flags: Flags) -> str|None:
    return extract_id(flags.positional(0))


@dataclass
class ListOptions():
    folder: str = field(default=ROOT_FOLDER)
    type: str|None = field(default=None)
    limit: int = field(default=20)
    sort: str = field(default="folder,name")

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        return cls(folder=extract_id(flags.text("folder", "in")) or ROOT_FOLDER,
                   type=flags.text("type"),
                   limit=flags.int_value("limit", default=20) or 20,
                   sort=flags.text("sort", default="folder,name"))

    def query(self) -> str:
        q = f"'{quote(self.folder)}' in parents and trashed = false"
        clause = type_query(self.type) if self.type else ""
        if clause:
            q += f" and {clause}"
        return q


@dataclass
class ShareOptions():
    file_id: str
    role: str = field(default="reader")
    email: str|None = field(default=None)
    anyone: bool = field(default=False)
    notify: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags, usage: str) -> Self:
        return cls(file_id=require(_file_id(flags), usage),
                   role=flags.text("role", default="reader"),
                   email=flags.text("email", "with") or flags.positional(1),
                   anyone=flags.flag("anyone"),
                   notify=flags.flag("notify"))


@commands.command("list", "ls")
def list_folder(ctx: Context, flags: Flags) -> None:
    opts = ListOptions.from_flags(flags)
    files = list_files(ctx.drive(), opts.query(), limit=opts.limit,
                       fields="files(id, name, mimeType, size, modifiedTime, parents)",
                       order_by=opts.sort)
    if not files:
        print("No files found.")
        return
    print("\nFiles" + (" in folder" if opts.folder != ROOT_FOLDER else "") + ":\n")
    folders = [f for f in files if f.get('mimeType') == FOLDER_MIME]
    others = [f for f in files if f.get('mimeType') != FOLDER_MIME]
    for f in folders + others:
        size = "" if f.get('mimeType') == FOLDER_MIME else format_size(f.get('size'))
        print(f"{mime_icon(f.get('mimeType'))} {f.get('name')}" + (f" ({size})" if size else ""))
        print(f"   ID: {f.get('id')}")
    print(f"\n({len(files)} items)")


@commands.command("search", "find")
def search(ctx: Context, flags: Flags) -> None:
    query = require(flags.positional(0) or flags.text("query", "q"), "Usage: gdrive search 'filename or keyword'")
    files = list_files(ctx.drive(), f"name contains '{quote(query)}' and trashed = false",
                       limit=flags.int_value("limit", default=20) or 20,
                       fields="files(id, name, mimeType, size, modifiedTime, webViewLink)")
    if not files:
        print(f"No files found matching: {query}")
        return
    print("\nSearch Results:\n")
    for f in files:
        print(f"{mime_icon(f.get('mimeType'))} {f.get('name')}")
        print(f"   ID: {f.get('id')}")
        print(f"   Modified: {format_datetime(f.get('modifiedTime'), ctx.tz)}")
        if f.get('webViewLink'):
            print(f"   Link: {f['webViewLink']}")
        print("")


@commands.command("info")
def info(ctx: Context, flags: Flags) -> None:
    file_id = require(_file_id(flags), "Usage: gdrive info <fileId>")
    f = ctx.drive().files().get(fileId=file_id,
                                fields="id,name,mimeType,size,createdTime,modifiedTime,owners,parents,"
                                       "webViewLink,webContentLink,shared,sharingUser").execute()
    print(f"\n{mime_icon(f.get('mimeType'))} {f.get('name')}")
    print(f"  ID: {f.get('id')}")
    print(f"  Type: {f.get('mimeType')}")
    print(f"  Size: {format_size(f.get('size'))}")
    print(f"  Created: {format_datetime(f.get('createdTime'), ctx.tz)}")
    print(f"  Modified: {format_datetime(f.get('modifiedTime'), ctx.tz)}")
    if f.get('owners'):
        print("  Owner: " + ", ".join(o.get('emailAddress', '') for o in f['owners']))
    print(f"  Shared: {'Yes' if f.get('shared') else 'No'}")
    if f.get('webViewLink'):
        print(f"  View: {f['webViewLink']}")
    if f.get('webContentLink'):
        print(f"  Download: {f['webContentLink']}")


@commands.command("mkdir")
def mkdir(ctx: Context, flags: Flags) -> None:
    name = require(flags.positional(0) or flags.text("name"), "Usage: gdrive mkdir 'Folder Name' [--in <parentFolderId>]")
    parent = extract_id(flags.text("in", "parent")) or ROOT_FOLDER
    folder = ctx.drive().files().create(body={'name': name, 'mimeType': FOLDER_MIME, 'parents': [parent]},
                                        fields="id, name, webViewLink").execute()
    print(f"\nFolder created: {folder.get('name')}")
    print(f"  ID: {folder.get('id')}")
    print(f"  Link: {folder.get('webViewLink')}")


@commands.command("upload", "put")
def upload(ctx: Context, flags: Flags) -> None:
    path = Path(require(flags.positional(0) or flags.text("file"),
                        "Usage: gdrive upload <localFile> [--to <folderId>] [--name 'newName']"))
    if not path.exists():
        print(f"File not found: {path}")
        return
    name = flags.text("name") or path.name
    print(f"\nUploading: {name} ({format_size(path.stat().st_size)})...")
    f = upload_file(ctx.drive(), path, name=name, folder_id=extract_id(flags.text("to", "folder")) or ROOT_FOLDER)
    print("\nUploaded successfully!")
    print(f"  ID: {f.get('id')}")
    print(f"  Link: {f.get('webViewLink')}")


@commands.command("download", "get")
def download(ctx: Context, flags: Flags) -> None:
    file_id = require(_file_id(flags), "Usage: gdrive download <fileId> [--output <filename>]")
    output = flags.text("output", "o")
    service = ctx.drive()
    meta = service.files().get(fileId=file_id, fields="name, mimeType, size").execute()
    mime_type = meta.get('mimeType', "")
    print(f"\nDownloading: {meta.get('name')}...")
    if mime_type.startswith(GOOGLE_APPS_PREFIX):
        if mime_type not in DOWNLOAD_EXPORTS:
            print("Cannot download this file type. Use the web interface.")
            return
        export_mime, ext = DOWNLOAD_EXPORTS[mime_type]
        p = export_file(service, file_id, export_mime, output or f"{meta.get('name')}{ext}")
        print(f"Exported to: {p}")
    else:
        p = download_file(service, file_id, output or meta.get('name'))
        print(f"Downloaded to: {p}")


@commands.command("delete", "rm")
def delete(ctx: Context, flags: Flags) -> None:
    file_id = require(_file_id(flags), "Usage: gdrive delete <fileId> [--permanent]")
    if flags.flag("permanent"):
        if not flags.flag("confirm"):
            print("Add --confirm to permanently delete this file.")
            return
        delete_file(ctx.drive(), file_id)
        print("\nFile permanently deleted.")
    else:
        set_trashed(ctx.drive(), file_id)
        print("\nFile moved to trash.")


@commands.command("trash")
def trash(ctx: Context, flags: Flags) -> None:
    set_trashed(ctx.drive(), require(_file_id(flags), "Usage: gdrive trash <fileId>"))
    print("\nFile moved to trash.")


@commands.command("untrash")
def untrash(ctx: Context, flags: Flags) -> None:
    set_trashed(ctx.drive(), require(_file_id(flags), "Usage: gdrive untrash <fileId>"), trashed=False)
    print("\nFile restored from trash.")


@commands.command("move", "mv")
def move(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdrive move <fileId> --to <folderId>"
    file_id = require(_file_id(flags), usage)
    new_parent = require(extract_id(flags.text("to") or flags.positional(1)), usage)
    service = ctx.drive()
    current = service.files().get(fileId=file_id, fields="parents").execute()
    previous = ",".join(current.get('parents') or [])
    logger.debug(f"move {file_id}: {previous} -> {new_parent}")
    service.files().update(fileId=file_id, addParents=new_parent, removeParents=previous,
                           fields="id, parents").execute()
    print("\nFile moved successfully.")


@commands.command("copy", "cp")
def copy(ctx: Context, flags: Flags) -> None:
    file_id = require(_file_id(flags), "Usage: gdrive copy <fileId> [--name 'Copy Name'] [--to <folderId>]")
    f = copy_file(ctx.drive(), file_id, name=flags.text("name", "title"),
                  folder_id=extract_id(flags.text("to", "folder")))
    print("\nFile copied!")
    print(f"  New ID: {f.get('id')}")
    print(f"  Name: {f.get('name')}")
    print(f"  Link: {f.get('webViewLink')}")


@commands.command("rename")
def rename(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gdrive rename <fileId> --name 'New Name'"
    file_id = require(_file_id(flags), usage)
    name = require(flags.text("name", "to") or flags.positional(1), usage)
    ctx.drive().files().update(fileId=file_id, body={'name': name}).execute()
    print(f"\nFile renamed to: {name}")


@commands.command("share")
def share(ctx: Context, flags: Flags) -> None:
    opts = ShareOptions.from_flags(flags, "Usage: gdrive share <fileId> --email 'user@example.com' --role reader|writer|commenter\n"
                                          "   or: gdrive share <fileId> --anyone [--role reader]  # Make public")
    service = ctx.drive()
    if opts.anyone:
        share_with_anyone(service, opts.file_id, opts.role)
        f = service.files().get(fileId=opts.file_id, fields="webViewLink").execute()
        print("\nFile is now public!")
        print(f"  Link: {f.get('webViewLink')}")
    elif opts.email:
        share_with_user(service, opts.file_id, opts.email, opts.role, notify=opts.notify)
        print(f"\nShared with {opts.email} as {opts.role}")
    else:
        print("Specify --email or --anyone")


@commands.command("unshare")
def unshare(ctx: Context, flags: Flags) -> None:
    opts = ShareOptions.from_flags(flags, "Usage: gdrive unshare <fileId> --email 'user@example.com'\n"
                                          "   or: gdrive unshare <fileId> --anyone")
    service = ctx.drive()
    response = service.permissions().list(fileId=opts.file_id,
                                          fields="permissions(id, emailAddress, type, role)").execute()
    perm = find_permission(response.get('permissions', []), email=opts.email, anyone=opts.anyone)
    if perm is None:
        print("Permission not found.")
        return
    service.permissions().delete(fileId=opts.file_id, permissionId=perm['id']).execute()
    print("\nPermission removed.")


@commands.command("permissions")
def permissions(ctx: Context, flags: Flags) -> None:
    file_id = require(_file_id(flags), "Usage: gdrive permissions <fileId>")
    response = ctx.drive().permissions().list(fileId=file_id,
                                              fields="permissions(id, emailAddress, type, role, displayName)").execute()
    perms = response.get('permissions', [])
    if not perms:
        print("No permissions found.")
        return
    print("\nPermissions:\n")
    for p in perms:
        who = "Anyone with link" if p.get('type') == "anyone" else (p.get('displayName') or p.get('emailAddress') or p.get('type'))
        print(f"* {who} - {p.get('role')}")


@commands.command("quota")
def quota(ctx: Context, flags: Flags) -> None:
    about = ctx.drive().about().get(fields="storageQuota, user").execute()
    q = about.get('storageQuota', {})
    print("\nGoogle Drive Storage:")
    print(f"  User: {about.get('user', {}).get('emailAddress')}")
    print(f"  Used: {format_size(q.get('usage'))}")
    print(f"  In Drive: {format_size(q.get('usageInDrive'))}")
    print(f"  In Trash: {format_size(q.get('usageInDriveTrash'))}")
    if q.get('limit'):
        print(f"  Limit: {format_size(q['limit'])}")
        print(f"  Usage: {int(q.get('usage', 0)) / int(q['limit']) * 100:.1f}%")
    else:
        print("  Limit: Unlimited")


@commands.command("empty-trash")
def empty_trash(ctx: Context, flags: Flags) -> None:
    if not flags.flag("confirm"):
        print("This will permanently delete all files in trash.")
        print("Add --confirm to proceed.")
        return
    ctx.drive().files().emptyTrash().execute()
    print("\nTrash emptied.")


@commands.command("list-trash")
def list_trash(ctx: Context, flags: Flags) -> None:
    files = list_files(ctx.drive(), "trashed = true", limit=flags.int_value("limit", default=20) or 20,
                       fields="files(id, name, mimeType, trashedTime)", order_by="trashedTime desc")
    if not files:
        print("Trash is empty.")
        return
    print("\nTrashed Files:\n")
    for f in files:
        print(f"{mime_icon(f.get('mimeType'))} {f.get('name')}")
        print(f"   ID: {f.get('id')}")
        print(f"   Trashed: {format_datetime(f.get('trashedTime'), ctx.tz)}")


def main() -> None:
    commands.main()

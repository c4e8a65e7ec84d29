"""
gsheet: Google Sheets from the command line.

Values go through spreadsheets.values, everything structural (tabs,
formatting, charts, validation and the rest) through batchUpdate with
grid ranges resolved from A1 notation against the live spreadsheet.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Self
import json

from ..cli import CommandSet, Context, require
from ..colors import parse_color
from ..drive import SPREADSHEET_MIME, extract_id, format_date, list_files, share_with_user
from ..flags import Flags, parse_int
from ..sheets import DEFAULT_SHEET
from ..sheets.a1 import resolve_grid_range
from ..sheets.requests import (AddChartRequest, AddConditionalFormatRuleRequest, AddNamedRangeRequest,
                               AddProtectedRangeRequest, AddSheetRequest, DeleteSheetRequest, FindReplaceRequest,
                               MergeCellsRequest, RepeatCellRequest, SetBasicFilterRequest,
                               SetDataValidationRequest, SortRangeRequest, UnmergeCellsRequest,
                               UpdateSheetPropertiesRequest, make_request)
from ..sheets.resources import CellFormat, Color, GoogleSheetsEnum, NumberFormat, SheetProperties, TextFormat
from ..sheets.values import format_table, parse_values, read_csv, to_csv

HELP = """
Google Sheets CLI

SPREADSHEETS:
  gsheet list [--limit 20]                    List your spreadsheets
  gsheet create "Title" [--sheets "S1,S2"]    Create new spreadsheet
  gsheet info <id>                            Get spreadsheet details

READ/WRITE:
  gsheet read <id> --range "A1:D10"           Read data
    --json                                    Output as JSON
    --csv                                     Output as CSV
    --formula                                 Show formulas
    --header                                  Treat first row as header

  gsheet write <id> --range "A1" --value "x"  Write single value
  gsheet write <id> --range "A1:C1" --values "a,b,c"  Write row
  gsheet write <id> --range "A1:B2" --values "[[1,2],[3,4]]"  Write grid
    --raw                                     Don't parse input as formulas/numbers

  gsheet append <id> --values "a,b,c"         Append row to sheet
  gsheet clear <id> --range "A1:D10"          Clear range

SHEETS (TABS):
  gsheet add-sheet <id> --title "Name"        Add new sheet
  gsheet delete-sheet <id> --id <sheetId>     Delete sheet
  gsheet rename-sheet <id> --id <sheetId> --title "New"
  gsheet copy-sheet <id> --id <sheetId> [--to <destId>]

FORMATTING:
  gsheet format <id> --range "A1:B5" [options]
    --bold, --italic, --underline
    --size 14, --color red, --bg yellow
    --align center, --valign middle
    --wrap, --number "$#,##0.00"

  gsheet merge <id> --range "A1:C1"           Merge cells
  gsheet unmerge <id> --range "A1:C1"         Unmerge cells

DATA TOOLS:
  gsheet filter <id> --range "A1:D100"        Add filter
  gsheet sort <id> --range "A1:D100" --column 0 --order asc
  gsheet dropdown <id> --range "A1:A10" --values "Yes,No,Maybe"
  gsheet conditional-format <id> --range "A1:A10" --condition greater_than --value 100 --color green
    Conditions: greater_than, less_than, equal, not_empty, text_contains
  gsheet find-replace <id> --find "old" --replace "new" [--case] [--exact]

CHARTS:
  gsheet add-chart <id> --range "A1:B10" --type column --title "Sales"
    Types: COLUMN, BAR, LINE, AREA, PIE, SCATTER

ADVANCED:
  gsheet protect <id> --range "A1:D10" [--description "Do not edit"] [--warning]
  gsheet named-range <id> --name "Data" --range "A1:D100"

IMPORT/EXPORT:
  gsheet export <id> --range "Sheet1" --output data.csv
  gsheet import <id> --file data.csv --range "Sheet1!A1"

SHARING:
  gsheet share <id> --email "user@example.com" --role reader|writer|commenter
"""

DEFAULT_READ_RANGE = "A1:Z100"

commands = CommandSet("gsheet", HELP)


def _spreadsheet_id(flags: Flags) -> str|None:
    return extract_id(flags.positional(0), "spreadsheet")


@dataclass
class RangeOptions():
    """A spreadsheet and an A1 range, the shape most commands take"""
    spreadsheet_id: str
    range: str

    @classmethod
    def from_flags(cls, flags: Flags, usage: str) -> Self:
        return cls(spreadsheet_id=require(_spreadsheet_id(flags), usage),
                   range=require(flags.text("range") or flags.positional(1), usage))


@dataclass
class SheetOptions():
    """A spreadsheet and a sheet (tab) id"""
    spreadsheet_id: str
    sheet_id: int

    @classmethod
    def from_flags(cls, flags: Flags, usage: str) -> Self:
        sheet_id = flags.int_value("id")
        if sheet_id is None and flags.positional(1) is not None:
            sheet_id = parse_int(flags.positional(1))
        return cls(spreadsheet_id=require(_spreadsheet_id(flags), usage),
                   sheet_id=require(sheet_id, usage))


@dataclass
class ReadOptions():
    spreadsheet_id: str
    range: str = field(default=DEFAULT_READ_RANGE)
    as_json: bool = field(default=False)
    as_csv: bool = field(default=False)
    formula: bool = field(default=False)
    header: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        return cls(spreadsheet_id=require(_spreadsheet_id(flags), "Usage: gsheet read <spreadsheetId> --range 'Sheet1!A1:D10'"),
                   range=flags.text("range") or flags.positional(1) or DEFAULT_READ_RANGE,
                   as_json=flags.flag("json"),
                   as_csv=flags.flag("csv"),
                   formula=flags.flag("formula"),
                   header=flags.flag("header"))


@dataclass
class WriteOptions():
    spreadsheet_id: str
    range: str
    values: List[list]
    raw: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = ("Usage: gsheet write <spreadsheetId> --range 'A1' --value 'Hello'\n"
                 "       gsheet write <spreadsheetId> --range 'A1:C1' --values 'a,b,c'\n"
                 "       gsheet write <spreadsheetId> --range 'A1:B2' --values '[[1,2],[3,4]]'")
        target = RangeOptions.from_flags(flags, usage)
        value = require(flags.text("value", "values") or flags.positional(2), usage)
        return cls(spreadsheet_id=target.spreadsheet_id,
                   range=target.range,
                   values=parse_values(value),
                   raw=flags.flag("raw"))


@dataclass
class AppendOptions():
    spreadsheet_id: str
    values: List[list]
    range: str = field(default=DEFAULT_SHEET)
    raw: bool = field(default=False)

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = ("Usage: gsheet append <spreadsheetId> --values 'col1,col2,col3'\n"
                 "       gsheet append <spreadsheetId> --values '[[row1],[row2]]' --range 'Sheet1'")
        return cls(spreadsheet_id=require(_spreadsheet_id(flags), usage),
                   values=parse_values(require(flags.text("values") or flags.positional(1), usage), single_cell=False),
                   range=flags.text("range", "sheet", default=DEFAULT_SHEET),
                   raw=flags.flag("raw"))


@dataclass
class FormatOptions():
    spreadsheet_id: str
    range: str
    format: CellFormat

    @classmethod
    def from_flags(cls, flags: Flags) -> Self:
        usage = ("Usage: gsheet format <spreadsheetId> --range 'A1:B5' [options]\n"
                 "Options:\n"
                 "  --bold          Make text bold\n"
                 "  --italic        Make text italic\n"
                 "  --underline     Underline text\n"
                 "  --size 12       Font size\n"
                 "  --color red     Text color (red, blue, green, or hex #RRGGBB)\n"
                 "  --bg yellow     Background color\n"
                 "  --align center  Horizontal align (left, center, right)\n"
                 "  --valign middle Vertical align (top, middle, bottom)\n"
                 "  --wrap          Enable text wrapping\n"
                 "  --number '$#,##0.00' Number format")
        target = RangeOptions.from_flags(flags, usage)
        text = TextFormat(bold=True if flags.flag("bold") else None,
                          italic=True if flags.flag("italic") else None,
                          underline=True if flags.flag("underline") else None,
                          fontSize=flags.int_value("size"),
                          foregroundColor=Color.from_dict(parse_color(flags.text("color"))) if flags.text("color") else None)
        background = flags.text("bg", "background")
        align = flags.text("align")
        valign = flags.text("valign")
        number = flags.text("number", "format")
        cell = CellFormat(textFormat=text if text else None,
                          backgroundColor=Color.from_dict(parse_color(background)) if background else None,
                          horizontalAlignment=align.upper() if align else None,
                          verticalAlignment=valign.upper() if valign else None,
                          wrapStrategy="WRAP" if flags.flag("wrap") else None,
                          numberFormat=NumberFormat(pattern=number) if number else None)
        return cls(spreadsheet_id=target.spreadsheet_id, range=target.range, format=cell)


def _batch_update(ctx: Context, spreadsheet_id: str, requests: list) -> dict:
    return ctx.sheets().spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id,
                                                   body=make_request(requests)).execute()


def _grid(ctx: Context, opts: RangeOptions):
    return resolve_grid_range(ctx.sheets(), opts.spreadsheet_id, opts.range)


@commands.command("list", "ls")
def list_spreadsheets(ctx: Context, flags: Flags) -> None:
    files = list_files(ctx.drive(), f"mimeType='{SPREADSHEET_MIME}'", limit=flags.int_value("limit", default=20))
    if not files:
        print("No spreadsheets found.")
        return
    print("\nYour Spreadsheets:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Modified: {format_date(f.get('modifiedTime'), ctx.tz)}")
        print(f"  Link: {f.get('webViewLink')}\n")


@commands.command("create", "new")
def create(ctx: Context, flags: Flags) -> None:
    title = flags.positional(0) or flags.text("title", default="New Spreadsheet")
    names = [n.strip() for n in flags.text("sheets", default=DEFAULT_SHEET).split(",")]
    body = {'properties': {'title': title},
            'sheets': [{'properties': SheetProperties(title=n).to_base()} for n in names]}
    response = ctx.sheets().spreadsheets().create(body=body).execute()
    print(f"\nSpreadsheet created: {response['properties']['title']}")
    print(f"  ID: {response.get('spreadsheetId')}")
    print(f"  Link: {response.get('spreadsheetUrl')}")
    print("  Sheets: " + ", ".join(s['properties']['title'] for s in response.get('sheets', [])))


@commands.command("info")
def info(ctx: Context, flags: Flags) -> None:
    spreadsheet_id = require(_spreadsheet_id(flags), "Usage: gsheet info <spreadsheetId>")
    data = ctx.sheets().spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
    props = data.get('properties', {})
    print(f"\n{props.get('title')}")
    print(f"  ID: {data.get('spreadsheetId')}")
    print(f"  URL: {data.get('spreadsheetUrl')}")
    print(f"  Locale: {props.get('locale')}")
    print(f"  Timezone: {props.get('timeZone')}")
    print("\nSheets:")
    for s in data.get('sheets', []):
        p = s.get('properties', {})
        grid = p.get('gridProperties', {})
        print(f"  * {p.get('title')} (ID: {p.get('sheetId')})")
        print(f"    Rows: {grid.get('rowCount')}, Cols: {grid.get('columnCount')}")


@commands.command("read", "get")
def read(ctx: Context, flags: Flags) -> None:
    opts = ReadOptions.from_flags(flags)
    render = GoogleSheetsEnum.valueRenderOption("FORMULA" if opts.formula else "FORMATTED")
    response = ctx.sheets().spreadsheets().values().get(spreadsheetId=opts.spreadsheet_id,
                                                        range=opts.range,
                                                        valueRenderOption=render).execute()
    rows = response.get('values', [])
    if not rows:
        print(f"No data found in range: {opts.range}")
        return
    print(f"\nData from {opts.range}:\n")
    if opts.as_json:
        print(json.dumps(rows, indent=2))
    elif opts.as_csv:
        print(to_csv(rows))
    else:
        for line in format_table(rows, header=opts.header):
            print(line)
    print(f"\n({len(rows)} rows)")


def _input_option(raw: bool) -> str:
    return GoogleSheetsEnum.valueInputOption("RAW" if raw else "USER_ENTERED")


@commands.command("write", "set")
def write(ctx: Context, flags: Flags) -> None:
    opts = WriteOptions.from_flags(flags)
    response = ctx.sheets().spreadsheets().values().update(spreadsheetId=opts.spreadsheet_id,
                                                           range=opts.range,
                                                           valueInputOption=_input_option(opts.raw),
                                                           body={'values': opts.values}).execute()
    print(f"\nUpdated {response.get('updatedCells')} cells in {response.get('updatedRange')}")


@commands.command("append", "add")
def append(ctx: Context, flags: Flags) -> None:
    opts = AppendOptions.from_flags(flags)
    response = ctx.sheets().spreadsheets().values().append(spreadsheetId=opts.spreadsheet_id,
                                                           range=opts.range,
                                                           valueInputOption=_input_option(opts.raw),
                                                           insertDataOption="INSERT_ROWS",
                                                           body={'values': opts.values}).execute()
    updated = response.get('updates', {}).get('updatedRange')
    print(f"\nAppended {len(opts.values)} row(s) to {updated}")


@commands.command("clear")
def clear(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet clear <spreadsheetId> --range 'A1:D10'")
    ctx.sheets().spreadsheets().values().clear(spreadsheetId=opts.spreadsheet_id, range=opts.range, body={}).execute()
    print(f"\nCleared range: {opts.range}")


@commands.command("add-sheet")
def add_sheet(ctx: Context, flags: Flags) -> None:
    spreadsheet_id = require(_spreadsheet_id(flags), "Usage: gsheet add-sheet <spreadsheetId> --title 'Sheet Name'")
    title = flags.text("title", "name") or flags.positional(1) or "New Sheet"
    response = _batch_update(ctx, spreadsheet_id, [AddSheetRequest(properties=SheetProperties(title=title))])
    props = response['replies'][0]['addSheet']['properties']
    print(f"\nSheet added: {props.get('title')} (ID: {props.get('sheetId')})")


@commands.command("delete-sheet")
def delete_sheet(ctx: Context, flags: Flags) -> None:
    opts = SheetOptions.from_flags(flags, "Usage: gsheet delete-sheet <spreadsheetId> --id <sheetId>\n"
                                          "Use 'gsheet info <id>' to find sheet IDs")
    _batch_update(ctx, opts.spreadsheet_id, [DeleteSheetRequest(sheetId=opts.sheet_id)])
    print(f"\nSheet deleted (ID: {opts.sheet_id})")


@commands.command("rename-sheet")
def rename_sheet(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet rename-sheet <spreadsheetId> --id <sheetId> --title 'New Name'"
    opts = SheetOptions.from_flags(flags, usage)
    title = require(flags.text("title", "name") or flags.positional(2), usage)
    props = SheetProperties(sheetId=opts.sheet_id, title=title)
    _batch_update(ctx, opts.spreadsheet_id, [UpdateSheetPropertiesRequest(properties=props)])
    print(f"\nSheet renamed to: {title}")


@commands.command("copy-sheet")
def copy_sheet(ctx: Context, flags: Flags) -> None:
    opts = SheetOptions.from_flags(flags, "Usage: gsheet copy-sheet <spreadsheetId> --id <sheetId> [--to <destSpreadsheetId>]")
    destination = extract_id(flags.text("to"), "spreadsheet") or opts.spreadsheet_id
    response = ctx.sheets().spreadsheets().sheets().copyTo(spreadsheetId=opts.spreadsheet_id,
                                                           sheetId=opts.sheet_id,
                                                           body={'destinationSpreadsheetId': destination}).execute()
    print(f"\nSheet copied: {response.get('title')} (ID: {response.get('sheetId')})")


@commands.command("format")
def format_cells(ctx: Context, flags: Flags) -> None:
    opts = FormatOptions.from_flags(flags)
    if not opts.format.fields():
        print("No formatting options given.")
        return
    grid = resolve_grid_range(ctx.sheets(), opts.spreadsheet_id, opts.range)
    _batch_update(ctx, opts.spreadsheet_id, [RepeatCellRequest(range=grid, format=opts.format)])
    print(f"\nFormatted range: {opts.range}")


@commands.command("merge")
def merge(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet merge <spreadsheetId> --range 'A1:C3'\n"
                                          "       --type MERGE_ALL|MERGE_COLUMNS|MERGE_ROWS")
    merge_type = GoogleSheetsEnum.mergeType(flags.text("type", default="MERGE_ALL")) or "MERGE_ALL"
    _batch_update(ctx, opts.spreadsheet_id, [MergeCellsRequest(range=_grid(ctx, opts), mergeType=merge_type)])
    print(f"\nMerged cells: {opts.range}")


@commands.command("unmerge")
def unmerge(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet unmerge <spreadsheetId> --range 'A1:C3'")
    _batch_update(ctx, opts.spreadsheet_id, [UnmergeCellsRequest(range=_grid(ctx, opts))])
    print(f"\nUnmerged cells: {opts.range}")


@commands.command("add-chart")
def add_chart(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet add-chart <spreadsheetId> --range 'A1:B10' --type column --title 'My Chart'\n"
                                          "Types: COLUMN, BAR, LINE, AREA, PIE, SCATTER")
    requested = flags.text("type", default="COLUMN")
    chart_type = GoogleSheetsEnum.chartType(requested)
    if not chart_type:
        raise ValueError(f"Unsupported chart type: {requested}")
    title = flags.text("title", default="Chart")
    _batch_update(ctx, opts.spreadsheet_id, [AddChartRequest(range=_grid(ctx, opts), chartType=chart_type, title=title)])
    print(f"\nChart created: {title}")


@commands.command("filter")
def basic_filter(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet filter <spreadsheetId> --range 'A1:D100'")
    _batch_update(ctx, opts.spreadsheet_id, [SetBasicFilterRequest(range=_grid(ctx, opts))])
    print(f"\nFilter added to range: {opts.range}")


@commands.command("sort")
def sort(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet sort <spreadsheetId> --range 'A1:D100' --column 0 --order asc")
    column = flags.int_value("column", "col", default=0)
    order = "DESCENDING" if flags.text("order", default="asc").lower() == "desc" else "ASCENDING"
    _batch_update(ctx, opts.spreadsheet_id, [SortRangeRequest(range=_grid(ctx, opts), dimensionIndex=column, sortOrder=order)])
    print(f"\nSorted by column {column} ({order.lower()})")


@commands.command("dropdown")
def dropdown(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet dropdown <spreadsheetId> --range 'A1:A10' --values 'Option1,Option2,Option3'"
    opts = RangeOptions.from_flags(flags, usage)
    values = [v.strip() for v in require(flags.text("values") or flags.positional(2), usage).split(",")]
    _batch_update(ctx, opts.spreadsheet_id, [SetDataValidationRequest(range=_grid(ctx, opts), values=values)])
    print(f"\nDropdown added to range: {opts.range}")


@commands.command("conditional-format")
def conditional_format(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet conditional-format <spreadsheetId> --range 'A1:A10' "
                                          "--condition greater_than --value 100 --color green\n"
                                          "Conditions: greater_than, less_than, equal, not_empty, text_contains")
    rule = AddConditionalFormatRuleRequest(range=_grid(ctx, opts),
                                           conditionType=GoogleSheetsEnum.conditionType(flags.text("condition", default="greater_than")),
                                           value=flags.text("value"),
                                           background=Color.from_dict(parse_color(flags.text("color", default="green"))))
    _batch_update(ctx, opts.spreadsheet_id, [rule])
    print(f"\nConditional formatting added to: {opts.range}")


@commands.command("protect")
def protect(ctx: Context, flags: Flags) -> None:
    opts = RangeOptions.from_flags(flags, "Usage: gsheet protect <spreadsheetId> --range 'A1:D10' --description 'Do not edit'")
    request = AddProtectedRangeRequest(range=_grid(ctx, opts),
                                       description=flags.text("description", "desc", default="Protected range"),
                                       warningOnly=flags.flag("warning"))
    _batch_update(ctx, opts.spreadsheet_id, [request])
    print(f"\nProtected range: {opts.range}")


@commands.command("named-range")
def named_range(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet named-range <spreadsheetId> --name 'SalesData' --range 'Sheet1!A1:D100'"
    spreadsheet_id = require(_spreadsheet_id(flags), usage)
    name = require(flags.text("name") or flags.positional(1), usage)
    a1 = require(flags.text("range") or flags.positional(2), usage)
    grid = resolve_grid_range(ctx.sheets(), spreadsheet_id, a1)
    _batch_update(ctx, spreadsheet_id, [AddNamedRangeRequest(name=name, range=grid)])
    print(f"\nNamed range created: {name} -> {a1}")


@commands.command("find-replace")
def find_replace(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet find-replace <spreadsheetId> --find 'old' --replace 'new'"
    spreadsheet_id = require(_spreadsheet_id(flags), usage)
    request = FindReplaceRequest(find=require(flags.text("find") or flags.positional(1), usage),
                                 replacement=flags.text("replace") or flags.positional(2) or "",
                                 matchCase=flags.flag("case"),
                                 matchEntireCell=flags.flag("exact"))
    response = _batch_update(ctx, spreadsheet_id, [request])
    result = (response.get('replies') or [{}])[0].get('findReplace', {})
    print(f"\nReplaced {result.get('occurrencesChanged', 0)} occurrences in {result.get('sheetsChanged', 0)} sheet(s)")


@commands.command("export")
def export(ctx: Context, flags: Flags) -> None:
    spreadsheet_id = require(_spreadsheet_id(flags),
                             "Usage: gsheet export <spreadsheetId> --range 'Sheet1!A1:D100' --output data.csv")
    a1 = flags.text("range", default=DEFAULT_SHEET)
    output = Path(flags.text("output", "o", default="output.csv"))
    rows = ctx.sheets().spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=a1).execute().get('values', [])
    output.write_text(to_csv(rows), encoding="utf-8")
    print(f"\nExported {len(rows)} rows to {output}")


@commands.command("import")
def import_csv(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet import <spreadsheetId> --file data.csv --range 'Sheet1!A1'"
    spreadsheet_id = require(_spreadsheet_id(flags), usage)
    path = require(flags.text("file") or flags.positional(1), usage)
    rows = read_csv(path)
    ctx.sheets().spreadsheets().values().update(spreadsheetId=spreadsheet_id,
                                                range=flags.text("range", default=f"{DEFAULT_SHEET}!A1"),
                                                valueInputOption=_input_option(False),
                                                body={'values': rows}).execute()
    print(f"\nImported {len(rows)} rows from {path}")


@commands.command("share")
def share(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gsheet share <spreadsheetId> --email 'user@example.com' --role reader|writer|commenter"
    spreadsheet_id = require(_spreadsheet_id(flags), usage)
    email = require(flags.text("email") or flags.positional(1), usage)
    role = flags.text("role", default="reader")
    share_with_user(ctx.drive(), spreadsheet_id, email, role, notify=flags.flag("notify"))
    print(f"\nShared with {email} as {role}")


def main() -> None:
    commands.main()

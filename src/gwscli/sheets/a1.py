import re

from typing import Self

from googleapiclient.discovery import Resource
from loguru import logger

from . import GoogleSheetsMaxColumns, DEFAULT_SHEET
from .resources import GridRange


class SheetNotFound(LookupError):
    """No sheet (tab) with the requested title"""


def col_to_index(col: str) -> int:
    """
    Zero based index of a column label, base 26 with A as 1.
    A -> 0, Z -> 25, AA -> 26
    """
    c = str(col).strip().upper()
    if not c or not c.isalpha() or not c.isascii():
        raise ValueError(f"Invalid column label: {col}")
    index = 0
    for ch in c:
        index = index * 26 + (ord(ch) - ord('A') + 1)
    return index - 1


def index_to_col(index: int) -> str:
    """The reverse of col_to_index(), 0 -> A"""
    i = int(index)
    if i < 0 or i >= GoogleSheetsMaxColumns:
        raise ValueError(f"Column index out of range: {index}")
    i += 1
    label = ""
    while i > 0:
        i, rem = divmod(i - 1, 26)
        label = chr(ord('A') + rem) + label
    return label


class A1Range():
    """
    Just enough of A1 notation to turn a user supplied range into grid
    coordinates:

    [<title>!]<start col><start row>[:<end col><end row>]

        title:      sheet (tab) title, 'Sheet1' when not given.  May be
                    quoted if it contains spaces.
        start/end:  column letters and a 1-based row.  A single cell
                    covers just itself.

    Unbounded ranges (A:B, 1:5) aren't supported, the commands that need
    grid coordinates want a concrete rectangle.
    Indexes here are zero based and the ends are exclusive, the same as
    the API's GridRange.
    """
    _cells_re = re.compile(r"([A-Z]+)(\d+)(?::([A-Z]+)(\d+))?", re.IGNORECASE)

    def __init__(self, a1: str = "") -> None:
        self.reset()
        if a1:
            self.set_a1(a1)

    def reset(self) -> None:
        self._a1 = ""
        self.sheet = DEFAULT_SHEET
        self.start_col = 0
        self.start_row = 0
        self.end_col = 0
        self.end_row = 0

    def __str__(self) -> str:
        return self._a1 if self._a1 else "<invalid>"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def __bool__(self) -> bool:
        return bool(self._a1)

    def __len__(self) -> int:
        """number of cells covered"""
        return (self.end_row - self.start_row) * (self.end_col - self.start_col)

    def __eq__(self, value: object) -> bool:
        if isinstance(value, A1Range):
            return self.coordinates() == value.coordinates() and self.sheet.lower() == value.sheet.lower()
        return self._a1 == value

    def set_a1(self, a1: str) -> Self:
        """
        Parse and validate.  Raises ValueError unless the cells part is
        exactly one cell or a bounded rectangle.
        """
        s = str(a1).strip()
        if "!" in s:
            sheet, cells = s.split("!", 1)
            sheet = sheet.strip()
            if len(sheet) >= 2 and sheet[0] == sheet[-1] and sheet[0] in "'\"":
                sheet = sheet[1:-1]
        else:
            sheet, cells = DEFAULT_SHEET, s
        m = self._cells_re.fullmatch(cells.strip())
        if not m:
            raise ValueError(f"Invalid range format: {cells}")
        self.sheet = sheet or DEFAULT_SHEET
        self.start_col = col_to_index(m.group(1))
        self.start_row = int(m.group(2)) - 1
        self.end_col = col_to_index(m.group(3)) + 1 if m.group(3) else self.start_col + 1
        self.end_row = int(m.group(4)) if m.group(4) else self.start_row + 1
        self._a1 = s
        return self

    def coordinates(self) -> tuple[int, int, int, int]:
        """(start row, end row, start col, end col)"""
        return (self.start_row, self.end_row, self.start_col, self.end_col)

    def grid_range(self, sheet_id: int) -> GridRange:
        return GridRange(sheetId=sheet_id,
                         startRowIndex=self.start_row,
                         endRowIndex=self.end_row,
                         startColumnIndex=self.start_col,
                         endColumnIndex=self.end_col)


def find_sheet_id(sheets: list[dict], title: str) -> int:
    """Sheet id by case-insensitive title out of a spreadsheets.get response"""
    t = title.lower()
    for s in sheets or []:
        props = s.get('properties', {})
        if str(props.get('title', '')).lower() == t:
            return int(props.get('sheetId', 0))
    raise SheetNotFound(f"Sheet not found: {title}")


def resolve_grid_range(service: Resource, spreadsheet_id: str, a1: str|A1Range) -> GridRange:
    """
    A1 to GridRange against the live spreadsheet, which costs one
    spreadsheets.get to look the sheet id up.
    """
    r = a1 if isinstance(a1, A1Range) else A1Range(a1)
    if not r:
        raise ValueError(f"Invalid range format: {a1}")
    response = service.spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
    sheet_id = find_sheet_id(response.get('sheets', []), r.sheet)
    logger.debug(f"{r} -> sheet {sheet_id} {r.coordinates()}")
    return r.grid_range(sheet_id)

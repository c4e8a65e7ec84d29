"""
Sheets request resources as dataclasses.
Only what the gsheet commands send is modelled; field names are the
API's so to_base()/trim() give the request dicts directly.
"""
from dataclasses import dataclass, field
from typing import List, ClassVar

from ..resources import GoogleWorkSpaceResourceBase


class GoogleSheetsEnum():
    """
    An 'enum' in the sheets client is just a string so this is
    just to translate and validate input.
    """
    _VALID_VALUE_RENDER_OPTIONS = {
        "FORMATTED": "FORMATTED_VALUE",
        "FORMATTED_VALUE": "FORMATTED_VALUE",
        "UNFORMATTED": "UNFORMATTED_VALUE",
        "UNFORMATTED_VALUE": "UNFORMATTED_VALUE",
        "FORMULA": "FORMULA"
    }
    _VALID_VALUE_INPUT_OPTIONS = {
        "RAW": "RAW",
        "USER": "USER_ENTERED",
        "USER_ENTERED": "USER_ENTERED"
    }
    _VALID_MERGE_TYPES = {
        "ALL": "MERGE_ALL",
        "MERGE_ALL": "MERGE_ALL",
        "COLUMNS": "MERGE_COLUMNS",
        "MERGE_COLUMNS": "MERGE_COLUMNS",
        "ROWS": "MERGE_ROWS",
        "MERGE_ROWS": "MERGE_ROWS"
    }
    _VALID_CONDITIONS = {
        "greater_than": "NUMBER_GREATER",
        "less_than": "NUMBER_LESS",
        "equal": "NUMBER_EQ",
        "not_empty": "NOT_BLANK",
        "text_contains": "TEXT_CONTAINS"
    }
    _VALID_CHART_TYPES = ["COLUMN", "BAR", "LINE", "AREA", "PIE", "SCATTER"]

    @classmethod
    def valueRenderOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueRenderOption"""
        return cls._VALID_VALUE_RENDER_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def valueInputOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueInputOption"""
        return cls._VALID_VALUE_INPUT_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def mergeType(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#mergetype"""
        return cls._VALID_MERGE_TYPES.get(str(option).upper(), "")

    @classmethod
    def conditionType(cls, condition: str) -> str:
        """Friendly condition name to ConditionType, NUMBER_GREATER if unknown"""
        return cls._VALID_CONDITIONS.get(str(condition).lower(), "NUMBER_GREATER")

    @classmethod
    def chartType(cls, option: str) -> str:
        t = str(option).upper()
        return t if t in cls._VALID_CHART_TYPES else ""


@dataclass
class NumberFormat(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#numberformat
    """
    type: str = field(default="NUMBER")
    pattern: str = field(default="")

    valid_values: ClassVar[List[str]] = ['TEXT', 'NUMBER', 'PERCENT',
                                         'CURRENCY', 'DATE', 'TIME',
                                         'DATE_TIME', 'SCIENTIFIC']

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        t = str(self.type).upper()
        if t not in self.valid_values:
            raise ValueError('Invalid number format type: ' + t)
        self.type = t


@dataclass
class Color(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#color
    """
    red: int|float = field(default=0)
    green: int|float = field(default=0)
    blue: int|float = field(default=0)

    @classmethod
    def from_dict(cls, d: dict) -> "Color":
        return cls(red=d.get('red', 0), green=d.get('green', 0), blue=d.get('blue', 0))


@dataclass
class GridRange(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#gridrange
    Zero based, ends exclusive.
    """
    sheetId: int = field(default=-1)
    startRowIndex: int|None = field(default=None)
    endRowIndex: int|None = field(default=None)
    startColumnIndex: int|None = field(default=None)
    endColumnIndex: int|None = field(default=None)

    def __bool__(self) -> bool:
        return self.sheetId >= 0

    def to_base(self) -> dict:
        b = {'sheetId': self.sheetId}
        for k in ['startRowIndex', 'endRowIndex', 'startColumnIndex', 'endColumnIndex']:
            v = getattr(self, k)
            if v is not None:
                b[k] = v
        return b


@dataclass
class TextFormat(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#textformat
    """
    bold: bool|None = field(default=None)
    italic: bool|None = field(default=None)
    underline: bool|None = field(default=None)
    fontSize: int|None = field(default=None)
    foregroundColor: Color|None = field(default=None)

    def __bool__(self) -> bool:
        return any(getattr(self, k) is not None for k in ['bold', 'italic', 'underline', 'fontSize', 'foregroundColor'])


@dataclass
class CellFormat(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#cellformat
    fields() gives the 'fields' mask for a repeatCell covering exactly
    what has been set.
    """
    textFormat: TextFormat|None = field(default=None)
    backgroundColor: Color|None = field(default=None)
    horizontalAlignment: str|None = field(default=None)
    verticalAlignment: str|None = field(default=None)
    wrapStrategy: str|None = field(default=None)
    numberFormat: NumberFormat|None = field(default=None)

    def fields(self, prefix: str = "userEnteredFormat") -> List[str]:
        f = []
        if self.textFormat:
            for k in ['bold', 'italic', 'underline', 'fontSize', 'foregroundColor']:
                if getattr(self.textFormat, k) is not None:
                    f.append(f"{prefix}.textFormat.{k}")
        for k in ['backgroundColor', 'horizontalAlignment', 'verticalAlignment', 'wrapStrategy', 'numberFormat']:
            if getattr(self, k) is not None:
                f.append(f"{prefix}.{k}")
        return f

    def to_base(self) -> dict:
        b = {}
        if self.textFormat:
            b['textFormat'] = self.textFormat.trim()
        if self.backgroundColor is not None:
            b['backgroundColor'] = self.backgroundColor.to_base()
        for k in ['horizontalAlignment', 'verticalAlignment', 'wrapStrategy']:
            v = getattr(self, k)
            if v is not None:
                b[k] = v
        if self.numberFormat is not None:
            b['numberFormat'] = self.numberFormat.to_base()
        return b


@dataclass
class SheetProperties(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheetproperties
    Only the parts the commands touch, sheetId None means 'let the API pick'.
    """
    sheetId: int|None = field(default=None)
    title: str|None = field(default=None)
    index: int|None = field(default=None)
    gridProperties: dict|None = field(default=None)

    def to_base(self) -> dict:
        b = {}
        for k in ['sheetId', 'title', 'index', 'gridProperties']:
            v = getattr(self, k)
            if v is not None:
                b[k] = v
        return b

"""
spreadsheets.batchUpdate requests.
Each class is named after the request it produces, to_request() derives
the key from the class name: RepeatCellRequest -> {'repeatCell': {...}}
"""
from dataclasses import dataclass, field
from typing import List
import re

from ..resources import GoogleWorkSpaceResourceBase
from .resources import CellFormat, Color, GridRange, SheetProperties


class GoogleSheetsUpdateRequestBase(GoogleWorkSpaceResourceBase):
    """
    Base class for sheet batchUpdate requests to get the actual
    request dict into the right format.
    """
    _name_re = re.compile(r"^([a-zA-Z])([a-zA-Z]+)Request$")

    def to_request(self) -> dict[str, dict]:
        # strip off the trailing 'Request' and lower case the first letter
        m = self._name_re.match(self.__class__.__name__)
        if not m:
            raise RuntimeError("Invalid Google Sheets request format for class name")
        return {m.group(1).lower() + m.group(2): self.to_base()}


@dataclass
class AddSheetRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addsheetrequest"""
    properties: SheetProperties = field(default_factory=SheetProperties)


@dataclass
class DeleteSheetRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletesheetrequest"""
    sheetId: int


@dataclass
class UpdateSheetPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatesheetpropertiesrequest
    fields is the mask of what is being changed, defaults to whatever is set
    in properties apart from the id.
    """
    properties: SheetProperties
    fields: str = field(default="")

    def fixup(self) -> None:
        if not self.fields:
            self.fields = ",".join(k for k in self.properties.to_base().keys() if k != 'sheetId')


@dataclass
class RepeatCellRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#repeatcellrequest"""
    range: GridRange
    format: CellFormat

    def to_base(self) -> dict:
        return {'range': self.range.to_base(),
                'cell': {'userEnteredFormat': self.format.to_base()},
                'fields': ",".join(self.format.fields())}


@dataclass
class MergeCellsRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#mergecellsrequest"""
    range: GridRange
    mergeType: str = field(default="MERGE_ALL")


@dataclass
class UnmergeCellsRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#unmergecellsrequest"""
    range: GridRange


@dataclass
class AddChartRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addchartrequest
    A single series chart over one range, anchored in the top row just
    past the right hand edge of the data.  PIE gets a pieChart spec,
    everything else a basicChart.
    """
    range: GridRange
    chartType: str = field(default="COLUMN")
    title: str = field(default="Chart")

    def to_base(self) -> dict:
        source = {'sourceRange': {'sources': [self.range.to_base()]}}
        spec = {'title': self.title}
        if self.chartType == "PIE":
            spec['pieChart'] = {'legendPosition': "RIGHT_LEGEND",
                                'domain': source,
                                'series': source}
        else:
            spec['basicChart'] = {'chartType': self.chartType,
                                  'legendPosition': "BOTTOM_LEGEND",
                                  'axis': [{'position': "BOTTOM_AXIS"}, {'position': "LEFT_AXIS"}],
                                  'domains': [{'domain': source}],
                                  'series': [{'series': source, 'targetAxis': "LEFT_AXIS"}]}
        anchor = {'sheetId': self.range.sheetId,
                  'rowIndex': 0,
                  'columnIndex': (self.range.endColumnIndex or 0) + 1}
        return {'chart': {'spec': spec, 'position': {'overlayPosition': {'anchorCell': anchor}}}}


@dataclass
class SetBasicFilterRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#setbasicfilterrequest"""
    range: GridRange

    def to_base(self) -> dict:
        return {'filter': {'range': self.range.to_base()}}


@dataclass
class SortRangeRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#sortrangerequest"""
    range: GridRange
    dimensionIndex: int = field(default=0)
    sortOrder: str = field(default="ASCENDING")

    def to_base(self) -> dict:
        return {'range': self.range.to_base(),
                'sortSpecs': [{'dimensionIndex': self.dimensionIndex, 'sortOrder': self.sortOrder}]}


@dataclass
class SetDataValidationRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#setdatavalidationrequest
    Only the dropdown (ONE_OF_LIST) flavour.
    """
    range: GridRange
    values: List[str] = field(default_factory=list)

    def to_base(self) -> dict:
        return {'range': self.range.to_base(),
                'rule': {'condition': {'type': "ONE_OF_LIST",
                                       'values': [{'userEnteredValue': v} for v in self.values]},
                         'showCustomUi': True,
                         'strict': True}}


@dataclass
class AddConditionalFormatRuleRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addconditionalformatrulerequest
    A boolean rule that paints the background, inserted ahead of any
    existing rules.
    """
    range: GridRange
    conditionType: str = field(default="NUMBER_GREATER")
    value: str|None = field(default=None)
    background: Color = field(default_factory=Color)
    index: int = field(default=0)

    def to_base(self) -> dict:
        condition = {'type': self.conditionType}
        if self.value is not None:
            condition['values'] = [{'userEnteredValue': self.value}]
        return {'rule': {'ranges': [self.range.to_base()],
                         'booleanRule': {'condition': condition,
                                         'format': {'backgroundColor': self.background.to_base()}}},
                'index': self.index}


@dataclass
class AddProtectedRangeRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addprotectedrangerequest"""
    range: GridRange
    description: str = field(default="Protected range")
    warningOnly: bool = field(default=False)

    def to_base(self) -> dict:
        return {'protectedRange': {'range': self.range.to_base(),
                                   'description': self.description,
                                   'warningOnly': self.warningOnly}}


@dataclass
class AddNamedRangeRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addnamedrangerequest"""
    name: str
    range: GridRange

    def to_base(self) -> dict:
        return {'namedRange': {'name': self.name, 'range': self.range.to_base()}}


@dataclass
class FindReplaceRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#findreplacerequest"""
    find: str
    replacement: str = field(default="")
    allSheets: bool = field(default=True)
    matchCase: bool = field(default=False)
    matchEntireCell: bool = field(default=False)


def make_request(requests: list[GoogleSheetsUpdateRequestBase|dict]) -> dict:
    """
    The batchUpdate body, requests converted as needed.
    """
    return {'requests': [r.to_request() if isinstance(r, GoogleSheetsUpdateRequestBase) else r for r in requests]}

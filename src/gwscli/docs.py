"""
Google Docs helpers: document text extraction, the end-of-body index
that appends go to, and the batchUpdate requests gdocs sends.
"""
from dataclasses import dataclass, field
from typing import List

from .colors import parse_color
from .resources import GoogleWorkSpaceResourceBase

DOCUMENT_URL = "https://docs.google.com/document/d/{}/edit"

EXPORT_FORMATS = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
    "html": "text/html",
    "rtf": "application/rtf",
    "odt": "application/vnd.oasis.opendocument.text",
}

BULLET_PRESET = "BULLET_DISC_CIRCLE_SQUARE"
NUMBERED_PRESET = "NUMBERED_DECIMAL_NESTED"


def document_url(document_id: str) -> str:
    return DOCUMENT_URL.format(document_id)


def extract_text(content: dict|None) -> str:
    """
    Plain text of a document body (or a table cell, which has the same
    shape).  Tables come out one '| a | b |' line per row with a blank
    line after.
    """
    text = ""
    for element in (content or {}).get('content', []):
        if 'paragraph' in element:
            for e in element['paragraph'].get('elements', []):
                if 'textRun' in e:
                    text += e['textRun'].get('content', "")
        elif 'table' in element:
            for row in element['table'].get('tableRows', []):
                cells = [extract_text(cell).strip() for cell in row.get('tableCells', [])]
                text += "| " + " | ".join(cells) + " |\n"
            text += "\n"
    return text


def end_index(document: dict) -> int:
    """
    Where new content goes: just before the final newline of the body.
    """
    content = document.get('body', {}).get('content', [])
    if not content:
        return 1
    return max(int(content[-1].get('endIndex', 1)) - 1, 1)


def insert_text(text: str, index: int) -> dict:
    return {'insertText': {'location': {'index': index}, 'text': text}}


def heading_requests(text: str, index: int, level: int) -> List[dict]:
    """
    The heading goes on its own line after index, styled HEADING_1..6
    (level is clamped).
    """
    n = min(max(int(level), 1), 6)
    return [insert_text("\n" + text + "\n", index),
            {'updateParagraphStyle': {'range': {'startIndex': index + 1,
                                                'endIndex': index + 1 + len(text)},
                                      'paragraphStyle': {'namedStyleType': f"HEADING_{n}"},
                                      'fields': "namedStyleType"}}]


def bullet_requests(items: List[str], index: int, numbered: bool = False) -> List[dict]:
    text = "\n" + "\n".join(items) + "\n"
    return [insert_text(text, index),
            {'createParagraphBullets': {'range': {'startIndex': index + 1,
                                                  'endIndex': index + len(text) - 1},
                                        'bulletPreset': NUMBERED_PRESET if numbered else BULLET_PRESET}}]


def replace_all(find: str, replace: str, match_case: bool = False) -> dict:
    return {'replaceAllText': {'containsText': {'text': find, 'matchCase': match_case},
                               'replaceText': replace}}


@dataclass
class TextStyle(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/docs/api/reference/rest/v1/documents#textstyle
    Only the attributes gdocs format sets.  Colours are names or #RRGGBB
    and turned into OptionalColor dicts on the way out.
    """
    bold: bool|None = field(default=None)
    italic: bool|None = field(default=None)
    underline: bool|None = field(default=None)
    strikethrough: bool|None = field(default=None)
    fontSize: int|None = field(default=None)
    fontFamily: str|None = field(default=None)
    foregroundColor: str|None = field(default=None)
    backgroundColor: str|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.fields())

    def fields(self) -> List[str]:
        f = []
        for k in ['bold', 'italic', 'underline', 'strikethrough', 'fontSize']:
            if getattr(self, k) is not None:
                f.append(k)
        if self.fontFamily is not None:
            f.append('weightedFontFamily')
        for k in ['foregroundColor', 'backgroundColor']:
            if getattr(self, k) is not None:
                f.append(k)
        return f

    def to_base(self) -> dict:
        b = {}
        for k in ['bold', 'italic', 'underline', 'strikethrough']:
            if getattr(self, k) is not None:
                b[k] = getattr(self, k)
        if self.fontSize is not None:
            b['fontSize'] = {'magnitude': self.fontSize, 'unit': "PT"}
        if self.fontFamily is not None:
            b['weightedFontFamily'] = {'fontFamily': self.fontFamily}
        for k in ['foregroundColor', 'backgroundColor']:
            v = getattr(self, k)
            if v is not None:
                b[k] = {'color': {'rgbColor': parse_color(v)}}
        return b

    def to_request(self, start: int, end: int) -> dict:
        return {'updateTextStyle': {'range': {'startIndex': start, 'endIndex': end},
                                    'textStyle': self.to_base(),
                                    'fields': ",".join(self.fields())}}

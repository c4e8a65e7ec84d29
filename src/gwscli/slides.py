"""
Google Slides helpers.

Slides positions and sizes everything in EMU (914400 per inch, 12700
per point); the command line takes inches and points and converts here.
"""
from dataclasses import dataclass, field
from typing import List
import time
import uuid

from .colors import parse_color
from .resources import GoogleWorkSpaceResourceBase

EMU_PER_INCH = 914400
EMU_PER_POINT = 12700

PRESENTATION_URL = "https://docs.google.com/presentation/d/{}/edit"

LAYOUTS = ["BLANK", "TITLE", "TITLE_ONLY", "TITLE_AND_BODY", "TITLE_AND_TWO_COLUMNS",
           "ONE_COLUMN_TEXT", "MAIN_POINT", "BIG_NUMBER", "SECTION_HEADER",
           "SECTION_TITLE_AND_DESCRIPTION", "CAPTION_ONLY"]

EXPORT_FORMATS = {
    "pdf": "application/pdf",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "txt": "text/plain",
    "png": "image/png",
    "odp": "application/vnd.oasis.opendocument.presentation",
}

TITLE_PLACEHOLDERS = ("TITLE", "CENTERED_TITLE")
BODY_PLACEHOLDERS = ("BODY", "SUBTITLE")


def presentation_url(presentation_id: str) -> str:
    return PRESENTATION_URL.format(presentation_id)


def inches_to_emu(inches: float) -> int:
    return round(inches * EMU_PER_INCH)


def points_to_emu(points: float) -> int:
    return round(points * EMU_PER_POINT)


def emu_to_inches(emu: float) -> int:
    return round(emu / EMU_PER_INCH)


def layout(name: str|None) -> str:
    """A predefined layout name, BLANK for anything unknown"""
    n = str(name or "").upper()
    return n if n in LAYOUTS else "BLANK"


def element_id(prefix: str, now: float|None = None) -> str:
    """'textbox_1705305600000', millisecond timestamp based"""
    t = time.time() if now is None else now
    return f"{prefix}_{int(t * 1000)}"


def unique_element_id(prefix: str = "copied") -> str:
    return f"{element_id(prefix)}_{uuid.uuid4().hex[:9]}"


@dataclass
class ElementProperties(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/slides/api/reference/rest/v1/presentations.pages#pageelementproperties
    Placement of a new element, in inches.
    """
    pageObjectId: str
    width: float
    height: float
    x: float = field(default=1)
    y: float = field(default=1)

    def to_base(self) -> dict:
        return {'pageObjectId': self.pageObjectId,
                'size': {'width': {'magnitude': inches_to_emu(self.width), 'unit': "EMU"},
                         'height': {'magnitude': inches_to_emu(self.height), 'unit': "EMU"}},
                'transform': {'scaleX': 1,
                              'scaleY': 1,
                              'translateX': inches_to_emu(self.x),
                              'translateY': inches_to_emu(self.y),
                              'unit': "EMU"}}


@dataclass
class TextStyle(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/slides/api/reference/rest/v1/presentations.pages/text#textstyle
    """
    fontSize: int|None = field(default=None)
    bold: bool|None = field(default=None)
    foregroundColor: str|None = field(default=None)
    fontFamily: str|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.fields())

    def fields(self) -> List[str]:
        return [k for k in ['fontSize', 'bold', 'foregroundColor', 'fontFamily'] if getattr(self, k) is not None]

    def to_base(self) -> dict:
        b = {}
        if self.fontSize is not None:
            b['fontSize'] = {'magnitude': self.fontSize, 'unit': "PT"}
        if self.bold is not None:
            b['bold'] = self.bold
        if self.foregroundColor is not None:
            b['foregroundColor'] = {'opaqueColor': {'rgbColor': parse_color(self.foregroundColor)}}
        if self.fontFamily is not None:
            b['fontFamily'] = self.fontFamily
        return b

    def to_request(self, object_id: str) -> dict:
        return {'updateTextStyle': {'objectId': object_id,
                                    'style': self.to_base(),
                                    'textRange': {'type': "ALL"},
                                    'fields': ",".join(self.fields())}}


def insert_text(object_id: str, text: str) -> dict:
    return {'insertText': {'objectId': object_id, 'text': text, 'insertionIndex': 0}}


def delete_text(object_id: str) -> dict:
    return {'deleteText': {'objectId': object_id, 'textRange': {'type': "ALL"}}}


def create_shape(object_id: str, props: ElementProperties, shape_type: str = "TEXT_BOX") -> dict:
    return {'createShape': {'objectId': object_id,
                            'shapeType': shape_type,
                            'elementProperties': props.to_base()}}


def text_box_requests(object_id: str, props: ElementProperties, text: str, style: TextStyle|None = None) -> List[dict]:
    """A text box holding text, styled when a style is given"""
    requests = [create_shape(object_id, props), insert_text(object_id, text)]
    if style:
        requests.append(style.to_request(object_id))
    return requests


def solid_fill(color: str) -> dict:
    return {'solidFill': {'color': {'rgbColor': parse_color(color)}}}


def text_of(text: dict|None) -> str:
    """The runs of a TextContent joined up and trimmed"""
    runs = (text or {}).get('textElements') or []
    return "".join(t['textRun'].get('content', "") for t in runs if t.get('textRun')).strip()


def has_text(element: dict) -> bool:
    runs = element.get('shape', {}).get('text', {}).get('textElements') or []
    return any(str(t.get('textRun', {}).get('content', "")).strip() for t in runs)


def placeholder_type(element: dict) -> str|None:
    return (element.get('shape', {}).get('placeholder') or {}).get('type')


def find_placeholder(slide: dict, types: tuple[str, ...]) -> dict|None:
    for e in slide.get('pageElements') or []:
        if placeholder_type(e) in types:
            return e
    return None


def find_slide(presentation: dict, slide_id: str) -> dict|None:
    for s in presentation.get('slides') or []:
        if s.get('objectId') == slide_id:
            return s
    return None


def slide_title(slide: dict) -> str|None:
    """Text of the title placeholder, if the slide has one with text"""
    for e in slide.get('pageElements') or []:
        if placeholder_type(e) in TITLE_PLACEHOLDERS:
            text = e.get('shape', {}).get('text')
            if text and text.get('textElements'):
                return text_of(text)
    return None


def unescape(text: str) -> str:
    """A literal backslash-n from the shell becomes a newline"""
    return text.replace("\\n", "\n")


def bulletize(text: str) -> str:
    return "\n".join("• " + line.strip() for line in text.split("\n") if line.strip())


def fill_placeholder(element: dict, text: str) -> List[dict]:
    """Replace whatever the placeholder holds with text"""
    requests = []
    if has_text(element):
        requests.append(delete_text(element['objectId']))
    requests.append(insert_text(element['objectId'], text))
    return requests


def fill_slide_requests(slide: dict, title: str|None, body: str|None, bullets: bool = False) -> List[dict]:
    """
    Requests putting title and body into the slide's title and body
    placeholders.  Nothing is produced for a part that has no placeholder.
    """
    requests = []
    title_element = find_placeholder(slide, TITLE_PLACEHOLDERS)
    if title_element is not None and title:
        requests += fill_placeholder(title_element, unescape(title))
    body_element = find_placeholder(slide, BODY_PLACEHOLDERS)
    if body_element is not None and body:
        text = unescape(body)
        requests += fill_placeholder(body_element, bulletize(text) if bullets else text)
    return requests


def copy_element_requests(element: dict, page_id: str, object_id: str) -> List[dict]:
    """
    Recreate a page element from another presentation on page_id.
    Shapes keep their text, images their source url, tables their
    dimensions only.  Anything else is skipped.
    """
    props = {'pageObjectId': page_id,
             'size': element.get('size'),
             'transform': element.get('transform')}
    if 'shape' in element:
        requests = [{'createShape': {'objectId': object_id,
                                     'shapeType': element['shape'].get('shapeType') or "TEXT_BOX",
                                     'elementProperties': props}}]
        runs = element['shape'].get('text', {}).get('textElements') or []
        text = "".join(t['textRun'].get('content', "") for t in runs if t.get('textRun'))
        if text.strip():
            requests.append(insert_text(object_id, text))
        return requests
    if 'image' in element:
        url = element['image'].get('sourceUrl')
        if not url:
            return []
        return [{'createImage': {'objectId': object_id, 'url': url, 'elementProperties': props}}]
    if 'table' in element:
        return [{'createTable': {'objectId': object_id,
                                 'elementProperties': props,
                                 'rows': element['table'].get('rows'),
                                 'columns': element['table'].get('columns')}}]
    return []


def background_rgb(color: dict) -> str:
    """rgb(r, g, b) with 0..255 channels"""
    return "rgb(" + ", ".join(str(round(color.get(k, 0) * 255)) for k in ["red", "green", "blue"]) + ")"

"""
gslides: Google Slides from the command line.

Positions and sizes are given in inches and font sizes in points, the
helpers in gwscli.slides convert to EMU.  New element ids are the kind
of element plus a millisecond timestamp.
"""
from dataclasses import dataclass, field
from typing import Self

from googleapiclient.errors import HttpError
from loguru import logger

from ..cli import CommandSet, Context, require
from ..colors import to_hex
from ..drive import (PRESENTATION_MIME, copy_file, delete_file, export_file, extract_id, format_date, list_files,
                     quote, share_with_user)
from ..flags import Flags, parse_int
from ..slides import (BODY_PLACEHOLDERS, EXPORT_FORMATS, TITLE_PLACEHOLDERS, ElementProperties, TextStyle,
                      background_rgb, bulletize, copy_element_requests, create_shape, element_id, emu_to_inches,
                      fill_placeholder, fill_slide_requests, find_placeholder, find_slide, layout,
                      presentation_url, slide_title, solid_fill, text_box_requests, text_of, unescape,
                      unique_element_id)

HELP = """
Google Slides CLI

PRESENTATIONS:
  gslides list [--limit 20]             List your presentations
  gslides create "Title"                Create new presentation
  gslides info <id>                     Get presentation details
  gslides read <id>                     Read all slide content
  gslides read-slide <id> --slide 1     Read specific slide
  gslides search "query"                Search presentations

TEMPLATES:
  gslides templates                     List template presentations
  gslides from-template <id> --title "Name"  Create from template
  gslides masters <id>                  List masters, layouts, theme colors
  gslides apply-layout <id> --slide <slideId> --layout <layoutId>
  gslides copy-slide <srcId> --slide <slideId> --to <destId>

SLIDES:
  gslides create-slide <id> --title "Title" --body "Content" [--bullets]
  gslides update-slide <id> --slide <slideId> --title "New Title" --body "New Body"
  gslides add-slide <id> [--layout TITLE|TITLE_AND_BODY|BLANK]
  gslides delete-slide <id> --slide <slideId>
  gslides duplicate-slide <id> --slide <slideId>
  gslides move-slide <id> --slide <slideId> --index 0
  gslides set-title <id> --slide <slideId> --title "Title"
  gslides set-background <id> --slide <slideId> --color blue
  gslides set-background <id> --slide <slideId> --image "https://..."

CONTENT:
  gslides add-text <id> --slide <slideId> --text "Hello"
    [--x 1] [--y 1] [--width 8] [--height 1]
    [--size 18] [--bold] [--color red] [--font "Arial"]

  gslides add-image <id> --slide <slideId> --url "https://..."
    [--x 1] [--y 1] [--width 4] [--height 3]

  gslides add-shape <id> --slide <slideId> --type RECTANGLE
    [--x 1] [--y 1] [--width 2] [--height 2]
    [--fill red] [--outline blue]
    Types: RECTANGLE, ELLIPSE, ROUND_RECTANGLE, TRIANGLE, etc.

  gslides add-table <id> --slide <slideId> --rows 3 --cols 3

EXPORT:
  gslides export <id> --format pdf --output slides.pdf
    Formats: pdf, pptx, txt, png, odp

MANAGE:
  gslides copy <id> --title "Copy Name"
  gslides delete <id> --confirm
  gslides share <id> --email "user@email.com" --role writer

LAYOUTS:
  BLANK, TITLE, TITLE_ONLY, TITLE_AND_BODY, TITLE_AND_TWO_COLUMNS,
  SECTION_HEADER, MAIN_POINT, BIG_NUMBER, CAPTION_ONLY
"""

RULE = "=" * 50

commands = CommandSet("gslides", HELP)


def _presentation_id(flags: Flags) -> str|None:
    return extract_id(flags.positional(0), "presentation")


def _batch_update(ctx: Context, presentation_id: str, requests: list) -> dict:
    return ctx.slides().presentations().batchUpdate(presentationId=presentation_id,
                                                    body={'requests': requests}).execute()


def _get(ctx: Context, presentation_id: str) -> dict:
    return ctx.slides().presentations().get(presentationId=presentation_id).execute()


def _snippet(text: str) -> str:
    return text[:50] + ("..." if len(text) > 50 else "")


@dataclass
class SlideOptions():
    """A presentation and one of its slides"""
    presentation_id: str
    slide_id: str

    @classmethod
    def from_flags(cls, flags: Flags, usage: str) -> Self:
        return cls(presentation_id=require(_presentation_id(flags), usage),
                   slide_id=require(flags.text("slide", "id") or flags.positional(1), usage))


@dataclass
class PlacementOptions():
    """Where a new element goes on a slide, inches"""
    presentation_id: str
    slide_id: str
    x: float = field(default=1)
    y: float = field(default=1)
    width: float = field(default=8)
    height: float = field(default=1)

    @classmethod
    def from_flags(cls, flags: Flags, usage: str, width: float, height: float) -> Self:
        target = SlideOptions.from_flags(flags, usage)
        return cls(presentation_id=target.presentation_id,
                   slide_id=target.slide_id,
                   x=flags.float_value("x") or 1,
                   y=flags.float_value("y") or 1,
                   width=flags.float_value("width") or width,
                   height=flags.float_value("height") or height)

    def properties(self) -> ElementProperties:
        return ElementProperties(pageObjectId=self.slide_id, width=self.width, height=self.height, x=self.x, y=self.y)


@dataclass
class ContentOptions():
    """Title and body for create-slide and update-slide"""
    presentation_id: str
    title: str|None = field(default=None)
    body: str|None = field(default=None)
    bullets: bool = field(default=False)


@commands.command("list", "ls")
def list_presentations(ctx: Context, flags: Flags) -> None:
    files = list_files(ctx.drive(), f"mimeType='{PRESENTATION_MIME}'", limit=flags.int_value("limit", default=20) or 20)
    if not files:
        print("No presentations found.")
        return
    print("\nYour Presentations:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Modified: {format_date(f.get('modifiedTime'), ctx.tz)}")
        print(f"  Link: {f.get('webViewLink')}\n")


@commands.command("create", "new")
def create(ctx: Context, flags: Flags) -> None:
    title = flags.positional(0) or flags.text("title", default="Untitled Presentation")
    pres = ctx.slides().presentations().create(body={'title': title}).execute()
    print(f"\nPresentation created: {pres.get('title')}")
    print(f"  ID: {pres.get('presentationId')}")
    print(f"  Link: {presentation_url(pres.get('presentationId'))}")
    print(f"  Slides: {len(pres.get('slides') or [])}")


def _print_element(element: dict) -> None:
    text = element.get('shape', {}).get('text')
    if text and text.get('textElements'):
        content = text_of(text)
        if content:
            kind = (element['shape'].get('placeholder') or {}).get('type') or "TEXT"
            print(f"\n  [{kind}]")
            print("  " + content.replace("\n", "\n  "))
    if 'table' in element:
        table = element['table']
        print(f"\n  [TABLE {table.get('rows')}x{table.get('columns')}]")
        for row in table.get('tableRows') or []:
            cells = [text_of(cell.get('text'))[:20] for cell in row.get('tableCells') or []]
            print("  | " + " | ".join(cells) + " |")
    if 'image' in element:
        print("\n  [IMAGE]")
        url = element['image'].get('sourceUrl')
        if url:
            print(f"  URL: {url[:60]}...")


def _read_slides(ctx: Context, flags: Flags, all_slides: bool) -> None:
    presentation_id = require(_presentation_id(flags), "Usage: gslides read-slide <presentationId> [--slide 1]\n"
                                                       "       gslides read-slide <presentationId> --all")
    pres = _get(ctx, presentation_id)
    slides = pres.get('slides') or []
    print(f"\n{pres.get('title')}")
    print(RULE)

    number = None
    if not all_slides:
        number = flags.int_value("slide", "index")
        if number is None and flags.positional(1):
            number = parse_int(flags.positional(1))
    if number is None:
        selected = list(enumerate(slides, start=1))
    elif 1 <= number <= len(slides):
        selected = [(number, slides[number - 1])]
    else:
        selected = []
    if not selected:
        print("No slides found.")
        return

    for n, slide in selected:
        print(f"\n--- Slide {n} [{slide.get('objectId')}] ---")
        elements = slide.get('pageElements') or []
        if not elements:
            print("  (Empty slide)")
            continue
        for element in elements:
            _print_element(element)

    print("\n" + RULE)
    print(f"Total: {len(slides)} slides")


@commands.command("read-slide")
def read_slide(ctx: Context, flags: Flags) -> None:
    _read_slides(ctx, flags, all_slides=flags.flag("all"))


@commands.command("read")
def read(ctx: Context, flags: Flags) -> None:
    _read_slides(ctx, flags, all_slides=True)


@commands.command("info", "get")
def info(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags), "Usage: gslides info <presentationId>")
    pres = _get(ctx, presentation_id)
    slides = pres.get('slides') or []
    size = pres.get('pageSize') or {}
    print(f"\n{pres.get('title')}")
    print(f"  ID: {pres.get('presentationId')}")
    print(f"  Link: {presentation_url(pres.get('presentationId'))}")
    print(f"  Slides: {len(slides)}")
    if size:
        width = emu_to_inches(size.get('width', {}).get('magnitude', 0))
        height = emu_to_inches(size.get('height', {}).get('magnitude', 0))
        print(f"  Page Size: {width}\" x {height}\"")
    print("\nSlide List:")
    for i, slide in enumerate(slides, start=1):
        print(f"  {i}. {slide_title(slide) or '(No title)'} [ID: {slide.get('objectId')}]")


@commands.command("add-slide")
def add_slide(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags),
                              "Usage: gslides add-slide <presentationId> [--layout TITLE|TITLE_AND_BODY|BLANK] [--index 0]")
    predefined = layout(flags.text("layout", default="BLANK"))
    request = {'createSlide': {'slideLayoutReference': {'predefinedLayout': predefined}}}
    index = flags.int_value("index")
    if index is not None:
        request['createSlide']['insertionIndex'] = index
    response = _batch_update(ctx, presentation_id, [request])
    print("\nSlide added!")
    print(f"  Slide ID: {response['replies'][0]['createSlide']['objectId']}")
    print(f"  Layout: {predefined}")


def _fallback_boxes(slide: dict, slide_id: str, opts: ContentOptions) -> list:
    """Text boxes for a title or body the slide's layout has no placeholder for"""
    requests = []
    if opts.title and find_placeholder(slide, TITLE_PLACEHOLDERS) is None:
        requests += text_box_requests(element_id("title"),
                                      ElementProperties(pageObjectId=slide_id, width=9, height=1, x=0.5, y=0.5),
                                      opts.title, TextStyle(fontSize=36, bold=True))
    if opts.body and find_placeholder(slide, BODY_PLACEHOLDERS) is None:
        text = unescape(opts.body)
        requests += text_box_requests(element_id("body"),
                                      ElementProperties(pageObjectId=slide_id, width=9, height=4, x=0.5, y=2),
                                      bulletize(text) if opts.bullets else text, TextStyle(fontSize=18))
    return requests


@commands.command("create-slide")
def create_slide(ctx: Context, flags: Flags) -> None:
    opts = ContentOptions(presentation_id=require(_presentation_id(flags),
                                                  "Usage: gslides create-slide <presentationId> --title 'Title' --body 'Content'\n"
                                                  "Options:\n"
                                                  "  --layout TITLE|TITLE_AND_BODY|BLANK (default: TITLE_AND_BODY)\n"
                                                  "  --bullets    Format body as bullet points (split by newlines)"),
                          title=flags.text("title") or flags.positional(1),
                          body=flags.text("body", "content") or flags.positional(2),
                          bullets=flags.flag("bullets"))
    predefined = flags.text("layout", default="TITLE_AND_BODY").upper()
    response = _batch_update(ctx, opts.presentation_id,
                             [{'createSlide': {'slideLayoutReference': {'predefinedLayout': predefined}}}])
    slide_id = response['replies'][0]['createSlide']['objectId']
    print(f"Slide created: {slide_id}")

    slide = find_slide(_get(ctx, opts.presentation_id), slide_id)
    if slide is None:
        raise RuntimeError("Could not find created slide")
    requests = fill_slide_requests(slide, opts.title, opts.body, bullets=opts.bullets)
    requests += _fallback_boxes(slide, slide_id, opts)
    if requests:
        _batch_update(ctx, opts.presentation_id, requests)

    print("\n✅ Slide created with content!")
    print(f"  Slide ID: {slide_id}")
    if opts.title:
        print(f"  Title: {opts.title}")
    if opts.body:
        print(f"  Body: {_snippet(opts.body)}")


@commands.command("update-slide", "modify", "modify-slide", "update")
def update_slide(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides update-slide <presentationId> --slide <slideId> --title 'New Title' --body 'New Content'\n"
             "Options:\n"
             "  --slide <id>   Slide ID to update (required)\n"
             "  --title        New title text\n"
             "  --body         New body text\n"
             "  --bullets      Format body as bullet points")
    presentation_id = require(_presentation_id(flags), usage)
    slide_id = require(flags.text("slide") or flags.positional(1), usage)
    opts = ContentOptions(presentation_id=presentation_id,
                          title=flags.text("title"),
                          body=flags.text("body", "content"),
                          bullets=flags.flag("bullets"))
    slide = find_slide(_get(ctx, presentation_id), slide_id)
    if slide is None:
        raise LookupError(f"Slide not found: {slide_id}")
    requests = fill_slide_requests(slide, opts.title, opts.body, bullets=opts.bullets)
    if not requests:
        print("No updates specified. Use --title and/or --body.")
        return
    _batch_update(ctx, presentation_id, requests)
    print("\n✅ Slide updated!")
    print(f"  Slide ID: {slide_id}")
    if opts.title:
        print(f"  Title: {opts.title}")
    if opts.body:
        print(f"  Body: {_snippet(opts.body)}")


@commands.command("delete-slide")
def delete_slide(ctx: Context, flags: Flags) -> None:
    opts = SlideOptions.from_flags(flags, "Usage: gslides delete-slide <presentationId> --slide <slideId>")
    _batch_update(ctx, opts.presentation_id, [{'deleteObject': {'objectId': opts.slide_id}}])
    print("\nSlide deleted.")


def _add_text_box(ctx: Context, opts: PlacementOptions, text: str, style: TextStyle) -> None:
    object_id = element_id("textbox")
    _batch_update(ctx, opts.presentation_id, text_box_requests(object_id, opts.properties(), text, style))
    print("\nText box added!")
    print(f"  Element ID: {object_id}")


@commands.command("add-text")
def add_text(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides add-text <presentationId> --slide <slideId> --text 'Your text'\n"
             "Options:\n"
             "  --x 1        X position in inches (default: 1)\n"
             "  --y 1        Y position in inches (default: 1)\n"
             "  --width 8    Width in inches (default: 8)\n"
             "  --height 1   Height in inches (default: 1)\n"
             "  --size 18    Font size in points\n"
             "  --bold       Bold text\n"
             "  --color red  Text color")
    opts = PlacementOptions.from_flags(flags, usage, width=8, height=1)
    text = require(flags.text("text") or flags.positional(2), usage)
    style = TextStyle(fontSize=flags.int_value("size"),
                      bold=True if flags.flag("bold") else None,
                      foregroundColor=flags.text("color"),
                      fontFamily=flags.text("font"))
    _add_text_box(ctx, opts, text, style)


@commands.command("add-image")
def add_image(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides add-image <presentationId> --slide <slideId> --url 'https://...'\n"
             "Options:\n"
             "  --x 1        X position in inches\n"
             "  --y 1        Y position in inches\n"
             "  --width 4    Width in inches\n"
             "  --height 3   Height in inches")
    opts = PlacementOptions.from_flags(flags, usage, width=4, height=3)
    url = require(flags.text("url", "image") or flags.positional(2), usage)
    object_id = element_id("image")
    _batch_update(ctx, opts.presentation_id,
                  [{'createImage': {'objectId': object_id, 'url': url, 'elementProperties': opts.properties().to_base()}}])
    print("\nImage added!")
    print(f"  Element ID: {object_id}")


@commands.command("add-shape")
def add_shape(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides add-shape <presentationId> --slide <slideId> --type RECTANGLE\n"
             "Shape types: RECTANGLE, ELLIPSE, ROUND_RECTANGLE, TRIANGLE, ARROW_*, STAR_*, etc.\n"
             "Options:\n"
             "  --x 1, --y 1, --width 2, --height 2\n"
             "  --fill red       Fill color\n"
             "  --outline blue   Outline color")
    opts = PlacementOptions.from_flags(flags, usage, width=2, height=2)
    shape_type = flags.text("type", "shape", default="RECTANGLE").upper()
    object_id = element_id("shape")
    requests = [create_shape(object_id, opts.properties(), shape_type)]
    fill = flags.text("fill")
    if fill:
        requests.append({'updateShapeProperties': {'objectId': object_id,
                                                   'shapeProperties': {'shapeBackgroundFill': solid_fill(fill)},
                                                   'fields': "shapeBackgroundFill.solidFill.color"}})
    outline = flags.text("outline")
    if outline:
        requests.append({'updateShapeProperties': {'objectId': object_id,
                                                   'shapeProperties': {'outline': {'outlineFill': solid_fill(outline)}},
                                                   'fields': "outline.outlineFill.solidFill.color"}})
    _batch_update(ctx, opts.presentation_id, requests)
    print("\nShape added!")
    print(f"  Element ID: {object_id}")
    print(f"  Type: {shape_type}")


@commands.command("add-table")
def add_table(ctx: Context, flags: Flags) -> None:
    opts = SlideOptions.from_flags(flags, "Usage: gslides add-table <presentationId> --slide <slideId> --rows 3 --cols 3")
    rows = flags.int_value("rows") or 3
    cols = flags.int_value("cols", "columns") or 3
    object_id = element_id("table")
    props = ElementProperties(pageObjectId=opts.slide_id, width=8, height=rows * 0.5, x=1, y=2)
    _batch_update(ctx, opts.presentation_id,
                  [{'createTable': {'objectId': object_id, 'elementProperties': props.to_base(),
                                    'rows': rows, 'columns': cols}}])
    print("\nTable added!")
    print(f"  Element ID: {object_id}")
    print(f"  Size: {rows}x{cols}")


@commands.command("set-title")
def set_title(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gslides set-title <presentationId> --slide <slideId> --title 'Slide Title'"
    opts = SlideOptions.from_flags(flags, usage)
    title = require(flags.text("title", "text") or flags.positional(2), usage)
    slide = find_slide(_get(ctx, opts.presentation_id), opts.slide_id)
    if slide is None:
        raise LookupError(f"Slide not found: {opts.slide_id}")
    element = find_placeholder(slide, TITLE_PLACEHOLDERS)
    if element is None:
        placement = PlacementOptions(presentation_id=opts.presentation_id, slide_id=opts.slide_id,
                                     x=0.5, y=0.5, width=9, height=1)
        _add_text_box(ctx, placement, title, TextStyle(fontSize=36, bold=True))
        return
    _batch_update(ctx, opts.presentation_id, fill_placeholder(element, title))
    print(f"\nSlide title set: {title}")


@commands.command("duplicate-slide")
def duplicate_slide(ctx: Context, flags: Flags) -> None:
    opts = SlideOptions.from_flags(flags, "Usage: gslides duplicate-slide <presentationId> --slide <slideId>")
    response = _batch_update(ctx, opts.presentation_id, [{'duplicateObject': {'objectId': opts.slide_id}}])
    print("\nSlide duplicated!")
    print(f"  New Slide ID: {response['replies'][0]['duplicateObject']['objectId']}")


@commands.command("move-slide")
def move_slide(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gslides move-slide <presentationId> --slide <slideId> --index 0"
    opts = SlideOptions.from_flags(flags, usage)
    index = require(flags.int_value("index", "to"), usage)
    _batch_update(ctx, opts.presentation_id,
                  [{'updateSlidesPosition': {'slideObjectIds': [opts.slide_id], 'insertionIndex': index}}])
    print(f"\nSlide moved to position {index}")


@commands.command("set-background")
def set_background(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides set-background <presentationId> --slide <slideId> --color blue\n"
             "   or: gslides set-background <presentationId> --slide <slideId> --image 'https://...'")
    opts = SlideOptions.from_flags(flags, usage)
    color = flags.text("color")
    image = flags.text("image", "url")
    if color:
        fill = solid_fill(color)
    else:
        fill = {'stretchedPictureFill': {'contentUrl': require(image, usage)}}
    _batch_update(ctx, opts.presentation_id,
                  [{'updatePageProperties': {'objectId': opts.slide_id,
                                             'pageProperties': {'pageBackgroundFill': fill},
                                             'fields': "pageBackgroundFill"}}])
    print("\nBackground updated!")


@commands.command("export")
def export(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags),
                              "Usage: gslides export <presentationId> --format pdf|pptx --output file.pdf")
    fmt = flags.text("format", "as", default="pdf").lower()
    mime_type = EXPORT_FORMATS.get(fmt)
    if mime_type is None:
        print("Supported formats: " + ", ".join(EXPORT_FORMATS))
        return
    p = export_file(ctx.drive(), presentation_id, mime_type, flags.text("output", "o", default=f"presentation.{fmt}"))
    print(f"\nExported to: {p}")


@commands.command("copy")
def copy(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags), "Usage: gslides copy <presentationId> --title 'New Presentation Name'")
    f = copy_file(ctx.drive(), presentation_id, name=flags.text("title", "name") or flags.positional(1))
    print("\nPresentation copied!")
    print(f"  New ID: {f.get('id')}")
    print(f"  Link: {presentation_url(f.get('id'))}")


@commands.command("delete")
def delete(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags), "Usage: gslides delete <presentationId> --confirm")
    if not flags.flag("confirm"):
        print("Add --confirm to delete this presentation.")
        return
    delete_file(ctx.drive(), presentation_id)
    print("\nPresentation deleted.")


@commands.command("share")
def share(ctx: Context, flags: Flags) -> None:
    usage = "Usage: gslides share <presentationId> --email 'user@example.com' --role reader|writer|commenter"
    presentation_id = require(_presentation_id(flags), usage)
    email = require(flags.text("email") or flags.positional(1), usage)
    role = flags.text("role", default="reader")
    share_with_user(ctx.drive(), presentation_id, email, role, notify=flags.flag("notify"))
    print(f"\nShared with {email} as {role}")


@commands.command("search")
def search(ctx: Context, flags: Flags) -> None:
    query = require(flags.positional(0) or flags.text("query", "q"), "Usage: gslides search 'search terms'")
    files = list_files(ctx.drive(), f"mimeType='{PRESENTATION_MIME}' and fullText contains '{quote(query)}'",
                       limit=flags.int_value("limit", default=10) or 10)
    if not files:
        print(f"No presentations found matching: {query}")
        return
    print("\nSearch Results:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Link: {f.get('webViewLink')}\n")


@commands.command("templates")
def templates(ctx: Context, flags: Flags) -> None:
    files = list_files(ctx.drive(), f"mimeType='{PRESENTATION_MIME}' and name contains 'template'",
                       limit=flags.int_value("limit", default=20) or 20)
    if not files:
        print("No template presentations found.")
        print("Tip: Name your templates with 'template' in the title.")
        return
    print("\nYour Templates:\n")
    for f in files:
        print(f"* {f.get('name')}")
        print(f"  ID: {f.get('id')}")
        print(f"  Use: gslides from-template {f.get('id')} --title 'New Title'")
        print("")


@commands.command("from-template")
def from_template(ctx: Context, flags: Flags) -> None:
    template_id = require(extract_id(flags.positional(0) or flags.text("template"), "presentation"),
                          "Usage: gslides from-template <templateId> --title 'New Presentation Name'\n"
                          "\nThis copies a template presentation and gives it a new name.\n"
                          "All slides, masters, layouts, and styling are preserved.")
    title = flags.text("title", "name") or flags.positional(1) or "New Presentation"
    new_id = copy_file(ctx.drive(), template_id, name=title, fields="id").get('id')
    pres = _get(ctx, new_id)
    print("\n✅ Created from template!")
    print(f"  Title: {title}")
    print(f"  ID: {new_id}")
    print(f"  Link: {presentation_url(new_id)}")
    print(f"  Slides: {len(pres.get('slides') or [])}")


@commands.command("masters")
def masters(ctx: Context, flags: Flags) -> None:
    presentation_id = require(_presentation_id(flags), "Usage: gslides masters <presentationId>\n"
                                                       "\nLists all master slides and their layouts.")
    pres = _get(ctx, presentation_id)
    print(f"\n{pres.get('title')}")
    print(RULE)
    print("\nMASTER SLIDES:")
    for master in pres.get('masters') or []:
        print(f"\n  Master: {master.get('objectId')}")
        fill = (master.get('pageProperties') or {}).get('pageBackgroundFill') or {}
        color = (fill.get('solidFill') or {}).get('color', {}).get('rgbColor')
        if color:
            print(f"    Background: {background_rgb(color)}")
        print("    Layouts:")
        for lay in pres.get('layouts') or []:
            if lay.get('masterObjectId') == master.get('objectId'):
                props = lay.get('layoutProperties') or {}
                print(f"      - {props.get('displayName') or props.get('name') or 'Unnamed'} [{lay.get('objectId')}]")

    print("\nTHEME COLORS:")
    first = (pres.get('masters') or [{}])[0]
    for entry in ((first.get('pageProperties') or {}).get('colorScheme') or {}).get('colors') or []:
        rgb = (entry.get('color') or {}).get('rgbColor')
        if rgb is not None:
            print(f"  {entry.get('type') or 'COLOR'}: {to_hex(rgb).upper()}")
    print("\n" + RULE)


@commands.command("apply-layout")
def apply_layout(ctx: Context, flags: Flags) -> None:
    usage = ("Usage: gslides apply-layout <presentationId> --slide <slideId> --layout <layoutId>\n"
             "\nChanges the layout of an existing slide.\n"
             "Use 'gslides masters <id>' to see available layout IDs.")
    presentation_id = require(_presentation_id(flags), usage)
    slide_id = require(flags.text("slide"), usage)
    layout_id = require(flags.text("layout"), usage)
    _batch_update(ctx, presentation_id,
                  [{'updateSlideProperties': {'objectId': slide_id,
                                              'slideProperties': {'layoutObjectId': layout_id},
                                              'fields': "layoutObjectId"}}])
    print("\n✅ Layout applied!")
    print(f"  Slide: {slide_id}")
    print(f"  Layout: {layout_id}")


@commands.command("copy-slide")
def copy_slide(ctx: Context, flags: Flags) -> None:
    """
    Slides can't be copied between presentations directly, so the slide
    is recreated: a new blank slide in the destination, the source
    background, then each shape, image and table rebuilt from the source.
    """
    usage = ("Usage: gslides copy-slide <sourceId> --slide <slideId> --to <destId>\n"
             "\nCopies a slide from one presentation to another.\n"
             "Options:\n"
             "  --index N    Insert at specific position (0-based)")
    source_id = require(extract_id(flags.positional(0) or flags.text("from"), "presentation"), usage)
    slide_id = require(flags.text("slide"), usage)
    dest_id = require(extract_id(flags.text("to", "dest"), "presentation"), usage)

    source = find_slide(_get(ctx, source_id), slide_id)
    if source is None:
        raise LookupError(f"Slide not found: {slide_id}")

    create_request = {'createSlide': {}}
    index = flags.int_value("index")
    if index is not None:
        create_request['createSlide']['insertionIndex'] = index
    response = _batch_update(ctx, dest_id, [create_request])
    new_slide_id = response['replies'][0]['createSlide']['objectId']

    requests = []
    background = (source.get('pageProperties') or {}).get('pageBackgroundFill')
    if background:
        requests.append({'updatePageProperties': {'objectId': new_slide_id,
                                                  'pageProperties': {'pageBackgroundFill': background},
                                                  'fields': "pageBackgroundFill"}})
    for element in source.get('pageElements') or []:
        requests += copy_element_requests(element, new_slide_id, unique_element_id())
    if requests:
        try:
            _batch_update(ctx, dest_id, requests)
        except HttpError as e:
            logger.opt(exception=e).debug(f"copy-slide {slide_id} -> {dest_id}")
            print(f"Warning: Some elements could not be copied: {getattr(e, 'reason', None) or e}")

    print("\n✅ Slide copied!")
    print(f"  Source: {source_id} slide {slide_id}")
    print(f"  Destination: {dest_id}")
    print(f"  New Slide ID: {new_slide_id}")


def main() -> None:
    commands.main()

"""
Colour names and hex strings to the {red, green, blue} float dicts
Sheets, Docs and Slides all use.
"""
import re

NAMED_COLORS = {
    "red": (1.0, 0.0, 0.0),
    "green": (0.0, 0.8, 0.0),
    "blue": (0.0, 0.0, 1.0),
    "yellow": (1.0, 1.0, 0.0),
    "orange": (1.0, 0.6, 0.0),
    "purple": (0.5, 0.0, 0.5),
    "pink": (1.0, 0.75, 0.8),
    "white": (1.0, 1.0, 1.0),
    "black": (0.0, 0.0, 0.0),
    "gray": (0.5, 0.5, 0.5),
    "grey": (0.5, 0.5, 0.5),
}

_hex_re = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def parse_color(value: str|None) -> dict[str, float]:
    """
    'red' or '#FF0000' -> {'red': 1.0, 'green': 0.0, 'blue': 0.0}
    Anything unrecognised is black.
    """
    s = str(value or "").strip()
    m = _hex_re.match(s) if s.startswith("#") else None
    if m:
        r, g, b = (int(x, 16) / 255 for x in m.groups())
    else:
        r, g, b = NAMED_COLORS.get(s.lower(), NAMED_COLORS["black"])
    return {"red": r, "green": g, "blue": b}


def to_hex(rgb: dict|None) -> str:
    """The reverse, for printing theme colours.  Missing channels are 0."""
    c = rgb or {}
    return "#" + "".join(f"{round(c.get(k, 0) * 255):02x}" for k in ["red", "green", "blue"])

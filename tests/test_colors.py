import pytest

from gwscli.colors import parse_color, to_hex


def test_named():
    assert(parse_color("red") == {'red': 1.0, 'green': 0.0, 'blue': 0.0})
    assert(parse_color("Green") == {'red': 0.0, 'green': 0.8, 'blue': 0.0})
    assert(parse_color("grey") == parse_color("gray"))


def test_hex():
    c = parse_color("#FF8000")
    assert(c['red'] == 1.0)
    assert(c['green'] == pytest.approx(128 / 255))
    assert(c['blue'] == 0.0)
    assert(parse_color("#00ff00") == {'red': 0.0, 'green': 1.0, 'blue': 0.0})


def test_unknown_is_black():
    black = {'red': 0.0, 'green': 0.0, 'blue': 0.0}
    assert(parse_color("chartreuse-ish") == black)
    assert(parse_color(None) == black)
    assert(parse_color("#12") == black)
    assert(parse_color("FF0000") == black)


def test_to_hex():
    assert(to_hex({'red': 1.0, 'green': 0.5, 'blue': 0.0}) == "#ff8000")
    assert(to_hex({'blue': 1.0}) == "#0000ff")
    assert(to_hex(None) == "#000000")
    assert(to_hex(parse_color("#1a2b3c")) == "#1a2b3c")

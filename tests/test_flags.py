import pytest

from gwscli.flags import Flags, parse_flags, parse_int


def test_values_and_booleans():
    flags = parse_flags(["create", "Team sync", "--start", "tomorrow 2pm", "--notify", "--duration", "30m"])
    assert(flags.positionals == ["create", "Team sync"])
    assert(flags["start"] == "tomorrow 2pm")
    assert(flags["notify"] is True)
    assert(flags["duration"] == "30m")


def test_flag_followed_by_flag_is_boolean():
    flags = parse_flags(["--force", "--to", "a@b.com"])
    assert(flags["force"] is True)
    assert(flags["to"] == "a@b.com")


def test_trailing_and_empty():
    flags = parse_flags(["--confirm"])
    assert(flags["confirm"] is True)
    flags = parse_flags(["--body", "", "x"])
    assert(flags["body"] is True)
    assert(flags.positionals == ["", "x"])
    assert(parse_flags([]) == Flags())


def test_repeated_flag_overwrites():
    flags = parse_flags(["--role", "reader", "--role", "writer"])
    assert(flags["role"] == "writer")


def test_aliases():
    flags = parse_flags(["--name", "Doc", "--bold"])
    assert(flags.first("title", "name") == "Doc")
    assert(flags.first("title", default="x") == "x")
    assert(flags.text("bold") is None)
    assert(flags.text("bold", default="no") == "no")
    assert(flags.flag("italic", "bold"))
    assert(not flags.flag("italic"))
    assert("bold" in flags)


def test_numbers():
    flags = parse_flags(["--limit", "15x", "--size", "abc", "--x", "1.5", "--n"])
    assert(flags.int_value("limit") == 15)
    assert(flags.int_value("size", default=3) == 3)
    assert(flags.int_value("size", "limit") == 15)
    assert(flags.int_value("n", default=7) == 7)
    assert(flags.float_value("x") == 1.5)
    assert(flags.float_value("size", default=2.0) == 2.0)


def test_positional():
    flags = parse_flags(["a", "--k", "v", "b"])
    assert(flags.positional(0) == "a")
    assert(flags.positional(1) == "b")
    assert(flags.positional(2) is None)
    assert(flags.positional(2, "z") == "z")
    assert(flags.as_dict() == {"k": "v", "_": ["a", "b"]})


@pytest.mark.parametrize("text, expected", [("15m", 15), ("-3", -3), ("+4", 4), (" 42 ", 42),
                                            ("abc", None), ("-", None), ("", None), ("1.9", 1)])
def test_parse_int(text, expected):
    assert(parse_int(text) == expected)

"""
Ad-hoc command line flag parsing shared by all the tools.

The grammar is deliberately tiny:
    --key value     a string value, if the next token exists and isn't a flag
    --key           boolean True otherwise
    anything else   a positional, kept in order

No short options, no --key=value and no escaping.  A repeated flag
simply overwrites the earlier one.
"""
from dataclasses import dataclass, field

FLAG_PREFIX = "--"


@dataclass
class Flags():
    """
    Parsed flags for a single invocation.
    values maps flag name (without the leading --) to a string or True.
    """
    values: dict[str, str|bool] = field(default_factory=dict)
    positionals: list[str] = field(default_factory=list)

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __getitem__(self, key: str) -> str|bool:
        return self.values[key]

    def get(self, key: str, default: str|bool|None = None) -> str|bool|None:
        return self.values.get(key, default)

    def first(self, *keys: str, default: str|bool|None = None) -> str|bool|None:
        """
        Value of the first alias that is set to something truthy.
        The tools accept a lot of aliases (--title/--name etc) so this
        keeps the lookups on one line.
        """
        for k in keys:
            v = self.values.get(k)
            if v:
                return v
        return default

    def text(self, *keys: str, default: str|None = None) -> str|None:
        """
        Like first() but only for string values, a bare boolean
        flag where text was expected is treated as missing.
        """
        for k in keys:
            v = self.values.get(k)
            if isinstance(v, str) and v:
                return v
        return default

    def flag(self, *keys: str) -> bool:
        """True if any of the aliases was given at all"""
        return any(bool(self.values.get(k)) for k in keys)

    def int_value(self, *keys: str, default: int|None = None) -> int|None:
        """
        Integer value of the first alias that parses, default otherwise.
        Leading digits are used the same way a loose parseInt would.
        """
        for k in keys:
            v = self.values.get(k)
            if isinstance(v, str):
                n = parse_int(v)
                if n is not None:
                    return n
        return default

    def float_value(self, *keys: str, default: float|None = None) -> float|None:
        for k in keys:
            v = self.values.get(k)
            if isinstance(v, str):
                try:
                    return float(v)
                except ValueError:
                    continue
        return default

    def positional(self, index: int, default: str|None = None) -> str|None:
        if 0 <= index < len(self.positionals):
            return self.positionals[index]
        return default

    def as_dict(self) -> dict:
        """The classic flat shape, positionals under '_'"""
        d = dict(self.values)
        d["_"] = list(self.positionals)
        return d


def parse_int(value: str) -> int|None:
    """
    Parse the leading integer of a string, ignoring any trailing junk.
    '15m' -> 15, '-3' -> -3, 'abc' -> None
    """
    s = str(value).strip()
    digits = ""
    for i, c in enumerate(s):
        if c.isdigit() or (i == 0 and c in "+-"):
            digits += c
        else:
            break
    if digits in ("", "+", "-"):
        return None
    return int(digits)


def parse_flags(args: list[str]) -> Flags:
    """
    Parse an argument list into a Flags object.
    A flag followed by another flag, an empty token or the end of input
    is a boolean, otherwise the next token is its value.
    """
    flags = Flags()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith(FLAG_PREFIX):
            key = arg[len(FLAG_PREFIX):]
            nxt = args[i + 1] if i + 1 < len(args) else None
            if nxt and not nxt.startswith(FLAG_PREFIX):
                flags.values[key] = nxt
                i += 2
            else:
                flags.values[key] = True
                i += 1
        else:
            flags.positionals.append(arg)
            i += 1
    return flags

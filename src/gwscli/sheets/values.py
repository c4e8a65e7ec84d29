"""
Turning command line text into cell value grids and back out to CSV.
"""
from pathlib import Path
import csv
import io
import json


def parse_values(value: str, single_cell: bool = True) -> list[list]:
    """
    '[[1,2],[3,4]]' -> a grid as given
    '[1,2]'         -> one row
    'a, b, c'       -> one row, values trimmed
    'x'             -> one cell (or one row of one when single_cell is off,
                       which comes to the same thing)
    Malformed JSON raises ValueError.
    """
    v = str(value)
    if v.startswith("[["):
        grid = json.loads(v)
    elif v.startswith("["):
        grid = [json.loads(v)]
    elif "," in v or not single_cell:
        grid = [[x.strip() for x in v.split(",")]]
    else:
        grid = [[v]]
    if not isinstance(grid, list) or not all(isinstance(r, list) for r in grid):
        raise ValueError(f"Values must be a list of rows: {value}")
    return grid


def cell_text(value) -> str:
    return "" if value is None else str(value)


def format_table(rows: list[list], header: bool = False) -> list[str]:
    """
    Rows padded into ' | ' separated columns at least 3 wide, with a
    rule under the first row when header is set.
    """
    widths: list[int] = []
    for row in rows:
        for i, c in enumerate(row):
            n = max(len(cell_text(c)), 3)
            if i < len(widths):
                widths[i] = max(widths[i], n)
            else:
                widths.append(n)
    lines = []
    for r, row in enumerate(rows):
        lines.append(" | ".join(cell_text(c).ljust(widths[i]) for i, c in enumerate(row)))
        if r == 0 and header:
            lines.append("-+-".join("-" * w for w in widths))
    return lines


def to_csv(rows: list[list]) -> str:
    """Rows as CSV text, quoting only where needed, '\\n' line endings and no trailing newline"""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    for row in rows:
        writer.writerow([cell_text(c) for c in row])
    return buf.getvalue().rstrip("\n")


def read_csv(path: Path|str) -> list[list[str]]:
    """CSV file to rows, blank lines and all-blank rows skipped"""
    p = path if isinstance(path, Path) else Path(str(path))
    with open(p, 'r', encoding='utf-8', newline='') as f:
        rows = list(csv.reader(f))
    return [r for r in rows if r and any(c.strip() for c in r)]

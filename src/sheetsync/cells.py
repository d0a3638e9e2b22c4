"""Cell id parsing and grid index helpers."""

import re

from .errors import AppError, BAD_CELL_ID

CELL_ID_RE = re.compile(r"^[a-z]\d\d?$", re.IGNORECASE)
SHEET_NAME_RE = re.compile(r"^[\w\- ]+$")

N_COLS = 26
N_ROWS = 99


def is_cell_id(value: str) -> bool:
    """Return True if value is a letter followed by one or two digits."""
    return bool(CELL_ID_RE.match(value))


def is_sheet_name(value: str) -> bool:
    return bool(SHEET_NAME_RE.match(value))


def canonical_cell_id(cell_id: str) -> str:
    """Return the lowercase form of a cell id, raising AppError if malformed."""
    cell_id = cell_id.strip()
    if not is_cell_id(cell_id):
        raise AppError(BAD_CELL_ID, f'bad cell id "{cell_id}"')
    return cell_id.lower()


def col_index(cell_id: str) -> int:
    """0-based column index of a cell id. a=0, b=1, ..."""
    return ord(cell_id[0].lower()) - ord("a")


def row_index(cell_id: str) -> int:
    """0-based row index of a cell id. a1 -> 0."""
    return int(cell_id[1:]) - 1


def index_to_col_spec(index: int) -> str:
    return chr(ord("a") + index)


def index_to_row_spec(index: int) -> str:
    return str(index + 1)


def make_cell_id(col: int, row: int) -> str:
    """Build a canonical cell id from 0-based column and row indexes."""
    if not (0 <= col < N_COLS and 0 <= row < N_ROWS):
        raise AppError(BAD_CELL_ID, f"cell at column {col}, row {row} is out of range")
    return f"{index_to_col_spec(col)}{index_to_row_spec(row)}"

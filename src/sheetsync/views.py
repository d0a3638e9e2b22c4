"""Full-grid view models for rendering a spreadsheet."""

from typing import Optional

from .cells import col_index, index_to_col_spec, row_index
from .config import settings
from .engine import Spreadsheet


def grid_size(
    cell_ids: list[str], min_rows: Optional[int] = None, min_cols: Optional[int] = None
) -> tuple[int, int]:
    """Return (rows, cols) big enough for every cell id and the minimum size."""
    min_rows = settings.min_rows if min_rows is None else min_rows
    min_cols = settings.min_cols if min_cols is None else min_cols
    rows = max((row_index(c) + 1 for c in cell_ids), default=0)
    cols = max((col_index(c) + 1 for c in cell_ids), default=0)
    return max(rows, min_rows), max(cols, min_cols)


def build_view_model(
    spreadsheet: Spreadsheet, min_rows: Optional[int] = None, min_cols: Optional[int] = None
) -> dict:
    """Project the current state of spreadsheet onto a display grid.

    Returns ``{"ss_name", "header", "cells"}`` where header is
    ``[name, "A", "B", ...]`` and cells is a list of
    ``{"row_num": n, "values": [...]}`` rows.
    """
    value_formulas = spreadsheet.value_formulas()
    rows, cols = grid_size(list(value_formulas), min_rows, min_cols)
    columns = [index_to_col_spec(i) for i in range(cols)]

    cells = []
    for row in range(1, rows + 1):
        values = []
        for col in columns:
            cell = value_formulas.get(f"{col}{row}")
            value = cell["value"] if cell else None
            values.append("" if value is None else value)
        cells.append({"row_num": row, "values": values})

    return {
        "ss_name": spreadsheet.name,
        "header": [spreadsheet.name, *(c.upper() for c in columns)],
        "cells": cells,
    }

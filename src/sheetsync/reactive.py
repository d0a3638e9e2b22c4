"""Reactive client controller for an interactive spreadsheet view.

The controller never caches cell contents: the engine is the source of
truth and ``view()`` re-projects from it. Mutations go to the engine first;
the local ``version`` is bumped only after one succeeds, so a failed action
leaves focus and copy source exactly as they were.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import httpx

from .cells import index_to_col_spec, index_to_row_spec
from .engine import Spreadsheet
from .errors import AppError
from .store.base import SpreadsheetStore
from .store.client import StoreClientError
from .validation import validate_sheet_name

logger = logging.getLogger(__name__)

VIEW_ROWS, VIEW_COLS = 10, 10

# Failures an action reports to the user instead of raising
ACTION_ERRORS = (AppError, StoreClientError, httpx.HTTPError)


@dataclass
class MenuItem:
    """A context menu entry; ``action`` is None when the item is disabled."""

    label: str
    action: Optional[Callable[[], Awaitable[None]]] = None

    @property
    def enabled(self) -> bool:
        return self.action is not None


@dataclass
class ControllerState:
    focused_cell_id: str = ""
    copy_source_id: str = ""
    version: int = 0
    error: str = ""


@dataclass
class CellView:
    cell_id: str
    value: object = ""
    formula: str = ""
    classes: list[str] = field(default_factory=list)


class SpreadsheetController:
    """UI state for one open spreadsheet."""

    def __init__(self, spreadsheet: Spreadsheet):
        self.spreadsheet = spreadsheet
        self.state = ControllerState()

    def _has_formula(self, cell_id: str) -> bool:
        return bool(cell_id) and bool(self.spreadsheet.query(cell_id)["formula"])

    def _applied(self):
        self.state.version += 1

    async def _run(self, description: str, call: Callable[[], Awaitable[None]]) -> bool:
        try:
            await call()
        except ACTION_ERRORS as e:
            logger.info(f"{description} failed: {e}")
            self.state.error = getattr(e, "message", None) or str(e)
            return False
        self._applied()
        return True

    def focus(self, cell_id: str):
        """Focus cell_id and clear any displayed error."""
        self.state.focused_cell_id = cell_id.lower()
        self.state.error = ""

    @property
    def current_formula(self) -> str:
        return self.spreadsheet.query(self.state.focused_cell_id)["formula"]

    async def submit_formula(self, formula: str) -> bool:
        """Evaluate formula into the focused cell."""
        cell_id = self.state.focused_cell_id
        if not cell_id:
            self.state.error = "No cell is focused"
            return False
        return await self._run(
            f"Update of {cell_id}", lambda: self.spreadsheet.eval(cell_id, formula)
        )

    def copy(self):
        """Remember the focused cell as the source of the next paste."""
        self.state.copy_source_id = self.state.focused_cell_id

    async def paste(self) -> bool:
        dest, src = self.state.focused_cell_id, self.state.copy_source_id
        return await self._run(
            f"Paste of {src} to {dest}", lambda: self.spreadsheet.copy(dest, src)
        )

    async def delete(self) -> bool:
        cell_id = self.state.focused_cell_id
        return await self._run(f"Delete of {cell_id}", lambda: self.spreadsheet.delete(cell_id))

    async def clear(self) -> bool:
        return await self._run(f"Clear of {self.spreadsheet.name}", self.spreadsheet.clear)

    def cell_menu(self) -> list[MenuItem]:
        """Copy/Delete/Paste entries for the focused cell."""
        focused = self.state.focused_cell_id
        source = self.state.copy_source_id
        focused_ok = self._has_formula(focused)
        source_ok = self._has_formula(source)

        async def do_copy():
            self.copy()

        return [
            MenuItem(f"Copy {focused.upper()}", do_copy) if focused_ok else MenuItem("Copy"),
            MenuItem(f"Delete {focused.upper()}", self.delete) if focused_ok else MenuItem("Delete"),
            MenuItem(f"Paste {source.upper()} to {focused.upper()}", self.paste)
            if source_ok
            else MenuItem("Paste"),
        ]

    def sheet_menu(self) -> list[MenuItem]:
        return [MenuItem("Clear", self.clear)]

    def view(self) -> dict:
        """Project the spreadsheet onto the fixed display grid."""
        value_formulas = self.spreadsheet.value_formulas()
        rows = []
        for r in range(VIEW_ROWS):
            row = []
            for c in range(VIEW_COLS):
                cell_id = f"{index_to_col_spec(c)}{index_to_row_spec(r)}"
                cell = value_formulas.get(cell_id, {})
                classes = []
                if cell_id == self.state.focused_cell_id:
                    classes.append("focused")
                if cell_id == self.state.copy_source_id:
                    classes.append("copied")
                value = cell.get("value")
                row.append(
                    CellView(
                        cell_id,
                        "" if value is None else value,
                        cell.get("formula", ""),
                        classes,
                    )
                )
            rows.append(row)
        return {
            "name": self.spreadsheet.name,
            "version": self.state.version,
            "focused": self.state.focused_cell_id.upper(),
            "formula": self.current_formula,
            "col_headers": [index_to_col_spec(c).upper() for c in range(VIEW_COLS)],
            "row_headers": [index_to_row_spec(r) for r in range(VIEW_ROWS)],
            "rows": rows,
            "error": self.state.error,
        }


class SpreadsheetApp:
    """Opens spreadsheets by name against a (usually remote) store."""

    def __init__(self, store: SpreadsheetStore):
        self.store = store
        self.controller: Optional[SpreadsheetController] = None

    async def open(self, ss_name: str) -> SpreadsheetController:
        """Open ss_name, raising ValueError if the name is not valid."""
        ss_name = ss_name.strip()
        error = validate_sheet_name(ss_name)
        if error:
            raise ValueError(error)
        spreadsheet = await Spreadsheet.make(ss_name, self.store)
        self.controller = SpreadsheetController(spreadsheet)
        return self.controller

"""Spreadsheet evaluation engine backed by a spreadsheet store."""

import logging
import math
from collections import deque
from typing import Any, Optional

from ..cells import canonical_cell_id, col_index, is_cell_id, row_index
from ..errors import AppError, CIRCULAR_REF
from ..store.base import SpreadsheetStore
from .parser import Node, evaluate, parse, references, shift_references

logger = logging.getLogger(__name__)


def _display_value(value: Optional[float]) -> Any:
    """Render integral floats as ints so 3.0 shows as 3."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


class Spreadsheet:
    """A named spreadsheet whose formulas live in a store.

    Formulas are cached locally after ``make``; every mutation is written to
    the store first and only applied locally once the store call succeeds.
    Values are recomputed from formulas after each mutation and never stored.
    """

    def __init__(self, name: str, store: SpreadsheetStore):
        self.name = name
        self.store = store
        self._formulas: dict[str, str] = {}
        self._asts: dict[str, Node] = {}
        self._values: dict[str, Any] = {}

    @classmethod
    async def make(cls, name: str, store: SpreadsheetStore) -> "Spreadsheet":
        """Create a spreadsheet loaded with the formulas stored under name."""
        spreadsheet = cls(name, store)
        for cell_id, formula in await store.read_formulas(name):
            spreadsheet._load(cell_id, formula)
        spreadsheet._recompute()
        return spreadsheet

    def _load(self, cell_id: str, formula: str):
        cell_id = cell_id.lower()
        self._formulas[cell_id] = formula
        try:
            self._asts[cell_id] = parse(formula)
        except AppError as e:
            # Stores accept raw formulas; bad ones are kept but not evaluated
            logger.warning(f"Spreadsheet {self.name}: cannot parse stored {cell_id}: {e}")

    def _check_cycle(self, cell_id: str, ast: Node):
        deps = {cid: references(node) for cid, node in self._asts.items()}
        deps[cell_id] = references(ast)
        stack = list(deps[cell_id])
        seen = set()
        while stack:
            current = stack.pop()
            if current == cell_id:
                raise AppError(
                    CIRCULAR_REF, f"circular reference involving cell {cell_id.upper()}"
                )
            if current in seen:
                continue
            seen.add(current)
            stack.extend(deps.get(current, ()))

    def _evaluation_order(self) -> list[str]:
        """Return parsed cells ordered so each follows the cells it reads (Kahn).

        Cells on a circular reference, or reading from one, are left out.
        """
        cells = set(self._asts)
        dependencies = {cid: references(ast) & cells for cid, ast in self._asts.items()}
        dependents: dict[str, set[str]] = {}
        for cid, refs in dependencies.items():
            for ref in refs:
                dependents.setdefault(ref, set()).add(cid)

        in_degree = {cid: len(refs) for cid, refs in dependencies.items()}
        queue: deque[str] = deque(cid for cid in self._formulas if in_degree.get(cid) == 0)
        order: list[str] = []
        while queue:
            cell_id = queue.popleft()
            order.append(cell_id)
            for dep in dependents.get(cell_id, ()):
                in_degree[dep] -= 1
                if in_degree[dep] == 0:
                    queue.append(dep)

        if len(order) != len(cells):
            # only reachable through formulas written to the store directly
            stuck = sorted(cells - set(order))
            logger.warning(f"Spreadsheet {self.name}: not evaluating circular cells {stuck}")
        return order

    def _recompute(self):
        values: dict[str, Any] = dict.fromkeys(self._formulas)

        def value_of(cell_id: str) -> float:
            value = values.get(cell_id)
            return value if isinstance(value, (int, float)) else 0

        for cell_id in self._evaluation_order():
            values[cell_id] = evaluate(self._asts[cell_id], value_of)
        self._values = values

    async def eval(self, cell_id: str, formula: str):
        """Set cell_id to formula, failing with SYNTAX or CIRCULAR_REF."""
        cell_id = canonical_cell_id(cell_id)
        formula = formula.strip()
        ast = parse(formula)
        self._check_cycle(cell_id, ast)
        await self.store.update_cell(self.name, cell_id, formula)
        self._formulas[cell_id] = formula
        self._asts[cell_id] = ast
        self._recompute()

    async def copy(self, dest_cell_id: str, src_cell_id: str):
        """Copy the formula at src_cell_id to dest_cell_id.

        Relative references are shifted by the distance between the cells.
        Copying an empty cell deletes the destination.
        """
        dest_cell_id = canonical_cell_id(dest_cell_id)
        src_cell_id = canonical_cell_id(src_cell_id)
        src_formula = self._formulas.get(src_cell_id)
        if src_formula is None:
            await self.delete(dest_cell_id)
            return
        formula = shift_references(
            src_formula,
            col_index(dest_cell_id) - col_index(src_cell_id),
            row_index(dest_cell_id) - row_index(src_cell_id),
        )
        await self.eval(dest_cell_id, formula)

    async def delete(self, cell_id: str):
        """Remove cell_id; cells referring to it now read 0."""
        cell_id = canonical_cell_id(cell_id)
        await self.store.delete(self.name, cell_id)
        self._formulas.pop(cell_id, None)
        self._asts.pop(cell_id, None)
        self._recompute()

    async def clear(self):
        """Remove every cell of this spreadsheet."""
        await self.store.clear(self.name)
        self._formulas.clear()
        self._asts.clear()
        self._values.clear()

    def query(self, cell_id: str) -> dict:
        """Return {value, formula} for cell_id; empty cells have formula ''."""
        if not cell_id or not is_cell_id(cell_id):
            return {"value": None, "formula": ""}
        cell_id = cell_id.lower()
        return {
            "value": _display_value(self._values.get(cell_id)),
            "formula": self._formulas.get(cell_id, ""),
        }

    def dump(self) -> list[list[str]]:
        """Return [cell_id, formula] pairs in store order."""
        return [[cell_id, formula] for cell_id, formula in self._formulas.items()]

    def value_formulas(self) -> dict[str, dict]:
        return {cell_id: self.query(cell_id) for cell_id in self._formulas}

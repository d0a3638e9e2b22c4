"""Typed store commands and how each one is applied."""

import logging
from dataclasses import dataclass, field
from typing import Union

from .cells import col_index, row_index
from .engine import Spreadsheet, shift_references
from .store.base import SpreadsheetStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateCell:
    cell_id: str
    formula: str


@dataclass(frozen=True)
class DeleteCell:
    cell_id: str


@dataclass(frozen=True)
class ClearAll:
    pass


@dataclass(frozen=True)
class ReplaceAll:
    """Clear the sheet, then set each (cell_id, formula) pair in order."""

    pairs: tuple[tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CopyCell:
    dest_cell_id: str
    src_cell_id: str


Command = Union[UpdateCell, DeleteCell, ClearAll, ReplaceAll, CopyCell]


async def apply_to_store(store: SpreadsheetStore, name: str, command: Command):
    """Run command directly against a store, without evaluating formulas.

    Copies shift relative references the same way the engine does.
    Multi-pair commands issue one store call per pair, in order; a failure
    leaves the pairs before it applied.
    """
    logger.debug(f"Applying {command} to store sheet {name}")
    if isinstance(command, UpdateCell):
        await store.update_cell(name, command.cell_id, command.formula)
    elif isinstance(command, DeleteCell):
        await store.delete(name, command.cell_id)
    elif isinstance(command, ClearAll):
        await store.clear(name)
    elif isinstance(command, ReplaceAll):
        await store.clear(name)
        for cell_id, formula in command.pairs:
            await store.update_cell(name, cell_id, formula)
    elif isinstance(command, CopyCell):
        formulas = dict(await store.read_formulas(name))
        src, dest = command.src_cell_id, command.dest_cell_id
        if src not in formulas:
            await store.delete(name, dest)
            return
        formula = shift_references(
            formulas[src], col_index(dest) - col_index(src), row_index(dest) - row_index(src)
        )
        await store.update_cell(name, dest, formula)
    else:
        raise TypeError(f"Unknown command: {command!r}")


async def apply_to_spreadsheet(spreadsheet: Spreadsheet, command: Command):
    """Run command through the evaluation engine."""
    logger.debug(f"Applying {command} to spreadsheet {spreadsheet.name}")
    if isinstance(command, UpdateCell):
        await spreadsheet.eval(command.cell_id, command.formula)
    elif isinstance(command, DeleteCell):
        await spreadsheet.delete(command.cell_id)
    elif isinstance(command, ClearAll):
        await spreadsheet.clear()
    elif isinstance(command, ReplaceAll):
        await spreadsheet.clear()
        for cell_id, formula in command.pairs:
            await spreadsheet.eval(cell_id, formula)
    elif isinstance(command, CopyCell):
        await spreadsheet.copy(command.dest_cell_id, command.src_cell_id)
    else:
        raise TypeError(f"Unknown command: {command!r}")

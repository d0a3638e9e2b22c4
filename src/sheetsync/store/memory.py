"""In-process store backend."""

import logging

logger = logging.getLogger(__name__)


class MemoryStore:
    """Keeps formulas in ordered dicts; contents are lost on restart."""

    def __init__(self):
        self._sheets: dict[str, dict[str, str]] = {}

    async def initialize(self):
        logger.info("Using in-memory spreadsheet store")

    async def close(self):
        pass

    async def read_formulas(self, name: str) -> list[tuple[str, str]]:
        return list(self._sheets.get(name, {}).items())

    async def update_cell(self, name: str, cell_id: str, formula: str) -> None:
        self._sheets.setdefault(name, {})[cell_id] = formula

    async def clear(self, name: str) -> None:
        self._sheets.pop(name, None)

    async def delete(self, name: str, cell_id: str) -> None:
        self._sheets.get(name, {}).pop(cell_id, None)

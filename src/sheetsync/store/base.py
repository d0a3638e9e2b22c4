"""Store protocol shared by local backends and the remote store client."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SpreadsheetStore(Protocol):
    """Persistent cell formulas, partitioned by spreadsheet name.

    Every call is atomic on its own. Updating an existing cell keeps its
    position in ``read_formulas`` order.
    """

    async def read_formulas(self, name: str) -> list[tuple[str, str]]:
        ...

    async def update_cell(self, name: str, cell_id: str, formula: str) -> None:
        ...

    async def clear(self, name: str) -> None:
        ...

    async def delete(self, name: str, cell_id: str) -> None:
        ...

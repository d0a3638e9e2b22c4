"""SQLite-based spreadsheet store."""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from ..config import settings
from ..errors import AppError, DB

logger = logging.getLogger(__name__)


class SQLiteStore:
    """Persistent storage for spreadsheet cell formulas."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS cells (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                sheet TEXT NOT NULL,
                cell_id TEXT NOT NULL,
                formula TEXT NOT NULL,
                UNIQUE (sheet, cell_id)
            );

            CREATE INDEX IF NOT EXISTS idx_cells_sheet ON cells(sheet);
            """
        )
        await self._connection.commit()
        logger.info(f"Opened spreadsheet store at {self.db_path}")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise AppError(DB, "store is not initialized")
        return self._connection

    async def read_formulas(self, name: str) -> list[tuple[str, str]]:
        """Return (cell_id, formula) pairs in the order cells were created."""
        async with self._conn().execute(
            "SELECT cell_id, formula FROM cells WHERE sheet = ? ORDER BY seq",
            (name,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [(row[0], row[1]) for row in rows]

    async def update_cell(self, name: str, cell_id: str, formula: str) -> None:
        await self._conn().execute(
            """
            INSERT INTO cells (sheet, cell_id, formula) VALUES (?, ?, ?)
            ON CONFLICT (sheet, cell_id) DO UPDATE SET formula = excluded.formula
            """,
            (name, cell_id, formula),
        )
        await self._conn().commit()

    async def clear(self, name: str) -> None:
        await self._conn().execute("DELETE FROM cells WHERE sheet = ?", (name,))
        await self._conn().commit()

    async def delete(self, name: str, cell_id: str) -> None:
        await self._conn().execute(
            "DELETE FROM cells WHERE sheet = ? AND cell_id = ?", (name, cell_id)
        )
        await self._conn().commit()

"""
SQLite Repository - College catalog storage.

Features:
- Async operations via aiosqlite
- Corpus snapshots as SearchableRecord lists
- Bulk inserts for seeding
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import aiosqlite

from collegematch.config.errors import CatalogError
from collegematch.domains.search.models import SearchableRecord

logger = logging.getLogger(__name__)

__all__ = ["CollegeRepository", "COLLEGE_FIELDS"]

COLLEGE_FIELDS: tuple[str, ...] = (
    "name",
    "city",
    "state",
    "district",
    "college_type",
    "stream",
)


class CollegeRepository:
    """
    SQLite repository for the college catalog.

    Example:
        >>> repo = CollegeRepository("data/collegematch.db")
        >>> await repo.initialize()
        >>> college_id = await repo.insert_college(name="BANGALORE MEDICAL COLLEGE", city="Bangalore")
        >>> corpus = await repo.list_records()
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS colleges (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                city TEXT,
                state TEXT,
                district TEXT,
                college_type TEXT,
                stream TEXT,
                metadata TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_colleges_state ON colleges(state);
            CREATE INDEX IF NOT EXISTS idx_colleges_type ON colleges(college_type);
        """)

        await conn.commit()
        logger.info("Database initialized: %s", self.db_path)

    async def insert_college(
        self,
        name: str,
        city: str | None = None,
        state: str | None = None,
        district: str | None = None,
        college_type: str | None = None,
        stream: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Insert a college.

        Returns:
            College ID
        """
        conn = await self._get_connection()

        cursor = await conn.execute(
            """
            INSERT INTO colleges (name, city, state, district, college_type, stream, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name,
                city,
                state,
                district,
                college_type,
                stream,
                json.dumps(metadata) if metadata else None,
            ),
        )

        await conn.commit()
        return cursor.lastrowid

    async def insert_colleges(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """
        Insert many colleges in one transaction.

        Unknown keys are ignored; rows without a name are rejected.

        Returns:
            Number of rows inserted
        """
        values = []
        for index, row in enumerate(rows):
            if not row.get("name"):
                raise CatalogError(
                    "College row is missing a name",
                    details={"row": index},
                )
            values.append(tuple(row.get(column) for column in COLLEGE_FIELDS))

        conn = await self._get_connection()
        await conn.executemany(
            """
            INSERT INTO colleges (name, city, state, district, college_type, stream)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            values,
        )
        await conn.commit()

        logger.info("Inserted %d colleges", len(values))
        return len(values)

    async def get_college(self, college_id: int) -> dict[str, Any] | None:
        """Get college by ID."""
        conn = await self._get_connection()

        cursor = await conn.execute(
            "SELECT * FROM colleges WHERE id = ?", (college_id,)
        )
        row = await cursor.fetchone()

        if row:
            return dict(row)
        return None

    async def list_records(self) -> list[SearchableRecord]:
        """
        Snapshot the catalog as searchable records, in insertion order.

        Empty columns are left out of each record's fields.
        """
        conn = await self._get_connection()

        columns = ", ".join(("id",) + COLLEGE_FIELDS)
        cursor = await conn.execute(f"SELECT {columns} FROM colleges ORDER BY id")
        rows = await cursor.fetchall()

        return [
            SearchableRecord(
                id=row["id"],
                fields={
                    column: row[column]
                    for column in COLLEGE_FIELDS
                    if row[column] not in (None, "")
                },
            )
            for row in rows
        ]

    async def count(self) -> int:
        """Get total college count."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) FROM colleges")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

"""
Catalog Files - Read college catalogs from JSON or JSON Lines files.

Accepted layouts:
- a JSON array of objects
- a JSON object with a "colleges" array
- JSON Lines, one object per line (.jsonl)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from collegematch.config.errors import CatalogError
from collegematch.domains.search.models import SearchableRecord

logger = logging.getLogger(__name__)

__all__ = ["read_catalog_rows", "load_corpus_file"]


def read_catalog_rows(path: str | Path) -> list[dict[str, Any]]:
    """
    Read raw catalog rows.

    Raises:
        CatalogError: File missing, unreadable, or not a list of objects
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(
            f"Cannot read catalog file: {path}",
            details={"path": str(path), "error": str(e)},
        ) from e

    try:
        if path.suffix == ".jsonl":
            data: Any = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogError(
            f"Catalog file is not valid JSON: {path}",
            details={"path": str(path), "line": e.lineno},
        ) from e

    if isinstance(data, dict):
        data = data.get("colleges")

    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise CatalogError(
            "Catalog must be a list of objects",
            details={"path": str(path)},
        )

    logger.debug("Read %d catalog rows from %s", len(data), path)
    return data


def load_corpus_file(path: str | Path) -> list[SearchableRecord]:
    """
    Load a catalog file as a search corpus, in file order.

    Either every row carries a unique "id" or none does; in the latter case
    rows are numbered from 1 by position.

    Raises:
        CatalogError: Unreadable file, missing, duplicate or invalid ids
    """
    rows = read_catalog_rows(path)
    numbered = any("id" in row for row in rows)

    records = []
    seen: set[int | str] = set()
    for position, row in enumerate(rows, start=1):
        record_id = row.get("id") if numbered else position
        if record_id is None:
            raise CatalogError(
                f"Catalog row {position} has no id",
                details={"path": str(path), "row": position},
            )
        fields = {key: value for key, value in row.items() if key != "id"}
        try:
            record = SearchableRecord(id=record_id, fields=fields)
        except ValidationError as e:
            raise CatalogError(
                f"Catalog row {position} is invalid",
                details={"path": str(path), "row": position, "error": str(e)},
            ) from e
        if record.id in seen:
            raise CatalogError(
                f"Duplicate id {record.id!r} in catalog",
                details={"path": str(path), "row": position, "id": record.id},
            )
        seen.add(record.id)
        records.append(record)

    logger.info("Loaded %d records from %s", len(records), path)
    return records

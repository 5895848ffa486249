"""Load a product catalog from a JSON or CSV file."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.errors import CatalogError
from stockscan.runtime.logging import get_logger

logger = get_logger(__name__)


def _entry_from_mapping(row: dict[str, Any], where: str) -> ProductCatalogEntry:
    product_id = str(row.get("id") or "").strip()
    name = str(row.get("name") or "").strip()
    if not product_id or not name:
        raise CatalogError(f"{where}: catalog entries need an id and a name")
    return ProductCatalogEntry(id=product_id, name=name, unit=str(row.get("unit") or "").strip())


def _load_json(path: Path) -> list[ProductCatalogEntry]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("products", [])
    if not isinstance(data, list):
        raise CatalogError(f"{path}: expected a list of products")

    entries = []
    for i, row in enumerate(data):
        if not isinstance(row, dict):
            raise CatalogError(f"{path}[{i}]: expected an object")
        entries.append(_entry_from_mapping(row, f"{path}[{i}]"))
    return entries


def _load_csv(path: Path) -> list[ProductCatalogEntry]:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or not {"id", "name"} <= set(reader.fieldnames):
            raise CatalogError(f"{path}: CSV header must include id and name")
        # Header is line 1
        return [_entry_from_mapping(row, f"{path}:{line}") for line, row in enumerate(reader, start=2)]


def load_catalog(path: Path | str) -> list[ProductCatalogEntry]:
    """
    Read catalog entries from ``.json`` (list of objects) or ``.csv`` (id,name,unit).

    Raises:
        CatalogError: The file is missing, unreadable or malformed
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".csv"):
        raise CatalogError(f"Unsupported catalog format: {path.suffix or path.name}")

    try:
        entries = _load_json(path) if suffix == ".json" else _load_csv(path)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            raise CatalogError(f"{path}: duplicate product id {entry.id!r}")
        seen.add(entry.id)

    logger.debug("Loaded %d catalog entries from %s", len(entries), path)
    return entries

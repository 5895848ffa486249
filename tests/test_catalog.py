"""Tests for catalog file loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.errors import CatalogError
from stockscan.runtime.catalog import load_catalog


def test_load_json_catalog(tmp_path: Path) -> None:
    path = tmp_path / "products.json"
    path.write_text(
        json.dumps([{"id": "p1", "name": "Tomates", "unit": "kg"}, {"id": "p2", "name": "Sel"}]),
        encoding="utf-8",
    )

    assert load_catalog(path) == [
        ProductCatalogEntry(id="p1", name="Tomates", unit="kg"),
        ProductCatalogEntry(id="p2", name="Sel", unit=""),
    ]


def test_load_json_catalog_with_products_key(tmp_path: Path) -> None:
    path = tmp_path / "products.json"
    path.write_text(json.dumps({"products": [{"id": 7, "name": "Sucre"}]}), encoding="utf-8")

    assert load_catalog(str(path)) == [ProductCatalogEntry(id="7", name="Sucre")]


def test_load_csv_catalog(tmp_path: Path) -> None:
    path = tmp_path / "products.csv"
    path.write_text("id,name,unit\np1,Tomates,kg\np5,Œufs frais,unité\n", encoding="utf-8")

    assert load_catalog(path) == [
        ProductCatalogEntry(id="p1", name="Tomates", unit="kg"),
        ProductCatalogEntry(id="p5", name="Œufs frais", unit="unité"),
    ]


@pytest.mark.parametrize(
    ("file_name", "content"),
    [
        ("products.json", "{broken"),
        ("products.json", '[{"id": "p1"}]'),
        ("products.json", '[{"id": "p1", "name": "A"}, {"id": "p1", "name": "B"}]'),
        ("products.csv", "code,label\np1,Tomates\n"),
        ("products.txt", "p1 Tomates"),
    ],
)
def test_invalid_catalogs(tmp_path: Path, file_name: str, content: str) -> None:
    path = tmp_path / file_name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CatalogError):
        load_catalog(path)


def test_missing_catalog(tmp_path: Path) -> None:
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "absent.json")

"""Tests for the review helpers driven by the confirmation UI."""

from __future__ import annotations

from decimal import Decimal

from stockscan.application.scans.review import (
    apply_user_correction,
    select_confident_matches,
    to_delivery_items,
    to_recipe_ingredients,
)
from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.scan import DeliveryItem, MatchType, ParsedLine, RecipeIngredient
from stockscan.ocr.line_parser import parse_line
from stockscan.ocr.matcher import match
from stockscan.runtime.correction_memory import CorrectionMemory


def test_user_correction_marks_item_and_records(
    catalog: list[ProductCatalogEntry], memory: CorrectionMemory
) -> None:
    item = match(parse_line("Tomate cerise 2kg"), catalog, memory)
    pigeon = catalog[1]

    corrected = apply_user_correction(item, pigeon, memory, catalog)

    assert corrected.product == pigeon
    assert corrected.match_score == 1.0
    assert corrected.match_type is MatchType.EXACT
    assert corrected.user_corrected is True
    assert corrected.corrected_product_id == "p2"
    assert all(alt.id != "p2" for alt in corrected.alternatives)
    assert corrected.parsed == item.parsed

    learned = memory.lookup("tomate cerise")
    assert learned is not None
    assert learned.product_id == "p2"

    rescanned = match(parse_line("TOMATE CERISE 3kg"), catalog, memory)
    assert rescanned.product == pigeon
    assert rescanned.match_score == 1.0


def test_user_correction_without_catalog_reuses_alternatives(catalog: list[ProductCatalogEntry]) -> None:
    item = match(parse_line("Tomates 5kg"), catalog)
    replacement = item.alternatives[0]

    corrected = apply_user_correction(item, replacement, None)

    assert corrected.product == replacement
    assert corrected.alternatives[0].id == "p1"
    assert all(alt.id != replacement.id for alt in corrected.alternatives)
    assert len(corrected.alternatives) <= 3


def test_select_confident_matches(catalog: list[ProductCatalogEntry]) -> None:
    items = [
        match(parse_line("Tomates 5kg"), catalog),
        match(parse_line("Farine 1kg"), catalog),
        match(parse_line("zzqx 2"), catalog),
    ]

    assert select_confident_matches(items) == {0, 1}
    assert select_confident_matches(items, threshold=0.95) == {0}


def test_to_delivery_items_defaults(catalog: list[ProductCatalogEntry]) -> None:
    items = [
        match(parse_line("Tomates 5kg 12.50€"), catalog),
        match(parse_line("Sucre"), catalog),
        match(parse_line("zzqx"), catalog),
    ]

    assert to_delivery_items(items) == [
        DeliveryItem(product_id="p1", product_name="Tomates", quantity=Decimal("5"), price=Decimal("12.50")),
        DeliveryItem(product_id="p7", product_name="Sucre", quantity=Decimal("1"), price=Decimal("0")),
    ]
    assert [item.product_id for item in to_delivery_items(items, selected={1})] == ["p7"]


def test_to_recipe_ingredients_falls_back_to_product_unit(catalog: list[ProductCatalogEntry]) -> None:
    items = [
        match(parse_line("200 g de farine"), catalog),
        match(parse_line("3 oeufs"), catalog),
        match(ParsedLine(raw="2 zzqx", name="zzqx", quantity=Decimal("2")), catalog),
    ]

    assert to_recipe_ingredients(items) == [
        RecipeIngredient(product_id="p4", product_name="Farine de blé T55", quantity=Decimal("200"), unit="g"),
        RecipeIngredient(product_id="p5", product_name="Œufs frais", quantity=Decimal("3"), unit="unité"),
        RecipeIngredient(product_id=None, product_name="zzqx", quantity=Decimal("2"), unit=""),
    ]

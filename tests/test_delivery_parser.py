"""Tests for delivery note line parsing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from stockscan.ocr.line_parser import build_unit_vocabulary, parse_delivery_lines, parse_line, split_lines


def test_quantity_unit_and_price_are_extracted() -> None:
    lines = parse_delivery_lines("Tomates 5kg 12.50€")

    assert len(lines) == 1
    line = lines[0]
    assert line.name == "Tomates"
    assert line.quantity == Decimal("5")
    assert line.unit == "kg"
    assert line.price == Decimal("12.50")
    assert line.raw == "Tomates 5kg 12.50€"
    assert line.confidence == 1.0


@pytest.mark.parametrize(
    ("raw", "name", "quantity", "unit", "price"),
    [
        ("Oignons jaunes 2 kg", "Oignons jaunes", Decimal("2"), "kg", None),
        ("Crème fraîche 1,5 L 4,20 €", "Crème fraîche", Decimal("1.5"), "L", Decimal("4.20")),
        ("3 barquettes fraises 7.80", "fraises", Decimal("3"), "barquette", Decimal("7.80")),
        ("Oeufs x12", "Oeufs", Decimal("12"), None, None),
        ("Beurre doux 250g", "Beurre doux", Decimal("250"), "g", None),
        ("6 Yaourts nature", "Yaourts nature", Decimal("6"), None, None),
        ("Riz 5 kg 1 234,50 €", "Riz", Decimal("5"), "kg", Decimal("1234.50")),
        ("Huile d'olive 20 L 1.050,00 €", "Huile d'olive", Decimal("20"), "L", Decimal("1050.00")),
        ("Sucre 1kg 2", "Sucre", Decimal("1"), "kg", None),
        ("Pack 6 x 1,5 L Eau", "Pack Eau", Decimal("1.5"), "L", None),
    ],
)
def test_parse_line_variants(
    raw: str, name: str, quantity: Decimal | None, unit: str | None, price: Decimal | None
) -> None:
    line = parse_line(raw)

    assert line.name == name
    assert line.quantity == quantity
    assert line.unit == unit
    assert line.price == price


def test_line_without_quantity_is_kept_with_null_fields() -> None:
    lines = parse_delivery_lines("Carton de salade")

    assert len(lines) == 1
    assert lines[0].name == "Carton de salade"
    assert lines[0].quantity is None
    assert lines[0].unit is None
    assert lines[0].price is None
    assert lines[0].confidence == pytest.approx(0.7)


def test_blank_and_noise_lines_are_dropped() -> None:
    text = "\n  \nTomates 5kg\na\n\nOignons 2 kg\n"

    lines = parse_delivery_lines(text)

    assert [line.name for line in lines] == ["Tomates", "Oignons"]


def test_empty_text_yields_no_lines() -> None:
    assert parse_delivery_lines("") == []
    assert split_lines("   \n\n") == []


def test_lines_keep_reading_order() -> None:
    text = "Sucre 1kg\nFarine 5kg\nSel 500g"

    assert [line.name for line in parse_delivery_lines(text)] == ["Sucre", "Farine", "Sel"]


def test_temperature_is_not_a_quantity() -> None:
    line = parse_line("Conserver à 4°C")

    assert line.quantity is None


def test_configured_unit_alias() -> None:
    vocabulary = build_unit_vocabulary({"plateau": "plateau"})

    line = parse_line("2 plateau Pêches", vocabulary=vocabulary)

    assert line.quantity == Decimal("2")
    assert line.unit == "plateau"
    assert line.name == "Pêches"


def test_parse_never_raises_on_garbage() -> None:
    line = parse_line("€€ ,,, // 12/ x")

    assert line.raw == "€€ ,,, // 12/ x"

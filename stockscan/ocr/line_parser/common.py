"""Shared grammar for OCR line parsing: unit vocabulary, token patterns, parse_line."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property

from stockscan.domain.scan import ParsedLine
from stockscan.ocr.text_utils import collapse_whitespace, parse_decimal

# Lines shorter than this are OCR noise
MIN_LINE_LENGTH = 2

# alias (lowercase) -> canonical unit
DEFAULT_UNIT_ALIASES: dict[str, str] = {
    "kg": "kg",
    "kgs": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogramme": "kg",
    "kilogrammes": "kg",
    "g": "g",
    "gr": "g",
    "grs": "g",
    "gramme": "g",
    "grammes": "g",
    "l": "L",
    "lt": "L",
    "litre": "L",
    "litres": "L",
    "dl": "dL",
    "cl": "cL",
    "ml": "mL",
    "u": "unité",
    "un": "unité",
    "pc": "unité",
    "pcs": "unité",
    "pce": "unité",
    "pces": "unité",
    "piece": "unité",
    "pieces": "unité",
    "pièce": "unité",
    "pièces": "unité",
    "unite": "unité",
    "unites": "unité",
    "unité": "unité",
    "unités": "unité",
    "boite": "boîte",
    "boites": "boîte",
    "boîte": "boîte",
    "boîtes": "boîte",
    "bte": "boîte",
    "btes": "boîte",
    "paquet": "paquet",
    "paquets": "paquet",
    "pqt": "paquet",
    "pqts": "paquet",
    "bouteille": "bouteille",
    "bouteilles": "bouteille",
    "btl": "bouteille",
    "btls": "bouteille",
    "sachet": "sachet",
    "sachets": "sachet",
    "barquette": "barquette",
    "barquettes": "barquette",
    "carton": "carton",
    "cartons": "carton",
    "colis": "colis",
    "douzaine": "douzaine",
    "douzaines": "douzaine",
    # Recipe measures
    "cs": "c. à soupe",
    "càs": "c. à soupe",
    "c. à s.": "c. à soupe",
    "c. à soupe": "c. à soupe",
    "cuillère à soupe": "c. à soupe",
    "cuillères à soupe": "c. à soupe",
    "cuillere a soupe": "c. à soupe",
    "cuilleres a soupe": "c. à soupe",
    "cc": "c. à café",
    "càc": "c. à café",
    "c. à c.": "c. à café",
    "c. à café": "c. à café",
    "cuillère à café": "c. à café",
    "cuillères à café": "c. à café",
    "cuillere a cafe": "c. à café",
    "cuilleres a cafe": "c. à café",
    "pincée": "pincée",
    "pincées": "pincée",
    "pincee": "pincée",
    "pincees": "pincée",
    "gousse": "gousse",
    "gousses": "gousse",
    "botte": "botte",
    "bottes": "botte",
    "tranche": "tranche",
    "tranches": "tranche",
    "verre": "verre",
    "verres": "verre",
}

_NUMBER = r"\d+(?:[.,]\d+)?(?:/\d+)?"

# Numbers that describe cooking parameters rather than amounts: "180°C", "20 min", "2 h"
_NOT_A_QUANTITY = (
    r"(?!\s*(?:°|º|%|degr[ée]s?(?!\w)|min(?:ute)?s?(?!\w)|mn(?!\w)|h(?!\w)|heures?(?!\w)|sec(?:onde)?s?(?!\w)))"
)

# "1 234,50" and "1.234,50" group thousands; plain "12.50" does not
_AMOUNT = r"\d{1,3}(?:[ \u00a0\u202f]\d{3})+(?:[.,]\d{1,2})?|\d{1,3}(?:\.\d{3})+,\d{1,2}|\d+(?:[.,]\d{1,2})?"

PRICE_PATTERNS = [
    # "12.50€", "12,50 eur", "12 euros", "1 234,50 €"
    re.compile(rf"(?<![\w.,])(?P<price>{_AMOUNT})\s*(?:€|eur(?:o|os)?(?!\w))", re.IGNORECASE),
    # "€ 12.50", "EUR 12,50"
    re.compile(rf"(?:€|(?<!\w)eur(?:o|os)?)\s*(?P<price>{_AMOUNT})(?![\w.,]?\d)", re.IGNORECASE),
    # Trailing amount with exactly two decimals
    re.compile(r"(?<![\w.,/])(?P<price>\d+[.,]\d{2})\s*$"),
]

MULTIPLIER_PATTERNS = [
    # "12 x Yaourts", "6x"
    re.compile(rf"(?<![\w.,])(?P<qty>{_NUMBER})\s*[x×*](?!\w)", re.IGNORECASE),
    # "Oeufs x12"
    re.compile(rf"(?<!\w)[x×*]\s*(?P<qty>{_NUMBER})(?![\w.,]?\d)", re.IGNORECASE),
]

STANDALONE_QUANTITY_PATTERN = re.compile(
    rf"(?<![\w.,/])(?P<qty>{_NUMBER})(?![\w.,/]?\d)(?!\w){_NOT_A_QUANTITY}", re.IGNORECASE
)

_LEADING_BULLET = re.compile(r"^[-–—•*·>]+\s*")
_LEADING_PARTITIVE = re.compile(r"^(?:(?:des|du|de)\s+|d['’]\s*)(?=\w)", re.IGNORECASE)
_EDGE_PUNCTUATION = " \t-–—•*·:;,./|"


@dataclass(frozen=True)
class UnitVocabulary:
    """Case-insensitive unit aliases mapped to canonical unit names."""

    aliases: tuple[tuple[str, str], ...]

    @cached_property
    def canonical_by_alias(self) -> dict[str, str]:
        return {alias.casefold(): canonical for alias, canonical in self.aliases}

    @cached_property
    def _alternation(self) -> str:
        # Longest aliases first so "kg" wins over "g" and "cl" over "l".
        ordered = sorted(self.canonical_by_alias, key=len, reverse=True)
        return "|".join(re.escape(alias) for alias in ordered)

    @cached_property
    def quantity_then_unit(self) -> re.Pattern[str]:
        return re.compile(
            rf"(?<![\w.,/])(?P<qty>{_NUMBER})\s*(?P<unit>{self._alternation})(?!\w)",
            re.IGNORECASE,
        )

    @cached_property
    def unit_then_quantity(self) -> re.Pattern[str]:
        return re.compile(
            rf"(?<!\w)(?P<unit>{self._alternation})\s*(?P<qty>{_NUMBER})(?![\w.,/]?\d)(?!\w)",
            re.IGNORECASE,
        )

    def canonical(self, alias: str) -> str:
        return self.canonical_by_alias.get(alias.casefold(), alias)


def build_unit_vocabulary(extra_aliases: Mapping[str, str] | None = None) -> UnitVocabulary:
    """Build a vocabulary from the built-in aliases plus configured extras (extras win)."""
    merged = dict(DEFAULT_UNIT_ALIASES)
    if extra_aliases:
        for alias, canonical in extra_aliases.items():
            merged[str(alias).casefold()] = str(canonical)
    return UnitVocabulary(aliases=tuple(merged.items()))


DEFAULT_UNIT_VOCABULARY = build_unit_vocabulary()


def split_lines(text: str) -> list[str]:
    """Split raw OCR text into trimmed lines, dropping blanks and noise shorter than MIN_LINE_LENGTH."""
    if not text:
        return []
    lines = []
    for line in text.splitlines():
        stripped = collapse_whitespace(line)
        if len(stripped) >= MIN_LINE_LENGTH:
            lines.append(stripped)
    return lines


def _cut(text: str, match: re.Match[str]) -> str:
    """Remove a matched span, leaving a space so neighbouring words stay apart."""
    return f"{text[: match.start()]} {text[match.end():]}"


def _clean_name(text: str) -> str:
    name = collapse_whitespace(text)
    name = _LEADING_BULLET.sub("", name)
    name = name.strip(_EDGE_PUNCTUATION)
    name = _LEADING_PARTITIVE.sub("", name)
    return collapse_whitespace(name.strip(_EDGE_PUNCTUATION))


def parse_line(line: str, *, vocabulary: UnitVocabulary | None = None) -> ParsedLine:
    """
    Split one OCR line into quantity, unit, price and residual name.

    Extraction order:
    1. Price (currency marker, else trailing two-decimal amount)
    2. Quantity next to a known unit ("5kg", "kg 5")
    3. Multiplier ("12 x", "x12")
    4. First standalone number, ignoring temperatures and durations

    Once a quantity is found, any other bare number is dropped from the name.

    Never fails: tokens that cannot be found are left as None.

    Args:
        line: A single line of OCR text
        vocabulary: Unit vocabulary; defaults to the built-in one

    Returns:
        ParsedLine with the raw line preserved
    """
    if vocabulary is None:
        vocabulary = DEFAULT_UNIT_VOCABULARY

    text = line.strip()
    quantity: Decimal | None = None
    unit: str | None = None
    price: Decimal | None = None
    confidence = 0.5

    for pattern in PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            price = parse_decimal(match.group("price"))
            text = _cut(text, match)
            confidence += 0.1
            break

    match = vocabulary.quantity_then_unit.search(text) or vocabulary.unit_then_quantity.search(text)
    if match:
        quantity = parse_decimal(match.group("qty"))
        unit = vocabulary.canonical(match.group("unit"))
        text = _cut(text, match)
    else:
        for pattern in (*MULTIPLIER_PATTERNS, STANDALONE_QUANTITY_PATTERN):
            match = pattern.search(text)
            if match:
                quantity = parse_decimal(match.group("qty"))
                text = _cut(text, match)
                break

    if quantity is not None:
        confidence += 0.2
        # Leftover counts ("Sucre 1kg 2") are not part of the name
        for pattern in (*MULTIPLIER_PATTERNS, STANDALONE_QUANTITY_PATTERN):
            text = pattern.sub(" ", text)

    name = _clean_name(text)
    if len(name) > 2:
        confidence += 0.2

    return ParsedLine(
        raw=line,
        name=name,
        quantity=quantity,
        unit=unit,
        price=price,
        confidence=min(confidence, 1.0),
    )

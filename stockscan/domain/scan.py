"""Data models for delivery and recipe scans."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from stockscan.domain.catalog import ProductCatalogEntry


class MatchType(str, Enum):
    """How a parsed line was tied to a catalog product."""

    EXACT = "exact"
    PARTIAL = "partial"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class RecognizedText:
    """Raw text returned by a text recognizer."""

    text: str
    confidence: float  # 0.0 to 1.0


@dataclass(frozen=True)
class ScanProgress:
    """A progress event for the UI progress bar."""

    status: str
    progress: int  # 0 to 100


@dataclass(frozen=True)
class ParsedLine:
    """A single text line split into quantity/unit/price/name tokens."""

    raw: str
    name: str
    quantity: Decimal | None = None
    unit: str | None = None
    price: Decimal | None = None
    # Parse-quality heuristic, not an OCR confidence.
    confidence: float = 0.5


@dataclass(frozen=True)
class MatchedItem:
    """A parsed line together with its catalog match and alternatives."""

    parsed: ParsedLine
    product: ProductCatalogEntry | None
    match_score: float
    match_type: MatchType
    alternatives: tuple[ProductCatalogEntry, ...] = ()
    user_corrected: bool = False
    corrected_product_id: str | None = None

    def __post_init__(self) -> None:
        no_type = self.match_type is MatchType.NONE
        no_product = self.product is None
        no_score = self.match_score == 0
        if not (no_type == no_product == no_score):
            raise ValueError(
                f"inconsistent match: type={self.match_type.value} "
                f"product={'none' if no_product else self.product.id} score={self.match_score}"
            )
        if not 0.0 <= self.match_score <= 1.0:
            raise ValueError(f"match score out of range: {self.match_score}")

    @property
    def is_matched(self) -> bool:
        return self.product is not None


@dataclass
class OCRResult:
    """Result of scanning a delivery note."""

    raw_text: str
    confidence: float
    matches: list[MatchedItem] = field(default_factory=list)


@dataclass(frozen=True)
class RecipeHeader:
    name: str
    portions: int


@dataclass
class RecipeLines:
    """Recipe text split into header, ingredient lines and instruction lines."""

    header: RecipeHeader
    ingredient_lines: list[ParsedLine] = field(default_factory=list)
    instruction_lines: list[str] = field(default_factory=list)


@dataclass
class ParsedRecipe:
    """Result of scanning a recipe sheet."""

    name: str
    portions: int
    ingredients: list[MatchedItem] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    raw_text: str = ""
    confidence: float = 0.0


@dataclass(frozen=True)
class DeliveryItem:
    """A confirmed delivery line ready for the persistence layer."""

    product_id: str
    product_name: str
    quantity: Decimal
    price: Decimal


@dataclass(frozen=True)
class RecipeIngredient:
    """A confirmed recipe ingredient ready for the persistence layer."""

    product_id: str | None
    product_name: str
    quantity: Decimal | None
    unit: str

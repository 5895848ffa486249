"""Core domain models for stockscan.

This module provides the records exchanged between the scan core and the UI:
- ProductCatalogEntry: a known product
- ParsedLine, MatchedItem, MatchType: per-line parse and match results
- OCRResult, ParsedRecipe: pipeline outputs
- Correction: a learned raw-text to product mapping

Usage:
    from stockscan.domain import MatchedItem, MatchType, ProductCatalogEntry
"""

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.correction import Correction
from stockscan.domain.errors import (
    CatalogError,
    CorrectionStoreError,
    RecognitionError,
    ScanCancelled,
    StockScanError,
)
from stockscan.domain.scan import (
    DeliveryItem,
    MatchedItem,
    MatchType,
    OCRResult,
    ParsedLine,
    ParsedRecipe,
    RecipeHeader,
    RecipeIngredient,
    RecipeLines,
    RecognizedText,
    ScanProgress,
)

__all__ = [
    "ProductCatalogEntry",
    "Correction",
    "MatchType",
    "ParsedLine",
    "MatchedItem",
    "OCRResult",
    "ParsedRecipe",
    "RecipeHeader",
    "RecipeLines",
    "RecognizedText",
    "ScanProgress",
    "DeliveryItem",
    "RecipeIngredient",
    "StockScanError",
    "RecognitionError",
    "ScanCancelled",
    "CorrectionStoreError",
    "CatalogError",
]

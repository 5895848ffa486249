"""Composable OCR line parser components."""

from .common import (
    DEFAULT_UNIT_ALIASES,
    DEFAULT_UNIT_VOCABULARY,
    MIN_LINE_LENGTH,
    UnitVocabulary,
    build_unit_vocabulary,
    parse_line,
    split_lines,
)
from .delivery_parser import parse_delivery_lines
from .recipe_parser import DEFAULT_PORTIONS, DEFAULT_RECIPE_NAME, parse_recipe_lines

__all__ = [
    "DEFAULT_PORTIONS",
    "DEFAULT_RECIPE_NAME",
    "DEFAULT_UNIT_ALIASES",
    "DEFAULT_UNIT_VOCABULARY",
    "MIN_LINE_LENGTH",
    "UnitVocabulary",
    "build_unit_vocabulary",
    "parse_delivery_lines",
    "parse_line",
    "parse_recipe_lines",
    "split_lines",
]

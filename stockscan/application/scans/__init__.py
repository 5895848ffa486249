"""Scan workflows."""

from stockscan.application.scans.pipeline import ScanPipeline, create_scan_pipeline
from stockscan.application.scans.review import (
    apply_user_correction,
    select_confident_matches,
    to_delivery_items,
    to_recipe_ingredients,
)

__all__ = [
    "ScanPipeline",
    "create_scan_pipeline",
    "apply_user_correction",
    "select_confident_matches",
    "to_delivery_items",
    "to_recipe_ingredients",
]

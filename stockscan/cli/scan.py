"""Scan command handlers used by the unified CLI."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from stockscan.domain.errors import CatalogError, RecognitionError
from stockscan.domain.scan import MatchedItem, ScanProgress
from stockscan.runtime import get_logger

logger = get_logger(__name__)


def _load_config_or_exit(args: argparse.Namespace):
    from stockscan.runtime.config import load_scan_config

    try:
        config = load_scan_config(args.config)
    except (OSError, ValueError) as e:
        # tomllib.TOMLDecodeError is a ValueError
        logger.error("Invalid configuration %s: %s", args.config or "(default)", e)
        print(f"Error: invalid configuration: {e}")
        sys.exit(1)
    if getattr(args, "ocr_url", None):
        config = replace(config, ocr=replace(config.ocr, engine="service", service_url=args.ocr_url))
    return config


def _load_catalog_or_exit(path: str):
    from stockscan.runtime.catalog import load_catalog

    try:
        return load_catalog(path)
    except CatalogError as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        sys.exit(1)


def _read_image_or_exit(path: str) -> bytes:
    image_path = Path(path)
    if not image_path.exists():
        print(f"Error: Image file not found: {image_path}")
        sys.exit(1)
    return image_path.read_bytes()


def _print_progress(event: ScanProgress) -> None:
    print(f"  [{event.progress:3d}%] {event.status}", file=sys.stderr)


def _format_quantity(item: MatchedItem) -> str:
    parsed = item.parsed
    if parsed.quantity is None:
        return "?"
    return f"{parsed.quantity} {parsed.unit}" if parsed.unit else f"{parsed.quantity}"


def _print_matches(items: list[MatchedItem]) -> None:
    for i, item in enumerate(items, 1):
        qty_str = _format_quantity(item)
        price_str = f" - {item.parsed.price:.2f} EUR" if item.parsed.price is not None else ""
        if item.product is not None:
            match_str = f"{item.product.name} [{item.product.id}] ({item.match_type.value} {item.match_score:.0%})"
        else:
            match_str = "NO MATCH"
        print(f"  {i}. {item.parsed.name} x {qty_str}{price_str} -> {match_str}")
        if item.alternatives:
            print(f"       alternatives: {', '.join(alt.name for alt in item.alternatives)}")


def cmd_scan_delivery(args: argparse.Namespace) -> None:
    """Scan a delivery note image and print the matched lines."""
    from stockscan.application.scans.pipeline import create_scan_pipeline
    from stockscan.application.scans.review import select_confident_matches

    image = _read_image_or_exit(args.image)
    catalog = _load_catalog_or_exit(args.catalog)
    pipeline = create_scan_pipeline(_load_config_or_exit(args))

    try:
        result = pipeline.process_delivery_image(image, catalog, on_progress=_print_progress)
    except RecognitionError as e:
        logger.error("%s", e)
        print(f"OCR failed: {e}")
        sys.exit(1)

    selected = select_confident_matches(result.matches)

    print("\n" + "=" * 60)
    print("SCANNED DELIVERY")
    print("=" * 60)
    print(f"OCR confidence: {result.confidence:.0%}")
    print(f"\nLines ({len(result.matches)}, {len(selected)} auto-selected):")
    _print_matches(result.matches)
    print("=" * 60)


def cmd_scan_recipe(args: argparse.Namespace) -> None:
    """Scan a recipe sheet image and print its ingredients and steps."""
    from stockscan.application.scans.pipeline import create_scan_pipeline

    image = _read_image_or_exit(args.image)
    catalog = _load_catalog_or_exit(args.catalog)
    pipeline = create_scan_pipeline(_load_config_or_exit(args))

    try:
        recipe = pipeline.process_recipe_image(image, catalog, on_progress=_print_progress)
    except RecognitionError as e:
        logger.error("%s", e)
        print(f"OCR failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("SCANNED RECIPE")
    print("=" * 60)
    print(f"Name: {recipe.name}")
    print(f"Portions: {recipe.portions}")
    print(f"\nIngredients ({len(recipe.ingredients)}):")
    _print_matches(recipe.ingredients)
    print(f"\nInstructions ({len(recipe.instructions)}):")
    for i, step in enumerate(recipe.instructions, 1):
        print(f"  {i}. {step}")
    print("=" * 60)


def cmd_correct(args: argparse.Namespace) -> None:
    """Teach the correction memory that a scanned name means a product."""
    from stockscan.runtime.correction_memory import CorrectionMemory
    from stockscan.runtime.correction_store import JsonFileCorrectionStore

    catalog = _load_catalog_or_exit(args.catalog)
    product = next((entry for entry in catalog if entry.id == args.product_id), None)
    if product is None:
        print(f"Error: Unknown product id: {args.product_id}")
        sys.exit(1)

    memory = CorrectionMemory(JsonFileCorrectionStore())
    correction = memory.record(args.raw_name, product.id, product.name)
    if correction is None:
        print(f"Could not record correction for {args.raw_name!r}.")
        sys.exit(1)

    print(
        f"Learned: {correction.raw_name_normalized!r} -> {product.name} [{product.id}] "
        f"(confirmed {correction.occurrences}x)"
    )

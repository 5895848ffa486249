"""Review workflow helpers: confirm, correct and convert scanned items."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.scan import DeliveryItem, MatchedItem, MatchType, RecipeIngredient
from stockscan.ocr.matcher import CatalogIndex, MatcherConfig, rank_alternatives
from stockscan.ocr.text_utils import normalize_name
from stockscan.runtime.correction_memory import CorrectionMemory
from stockscan.runtime.logging import get_logger

logger = get_logger(__name__)

AUTO_SELECT_THRESHOLD = 0.6


def apply_user_correction(
    item: MatchedItem,
    product: ProductCatalogEntry,
    memory: CorrectionMemory | None,
    catalog: Sequence[ProductCatalogEntry] | CatalogIndex | None = None,
    config: MatcherConfig | None = None,
) -> MatchedItem:
    """
    Point a scanned line at the product the user picked and remember the choice.

    The returned item is an exact, user-corrected match. When ``catalog`` is
    given the alternatives are re-ranked so they never contain the new product;
    otherwise the old ones are kept, minus the picked product, with the
    previously matched product first.

    A failure to persist the correction is logged by the memory and does not
    affect the returned item.
    """
    if catalog is not None:
        ranked = rank_alternatives(normalize_name(item.parsed.name), CatalogIndex.build(catalog), product.id, config)
        alternatives = tuple(entry for entry, _ in ranked)
    else:
        previous = [item.product] if item.product is not None else []
        alternatives = tuple(entry for entry in [*previous, *item.alternatives] if entry.id != product.id)
        alternatives = alternatives[: (config or MatcherConfig()).max_alternatives]

    corrected = replace(
        item,
        product=product,
        match_score=1.0,
        match_type=MatchType.EXACT,
        alternatives=alternatives,
        user_corrected=True,
        corrected_product_id=product.id,
    )

    if memory is not None:
        memory.record(item.parsed.name, product.id, product.name)
    logger.debug("User corrected %r -> %s", item.parsed.name, product.id)
    return corrected


def select_confident_matches(matches: Sequence[MatchedItem], threshold: float = AUTO_SELECT_THRESHOLD) -> set[int]:
    """Indices of matched items pre-selected for confirmation (score >= threshold)."""
    return {i for i, item in enumerate(matches) if item.product is not None and item.match_score >= threshold}


def to_delivery_items(matches: Sequence[MatchedItem], selected: Iterable[int] | None = None) -> list[DeliveryItem]:
    """
    Convert confirmed delivery matches into records for persistence.

    Unmatched items are skipped. A missing quantity counts as 1 and a missing
    price as 0.
    """
    indices = sorted(set(selected)) if selected is not None else range(len(matches))
    items: list[DeliveryItem] = []
    for i in indices:
        item = matches[i]
        if item.product is None:
            continue
        items.append(
            DeliveryItem(
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=item.parsed.quantity if item.parsed.quantity is not None else Decimal("1"),
                price=item.parsed.price if item.parsed.price is not None else Decimal("0"),
            )
        )
    return items


def to_recipe_ingredients(ingredients: Sequence[MatchedItem]) -> list[RecipeIngredient]:
    """
    Convert recipe ingredient matches into records for persistence.

    Unmatched ingredients are kept under their scanned name so nothing the
    user saw disappears. The unit falls back to the product's catalog unit.
    """
    result: list[RecipeIngredient] = []
    for item in ingredients:
        product = item.product
        unit = item.parsed.unit or (product.unit if product is not None else "") or ""
        result.append(
            RecipeIngredient(
                product_id=product.id if product is not None else None,
                product_name=product.name if product is not None else item.parsed.name,
                quantity=item.parsed.quantity,
                unit=unit,
            )
        )
    return result

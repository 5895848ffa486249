"""Match parsed OCR lines to products in the catalog.

Matching is evaluated top-down and the first hit wins:
1. Learned correction for the normalized name
2. Exact name equality (case/accent-insensitive)
3. Containment of one name in the other, on whole words
4. Best edit-distance similarity above a low threshold

Every result carries up to three ranked alternatives for manual override.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.correction import Correction
from stockscan.domain.scan import MatchedItem, MatchType, ParsedLine
from stockscan.ocr.text_utils import normalize_name

# Upper bound on alternatives offered for manual override
MAX_ALTERNATIVES = 3


@dataclass
class MatcherConfig:
    """Configuration for matching algorithm."""

    fuzzy_threshold: float = 0.35
    max_alternatives: int = MAX_ALTERNATIVES
    alternative_min_score: float = 0.2
    # Normalized names shorter than this never match
    min_name_length: int = 2
    # Containment needs the shorter name to be at least this long
    min_containment_length: int = 3
    partial_score_floor: float = 0.6
    partial_score_ceiling: float = 0.9
    # A learned match confirmed this many times is reported as exact
    learned_exact_occurrences: int = 2

    def __post_init__(self) -> None:
        if not 0.0 < self.fuzzy_threshold <= 1.0:
            raise ValueError(f"fuzzy_threshold must be in (0, 1], got {self.fuzzy_threshold!r}")
        if not 0 <= self.max_alternatives <= MAX_ALTERNATIVES:
            raise ValueError(
                f"max_alternatives must be between 0 and {MAX_ALTERNATIVES}, got {self.max_alternatives!r}"
            )
        if not 0.0 <= self.alternative_min_score <= 1.0:
            raise ValueError(f"alternative_min_score must be in [0, 1], got {self.alternative_min_score!r}")
        if not 0.0 < self.partial_score_floor <= self.partial_score_ceiling < 1.0:
            raise ValueError(
                "partial scores need 0 < partial_score_floor <= partial_score_ceiling < 1, "
                f"got {self.partial_score_floor!r} and {self.partial_score_ceiling!r}"
            )
        if self.learned_exact_occurrences < 1:
            raise ValueError(f"learned_exact_occurrences must be at least 1, got {self.learned_exact_occurrences!r}")


class CorrectionLookup(Protocol):
    """Anything that can answer a correction lookup (CorrectionMemory in practice)."""

    def lookup(self, normalized_name: str) -> Correction | None: ...


@dataclass(frozen=True)
class CatalogIndex:
    """Catalog with names normalized once, preserving insertion order."""

    entries: tuple[ProductCatalogEntry, ...]
    normalized_names: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "normalized_names", tuple(normalize_name(e.name) for e in self.entries))

    @classmethod
    def build(cls, catalog: Iterable[ProductCatalogEntry] | CatalogIndex) -> CatalogIndex:
        if isinstance(catalog, CatalogIndex):
            return catalog
        return cls(entries=tuple(catalog))

    def get(self, product_id: str) -> ProductCatalogEntry | None:
        for entry in self.entries:
            if entry.id == product_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)


def name_similarity(a: str, b: str) -> float:
    """
    Edit-distance similarity between two normalized names, 0.0 to 1.0.

    Takes the better of plain Levenshtein similarity and a word-order
    insensitive ratio so "filet poulet" still scores well against "poulet filet".
    """
    if a == b:
        return 1.0 if a else 0.0
    if not a or not b:
        return 0.0
    return max(Levenshtein.normalized_similarity(a, b), fuzz.token_sort_ratio(a, b) / 100.0)


def rank_alternatives(
    normalized_name: str,
    index: CatalogIndex,
    exclude_id: str | None = None,
    config: MatcherConfig | None = None,
) -> list[tuple[ProductCatalogEntry, float]]:
    """
    Rank catalog entries by similarity to a normalized name.

    Returns at most ``config.max_alternatives`` (entry, score) pairs, best first,
    ties kept in catalog order, never including ``exclude_id``.
    """
    if config is None:
        config = MatcherConfig()
    if not normalized_name:
        return []

    scored = []
    for position, (entry, candidate) in enumerate(zip(index.entries, index.normalized_names)):
        if exclude_id is not None and entry.id == exclude_id:
            continue
        score = name_similarity(normalized_name, candidate)
        if score >= config.alternative_min_score:
            scored.append((position, entry, score))

    scored.sort(key=lambda item: (-item[2], item[0]))
    return [(entry, score) for _, entry, score in scored[: config.max_alternatives]]


def _result(
    parsed: ParsedLine,
    normalized_name: str,
    index: CatalogIndex,
    config: MatcherConfig,
    product: ProductCatalogEntry | None,
    score: float,
    match_type: MatchType,
) -> MatchedItem:
    alternatives = rank_alternatives(normalized_name, index, product.id if product else None, config)
    return MatchedItem(
        parsed=parsed,
        product=product,
        match_score=score,
        match_type=match_type,
        alternatives=tuple(entry for entry, _ in alternatives),
    )


def _match_learned(
    normalized_name: str,
    index: CatalogIndex,
    corrections: CorrectionLookup,
    config: MatcherConfig,
) -> tuple[ProductCatalogEntry, MatchType] | None:
    correction = corrections.lookup(normalized_name)
    if correction is None:
        return None

    product = index.get(correction.product_id)
    if product is None:
        # Stale: the product was removed from the catalog since the correction was learned.
        return None

    if correction.occurrences >= config.learned_exact_occurrences:
        return product, MatchType.EXACT
    return product, MatchType.PARTIAL


def _match_exact(normalized_name: str, index: CatalogIndex) -> ProductCatalogEntry | None:
    for entry, candidate in zip(index.entries, index.normalized_names):
        if candidate == normalized_name:
            return entry
    return None


def _singular(word: str) -> str:
    # "tomates" and "tomate" compare equal; short words like "riz" are left alone
    if len(word) > 3 and word[-1] in "sx":
        return word[:-1]
    return word


def _contains_words(shorter: str, longer: str) -> bool:
    """Whether the words of ``shorter`` appear as a contiguous run of whole words in ``longer``."""
    needle = [_singular(word) for word in shorter.split()]
    haystack = [_singular(word) for word in longer.split()]
    if not needle:
        return False
    return any(haystack[i : i + len(needle)] == needle for i in range(len(haystack) - len(needle) + 1))


def _match_partial(
    normalized_name: str, index: CatalogIndex, config: MatcherConfig
) -> tuple[ProductCatalogEntry, float] | None:
    best: tuple[ProductCatalogEntry, float] | None = None
    span = config.partial_score_ceiling - config.partial_score_floor

    for entry, candidate in zip(index.entries, index.normalized_names):
        if not candidate:
            continue
        shorter, longer = sorted((normalized_name, candidate), key=len)
        if len(shorter) < config.min_containment_length or not _contains_words(shorter, longer):
            continue
        score = config.partial_score_floor + span * (len(shorter) / len(longer))
        # Strict comparison keeps the earliest catalog entry on ties.
        if best is None or score > best[1]:
            best = (entry, score)

    return best


def _match_fuzzy(
    normalized_name: str, index: CatalogIndex
) -> tuple[ProductCatalogEntry, float] | None:
    best: tuple[ProductCatalogEntry, float] | None = None
    for entry, candidate in zip(index.entries, index.normalized_names):
        score = name_similarity(normalized_name, candidate)
        if best is None or score > best[1]:
            best = (entry, score)
    return best


def match(
    parsed_line: ParsedLine,
    catalog: Sequence[ProductCatalogEntry] | CatalogIndex,
    corrections: CorrectionLookup | None = None,
    config: MatcherConfig | None = None,
) -> MatchedItem:
    """
    Match one parsed line against the catalog.

    Args:
        parsed_line: Line produced by the line parser
        catalog: Products to match against (or a prebuilt CatalogIndex)
        corrections: Learned corrections consulted before any text matching
        config: Matching configuration

    Returns:
        MatchedItem; ``MatchType.NONE`` with no product and score 0 when nothing fits
    """
    if config is None:
        config = MatcherConfig()
    index = CatalogIndex.build(catalog)
    normalized_name = normalize_name(parsed_line.name)

    if len(normalized_name) < config.min_name_length:
        return _result(parsed_line, normalized_name, index, config, None, 0.0, MatchType.NONE)

    if corrections is not None:
        learned = _match_learned(normalized_name, index, corrections, config)
        if learned is not None:
            product, match_type = learned
            return _result(parsed_line, normalized_name, index, config, product, 1.0, match_type)

    exact = _match_exact(normalized_name, index)
    if exact is not None:
        return _result(parsed_line, normalized_name, index, config, exact, 1.0, MatchType.EXACT)

    partial = _match_partial(normalized_name, index, config)
    if partial is not None:
        product, score = partial
        return _result(parsed_line, normalized_name, index, config, product, score, MatchType.PARTIAL)

    fuzzy = _match_fuzzy(normalized_name, index)
    if fuzzy is not None and fuzzy[1] >= config.fuzzy_threshold:
        product, score = fuzzy
        return _result(parsed_line, normalized_name, index, config, product, score, MatchType.FUZZY)

    return _result(parsed_line, normalized_name, index, config, None, 0.0, MatchType.NONE)


def match_lines(
    lines: Sequence[ParsedLine],
    catalog: Sequence[ProductCatalogEntry] | CatalogIndex,
    corrections: CorrectionLookup | None = None,
    config: MatcherConfig | None = None,
) -> list[MatchedItem]:
    """Match each line independently, preserving input order."""
    index = CatalogIndex.build(catalog)
    return [match(line, index, corrections, config) for line in lines]

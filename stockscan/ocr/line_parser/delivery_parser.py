"""Delivery note line extraction."""

from stockscan.domain.scan import ParsedLine

from .common import UnitVocabulary, parse_line, split_lines


def parse_delivery_lines(text: str, *, vocabulary: UnitVocabulary | None = None) -> list[ParsedLine]:
    """
    Parse every usable line of a delivery note.

    Each non-blank line of at least two characters yields one ParsedLine, in
    input order. Lines without a recognizable quantity are kept with
    ``quantity=None`` so they can be completed by hand.
    """
    return [parse_line(line, vocabulary=vocabulary) for line in split_lines(text)]

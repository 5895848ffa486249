"""Text normalization and number parsing shared by the parser and matcher."""

import re
import unicodedata
from decimal import Decimal, InvalidOperation

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_GROUPING_SPACE = re.compile(r"(?<=\d)[ \u00a0\u202f](?=\d)")


def normalize_name(text: str) -> str:
    """
    Normalize a product name for comparison and correction keys.

    Case-folds, strips accents, turns punctuation into spaces and collapses
    whitespace: ``"  Tomates-Cerises  "`` -> ``"tomates cerises"``.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.casefold())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    # Ligatures survive NFD ("œ" in "oeuf"), spell them out.
    stripped = stripped.replace("œ", "oe").replace("æ", "ae")
    stripped = _NON_ALNUM.sub(" ", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def parse_decimal(token: str) -> Decimal | None:
    """
    Parse a numeric token with a decimal comma or dot, or a simple fraction.

    Thousands groups are accepted: "1 234,50" and "1.234,50" both give 1234.50.
    Returns None when the token is not a number.
    """
    token = _GROUPING_SPACE.sub("", token.strip())
    if "," in token and "." in token:
        # The last separator is the decimal one
        grouping = "." if token.rfind(",") > token.rfind(".") else ","
        token = token.replace(grouping, "")
    token = token.replace(",", ".")
    if not token:
        return None
    try:
        if "/" in token:
            numerator, denominator = token.split("/", 1)
            den = Decimal(denominator)
            if den == 0:
                return None
            return Decimal(numerator) / den
        return Decimal(token)
    except (InvalidOperation, ValueError):
        return None

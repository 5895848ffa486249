"""Recipe sheet extraction: title, portions, ingredients and instructions."""

import re

from stockscan.domain.scan import RecipeHeader, RecipeLines

from .common import UnitVocabulary, parse_line, split_lines

DEFAULT_RECIPE_NAME = "Recette sans nom"
DEFAULT_PORTIONS = 4
# Portions are only looked for near the top of the sheet
PORTION_SEARCH_LINES = 5

PORTION_PATTERNS = [
    re.compile(r"(\d+)\s*(?:portions?|personnes?|pers\.?|couverts?)(?!\w)", re.IGNORECASE),
    # "Crêpes pour 4" but not "Cuire pour 2 minutes"
    re.compile(r"\bpour\s+(\d+)\s*$", re.IGNORECASE),
    # "6 parts" alone on its line; "2 parts de pâte" is an ingredient
    re.compile(r"^\s*(?:pour\s+)?(\d+)\s*parts?\s*$", re.IGNORECASE),
]
# Words that may surround a portions phrase without making the line anything else
_PORTION_FILLER = {"pour", "recette", "environ", "soit"}

INGREDIENTS_HEADER = re.compile(r"^ingr[ée]dients?\b\s*:?\s*$", re.IGNORECASE)
INSTRUCTIONS_HEADER = re.compile(
    r"^(?:pr[ée]paration|instructions?|[ée]tapes?|m[ée]thode|d[ée]roul[ée])\s*(?::.*)?$", re.IGNORECASE
)
# "1. Couper...", "2) Ajouter...", "Étape 3 : Cuire..."
NUMBERED_STEP = re.compile(r"^(?:(?:[ée]tape\s*)?\d{1,2}\s*[.)]|[ée]tape\s*\d{1,2}\s*:?)\s+(?=\S)", re.IGNORECASE)
_TITLE_PREFIX = re.compile(r"^#+\s*")


def _extract_portions(line: str) -> tuple[int, bool] | None:
    """
    Find a portions count in a line.

    Returns (portions, is_portions_line); the second flag is True when nothing
    but the portions phrase and filler words is left on the line.
    """
    for pattern in PORTION_PATTERNS:
        match = pattern.search(line)
        if match:
            value = int(match.group(1))
            if value > 0:
                rest = line[: match.start()] + " " + line[match.end() :]
                words = [word for word in re.split(r"[\W\d_]+", rest.lower()) if word]
                return value, all(word in _PORTION_FILLER for word in words)
    return None


def parse_recipe_lines(text: str, *, vocabulary: UnitVocabulary | None = None) -> RecipeLines:
    """
    Split recipe text into header, ingredient lines and instruction lines.

    Heuristics, in order, for each line after the title:
    - a line holding only a portions phrase ("Pour 6 personnes") sets the
      header and is dropped; a portions phrase sharing its line with other
      text still sets the header, and the line is classified as usual
    - numbered steps are instructions, with their number stripped
    - an "Ingrédients" header is skipped and switches back to ingredients
    - a "Préparation"/"Instructions"/"Étapes"/"Méthode" header switches every
      following line to instructions
    - a line with a quantity or unit token is an ingredient
    - anything else is an instruction

    The last rule is the weak spot: an ingredient written without any amount
    ("Sel, poivre") lands in the instructions.
    """
    lines = split_lines(text)
    if not lines:
        return RecipeLines(header=RecipeHeader(name=DEFAULT_RECIPE_NAME, portions=DEFAULT_PORTIONS))

    name = _TITLE_PREFIX.sub("", lines[0]).strip() or DEFAULT_RECIPE_NAME

    portions = DEFAULT_PORTIONS
    portions_index: int | None = None
    for idx, line in enumerate(lines[:PORTION_SEARCH_LINES]):
        found = _extract_portions(line)
        if found is not None:
            portions, is_portions_line = found
            if is_portions_line:
                portions_index = idx
            break

    recipe = RecipeLines(header=RecipeHeader(name=name, portions=portions))
    in_instructions = False

    for idx, line in enumerate(lines[1:], start=1):
        if idx == portions_index:
            continue

        step = NUMBERED_STEP.match(line)
        if step:
            recipe.instruction_lines.append(line[step.end() :].strip())
            continue
        if INGREDIENTS_HEADER.match(line):
            in_instructions = False
            continue
        if INSTRUCTIONS_HEADER.match(line):
            in_instructions = True
            continue
        if in_instructions:
            recipe.instruction_lines.append(line)
            continue

        parsed = parse_line(line, vocabulary=vocabulary)
        if parsed.quantity is not None or parsed.unit is not None:
            recipe.ingredient_lines.append(parsed)
        else:
            recipe.instruction_lines.append(line)

    return recipe

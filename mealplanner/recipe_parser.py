"""Bulk recipe import: turns pasted free text into recipe drafts.

Recipes are separated by a line containing only ``---``. Inside a recipe,
labelled lines (``Title:``, ``Time:``, ``Tags:`` ...) set metadata and the
``Ingredients:`` / ``Directions:`` headers switch the section that list lines
are collected into::

    Title: Spaghetti Bolognese
    Time: 30 minutes
    Tags: italian, pasta
    Ingredients:
    - 1 lb ground beef
    - 2 cloves garlic
    Directions:
    1. Brown the beef
    2. Add the garlic

Malformed input never raises. Lines that cannot be classified are ignored and
blocks without a title or without ingredients are dropped.
"""
import re
from enum import Enum

from . import DEFAULT_CATEGORY
from .schemas import MAX_INTEGER, TITLE_MAX_LENGTH, IngredientSchema, RecipeDraft

BLOCK_SEPARATOR = re.compile(r'^---\r?$', re.MULTILINE)

UNIT_WORDS = (r'(?:cups?|tbsp?|tsp?|lbs?|pounds?|oz|ounces?|grams?|kg|ml|liters?'
              r'|cloves?|pieces?|slices?|medium|large|small)')

# Tried in order, the first match splits "<amount> <name>". Only ASCII digits are numbers
AMOUNT_PATTERNS = (
    re.compile(r'^([0-9]+/?[0-9]*\s*' + UNIT_WORDS + r')\s+(.+)$', re.IGNORECASE),
    re.compile(r'^([0-9]+\.?[0-9]*)\s+(.+)$'),
    re.compile(r'^([0-9]+/[0-9]+)\s+(.+)$'),
    re.compile(r'^(a\s+(?:few|little|pinch|dash))\s+(.+)$', re.IGNORECASE),
)

# First match wins, so "pepper" is produce even though pantry lists it too
CATEGORY_PATTERNS = (
    ('produce', re.compile(
        r'\b(tomato|onion|garlic|pepper|carrot|celery|lettuce|spinach|broccoli|potato|apple|banana'
        r'|lemon|lime|orange|herbs?|parsley|cilantro|basil|oregano|thyme)\b')),
    ('meat & seafood', re.compile(
        r'\b(chicken|beef|pork|turkey|salmon|tuna|shrimp|fish|meat|ground|steak|chops?)\b')),
    ('dairy', re.compile(r'\b(milk|cheese|butter|cream|eggs?|yogurt|sour cream)\b')),
    ('pantry', re.compile(
        r'\b(flour|sugar|salt|pepper|oil|vinegar|rice|pasta|beans?|spices?|sauce|stock|broth)\b')),
)

DIRECTION_NUMBER = re.compile(r'^[0-9]+\.')
SECTION_LABEL = re.compile(r'^(title|description|time|servings|tags|ingredients|directions):', re.IGNORECASE)
FIRST_INTEGER = re.compile(r'([0-9]+)')


class Section(Enum):
    NONE = 'none'
    INGREDIENTS = 'ingredients'
    DIRECTIONS = 'directions'


def categorize_ingredient(name):
    """Return the grocery category for an ingredient name, ``pantry`` if unknown."""
    lower_name = name.lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(lower_name):
            return category
    return DEFAULT_CATEGORY


def parse_ingredient(text):
    """Split an ingredient line into amount and name, and categorize it."""
    for pattern in AMOUNT_PATTERNS:
        match = pattern.match(text)
        if match:
            name = match.group(2).strip()
            return IngredientSchema(name=name, amount=match.group(1).strip(),
                                    category=categorize_ingredient(name))

    return IngredientSchema(name=text, category=categorize_ingredient(text))


def _labelled_integer(line):
    # Only the text between the first and second colon is searched
    parts = line.split(':')
    if len(parts) < 2:
        return None
    match = FIRST_INTEGER.search(parts[1].strip())
    if not match:
        return None
    # Numbers too large to store are treated as missing
    digits = match.group(1).lstrip('0') or '0'
    if len(digits) > len(str(MAX_INTEGER)) or int(digits) > MAX_INTEGER:
        return None
    return int(digits)


def _strip_direction_prefix(line):
    text = re.sub(r'^[0-9]+\.\s*', '', line, count=1)
    text = re.sub(r'^-\s*', '', text, count=1)
    return text.strip()


def parse_block(block):
    """Parse one recipe block. Returns a ``RecipeDraft`` or ``None``."""
    lines = [line.strip() for line in block.strip().split('\n')]
    lines = [line for line in lines if line]

    title = ''
    description = None
    estimated_time = None
    servings = None
    tags = []
    ingredients = []
    directions = []
    section = Section.NONE

    for line in lines:
        lower = line.lower()

        if lower.startswith('title:'):
            title = line[6:].strip()
        elif lower.startswith('description:'):
            description = line[12:].strip()
        elif lower.startswith('time:') or lower.startswith('estimated time:'):
            minutes = _labelled_integer(line)
            if minutes is not None:
                estimated_time = minutes
        elif lower.startswith('servings:') or lower.startswith('serves:'):
            count = _labelled_integer(line)
            if count is not None:
                servings = count
        elif lower.startswith('tags:'):
            tags = [tag.strip() for tag in line[5:].strip().split(',') if tag.strip()]
        elif lower == 'ingredients:':
            section = Section.INGREDIENTS
        elif lower in ('directions:', 'instructions:'):
            section = Section.DIRECTIONS
        elif section is Section.INGREDIENTS and line.startswith('-'):
            ingredient_text = line[1:].strip()
            if ingredient_text:
                ingredients.append(parse_ingredient(ingredient_text))
        elif section is Section.DIRECTIONS and (DIRECTION_NUMBER.match(line) or line.startswith('-')):
            direction = _strip_direction_prefix(line)
            if direction:
                directions.append(direction)
        elif section is Section.DIRECTIONS and not SECTION_LABEL.match(line):
            # Unnumbered lines become steps of their own
            directions.append(line)

    if not title and lines:
        title = lines[0]
    title = title[:TITLE_MAX_LENGTH].strip()

    if not title or not ingredients:
        return None

    return RecipeDraft(
        title=title,
        description=description,
        ingredients=ingredients,
        directions=directions,
        tags=tags,
        estimated_time=estimated_time,
        servings=servings,
    )


def parse_recipes(text):
    """Yield a ``RecipeDraft`` for every parseable ``---``-separated block."""
    for block in BLOCK_SEPARATOR.split(text or ''):
        if not block.strip():
            continue
        draft = parse_block(block)
        if draft is not None:
            yield draft

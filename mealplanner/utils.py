from datetime import datetime

from . import WEEK_DAYS
from .errors import ValidationFailure


# --- Recipe Search Utilities ---
def recipe_matches(recipe, search=None, tags=None):
    """Checks a recipe mapping against a free-text search and a tag filter.

    The search is a case-insensitive substring match against the title,
    description, tags and ingredient names. The tag filter matches when the
    recipe carries any of the given tags.
    """
    if tags:
        wanted = {tag.lower() for tag in tags}
        if not wanted.intersection(tag.lower() for tag in recipe.get('tags') or []):
            return False

    if not search or not search.strip():
        return True

    needle = search.strip().lower()
    haystack = [recipe.get('title') or '', recipe.get('description') or '']
    haystack += recipe.get('tags') or []
    haystack += [ingredient.get('name') or '' for ingredient in recipe.get('ingredients') or []]
    return any(needle in text.lower() for text in haystack)


def filter_recipes(recipes, search=None, tags=None):
    """Filters recipe mappings, keeping their order."""
    tags = [tag for tag in (tags or []) if tag and tag.strip()]
    return [recipe for recipe in recipes if recipe_matches(recipe, search, tags)]


# --- Like Utilities ---
def toggle_membership(values, member):
    """Removes ``member`` if present, otherwise appends it.

    Returns the new list and whether ``member`` is now present. The input
    list is not modified.
    """
    values = list(values or [])
    if member in values:
        return [value for value in values if value != member], False
    return values + [member], True


# --- Data Conversion Utilities ---
def parse_week_start(value):
    """Converts a 'YYYY-MM-DD' string to a date."""
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except (ValueError, TypeError):
        raise ValidationFailure(f"Invalid week start date '{value}'. Expected YYYY-MM-DD.")


def normalize_day(day):
    """Lower-cases a day name and checks it is a day of the week."""
    normalized = (day or '').strip().lower()
    if normalized not in WEEK_DAYS:
        raise ValidationFailure(f"Invalid day '{day}'. Expected one of: {', '.join(WEEK_DAYS)}.")
    return normalized

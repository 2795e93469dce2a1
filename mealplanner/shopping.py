"""Shopping list consolidation.

Ingredients from every recipe planned for a week are merged by lower-cased
name. Amounts are free text and are never added up: when several recipes
need the same ingredient their amounts are joined with ``", "``.
"""
from . import DEFAULT_CATEGORY, GROCERY_CATEGORIES, WEEK_DAYS
from .errors import NothingPlanned

DEFAULT_AMOUNT = '1'
AMOUNT_SEPARATOR = ', '


def planned_recipe_ids(meals):
    """Distinct recipe ids assigned in a week's day -> recipe id mapping.

    Days are visited Monday to Sunday, then any other keys in stored order,
    so the same plan always yields the same id order.
    """
    meals = meals or {}
    ordered_days = [day for day in WEEK_DAYS if day in meals]
    ordered_days += [day for day in meals if day not in WEEK_DAYS]

    recipe_ids = []
    for day in ordered_days:
        recipe_id = meals.get(day)
        if recipe_id and recipe_id not in recipe_ids:
            recipe_ids.append(recipe_id)

    if not recipe_ids:
        raise NothingPlanned()
    return recipe_ids


def consolidate_ingredients(recipes):
    """Merge the ingredients of ``recipes`` into a list of shopping items.

    ``recipes`` is an iterable of recipe mappings with ``title`` and
    ``ingredients``. Items come back in the order their names were first seen.
    """
    items = {}
    for recipe in recipes:
        title = recipe.get('title')
        for ingredient in recipe.get('ingredients') or []:
            name = ingredient.get('name')
            if not name:
                continue
            amount = ingredient.get('amount')
            key = name.lower()

            existing = items.get(key)
            if existing is None:
                items[key] = {
                    'key': key,
                    'ingredient': name,
                    'total_amount': amount or DEFAULT_AMOUNT,
                    'category': ingredient.get('category') or DEFAULT_CATEGORY,
                    'checked': False,
                    'recipes': [title],
                }
                continue

            existing['recipes'].append(title)
            if amount and existing['total_amount']:
                existing['total_amount'] += AMOUNT_SEPARATOR + amount
            elif amount:
                existing['total_amount'] = amount

    return list(items.values())


def group_by_category(items):
    """Group shopping items by grocery category, in store-walk order.

    Returns a list of ``{'category': ..., 'items': [...]}``; each item keeps
    its ``index`` in the list so it can still be toggled. Categories outside
    the known set follow the known ones.
    """
    grouped = {}
    for index, item in enumerate(items):
        category = item.get('category') or DEFAULT_CATEGORY
        grouped.setdefault(category, []).append(dict(item, index=index))

    ordered = [category for category in GROCERY_CATEGORIES if category in grouped]
    ordered += [category for category in grouped if category not in GROCERY_CATEGORIES]
    return [{'category': category, 'items': grouped[category]} for category in ordered]


def all_checked(items):
    return bool(items) and all(item.get('checked') for item in items)

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError

from . import db
from .decorators import require_household_member
from .errors import Conflict, NotFound
from .models import Recipe, ShoppingList, WeeklyPlan
from .recipe_parser import parse_recipes
from .schemas import (AssignMealRequest, GenerateShoppingListRequest,
                      ImportRequest, RecipeDraft, load)
from .shopping import (all_checked, consolidate_ingredients,
                       group_by_category, planned_recipe_ids)
from .utils import (filter_recipes, normalize_day, parse_week_start,
                    toggle_membership)

api = Blueprint('api', __name__)


def get_recipe_or_404(household_id, recipe_id, for_update=False):
    query = Recipe.query.filter_by(id=recipe_id, household_id=household_id)
    if for_update:
        query = query.with_for_update()
    recipe = query.first()
    if not recipe:
        raise NotFound('Recipe not found')
    return recipe


def create_recipe(household_id, draft, author_id):
    """Adds a recipe built from a ``RecipeDraft`` to the session."""
    recipe = Recipe(
        household_id=household_id,
        created_by=author_id,
        title=draft.title,
        description=draft.description,
        ingredients=[ingredient.model_dump() for ingredient in draft.ingredients],
        directions=list(draft.directions),
        tags=list(draft.tags),
        estimated_time=draft.estimated_time,
        servings=draft.servings,
        source_url=draft.source_url,
        likes=[],
        times_planned=0,
    )
    db.session.add(recipe)
    return recipe


# --- Recipes ---
@api.route('/households/<household_id>/recipes', methods=['POST'])
@login_required
@require_household_member
def add_recipe(household_id):
    draft = load(RecipeDraft, request.get_json(silent=True))
    recipe = create_recipe(household_id, draft, current_user.id)
    db.session.commit()
    return jsonify(recipe.to_dict()), 201


@api.route('/households/<household_id>/recipes/import', methods=['POST'])
@login_required
@require_household_member
def import_recipes(household_id):
    data = load(ImportRequest, request.get_json(silent=True))
    drafts = list(parse_recipes(data.text))

    if data.preview:
        return jsonify({'count': len(drafts), 'recipes': [draft.model_dump() for draft in drafts]})

    recipes = [create_recipe(household_id, draft, current_user.id) for draft in drafts]
    db.session.commit()
    current_app.logger.info(f"Imported {len(recipes)} recipes into household {household_id}")
    return jsonify({'count': len(recipes), 'recipes': [recipe.to_dict() for recipe in recipes]}), 201


@api.route('/households/<household_id>/recipes', methods=['GET'])
@login_required
@require_household_member
def list_recipes(household_id):
    search = request.args.get('search', '')
    tags = [tag.strip() for value in request.args.getlist('tags') for tag in value.split(',')]

    recipes = Recipe.query.filter_by(household_id=household_id).order_by(Recipe.created_at.desc()).all()
    matching = filter_recipes([recipe.to_dict() for recipe in recipes], search=search, tags=tags)
    return jsonify(matching)


@api.route('/households/<household_id>/recipes/<recipe_id>', methods=['GET'])
@login_required
@require_household_member
def get_recipe(household_id, recipe_id):
    return jsonify(get_recipe_or_404(household_id, recipe_id).to_dict())


@api.route('/households/<household_id>/recipes/<recipe_id>/like', methods=['POST'])
@login_required
@require_household_member
def toggle_like(household_id, recipe_id):
    recipe = get_recipe_or_404(household_id, recipe_id, for_update=True)
    likes, liked = toggle_membership(recipe.likes, current_user.id)
    recipe.likes = likes
    db.session.commit()
    return jsonify({'liked': liked})


# --- Weekly Plans ---
@api.route('/households/<household_id>/weekly-plans', methods=['GET'])
@login_required
@require_household_member
def get_weekly_plan(household_id):
    week_start = parse_week_start(request.args.get('week_start'))
    plan = WeeklyPlan.query.filter_by(household_id=household_id, week_start_date=week_start).first()
    return jsonify(plan.to_dict() if plan else None)


@api.route('/households/<household_id>/weekly-plans/<week_start>/days/<day>', methods=['PUT'])
@login_required
@require_household_member
def assign_meal_to_day(household_id, week_start, day):
    week_start_date = parse_week_start(week_start)
    day = normalize_day(day)
    data = load(AssignMealRequest, request.get_json(silent=True))
    recipe = get_recipe_or_404(household_id, data.recipe_id, for_update=True)

    plan = WeeklyPlan.query.filter_by(household_id=household_id, week_start_date=week_start_date)\
        .with_for_update().first()
    status = 200
    if plan:
        changed = (plan.meals or {}).get(day) != recipe.id
        meals = dict(plan.meals or {})
        meals[day] = recipe.id
        plan.meals = meals
        plan.last_modified = datetime.utcnow()
    else:
        changed = True
        plan = WeeklyPlan(
            household_id=household_id,
            week_start_date=week_start_date,
            meals={day: recipe.id},
            created_by=current_user.id,
        )
        db.session.add(plan)
        status = 201

    if changed:
        recipe.times_planned = (recipe.times_planned or 0) + 1

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(f"Concurrent plan creation for household {household_id} week {week_start}")
        raise Conflict('The weekly plan was changed by someone else. Please try again.')
    return jsonify(plan.to_dict()), status


@api.route('/households/<household_id>/weekly-plans/<week_start>/days/<day>', methods=['DELETE'])
@login_required
@require_household_member
def remove_meal_from_day(household_id, week_start, day):
    week_start_date = parse_week_start(week_start)
    day = normalize_day(day)

    plan = WeeklyPlan.query.filter_by(household_id=household_id, week_start_date=week_start_date)\
        .with_for_update().first()
    if not plan:
        return jsonify({'success': False})

    meals = dict(plan.meals or {})
    meals.pop(day, None)
    plan.meals = meals
    plan.last_modified = datetime.utcnow()
    db.session.commit()
    return jsonify({'success': True})


# --- Shopping Lists ---
@api.route('/households/<household_id>/shopping-lists', methods=['POST'])
@login_required
@require_household_member
def generate_shopping_list(household_id):
    data = load(GenerateShoppingListRequest, request.get_json(silent=True))
    plan = WeeklyPlan.query.filter_by(id=data.weekly_plan_id, household_id=household_id).first()
    if not plan:
        raise NotFound('Weekly plan not found')

    recipe_ids = planned_recipe_ids(plan.meals)
    found = {
        recipe.id: recipe
        for recipe in Recipe.query.filter(Recipe.household_id == household_id, Recipe.id.in_(recipe_ids)).all()
    }
    # Recipes deleted since they were planned are skipped
    recipes = [found[recipe_id].to_dict() for recipe_id in recipe_ids if recipe_id in found]
    if len(recipes) < len(recipe_ids):
        current_app.logger.info(f"Skipped {len(recipe_ids) - len(recipes)} missing recipes for plan {plan.id}")

    shopping_list = ShoppingList(
        household_id=household_id,
        weekly_plan_id=plan.id,
        items=consolidate_ingredients(recipes),
        user_generated=True,
    )
    db.session.add(shopping_list)
    db.session.commit()
    current_app.logger.info(f"Generated shopping list {shopping_list.id} with {len(shopping_list.items)} items")

    payload = shopping_list.to_dict()
    payload['grouped'] = group_by_category(payload['items'])
    return jsonify(payload), 201


@api.route('/households/<household_id>/shopping-lists/<list_id>', methods=['GET'])
@login_required
@require_household_member
def get_shopping_list(household_id, list_id):
    shopping_list = ShoppingList.query.filter_by(id=list_id, household_id=household_id).first()
    if not shopping_list:
        raise NotFound('Shopping list not found')

    payload = shopping_list.to_dict()
    payload['grouped'] = group_by_category(payload['items'])
    return jsonify(payload)


@api.route('/households/<household_id>/shopping-lists/<list_id>/items/<int(signed=True):index>/toggle',
           methods=['POST'])
@login_required
@require_household_member
def toggle_item_checked(household_id, list_id, index):
    shopping_list = ShoppingList.query.filter_by(id=list_id, household_id=household_id)\
        .with_for_update().first()
    if not shopping_list:
        raise NotFound('Shopping list not found')

    items = [dict(item) for item in shopping_list.items or []]
    if 0 <= index < len(items):
        items[index]['checked'] = not items[index].get('checked')
        shopping_list.items = items
        shopping_list.completed_at = datetime.utcnow() if all_checked(items) else None
        db.session.commit()

    return jsonify({'success': True})

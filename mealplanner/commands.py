import click
from flask.cli import with_appcontext

from . import db
from .api import create_recipe
from .models import Household
from .recipe_parser import parse_recipes


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Creates all database tables that do not exist yet."""
    db.create_all()
    click.echo("Database tables are up-to-date.")


@click.command('import-recipes')
@click.argument('recipe_file', type=click.File('r', encoding='utf-8'))
@click.option('--household', 'household_id', required=True, help='Household that will own the recipes.')
@click.option('--dry-run', is_flag=True, help='Only list the recipes that would be imported.')
@with_appcontext
def import_recipes_command(recipe_file, household_id, dry_run):
    """
    Imports recipes from a text file of '---'-separated recipe blocks.
    Blocks without a title or without ingredients are skipped.
    """
    household = db.session.get(Household, household_id)
    if not household:
        raise click.ClickException(f"Household '{household_id}' not found.")

    author_id = household.created_by or (household.members[0].id if household.members else None)
    if author_id is None:
        raise click.ClickException(f"Household '{household_id}' has no members to attribute recipes to.")

    drafts = list(parse_recipes(recipe_file.read()))
    if not drafts:
        click.echo("No recipes found in the file.")
        return

    for draft in drafts:
        click.echo(f"- {draft.title} ({len(draft.ingredients)} ingredients, {len(draft.directions)} steps)")

    if dry_run:
        click.echo(f"Dry run: {len(drafts)} recipes would be imported.")
        return

    try:
        for draft in drafts:
            create_recipe(household.id, draft, author_id)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        raise click.ClickException(f"An error occurred while importing: {e}")

    click.echo(f"Successfully imported {len(drafts)} recipes into '{household.name}'.")

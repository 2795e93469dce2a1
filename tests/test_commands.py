"""
Tests for the flask CLI commands.
"""

from mealplanner import db
from mealplanner.models import Recipe


def test_init_db(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['init-db'])

    assert result.exit_code == 0
    assert 'up-to-date' in result.output


class TestImportRecipesCommand:

    def write_recipes(self, tmp_path, text):
        path = tmp_path / 'recipes.txt'
        path.write_text(text, encoding='utf-8')
        return str(path)

    def test_import(self, app, account, bulk_text, tmp_path):
        path = self.write_recipes(tmp_path, bulk_text)
        result = app.test_cli_runner().invoke(args=['import-recipes', path, '--household', account['household_id']])

        assert result.exit_code == 0, result.output
        assert '- Spaghetti Bolognese (4 ingredients, 2 steps)' in result.output
        assert 'Successfully imported 2 recipes' in result.output
        with app.app_context():
            recipes = Recipe.query.filter_by(household_id=account['household_id']).all()
            assert sorted(r.title for r in recipes) == ['Fried Chicken', 'Spaghetti Bolognese']
            assert {r.created_by for r in recipes} == {account['user']['id']}

    def test_dry_run(self, app, account, bulk_text, tmp_path):
        path = self.write_recipes(tmp_path, bulk_text)
        result = app.test_cli_runner().invoke(
            args=['import-recipes', path, '--household', account['household_id'], '--dry-run'])

        assert result.exit_code == 0
        assert 'Dry run: 2 recipes would be imported.' in result.output
        with app.app_context():
            assert db.session.query(Recipe).count() == 0

    def test_unknown_household(self, app, bulk_text, tmp_path):
        path = self.write_recipes(tmp_path, bulk_text)
        result = app.test_cli_runner().invoke(args=['import-recipes', path, '--household', 'nope'])

        assert result.exit_code != 0
        assert "Household 'nope' not found." in result.output

    def test_empty_file(self, app, account, tmp_path):
        path = self.write_recipes(tmp_path, 'nothing useful here')
        result = app.test_cli_runner().invoke(args=['import-recipes', path, '--household', account['household_id']])

        assert result.exit_code == 0
        assert 'No recipes found' in result.output

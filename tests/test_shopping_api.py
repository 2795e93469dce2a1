"""
Tests for shopping list generation, retrieval and item toggling.
"""

import pytest

from mealplanner import db
from mealplanner.models import Recipe, ShoppingList

WEEK = '2026-10-19'

OMELETTE = ("Title: Omelette\nIngredients:\n-2 eggs\n-1 cup cheese\n-Salt\n"
            "---\n"
            "Title: Fried Rice\nIngredients:\n-1 eggs\n-2 cups rice\n-1 onion\n")


@pytest.fixture
def recipes(client, account):
    response = client.post(account['url'] + '/recipes/import', headers=account['headers'],
                           json={'text': OMELETTE})
    return {r['title']: r['id'] for r in response.get_json()['recipes']}


@pytest.fixture
def plan(client, account, recipes):
    for day, title in (('monday', 'Omelette'), ('wednesday', 'Fried Rice'), ('friday', 'Omelette')):
        response = client.put(account['url'] + f'/weekly-plans/{WEEK}/days/{day}',
                              headers=account['headers'], json={'recipe_id': recipes[title]})
    return response.get_json()


def generate(client, account, plan_id):
    return client.post(account['url'] + '/shopping-lists', headers=account['headers'],
                       json={'weekly_plan_id': plan_id})


class TestGenerateShoppingList:

    def test_generate(self, client, account, plan):
        response = generate(client, account, plan['id'])

        assert response.status_code == 201
        shopping_list = response.get_json()
        assert shopping_list['weekly_plan_id'] == plan['id']
        assert shopping_list['user_generated'] is True
        assert shopping_list['completed_at'] is None

        # Omelette is planned twice but only counted once
        assert [(i['key'], i['total_amount'], i['category']) for i in shopping_list['items']] == [
            ('eggs', '2, 1', 'dairy'),
            ('cheese', '1 cup', 'dairy'),
            ('salt', '1', 'pantry'),
            ('rice', '2 cups', 'pantry'),
            ('onion', '1', 'produce'),
        ]
        assert shopping_list['items'][0]['recipes'] == ['Omelette', 'Fried Rice']
        assert [g['category'] for g in shopping_list['grouped']] == ['produce', 'dairy', 'pantry']

    def test_regenerating_gives_same_items(self, client, account, plan):
        first = generate(client, account, plan['id']).get_json()
        second = generate(client, account, plan['id']).get_json()

        assert first['id'] != second['id']
        assert first['items'] == second['items']

    def test_missing_plan(self, client, account):
        response = generate(client, account, 'no-such-plan')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Weekly plan not found'

    def test_plan_with_no_meals(self, app, client, account, plan):
        for day in ('monday', 'wednesday', 'friday'):
            client.delete(account['url'] + f'/weekly-plans/{WEEK}/days/{day}', headers=account['headers'])

        response = generate(client, account, plan['id'])

        assert response.status_code == 400
        assert response.get_json()['error'] == 'No meals planned for this week'
        with app.app_context():
            assert ShoppingList.query.count() == 0

    def test_deleted_recipes_are_skipped(self, app, client, account, recipes, plan):
        with app.app_context():
            db.session.delete(db.session.get(Recipe, recipes['Fried Rice']))
            db.session.commit()

        response = generate(client, account, plan['id'])

        assert response.status_code == 201
        assert [i['key'] for i in response.get_json()['items']] == ['eggs', 'cheese', 'salt']

    def test_plan_from_other_household(self, client, account, other_account, plan):
        response = generate(client, other_account, plan['id'])
        assert response.status_code == 404


class TestGetShoppingList:

    def test_get(self, client, account, plan):
        created = generate(client, account, plan['id']).get_json()
        response = client.get(account['url'] + f"/shopping-lists/{created['id']}", headers=account['headers'])

        assert response.status_code == 200
        assert response.get_json() == created

    def test_missing(self, client, account):
        response = client.get(account['url'] + '/shopping-lists/nope', headers=account['headers'])
        assert response.status_code == 404


class TestToggleItem:

    @pytest.fixture
    def shopping_list(self, client, account, plan):
        return generate(client, account, plan['id']).get_json()

    def toggle(self, client, account, shopping_list, index):
        url = account['url'] + f"/shopping-lists/{shopping_list['id']}/items/{index}/toggle"
        response = client.post(url, headers=account['headers'])
        assert response.get_json() == {'success': True}
        return client.get(account['url'] + f"/shopping-lists/{shopping_list['id']}",
                          headers=account['headers']).get_json()

    def test_toggle(self, client, account, shopping_list):
        updated = self.toggle(client, account, shopping_list, 1)
        assert [i['checked'] for i in updated['items']] == [False, True, False, False, False]

        updated = self.toggle(client, account, shopping_list, 1)
        assert not any(i['checked'] for i in updated['items'])

    @pytest.mark.parametrize("index", [5, 99, -1])
    def test_out_of_bounds_is_a_no_op(self, client, account, shopping_list, index):
        updated = self.toggle(client, account, shopping_list, index)
        assert updated['items'] == shopping_list['items']

    def test_completed_when_everything_is_checked(self, client, account, shopping_list):
        for index in range(len(shopping_list['items'])):
            updated = self.toggle(client, account, shopping_list, index)
        assert updated['completed_at'] is not None

        updated = self.toggle(client, account, shopping_list, 0)
        assert updated['completed_at'] is None

    def test_missing_list(self, client, account):
        response = client.post(account['url'] + '/shopping-lists/nope/items/0/toggle', headers=account['headers'])
        assert response.status_code == 404

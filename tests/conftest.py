"""
Pytest configuration and shared fixtures.

Every test gets a fresh app backed by an in-memory SQLite database. No app
context is held open while requests run, so each request authenticates on
its own.
"""

import pytest

from mealplanner import create_app, db


TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'BCRYPT_LOG_ROUNDS': 4,
}


@pytest.fixture
def app():
    """Create an app with all tables created."""
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def signup(client, email, password='correct-horse', name=None):
    payload = {'email': email, 'password': password}
    if name:
        payload['name'] = name
    response = client.post('/auth/signup', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def account(client):
    """A signed-up user with their own household.

    Usage in tests:
        def test_something(client, account):
            client.get(account['url'] + '/recipes', headers=account['headers'])
    """
    data = signup(client, 'pat@example.com', name='Pat')
    household_id = data['household']['id']
    return {
        'user': data['user'],
        'household_id': household_id,
        'token': data['token'],
        'headers': {'Authorization': f"Bearer {data['token']}"},
        'url': f'/api/households/{household_id}',
    }


@pytest.fixture
def other_account(client):
    """A second user in a different household."""
    data = signup(client, 'sam@example.com', name='Sam')
    household_id = data['household']['id']
    return {
        'user': data['user'],
        'household_id': household_id,
        'token': data['token'],
        'headers': {'Authorization': f"Bearer {data['token']}"},
        'url': f'/api/households/{household_id}',
    }


@pytest.fixture
def soup_text():
    return "Title: Soup\nIngredients:\n-2 cups broth\n-1 onion"


@pytest.fixture
def bulk_text():
    """Pasted text with three recipes, one of which has no ingredients."""
    return (
        "Title: Spaghetti Bolognese\n"
        "Description: Classic Italian pasta dish\n"
        "Time: 30 minutes\n"
        "Servings: 4\n"
        "Tags: italian, pasta, dinner\n"
        "\n"
        "Ingredients:\n"
        "- 1 lb ground beef\n"
        "- 1 onion, diced\n"
        "- 2 cloves garlic, minced\n"
        "- 1 lb spaghetti\n"
        "\n"
        "Directions:\n"
        "1. Cook the spaghetti\n"
        "2. Brown the ground beef\n"
        "---\n"
        "Title: Fried Chicken\n"
        "Ingredients:\n"
        "-1.5 lbs boneless chicken thighs\n"
        "-Kentucky Colonel mix\n"
        "-2 eggs\n"
        "---\n"
        "Title: Just A Note\n"
        "Directions:\n"
        "1. Nothing to buy here\n"
    )

import os
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_migrate import Migrate
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Initialize extensions
db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()

# Grocery categories, in shopping order
GROCERY_CATEGORIES = (
    'produce',
    'meat & seafood',
    'dairy',
    'deli',
    'bakery',
    'frozen',
    'pantry',
    'beverages',
    'household',
)
DEFAULT_CATEGORY = 'pantry'

WEEK_DAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

# Bearer tokens stay valid for 30 days unless configured otherwise
DEFAULT_TOKEN_MAX_AGE = 60 * 60 * 24 * 30


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__)

    # --- CONFIGURATION ---
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'a_default_secret_key_for_development')
    app.config['TOKEN_MAX_AGE'] = int(os.getenv('TOKEN_MAX_AGE', DEFAULT_TOKEN_MAX_AGE))

    database_url = os.getenv("DATABASE_URL")
    if database_url and database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    app.config['SQLALCHEMY_DATABASE_URI'] = database_url or 'sqlite:///meal_planner.db'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    if test_config:
        app.config.update(test_config)

    # --- INITIALIZE EXTENSIONS ---
    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # --- BLUEPRINTS ---
    with app.app_context():
        # Import models here to avoid circular imports
        from . import models
        from .auth import load_user_from_request, unauthorized

        @login_manager.user_loader
        def load_user(user_id):
            return db.session.get(models.User, int(user_id))

        login_manager.request_loader(load_user_from_request)
        login_manager.unauthorized_handler(unauthorized)

        from .auth import auth as auth_blueprint
        app.register_blueprint(auth_blueprint, url_prefix='/auth')

        from .api import api as api_blueprint
        app.register_blueprint(api_blueprint, url_prefix='/api')

        from .errors import register_error_handlers
        register_error_handlers(app)

        from .commands import init_db_command, import_recipes_command
        app.cli.add_command(init_db_command)
        app.cli.add_command(import_recipes_command)

        return app

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from itsdangerous import BadSignature, URLSafeTimedSerializer

from . import db, bcrypt
from .errors import Conflict, Unauthenticated
from .models import Household, User
from .schemas import HouseholdCreate, LoginRequest, ProfileUpdate, SignupRequest, load

auth = Blueprint('auth', __name__)

TOKEN_SALT = 'auth-token'


# --- Token Utilities ---
def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'])


def issue_token(user):
    """Signs the user's id into a bearer token."""
    return _serializer().dumps(user.id, salt=TOKEN_SALT)


def load_user_from_request(req):
    """Flask-Login request loader for ``Authorization: Bearer <token>``."""
    auth_header = req.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    token = auth_header[len('Bearer '):].strip()
    try:
        user_id = _serializer().loads(token, salt=TOKEN_SALT, max_age=current_app.config['TOKEN_MAX_AGE'])
    except BadSignature as e:
        current_app.logger.warning(f"Rejected bearer token: {e}")
        return None
    return db.session.get(User, int(user_id))


def unauthorized():
    error = Unauthenticated()
    return jsonify(error.to_dict()), error.status_code


# --- Routes ---
@auth.route('/signup', methods=['POST'])
def signup():
    data = load(SignupRequest, request.get_json(silent=True))
    if User.query.filter_by(email=data.email).first():
        raise Conflict('Email address already in use.')

    name = data.name or data.email.split('@')[0]
    new_household = Household(name=f"{name}'s Family" if data.name else 'My Family')
    db.session.add(new_household)
    db.session.flush()

    hashed_password = bcrypt.generate_password_hash(data.password).decode('utf-8')
    user = User(email=data.email, name=name, password=hashed_password, household_id=new_household.id)
    db.session.add(user)
    db.session.flush()

    new_household.created_by = user.id
    db.session.commit()
    current_app.logger.info(f"Created user {user.id} with household {new_household.id}")

    return jsonify({
        'user': user.to_dict(),
        'household': new_household.to_dict(),
        'token': issue_token(user),
    }), 201


@auth.route('/login', methods=['POST'])
def login():
    data = load(LoginRequest, request.get_json(silent=True))
    user = User.query.filter_by(email=data.email.strip().lower()).first()
    if not user or not bcrypt.check_password_hash(user.password, data.password):
        raise Unauthenticated('Login unsuccessful. Please check email and password.')

    user.last_active_at = datetime.utcnow()
    db.session.commit()
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)})


@auth.route('/profile', methods=['GET'])
@login_required
def get_profile():
    current_user.last_active_at = datetime.utcnow()
    db.session.commit()
    household = current_user.household
    return jsonify({
        'user': current_user.to_dict(),
        'household': household.to_dict() if household else None,
    })


@auth.route('/profile', methods=['PATCH'])
@login_required
def update_profile():
    data = load(ProfileUpdate, request.get_json(silent=True))
    if data.name is not None:
        current_user.name = data.name
    if data.preferences is not None:
        if data.preferences.notifications is not None:
            current_user.notifications = data.preferences.notifications
        if data.preferences.theme is not None:
            current_user.theme = data.preferences.theme
    db.session.commit()
    return jsonify({'success': True, 'user': current_user.to_dict()})


@auth.route('/households', methods=['POST'])
@login_required
def create_household():
    data = load(HouseholdCreate, request.get_json(silent=True))
    household = Household(
        name=data.name,
        created_by=current_user.id,
        timezone=data.timezone,
        week_starts_on=data.week_starts_on,
    )
    db.session.add(household)
    db.session.flush()

    current_user.household_id = household.id
    db.session.commit()
    current_app.logger.info(f"User {current_user.id} created and joined household {household.id}")
    return jsonify(household.to_dict()), 201

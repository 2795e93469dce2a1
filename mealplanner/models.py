import uuid
from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import UniqueConstraint

from . import db, DEFAULT_CATEGORY


def generate_id():
    return uuid.uuid4().hex


class Household(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=generate_id)
    name = db.Column(db.String(100), nullable=False)
    created_by = db.Column(db.Integer, nullable=True)
    timezone = db.Column(db.String(64), nullable=False, default='America/New_York')
    week_starts_on = db.Column(db.String(10), nullable=False, default='sunday')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    recipes = db.relationship('Recipe', backref='household', lazy=True, cascade="all, delete-orphan")
    weekly_plans = db.relationship('WeeklyPlan', backref='household', lazy=True, cascade="all, delete-orphan")
    shopping_lists = db.relationship('ShoppingList', backref='household', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_by': self.created_by,
            'members': [member.id for member in self.members],
            'created_at': self.created_at.isoformat(),
            'settings': {
                'timezone': self.timezone,
                'week_starts_on': self.week_starts_on,
            },
        }


class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    password = db.Column(db.String(150), nullable=False)
    household_id = db.Column(db.String(64), db.ForeignKey('household.id'))
    household = db.relationship('Household', backref='members')
    role = db.Column(db.String(10), nullable=False, default='parent')
    notifications = db.Column(db.Boolean, nullable=False, default=True)
    theme = db.Column(db.String(10), nullable=False, default='light')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_active_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'household_id': self.household_id,
            'role': self.role,
            'created_at': self.created_at.isoformat(),
            'last_active_at': self.last_active_at.isoformat(),
            'preferences': {
                'notifications': self.notifications,
                'theme': self.theme,
            },
        }


class Recipe(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=generate_id)
    household_id = db.Column(db.String(64), db.ForeignKey('household.id'), nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    author = db.relationship('User', backref='recipes')
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # [{'name': ..., 'amount': ..., 'category': ...}, ...]
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    directions = db.Column(db.JSON, nullable=False, default=list)
    tags = db.Column(db.JSON, nullable=False, default=list)
    estimated_time = db.Column(db.Integer, nullable=True)
    servings = db.Column(db.Integer, nullable=True)
    source_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    likes = db.Column(db.JSON, nullable=False, default=list)
    times_planned = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'household_id': self.household_id,
            'title': self.title,
            'description': self.description,
            'ingredients': list(self.ingredients or []),
            'directions': list(self.directions or []),
            'tags': list(self.tags or []),
            'estimated_time': self.estimated_time,
            'servings': self.servings,
            'source_url': self.source_url,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat(),
            'likes': list(self.likes or []),
            'times_planned': self.times_planned,
        }


class WeeklyPlan(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=generate_id)
    household_id = db.Column(db.String(64), db.ForeignKey('household.id'), nullable=False)
    week_start_date = db.Column(db.Date, nullable=False)
    # day name -> recipe id, one meal per day
    meals = db.Column(db.JSON, nullable=False, default=dict)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    last_modified = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (UniqueConstraint('household_id', 'week_start_date', name='_household_week_uc'),)

    def to_dict(self):
        return {
            'id': self.id,
            'household_id': self.household_id,
            'week_start_date': self.week_start_date.isoformat(),
            'meals': dict(self.meals or {}),
            'created_by': self.created_by,
            'last_modified': self.last_modified.isoformat() if self.last_modified else None,
        }


class ShoppingList(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=generate_id)
    household_id = db.Column(db.String(64), db.ForeignKey('household.id'), nullable=False)
    weekly_plan_id = db.Column(db.String(64), db.ForeignKey('weekly_plan.id'), nullable=False)
    # [{'key', 'ingredient', 'total_amount', 'category', 'checked', 'recipes'}, ...]
    items = db.Column(db.JSON, nullable=False, default=list)
    generated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    user_generated = db.Column(db.Boolean, nullable=False, default=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'household_id': self.household_id,
            'weekly_plan_id': self.weekly_plan_id,
            'items': [dict(item, category=item.get('category') or DEFAULT_CATEGORY) for item in self.items or []],
            'generated_at': self.generated_at.isoformat(),
            'user_generated': self.user_generated,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

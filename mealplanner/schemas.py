"""Request schemas for the JSON API.

Bodies are validated here before they reach any core logic; a rejected body
becomes a ``ValidationFailure`` (HTTP 400).
"""
from __future__ import annotations

import json
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from . import GROCERY_CATEGORIES
from .errors import ValidationFailure

# Upper bounds of the recipe columns they are stored in
MAX_INTEGER = 2**31 - 1
TITLE_MAX_LENGTH = 200
SOURCE_URL_MAX_LENGTH = 500


class IngredientSchema(BaseModel):
    name: str = Field(..., min_length=1)
    amount: Optional[str] = None
    category: Optional[str] = None

    @field_validator('category')
    @classmethod
    def known_category(cls, value):
        if value is not None and value not in GROCERY_CATEGORIES:
            raise ValueError(f"category must be one of: {', '.join(GROCERY_CATEGORIES)}")
        return value


class RecipeDraft(BaseModel):
    """A recipe that has not been persisted yet (no id, no timestamps)."""
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    ingredients: List[IngredientSchema] = []
    directions: List[str] = []
    tags: List[str] = []
    estimated_time: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    servings: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    source_url: Optional[str] = Field(default=None, max_length=SOURCE_URL_MAX_LENGTH)

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, value):
        if not value.strip():
            raise ValueError('title must not be blank')
        return value.strip()


class ImportRequest(BaseModel):
    text: str = Field(..., min_length=1)
    preview: bool = False


class AssignMealRequest(BaseModel):
    recipe_id: str = Field(..., min_length=1)


class GenerateShoppingListRequest(BaseModel):
    weekly_plan_id: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=150)
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(default=None, max_length=100)

    @field_validator('email')
    @classmethod
    def looks_like_email(cls, value):
        value = value.strip().lower()
        if '@' not in value:
            raise ValueError('email must contain "@"')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class Preferences(BaseModel):
    notifications: Optional[bool] = None
    theme: Optional[Literal['light', 'dark']] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    preferences: Optional[Preferences] = None


class HouseholdCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    timezone: str = 'America/New_York'
    week_starts_on: Literal['sunday', 'monday'] = 'sunday'


def load(schema, data):
    """Validate ``data`` against ``schema`` or raise ``ValidationFailure``."""
    if data is None:
        data = {}
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailure('Invalid request data.', details=json.loads(e.json(include_url=False))) from e

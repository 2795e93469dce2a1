from functools import wraps
from flask_login import current_user

from .errors import NotFound


def require_household_member(f):
    """
    A decorator to verify that the current user belongs to the household named
    in the URL. Non-members get the same 404 as a missing household, so
    household ids cannot be probed.
    Must be applied below ``login_required``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        household_id = kwargs.get('household_id')
        if not household_id or current_user.household_id != household_id:
            raise NotFound('Household not found')
        return f(*args, **kwargs)
    return decorated_function

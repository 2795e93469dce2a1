from flask import current_app, jsonify
from sqlalchemy.exc import OperationalError

from . import db


class MealPlannerError(Exception):
    """Base class for errors surfaced to API callers as JSON."""
    status_code = 500
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message}
        if self.details is not None:
            payload['details'] = self.details
        return payload


class NotConfigured(MealPlannerError):
    status_code = 503
    default_message = 'Database not configured'


class NotFound(MealPlannerError):
    status_code = 404
    default_message = 'Not found'


class ValidationFailure(MealPlannerError):
    status_code = 400
    default_message = 'Invalid request data.'


class Unauthenticated(MealPlannerError):
    status_code = 401
    default_message = 'Authentication required.'


class NothingPlanned(MealPlannerError):
    status_code = 400
    default_message = 'No meals planned for this week'


class Conflict(MealPlannerError):
    status_code = 409
    default_message = 'Resource already exists.'


def register_error_handlers(app):
    @app.errorhandler(MealPlannerError)
    def handle_meal_planner_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(OperationalError)
    def handle_store_unavailable(error):
        db.session.rollback()
        current_app.logger.error(f"Database unavailable: {error}", exc_info=True)
        unavailable = NotConfigured()
        return jsonify(unavailable.to_dict()), unavailable.status_code

    @app.errorhandler(500)
    def handle_unexpected(error):
        db.session.rollback()
        original = getattr(error, 'original_exception', None) or error
        current_app.logger.error(f"Unhandled error: {original}", exc_info=original)
        return jsonify({'error': MealPlannerError.default_message}), 500

    @app.errorhandler(404)
    def handle_unknown_route(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_bad_method(error):
        return jsonify({'error': 'Method not allowed'}), 405

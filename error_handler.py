"""
Error taxonomy for the journal engine and the Flask handlers that turn it
into structured JSON responses.

Services raise these exceptions; they never build HTTP responses themselves.
Every failure reaching the client has the shape
``{"error": {"kind": ..., "message": ..., **details}}``.
"""

import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class JournalError(Exception):
    """Base class for every error the engine reports to its caller."""
    kind = 'JournalError'
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'kind': self.kind, 'message': self.message}
        payload.update(self.details)
        return payload


class ValidationError(JournalError):
    """Malformed or out-of-range input."""
    kind = 'ValidationError'
    status_code = 400


class OutOfRange(ValidationError):
    """A grade value outside the scale of its grading system."""
    kind = 'OutOfRange'


class ConfirmationRequired(ValidationError):
    """A destructive operation was invoked without the caller's confirmation."""
    kind = 'ConfirmationRequired'
    status_code = 409


class InvalidTransition(JournalError):
    kind = 'InvalidTransition'
    status_code = 409


class LessonNotConducted(JournalError):
    kind = 'LessonNotConducted'
    status_code = 409


class DuplicateGrade(JournalError):
    """A grade already exists for this student and assignment."""
    kind = 'DuplicateGrade'
    status_code = 409

    def __init__(self, message, existing_grade_id):
        super().__init__(message, existingGradeId=existing_grade_id)
        self.existing_grade_id = existing_grade_id


class NotFound(JournalError):
    kind = 'NotFound'
    status_code = 404


def error_response(kind, message, status_code, **details):
    payload = {'kind': kind, 'message': message}
    payload.update(details)
    return jsonify({'error': payload}), status_code


def register_error_handlers(app):
    """Attach JSON error handlers to the application."""

    @app.errorhandler(JournalError)
    def handle_journal_error(error):
        db.session.rollback()
        logger.warning(f"{request.method} {request.path} rejected: {error.kind} - {error.message}")
        return jsonify({'error': error.to_dict()}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(error.name.replace(' ', ''), error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception(f"Unhandled error on {request.method} {request.path}: {error}")
        return error_response('InternalError', 'An unexpected error occurred.', 500)

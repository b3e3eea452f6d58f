from functools import wraps
from flask import request
from error_handler import ValidationError


def json_body_required(f):
    """Rejects requests whose body is not a JSON object."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError('Request body must be a JSON object.')
        return f(*args, **kwargs)
    return decorated_function


def json_list_or_object_required(f):
    """Accepts a JSON array or a JSON object, used by the bulk endpoints."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        body = request.get_json(silent=True)
        if not isinstance(body, (dict, list)):
            raise ValidationError('Request body must be a JSON array or object.')
        return f(*args, **kwargs)
    return decorated_function

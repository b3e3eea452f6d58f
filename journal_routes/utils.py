"""
Shared request parsing helpers for the journal API.
"""

from datetime import date, datetime

from flask import request

from error_handler import ValidationError


def query_int(name, required=False):
    """Integer query-string argument."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        if required:
            raise ValidationError(f"Query parameter '{name}' is required.", field=name)
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer.", field=name)


def query_date(name):
    raw = request.args.get(name)
    return parse_date(raw, name) if raw else None


def query_bool(name, default=False):
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.lower() in ('true', '1', 'yes', 'on')


def body_int(body, name, required=False):
    value = body.get(name)
    if value is None:
        if required:
            raise ValidationError(f"'{name}' is required.", field=name)
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be an integer.", field=name)
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    if not isinstance(value, int):
        raise ValidationError(f"'{name}' must be an integer.", field=name)
    return value


def body_required(body, name):
    if body.get(name) is None:
        raise ValidationError(f"'{name}' is required.", field=name)
    return body[name]


def parse_date(value, name):
    """Accepts YYYY-MM-DD or a full ISO timestamp (whose date part is used)."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be a date (YYYY-MM-DD).", field=name)
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f"'{name}' must be a date (YYYY-MM-DD).", field=name)


def parse_time(value, name):
    """Lesson times travel as 'HH:MM'."""
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be a time (HH:MM).", field=name)
    try:
        return datetime.strptime(value, '%H:%M').time()
    except ValueError:
        raise ValidationError(f"'{name}' must be a time (HH:MM).", field=name)


def snake_changes(body, mapping):
    """Translate camelCase body keys to service keyword arguments, keeping only known ones."""
    unknown = sorted(set(body) - set(mapping))
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}.")
    return {mapping[key]: value for key, value in body.items()}

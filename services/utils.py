"""
Shared helpers for the journal services.
"""

import math
from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app

from extensions import db
from error_handler import NotFound, ValidationError


def require(model, ident, label=None):
    """Load a row by primary key or raise NotFound."""
    label = label or model.__name__
    if ident is None:
        raise NotFound(f"{label} id is required.")
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFound(f"{label} {ident} not found.", entity=label, id=ident)
    return obj


def school_now():
    """Current wall-clock time in the school's timezone, as a naive datetime."""
    tz = ZoneInfo(current_app.config.get('SCHOOL_TIMEZONE', 'UTC'))
    return datetime.now(tz).replace(tzinfo=None)


def to_number(value, field):
    """Coerce a JSON scalar to a finite float."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number.", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.", field=field)
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number.", field=field)
    return number

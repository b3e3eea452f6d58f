"""
Audit trail of journal changes.
"""

from datetime import datetime, time

from flask import Blueprint, request, jsonify

from error_handler import ValidationError
from services import get_activity_log
from .utils import query_date, query_int

bp = Blueprint('activity', __name__)


@bp.route('/activity', methods=['GET'])
def get_activity():
    from_date = query_date('fromDate')
    to_date = query_date('toDate')
    limit = query_int('limit')
    if limit is None:
        limit = 100
    if not 1 <= limit <= 1000:
        raise ValidationError("'limit' must be between 1 and 1000.", field='limit')
    entries = get_activity_log(
        user_id=query_int('userId'),
        action=request.args.get('action'),
        start_date=datetime.combine(from_date, time.min) if from_date else None,
        end_date=datetime.combine(to_date, time.max) if to_date else None,
        limit=limit,
    )
    return jsonify([entry.to_dict() for entry in entries])

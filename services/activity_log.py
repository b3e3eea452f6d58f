"""
Activity logging for auditing journal changes.
"""

import json
from extensions import db
from models import ActivityLog


def log_activity(action, details=None, user_id=None):
    """
    Stage one activity entry in the current session.

    The entry is committed together with the change it describes, so a
    rolled-back operation leaves no audit trace behind.
    """
    log_entry = ActivityLog()
    log_entry.user_id = user_id
    log_entry.action = action
    if details:
        log_entry.details = json.dumps(details, default=str)
    db.session.add(log_entry)
    return log_entry


def get_activity_log(user_id=None, action=None, start_date=None, end_date=None, limit=100):
    """Activity entries matching the filters, newest first."""
    query = ActivityLog.query
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    if action:
        query = query.filter_by(action=action)
    if start_date:
        query = query.filter(ActivityLog.timestamp >= start_date)
    if end_date:
        query = query.filter(ActivityLog.timestamp <= end_date)
    return query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit).all()

"""
Attendance routes.
"""

from flask import Blueprint, request, jsonify

from decorators import json_list_or_object_required
from error_handler import ValidationError
from services import record_attendance, get_lesson_attendance, attendance_summary
from .utils import parse_date, query_bool, query_date, query_int

bp = Blueprint('attendance', __name__)


def _entries_from_body(body):
    """
    Accepts either a bare list of entries, each carrying its scheduleId, or
    {'scheduleId': ..., 'entries': [...]}. One request covers one lesson.
    """
    if isinstance(body, dict):
        schedule_id = body.get('scheduleId')
        raw_entries = body.get('entries')
    else:
        raw_entries = body
        schedule_ids = {entry.get('scheduleId') for entry in raw_entries if isinstance(entry, dict)}
        if len(schedule_ids) != 1:
            raise ValidationError('All attendance entries must reference the same scheduleId.')
        schedule_id = schedule_ids.pop()
    if not isinstance(schedule_id, int) or isinstance(schedule_id, bool):
        raise ValidationError("'scheduleId' is required.", field='scheduleId')
    if not isinstance(raw_entries, list):
        raise ValidationError("'entries' must be a list.", field='entries')

    entries = []
    for raw in raw_entries:
        if not isinstance(raw, dict):
            raise ValidationError('Each attendance entry must be an object.')
        entries.append({
            'student_id': raw.get('studentId'),
            'status': raw.get('status'),
            'comment': raw.get('comment'),
            'date': parse_date(raw['date'], 'date') if raw.get('date') else None,
        })
    return schedule_id, entries


@bp.route('/attendance', methods=['POST'])
@json_list_or_object_required
def save_attendance():
    schedule_id, entries = _entries_from_body(request.get_json())
    records = record_attendance(schedule_id, entries)
    return jsonify([record.to_dict() for record in records]), 201


@bp.route('/attendance', methods=['GET'])
def get_attendance():
    schedule_id = query_int('scheduleId', required=True)
    return jsonify(get_lesson_attendance(schedule_id, fill_missing=query_bool('fill', default=True)))


@bp.route('/attendance/summary', methods=['GET'])
def get_attendance_summary():
    summary = attendance_summary(
        class_id=query_int('classId', required=True),
        student_id=query_int('studentId'),
        start=query_date('fromDate'),
        end=query_date('toDate'),
    )
    return jsonify({str(student_id): counts for student_id, counts in summary.items()})

"""
Lesson occurrence routes (schedules).
"""

from flask import Blueprint, request, jsonify

from decorators import json_body_required
from services import create_lesson, instantiate_weekly_lessons, set_lesson_status, list_lessons, delete_lesson
from .utils import body_int, body_required, parse_date, parse_time, query_int, query_date

bp = Blueprint('lessons', __name__)


@bp.route('/schedules', methods=['GET'])
def get_schedules():
    lessons = list_lessons(
        class_id=query_int('classId'),
        subject_id=query_int('subjectId'),
        teacher_id=query_int('teacherId'),
        subgroup_id=query_int('subgroupId'),
        schedule_id=query_int('scheduleId'),
        schedule_date=query_date('date') or query_date('scheduleDate'),
    )
    return jsonify([lesson.to_dict() for lesson in lessons])


@bp.route('/schedules', methods=['POST'])
@json_body_required
def add_schedule():
    body = request.get_json()
    lesson = create_lesson(
        class_id=body_int(body, 'classId', required=True),
        subject_id=body_int(body, 'subjectId', required=True),
        teacher_id=body_int(body, 'teacherId'),
        schedule_date=parse_date(body_required(body, 'scheduleDate'), 'scheduleDate'),
        start_time=parse_time(body_required(body, 'startTime'), 'startTime'),
        end_time=parse_time(body_required(body, 'endTime'), 'endTime'),
        subgroup_id=body_int(body, 'subgroupId'),
        room=body.get('room'),
    )
    return jsonify(lesson.to_dict()), 201


@bp.route('/schedules/weekly', methods=['POST'])
@json_body_required
def add_weekly_schedules():
    """Instantiate a weekly timetable slot as concrete lessons over a date range."""
    body = request.get_json()
    lessons = instantiate_weekly_lessons(
        class_id=body_int(body, 'classId', required=True),
        subject_id=body_int(body, 'subjectId', required=True),
        teacher_id=body_int(body, 'teacherId'),
        day_of_week=body_int(body, 'dayOfWeek', required=True),
        start_time=parse_time(body_required(body, 'startTime'), 'startTime'),
        end_time=parse_time(body_required(body, 'endTime'), 'endTime'),
        from_date=parse_date(body_required(body, 'fromDate'), 'fromDate'),
        to_date=parse_date(body_required(body, 'toDate'), 'toDate'),
        subgroup_id=body_int(body, 'subgroupId'),
        room=body.get('room'),
    )
    return jsonify([lesson.to_dict() for lesson in lessons]), 201


@bp.route('/schedules/<int:schedule_id>/status', methods=['PATCH'])
@json_body_required
def update_schedule_status(schedule_id):
    body = request.get_json()
    lesson = set_lesson_status(schedule_id, body.get('status'))
    return jsonify(lesson.to_dict())


@bp.route('/schedules/<int:schedule_id>', methods=['DELETE'])
def remove_schedule(schedule_id):
    deleted = delete_lesson(schedule_id)
    return jsonify({'id': schedule_id, 'deleted': deleted})

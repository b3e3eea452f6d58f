"""
Grade routes.
"""

from flask import Blueprint, request, jsonify

from decorators import json_body_required
from services import record_grade, update_grade, delete_grade, list_grades
from .utils import body_int, body_required, parse_date, query_int, snake_changes

bp = Blueprint('grades', __name__)

PATCH_FIELDS = {
    'grade': 'grade',
    'comment': 'comment',
    'gradeType': 'grade_type',
    'subgroupId': 'subgroup_id',
}


@bp.route('/grades', methods=['GET'])
def get_grades():
    grades = list_grades(
        student_id=query_int('studentId'),
        class_id=query_int('classId'),
        subject_id=query_int('subjectId'),
        schedule_id=query_int('scheduleId'),
        assignment_id=query_int('assignmentId'),
    )
    return jsonify([g.to_dict() for g in grades])


@bp.route('/grades', methods=['POST'])
@json_body_required
def add_grade():
    body = request.get_json()
    grade = record_grade(
        student_id=body_int(body, 'studentId', required=True),
        subject_id=body_int(body, 'subjectId', required=True),
        class_id=body_int(body, 'classId', required=True),
        teacher_id=body_int(body, 'teacherId'),
        value=body_required(body, 'grade'),
        schedule_id=body_int(body, 'scheduleId'),
        assignment_id=body_int(body, 'assignmentId'),
        subgroup_id=body_int(body, 'subgroupId'),
        comment=body.get('comment'),
        grade_type=body.get('gradeType'),
        date=parse_date(body['date'], 'date') if body.get('date') else None,
    )
    return jsonify(grade.to_dict()), 201


@bp.route('/grades/<int:grade_id>', methods=['PATCH'])
@json_body_required
def edit_grade(grade_id):
    changes = snake_changes(request.get_json(), PATCH_FIELDS)
    grade = update_grade(grade_id, **changes)
    return jsonify(grade.to_dict())


@bp.route('/grades/<int:grade_id>', methods=['DELETE'])
def remove_grade(grade_id):
    deleted = delete_grade(grade_id)
    return jsonify({'id': grade_id, 'deleted': deleted})

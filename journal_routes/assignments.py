"""
Assignment routes.
"""

from flask import Blueprint, request, jsonify

from decorators import json_body_required
from services import create_assignment, update_assignment, list_assignments, delete_assignment
from .utils import body_int, body_required, query_int, query_bool, snake_changes

bp = Blueprint('assignments', __name__)

PATCH_FIELDS = {
    'assignmentType': 'assignment_type',
    'maxScore': 'max_score',
    'description': 'description',
    'plannedFor': 'planned_for',
    'displayOrder': 'display_order',
}


@bp.route('/assignments', methods=['GET'])
def get_assignments():
    assignments = list_assignments(
        class_id=query_int('classId'),
        subject_id=query_int('subjectId'),
        teacher_id=query_int('teacherId'),
        subgroup_id=query_int('subgroupId'),
        schedule_id=query_int('scheduleId'),
    )
    return jsonify([a.to_dict() for a in assignments])


@bp.route('/assignments', methods=['POST'])
@json_body_required
def add_assignment():
    body = request.get_json()
    assignment = create_assignment(
        schedule_id=body_int(body, 'scheduleId', required=True),
        assignment_type=body_required(body, 'assignmentType'),
        max_score=body_required(body, 'maxScore'),
        planned_for=body.get('plannedFor', False),
        description=body.get('description'),
        teacher_id=body_int(body, 'teacherId'),
        class_id=body_int(body, 'classId'),
        subject_id=body_int(body, 'subjectId'),
        subgroup_id=body_int(body, 'subgroupId'),
        display_order=body_int(body, 'displayOrder'),
    )
    return jsonify(assignment.to_dict()), 201


@bp.route('/assignments/<int:assignment_id>', methods=['PATCH'])
@json_body_required
def edit_assignment(assignment_id):
    changes = snake_changes(request.get_json(), PATCH_FIELDS)
    assignment = update_assignment(assignment_id, **changes)
    return jsonify(assignment.to_dict())


@bp.route('/assignments/<int:assignment_id>', methods=['DELETE'])
def remove_assignment(assignment_id):
    """
    Two-step delete. Without ?confirm=true the response is a 409 carrying
    the grades that would be removed; repeating with confirmation deletes.
    """
    removed = delete_assignment(assignment_id, confirm=query_bool('confirm'))
    if removed is None:
        return jsonify({'id': assignment_id, 'deleted': False})
    return jsonify({'id': assignment_id, 'deleted': True, 'deletedGradeIds': removed['gradeIds']})

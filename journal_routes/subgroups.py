"""
Subgroup routes.
"""

from flask import Blueprint, request, jsonify

from decorators import json_body_required
from error_handler import ValidationError
from models import Subgroup
from services import create_subgroup, add_subgroup_members, remove_subgroup_members, list_subgroups, delete_subgroup
from services.utils import require
from .utils import body_int, body_required, query_int

bp = Blueprint('subgroups', __name__)


def _student_ids(body):
    student_ids = body.get('studentIds')
    if not isinstance(student_ids, list) or not all(isinstance(s, int) and not isinstance(s, bool)
                                                    for s in student_ids):
        raise ValidationError("'studentIds' must be a list of integers.", field='studentIds')
    return student_ids


@bp.route('/subgroups', methods=['GET'])
def get_subgroups():
    return jsonify([sg.to_dict() for sg in list_subgroups(query_int('classId'))])


@bp.route('/subgroups', methods=['POST'])
@json_body_required
def add_subgroup():
    body = request.get_json()
    subgroup = create_subgroup(
        class_id=body_int(body, 'classId', required=True),
        name=body_required(body, 'name'),
        description=body.get('description'),
        school_id=body_int(body, 'schoolId'),
        student_ids=_student_ids(body) if 'studentIds' in body else None,
    )
    return jsonify(subgroup.to_dict()), 201


@bp.route('/subgroups/<int:subgroup_id>', methods=['DELETE'])
def remove_subgroup(subgroup_id):
    deleted = delete_subgroup(subgroup_id)
    return jsonify({'id': subgroup_id, 'deleted': deleted})


@bp.route('/subgroups/<int:subgroup_id>/students', methods=['POST'])
@json_body_required
def add_members(subgroup_id):
    added = add_subgroup_members(subgroup_id, _student_ids(request.get_json()))
    subgroup = require(Subgroup, subgroup_id, 'Subgroup')
    return jsonify(dict(subgroup.to_dict(), added=added))


@bp.route('/subgroups/<int:subgroup_id>/students', methods=['DELETE'])
@json_body_required
def remove_members(subgroup_id):
    removed = remove_subgroup_members(subgroup_id, _student_ids(request.get_json()))
    subgroup = require(Subgroup, subgroup_id, 'Subgroup')
    return jsonify(dict(subgroup.to_dict(), removed=removed))

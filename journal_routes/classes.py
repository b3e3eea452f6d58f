"""
Roster routes: classes, subjects, students and enrollment.
"""

from flask import Blueprint, request, jsonify

from decorators import json_body_required
from models import Class, Student
from services import create_class, set_grading_system, create_subject, create_student, enroll_student, class_roster
from services.utils import require
from .utils import body_int, body_required

bp = Blueprint('classes', __name__)


@bp.route('/classes', methods=['POST'])
@json_body_required
def add_class():
    body = request.get_json()
    klass = create_class(
        name=body_required(body, 'name'),
        grading_system=body.get('gradingSystem'),
        school_id=body_int(body, 'schoolId'),
        grade_level=body_int(body, 'gradeLevel'),
        academic_year=body_int(body, 'academicYear'),
    )
    return jsonify(klass.to_dict()), 201


@bp.route('/classes/<int:class_id>', methods=['GET'])
def get_class(class_id):
    klass = require(Class, class_id, 'Class')
    data = klass.to_dict()
    data['studentIds'] = class_roster(klass.id)
    return jsonify(data)


@bp.route('/classes/<int:class_id>', methods=['PATCH'])
@json_body_required
def update_class(class_id):
    """Only the grading system of a class is editable here."""
    body = request.get_json()
    klass = set_grading_system(class_id, body_required(body, 'gradingSystem'))
    return jsonify(klass.to_dict())


@bp.route('/classes/<int:class_id>/students', methods=['POST'])
@json_body_required
def enroll(class_id):
    body = request.get_json()
    student_id = body_int(body, 'studentId', required=True)
    enroll_student(class_id, student_id)
    return jsonify({'classId': class_id, 'studentIds': class_roster(class_id)}), 201


@bp.route('/subjects', methods=['POST'])
@json_body_required
def add_subject():
    body = request.get_json()
    subject = create_subject(body_required(body, 'name'), body.get('description'), body_int(body, 'schoolId'))
    return jsonify(subject.to_dict()), 201


@bp.route('/students', methods=['POST'])
@json_body_required
def add_student():
    body = request.get_json()
    student = create_student(body.get('firstName'), body.get('lastName'))
    return jsonify(student.to_dict()), 201


@bp.route('/students/<int:student_id>', methods=['GET'])
def get_student(student_id):
    return jsonify(require(Student, student_id, 'Student').to_dict())

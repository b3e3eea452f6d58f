"""
Journal views and performance averages.
"""

from flask import Blueprint, request, jsonify

from services import class_averages, journal_averages, assignment_averages, load_journal
from services.performance import serialize_result
from .utils import query_date, query_int

bp = Blueprint('averages', __name__)


def _period_args():
    return {
        'period': request.args.get('period', 'year'),
        'academic_year': query_int('academicYear'),
        'from_date': query_date('fromDate'),
        'to_date': query_date('toDate'),
    }


@bp.route('/averages', methods=['GET'])
def get_averages():
    """
    Averages keyed by student id, then by subject id or 'overall'.
    Students without qualifying grades carry noData=true, never a zero.
    """
    result = class_averages(
        class_id=query_int('classId', required=True),
        student_id=query_int('studentId'),
        **_period_args(),
    )
    return jsonify({
        str(student_id): {str(key): serialize_result(value) for key, value in row.items()}
        for student_id, row in result['students'].items()
    })


@bp.route('/averages/journal', methods=['GET'])
def get_journal_averages():
    result = journal_averages(
        class_id=query_int('classId', required=True),
        subject_id=query_int('subjectId', required=True),
        subgroup_id=query_int('subgroupId'),
        **_period_args(),
    )
    return jsonify({
        'classId': result['classId'],
        'subjectId': result['subjectId'],
        'subgroupId': result['subgroupId'],
        'gradingSystem': result['gradingSystem'],
        'startDate': result['startDate'].isoformat(),
        'endDate': result['endDate'].isoformat(),
        'students': {str(sid): serialize_result(value) for sid, value in result['students'].items()},
    })


@bp.route('/classes/<int:class_id>/assignment-averages', methods=['GET'])
def get_assignment_averages(class_id):
    return jsonify(assignment_averages(class_id, subject_id=query_int('subjectId')))


@bp.route('/journal', methods=['GET'])
def get_journal():
    """Lessons, assignments and grades of one journal (main class or a subgroup)."""
    view = load_journal(
        class_id=query_int('classId', required=True),
        subject_id=query_int('subjectId', required=True),
        subgroup_id=query_int('subgroupId'),
    )
    return jsonify({
        'lessons': [lesson.to_dict() for lesson in view['lessons']],
        'assignments': [a.to_dict() for a in view['assignments']],
        'grades': [g.to_dict() for g in view['grades']],
    })

"""
Subgroup and membership management.
"""

from flask import current_app

from extensions import db
from error_handler import ValidationError
from models import Class, Student, Enrollment, Subgroup, SubgroupMember, Schedule, Grade
from .activity_log import log_activity
from .utils import require


def create_subgroup(class_id, name, description=None, school_id=None, student_ids=None):
    klass = require(Class, class_id, 'Class')
    name = (name or '').strip()
    if not name:
        raise ValidationError('Subgroup name is required.', field='name')

    subgroup = Subgroup(
        name=name,
        description=description,
        class_id=klass.id,
        school_id=school_id if school_id is not None else klass.school_id,
    )
    db.session.add(subgroup)
    db.session.flush()
    if student_ids:
        _add_members(subgroup, student_ids)
    log_activity('subgroup_created', {'subgroupId': subgroup.id, 'classId': klass.id})
    db.session.commit()
    current_app.logger.info(f"Subgroup {subgroup.id} '{name}' created for class {klass.id}")
    return subgroup


def _add_members(subgroup, student_ids):
    added = 0
    for student_id in student_ids:
        require(Student, student_id, 'Student')
        enrolled = Enrollment.query.filter_by(student_id=student_id, class_id=subgroup.class_id, is_active=True).first()
        if not enrolled:
            raise ValidationError(f"Student {student_id} is not enrolled in class {subgroup.class_id}.")
        exists = SubgroupMember.query.filter_by(subgroup_id=subgroup.id, student_id=student_id).first()
        if not exists:
            db.session.add(SubgroupMember(subgroup_id=subgroup.id, student_id=student_id))
            db.session.flush()
            added += 1
    return added


def add_subgroup_members(subgroup_id, student_ids):
    """Add students to a subgroup. Students already in it are skipped."""
    subgroup = require(Subgroup, subgroup_id, 'Subgroup')
    added = _add_members(subgroup, student_ids)
    log_activity('subgroup_members_added', {'subgroupId': subgroup.id, 'studentIds': list(student_ids)})
    db.session.commit()
    return added


def remove_subgroup_members(subgroup_id, student_ids):
    subgroup = require(Subgroup, subgroup_id, 'Subgroup')
    removed = SubgroupMember.query.filter(
        SubgroupMember.subgroup_id == subgroup.id,
        SubgroupMember.student_id.in_(list(student_ids)),
    ).delete(synchronize_session=False)
    log_activity('subgroup_members_removed', {'subgroupId': subgroup.id, 'studentIds': list(student_ids)})
    db.session.commit()
    return removed


def list_subgroups(class_id=None):
    query = Subgroup.query
    if class_id is not None:
        query = query.filter_by(class_id=class_id)
    return query.order_by(Subgroup.id).all()


def delete_subgroup(subgroup_id):
    """Delete an unused subgroup. A missing id is treated as already deleted."""
    subgroup = db.session.get(Subgroup, subgroup_id)
    if subgroup is None:
        return False
    lesson_count = Schedule.query.filter_by(subgroup_id=subgroup.id).count()
    grade_count = Grade.query.filter_by(subgroup_id=subgroup.id).count()
    if lesson_count or grade_count:
        raise ValidationError(
            f"Subgroup {subgroup.id} still owns {lesson_count} lesson(s) and {grade_count} grade(s).",
            lessonCount=lesson_count,
            gradeCount=grade_count,
        )
    db.session.delete(subgroup)
    log_activity('subgroup_deleted', {'subgroupId': subgroup_id})
    db.session.commit()
    return True

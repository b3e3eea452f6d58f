"""
Classes, subjects, students and enrollment.
"""

from flask import current_app

from extensions import db
from error_handler import ValidationError
from models import Class, Subject, Student, Enrollment, GRADING_SYSTEMS
from .activity_log import log_activity
from .utils import require


def _validate_grading_system(grading_system):
    if grading_system not in GRADING_SYSTEMS:
        raise ValidationError(f"Unknown grading system '{grading_system}'.", allowed=list(GRADING_SYSTEMS))
    return grading_system


def create_class(name, grading_system=None, school_id=None, grade_level=None, academic_year=None):
    if not name:
        raise ValidationError('Class name is required.', field='name')
    grading_system = grading_system or current_app.config.get('DEFAULT_GRADING_SYSTEM', 'five_point')
    klass = Class(
        name=name,
        grading_system=_validate_grading_system(grading_system),
        school_id=school_id,
        grade_level=grade_level,
        academic_year=academic_year,
    )
    db.session.add(klass)
    db.session.commit()
    return klass


def set_grading_system(class_id, grading_system):
    """
    Switch the grading system of a class.

    Grades already recorded are kept as they are; only validation of new
    writes and the averaging algorithm change.
    """
    klass = require(Class, class_id, 'Class')
    _validate_grading_system(grading_system)
    if klass.grading_system != grading_system:
        previous = klass.grading_system
        klass.grading_system = grading_system
        log_activity('grading_system_changed', {'classId': klass.id, 'from': previous, 'to': grading_system})
        db.session.commit()
        current_app.logger.info(f"Class {klass.id} grading system changed from {previous} to {grading_system}")
    return klass


def create_subject(name, description=None, school_id=None):
    if not name:
        raise ValidationError('Subject name is required.', field='name')
    subject = Subject(name=name, description=description, school_id=school_id)
    db.session.add(subject)
    db.session.commit()
    return subject


def create_student(first_name, last_name):
    if not first_name or not last_name:
        raise ValidationError('Student first and last name are required.')
    student = Student(first_name=first_name, last_name=last_name)
    db.session.add(student)
    db.session.commit()
    return student


def enroll_student(class_id, student_id):
    """Enroll a student, reactivating a dropped enrollment if there is one."""
    require(Class, class_id, 'Class')
    require(Student, student_id, 'Student')
    enrollment = Enrollment.query.filter_by(class_id=class_id, student_id=student_id).first()
    if enrollment is None:
        enrollment = Enrollment(class_id=class_id, student_id=student_id, is_active=True)
        db.session.add(enrollment)
    else:
        enrollment.is_active = True
    db.session.commit()
    return enrollment


def class_roster(class_id):
    """Ids of the students actively enrolled in a class."""
    rows = Enrollment.query.filter_by(class_id=class_id, is_active=True).all()
    return sorted(row.student_id for row in rows)

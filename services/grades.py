"""
Grade ledger: recording, correcting and removing individual student scores.
"""

from datetime import date as date_type, datetime, time

from flask import current_app

from extensions import db
from error_handler import DuplicateGrade, LessonNotConducted, OutOfRange, ValidationError
from models import Class, Subject, Student, Subgroup, Schedule, Assignment, Grade, GRADE_TYPES
from .activity_log import log_activity
from .utils import require, school_now, to_number

UPDATABLE_FIELDS = ('grade', 'comment', 'grade_type', 'subgroup_id')


def validate_grade_value(klass, assignment, value):
    """
    Check a numeric grade against the scale of the class's grading system.

    Args:
        klass: the Class the grade belongs to
        assignment: linked Assignment or None
        value: grade value

    Returns:
        float: the validated value
    """
    value = to_number(value, 'grade')
    if klass.grading_system == 'cumulative':
        upper = assignment.max_score if assignment is not None else None
        if value < 0 or (upper is not None and value > upper):
            bound = f"0 and {upper:g}" if upper is not None else "0 and above"
            raise OutOfRange(f"Grade {value:g} must be between {bound}.", min=0, max=upper)
    else:
        if not 1 <= value <= 5:
            raise OutOfRange(f"Grade {value:g} must be between 1 and 5.", min=1, max=5)
    return value


def _validate_grade_type(grade_type):
    if grade_type not in GRADE_TYPES:
        raise ValidationError(f"Unknown grade type '{grade_type}'.", allowed=list(GRADE_TYPES))
    return grade_type


def _resolve_subgroup(klass, lesson, subgroup_id):
    if lesson is not None and lesson.subgroup_id is not None:
        if subgroup_id is not None and subgroup_id != lesson.subgroup_id:
            raise ValidationError(f"Grade subgroup {subgroup_id} conflicts with lesson subgroup {lesson.subgroup_id}.")
        return lesson.subgroup_id
    if subgroup_id is not None:
        subgroup = require(Subgroup, subgroup_id, 'Subgroup')
        if subgroup.class_id != klass.id:
            raise ValidationError(f"Subgroup {subgroup_id} does not belong to class {klass.id}.")
    return subgroup_id


def _timestamp(value):
    if value is None:
        return school_now()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date_type):
        return datetime.combine(value, time.min)
    raise ValidationError('date must be a date.', field='date')


def record_grade(student_id, subject_id, class_id, teacher_id, value, schedule_id=None, assignment_id=None,
                 subgroup_id=None, comment=None, grade_type=None, date=None):
    """
    Record a new grade after running every write-time rule.

    Raises:
        NotFound: unknown class, subject, student, lesson or assignment
        ValidationError / OutOfRange: malformed input or a value off the scale
        LessonNotConducted: planned assignment whose lesson has not happened
        DuplicateGrade: the student already has a grade for this assignment
    """
    klass = require(Class, class_id, 'Class')
    require(Subject, subject_id, 'Subject')
    require(Student, student_id, 'Student')
    lesson = require(Schedule, schedule_id, 'Lesson') if schedule_id is not None else None
    assignment = require(Assignment, assignment_id, 'Assignment') if assignment_id is not None else None

    if assignment is not None:
        if lesson is None:
            lesson = assignment.schedule
        elif assignment.schedule_id != lesson.id:
            raise ValidationError(f"Assignment {assignment.id} belongs to lesson {assignment.schedule_id}, not {lesson.id}.")
    if lesson is not None and (lesson.class_id != class_id or lesson.subject_id != subject_id):
        raise ValidationError(f"Lesson {lesson.id} is not a lesson of this class and subject.")

    if grade_type is None:
        if assignment is None:
            raise ValidationError('gradeType is required when no assignment is linked.', field='gradeType')
        grade_type = assignment.assignment_type
    _validate_grade_type(grade_type)
    value = validate_grade_value(klass, assignment, value)
    subgroup_id = _resolve_subgroup(klass, lesson, subgroup_id)

    if assignment is not None:
        if assignment.planned_for and not lesson.is_conducted:
            raise LessonNotConducted(
                f"Assignment {assignment.id} is planned for lesson {lesson.id}, which has not been conducted.",
                scheduleId=lesson.id,
            )
        if lesson.is_conducted:
            existing = Grade.query.filter_by(student_id=student_id, assignment_id=assignment.id).first()
            if existing:
                raise DuplicateGrade(
                    f"Student {student_id} already has grade {existing.id} for assignment {assignment.id}.",
                    existing_grade_id=existing.id,
                )

    grade = Grade(
        student_id=student_id,
        subject_id=subject_id,
        class_id=class_id,
        teacher_id=teacher_id,
        schedule_id=lesson.id if lesson is not None else None,
        assignment_id=assignment.id if assignment is not None else None,
        subgroup_id=subgroup_id,
        grade=value,
        grade_type=grade_type,
        comment=comment,
        created_at=_timestamp(date),
    )
    db.session.add(grade)
    db.session.flush()
    log_activity('grade_created', {'gradeId': grade.id, 'studentId': student_id, 'assignmentId': grade.assignment_id,
                                   'grade': value}, user_id=teacher_id)
    db.session.commit()
    current_app.logger.info(f"Grade {grade.id} ({value:g}) recorded for student {student_id}, subject {subject_id}")
    return grade


def update_grade(grade_id, **changes):
    """
    Apply a partial update; re-applying the same change leaves the same record.

    Every field is validated before any is assigned, so a rejected update
    leaves the grade untouched.
    """
    grade = require(Grade, grade_id, 'Grade')
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}.")

    klass = require(Class, grade.class_id, 'Class')
    validated = {}
    if 'grade' in changes:
        validated['grade'] = validate_grade_value(klass, grade.assignment, changes['grade'])
    if 'grade_type' in changes:
        validated['grade_type'] = _validate_grade_type(changes['grade_type'])
    if 'comment' in changes:
        validated['comment'] = changes['comment']
    if 'subgroup_id' in changes:
        validated['subgroup_id'] = _resolve_subgroup(klass, grade.schedule, changes['subgroup_id'])

    for field, value in validated.items():
        setattr(grade, field, value)
    log_activity('grade_updated', {'gradeId': grade.id, 'fields': sorted(changes)}, user_id=grade.teacher_id)
    db.session.commit()
    return grade


def delete_grade(grade_id):
    """Delete a grade. A missing id is treated as already deleted."""
    grade = db.session.get(Grade, grade_id)
    if grade is None:
        return False
    db.session.delete(grade)
    log_activity('grade_deleted', {'gradeId': grade_id, 'studentId': grade.student_id})
    db.session.commit()
    current_app.logger.info(f"Grade {grade_id} deleted")
    return True


def list_grades(student_id=None, class_id=None, subject_id=None, schedule_id=None, assignment_id=None):
    query = Grade.query
    if student_id is not None:
        query = query.filter(Grade.student_id == student_id)
    if class_id is not None:
        query = query.filter(Grade.class_id == class_id)
    if subject_id is not None:
        query = query.filter(Grade.subject_id == subject_id)
    if schedule_id is not None:
        query = query.filter(Grade.schedule_id == schedule_id)
    if assignment_id is not None:
        query = query.filter(Grade.assignment_id == assignment_id)
    return query.order_by(Grade.created_at, Grade.id).all()

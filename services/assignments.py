"""
Assignment catalog: gradable work items attached to a lesson occurrence.
"""

from flask import current_app

from extensions import db
from error_handler import ConfirmationRequired, ValidationError
from models import Class, Schedule, Assignment, Grade, ASSIGNMENT_TYPES
from .activity_log import log_activity
from .utils import require, to_number

UPDATABLE_FIELDS = ('assignment_type', 'max_score', 'description', 'planned_for', 'display_order')


def _validate_type(assignment_type):
    if assignment_type not in ASSIGNMENT_TYPES:
        raise ValidationError(f"Unknown assignment type '{assignment_type}'.", allowed=list(ASSIGNMENT_TYPES))
    return assignment_type


def _validate_max_score(max_score):
    value = to_number(max_score, 'maxScore')
    if value <= 0:
        raise ValidationError('maxScore must be a positive number.', field='maxScore')
    return value


def _validate_flag(value, field):
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false.", field=field)
    return value


def create_assignment(schedule_id, assignment_type, max_score, planned_for=False, description=None,
                      teacher_id=None, class_id=None, subject_id=None, subgroup_id=None, display_order=None):
    """
    Attach an assignment to a lesson.

    class, subject and subgroup are inherited from the lesson; values passed
    explicitly must agree with it. planned_for may be set whatever the
    lesson's current status is.
    """
    lesson = require(Schedule, schedule_id, 'Lesson')
    _validate_type(assignment_type)
    max_score = _validate_max_score(max_score)
    _validate_flag(planned_for, 'plannedFor')

    for field, given, actual in (('classId', class_id, lesson.class_id),
                                 ('subjectId', subject_id, lesson.subject_id),
                                 ('subgroupId', subgroup_id, lesson.subgroup_id)):
        if given is not None and given != actual:
            raise ValidationError(f"{field} {given} does not match lesson {lesson.id}.", field=field)

    if display_order is None:
        display_order = Assignment.query.filter_by(schedule_id=lesson.id).count()

    assignment = Assignment(
        schedule_id=lesson.id,
        assignment_type=assignment_type,
        max_score=max_score,
        description=description,
        planned_for=planned_for,
        display_order=display_order,
        teacher_id=teacher_id if teacher_id is not None else lesson.teacher_id,
        class_id=lesson.class_id,
        subject_id=lesson.subject_id,
        subgroup_id=lesson.subgroup_id,
    )
    db.session.add(assignment)
    db.session.flush()
    log_activity('assignment_created', {'assignmentId': assignment.id, 'scheduleId': lesson.id,
                                        'plannedFor': planned_for}, user_id=assignment.teacher_id)
    db.session.commit()
    current_app.logger.info(f"Assignment {assignment.id} ({assignment_type}, max {max_score}) added to lesson {lesson.id}")
    return assignment


def update_assignment(assignment_id, **changes):
    """
    Apply a partial update, validating every field before assigning any.

    In cumulative classes max_score may not drop below a grade already given.
    """
    assignment = require(Assignment, assignment_id, 'Assignment')
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}.")

    validated = {}
    if 'assignment_type' in changes:
        validated['assignment_type'] = _validate_type(changes['assignment_type'])
    if 'max_score' in changes:
        max_score = _validate_max_score(changes['max_score'])
        klass = require(Class, assignment.class_id, 'Class')
        if klass.grading_system == 'cumulative':
            highest = db.session.query(db.func.max(Grade.grade)).filter(Grade.assignment_id == assignment.id).scalar()
            if highest is not None and highest > max_score:
                raise ValidationError(
                    f"maxScore {max_score:g} is below an existing grade of {highest:g}.",
                    field='maxScore',
                )
        validated['max_score'] = max_score
    if 'planned_for' in changes:
        validated['planned_for'] = _validate_flag(changes['planned_for'], 'plannedFor')
    if 'description' in changes:
        validated['description'] = changes['description']
    if 'display_order' in changes:
        validated['display_order'] = int(to_number(changes['display_order'], 'displayOrder'))

    for field, value in validated.items():
        setattr(assignment, field, value)
    log_activity('assignment_updated', {'assignmentId': assignment.id, 'fields': sorted(changes)},
                 user_id=assignment.teacher_id)
    db.session.commit()
    return assignment


def list_assignments(class_id=None, subject_id=None, teacher_id=None, subgroup_id=None, schedule_id=None):
    query = Assignment.query
    if class_id is not None:
        query = query.filter(Assignment.class_id == class_id)
    if subject_id is not None:
        query = query.filter(Assignment.subject_id == subject_id)
    if teacher_id is not None:
        query = query.filter(Assignment.teacher_id == teacher_id)
    if subgroup_id is not None:
        query = query.filter(Assignment.subgroup_id == subgroup_id)
    if schedule_id is not None:
        query = query.filter(Assignment.schedule_id == schedule_id)
    return query.order_by(Assignment.schedule_id, Assignment.display_order, Assignment.id).all()


def preview_assignment_deletion(assignment_id):
    """
    Describe what deleting an assignment would remove, without removing it.

    Returns:
        dict: {'assignment': {...}, 'gradeIds': [...], 'gradeCount': n}
    """
    assignment = require(Assignment, assignment_id, 'Assignment')
    grade_ids = [g.id for g in Grade.query.filter_by(assignment_id=assignment.id).order_by(Grade.id).all()]
    return {
        'assignment': assignment.to_dict(),
        'gradeIds': grade_ids,
        'gradeCount': len(grade_ids),
    }


def delete_assignment(assignment_id, confirm=False):
    """
    Delete an assignment together with every grade recorded against it.

    The caller must pass confirm=True after reviewing the preview; otherwise
    ConfirmationRequired is raised with the preview attached. Deleting an
    assignment that no longer exists succeeds and returns None.
    """
    if db.session.get(Assignment, assignment_id) is None:
        return None

    preview = preview_assignment_deletion(assignment_id)
    if not confirm:
        raise ConfirmationRequired(
            f"Deleting assignment {assignment_id} also deletes {preview['gradeCount']} grade(s); confirm to proceed.",
            preview=preview,
        )

    for grade in Grade.query.filter_by(assignment_id=assignment_id).all():
        db.session.delete(grade)
    db.session.delete(db.session.get(Assignment, assignment_id))
    log_activity('assignment_deleted', {'assignmentId': assignment_id, 'gradeIds': preview['gradeIds']})
    db.session.commit()
    current_app.logger.info(f"Assignment {assignment_id} deleted with {preview['gradeCount']} grade(s)")
    return preview

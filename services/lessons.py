"""
Lesson occurrence registry: creating lessons, moving them through their
status lifecycle and reading them back.
"""

from datetime import timedelta

from flask import current_app

from extensions import db
from error_handler import InvalidTransition, ValidationError
from models import Class, Subject, Subgroup, Schedule, Assignment, Grade, Attendance, LESSON_STATUSES
from .activity_log import log_activity
from .utils import require, school_now


def _check_lesson_fields(class_id, subject_id, subgroup_id, start_time, end_time):
    require(Class, class_id, 'Class')
    require(Subject, subject_id, 'Subject')
    if subgroup_id is not None:
        subgroup = require(Subgroup, subgroup_id, 'Subgroup')
        if subgroup.class_id != class_id:
            raise ValidationError(f"Subgroup {subgroup_id} does not belong to class {class_id}.")
    if end_time <= start_time:
        raise ValidationError('Lesson end time must be after its start time.')


def create_lesson(class_id, subject_id, teacher_id, schedule_date, start_time, end_time,
                  subgroup_id=None, room=None):
    """Create one lesson occurrence. New lessons always start as not_conducted."""
    _check_lesson_fields(class_id, subject_id, subgroup_id, start_time, end_time)

    lesson = Schedule(
        class_id=class_id,
        subject_id=subject_id,
        teacher_id=teacher_id,
        subgroup_id=subgroup_id,
        schedule_date=schedule_date,
        start_time=start_time,
        end_time=end_time,
        room=room,
        status='not_conducted',
    )
    db.session.add(lesson)
    db.session.flush()
    log_activity('schedule_created', {'scheduleId': lesson.id, 'classId': class_id, 'subjectId': subject_id},
                 user_id=teacher_id)
    db.session.commit()
    current_app.logger.info(f"Lesson {lesson.id} created for class {class_id} on {schedule_date}")
    return lesson


def instantiate_weekly_lessons(class_id, subject_id, teacher_id, day_of_week, start_time, end_time,
                               from_date, to_date, subgroup_id=None, room=None):
    """
    Create a lesson on every given weekday (0 = Monday) between from_date and
    to_date inclusive. Dates that already hold the same lesson are skipped.

    Returns:
        list: the newly created Schedule rows
    """
    if not 0 <= day_of_week <= 6:
        raise ValidationError('dayOfWeek must be between 0 (Monday) and 6 (Sunday).')
    if from_date > to_date:
        raise ValidationError('fromDate must not be after toDate.')
    _check_lesson_fields(class_id, subject_id, subgroup_id, start_time, end_time)

    current = from_date + timedelta(days=(day_of_week - from_date.weekday()) % 7)
    created = []
    while current <= to_date:
        exists = Schedule.query.filter_by(
            class_id=class_id,
            subject_id=subject_id,
            subgroup_id=subgroup_id,
            schedule_date=current,
            start_time=start_time,
        ).first()
        if not exists:
            lesson = Schedule(
                class_id=class_id,
                subject_id=subject_id,
                teacher_id=teacher_id,
                subgroup_id=subgroup_id,
                schedule_date=current,
                start_time=start_time,
                end_time=end_time,
                room=room,
                status='not_conducted',
            )
            db.session.add(lesson)
            created.append(lesson)
        current += timedelta(days=7)

    db.session.flush()
    log_activity('schedule_instantiated', {'classId': class_id, 'subjectId': subject_id,
                                           'scheduleIds': [lesson.id for lesson in created]},
                 user_id=teacher_id)
    db.session.commit()
    current_app.logger.info(f"Instantiated {len(created)} weekly lessons for class {class_id}, subject {subject_id}")
    return created


def _check_revert(lesson):
    attendance_count = Attendance.query.filter_by(schedule_id=lesson.id).count()
    planned_ids = [a.id for a in lesson.assignments if a.planned_for]
    grade_count = Grade.query.filter(Grade.assignment_id.in_(planned_ids)).count() if planned_ids else 0
    if attendance_count or grade_count:
        raise InvalidTransition(
            f"Lesson {lesson.id} has {attendance_count} attendance record(s) and {grade_count} grade(s) "
            f"on planned assignments; it cannot go back to not_conducted.",
            attendanceCount=attendance_count,
            gradeCount=grade_count,
        )


def set_lesson_status(lesson_id, status, now=None):
    """
    Move a lesson to 'conducted' or back to 'not_conducted'.

    A lesson may only be marked conducted once its end time has passed.
    It may only go back to not_conducted while it holds no attendance and no
    grades on planned assignments. Requesting the status a lesson already
    has is a no-op.

    Args:
        lesson_id: Schedule id
        status: 'conducted' or 'not_conducted'
        now: naive school-local datetime; defaults to the current wall clock
    """
    if status not in LESSON_STATUSES:
        raise ValidationError(f"Invalid status '{status}'.", allowed=list(LESSON_STATUSES))
    lesson = require(Schedule, lesson_id, 'Lesson')
    now = now or school_now()

    if status == 'conducted' and now < lesson.ends_at:
        raise InvalidTransition(
            f"Lesson {lesson.id} cannot be marked conducted before it ends at {lesson.ends_at.isoformat()}.",
            endsAt=lesson.ends_at.isoformat(),
        )
    if lesson.status == status:
        return lesson
    if status == 'not_conducted':
        _check_revert(lesson)

    previous = lesson.status
    lesson.status = status
    log_activity('schedule_status_updated', {'scheduleId': lesson.id, 'from': previous, 'to': status},
                 user_id=lesson.teacher_id)
    db.session.commit()
    current_app.logger.info(f"Lesson {lesson.id} status changed from {previous} to {status}")
    return lesson


def list_lessons(class_id=None, subject_id=None, teacher_id=None, subgroup_id=None,
                 schedule_id=None, schedule_date=None):
    """Lessons matching every filter given, in calendar order."""
    query = Schedule.query
    if schedule_id is not None:
        query = query.filter(Schedule.id == schedule_id)
    if class_id is not None:
        query = query.filter(Schedule.class_id == class_id)
    if subject_id is not None:
        query = query.filter(Schedule.subject_id == subject_id)
    if teacher_id is not None:
        query = query.filter(Schedule.teacher_id == teacher_id)
    if subgroup_id is not None:
        query = query.filter(Schedule.subgroup_id == subgroup_id)
    if schedule_date is not None:
        query = query.filter(Schedule.schedule_date == schedule_date)
    return query.order_by(Schedule.schedule_date, Schedule.start_time, Schedule.id).all()


def delete_lesson(lesson_id):
    """
    Remove a lesson and its assignments. Refused while any grade or
    attendance record still points at the lesson.

    Returns:
        bool: False when there was nothing to delete
    """
    lesson = db.session.get(Schedule, lesson_id)
    if lesson is None:
        return False

    assignment_ids = [a.id for a in lesson.assignments]
    grade_query = Grade.query.filter(Grade.schedule_id == lesson.id)
    if assignment_ids:
        grade_query = Grade.query.filter(db.or_(Grade.schedule_id == lesson.id,
                                                Grade.assignment_id.in_(assignment_ids)))
    grade_count = grade_query.count()
    attendance_count = Attendance.query.filter_by(schedule_id=lesson.id).count()
    if grade_count or attendance_count:
        raise ValidationError(
            f"Lesson {lesson.id} still has {grade_count} grade(s) and {attendance_count} attendance record(s).",
            gradeCount=grade_count,
            attendanceCount=attendance_count,
        )

    for assignment in Assignment.query.filter_by(schedule_id=lesson.id).all():
        db.session.delete(assignment)
    db.session.delete(lesson)
    log_activity('schedule_deleted', {'scheduleId': lesson_id, 'assignmentIds': assignment_ids})
    db.session.commit()
    current_app.logger.info(f"Lesson {lesson_id} deleted with {len(assignment_ids)} assignment(s)")
    return True

"""
Attendance ledger for conducted lessons.
"""

from flask import current_app

from extensions import db
from error_handler import LessonNotConducted, ValidationError
from models import Class, Student, Schedule, Attendance, Enrollment, SubgroupMember, ATTENDANCE_STATUSES
from .activity_log import log_activity
from .utils import require

DEFAULT_STATUS = 'absent'


def lesson_roster(lesson):
    """Student ids expected at a lesson: subgroup members, or the active class enrollment."""
    if lesson.subgroup_id is not None:
        rows = SubgroupMember.query.filter_by(subgroup_id=lesson.subgroup_id).all()
    else:
        rows = Enrollment.query.filter_by(class_id=lesson.class_id, is_active=True).all()
    return sorted({row.student_id for row in rows})


def _validate_entries(entries):
    if not isinstance(entries, list) or not entries:
        raise ValidationError('At least one attendance entry is required.')
    cleaned = {}
    for index, entry in enumerate(entries):
        student_id = entry.get('student_id')
        status = entry.get('status')
        if not isinstance(student_id, int) or isinstance(student_id, bool):
            raise ValidationError(f"Entry {index}: studentId must be an integer.", index=index)
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(f"Entry {index}: invalid status '{status}'.", index=index,
                                  allowed=list(ATTENDANCE_STATUSES))
        require(Student, student_id, 'Student')
        # A later entry for the same student replaces an earlier one
        cleaned[student_id] = entry
    return cleaned


def record_attendance(schedule_id, entries):
    """
    Bulk upsert attendance for one lesson.

    Every entry is validated before anything is written, so a single bad
    entry rejects the whole batch.

    Args:
        schedule_id: the lesson
        entries: list of {'student_id', 'status', 'comment'?, 'date'?}

    Returns:
        list: the Attendance rows written, in student order
    """
    lesson = require(Schedule, schedule_id, 'Lesson')
    if not lesson.is_conducted:
        raise LessonNotConducted(f"Attendance can only be recorded for a conducted lesson; lesson {lesson.id} is not.",
                                 scheduleId=lesson.id)
    cleaned = _validate_entries(entries)

    records = []
    for student_id in sorted(cleaned):
        entry = cleaned[student_id]
        record = Attendance.query.filter_by(student_id=student_id, schedule_id=lesson.id).first()
        if record is None:
            record = Attendance(student_id=student_id, schedule_id=lesson.id, class_id=lesson.class_id)
            db.session.add(record)
        record.status = entry['status']
        record.comment = entry.get('comment')
        record.date = entry.get('date') or lesson.schedule_date
        records.append(record)

    log_activity('attendance_recorded', {'scheduleId': lesson.id, 'count': len(records)}, user_id=lesson.teacher_id)
    db.session.commit()
    current_app.logger.info(f"Recorded attendance for {len(records)} student(s) on lesson {lesson.id}")
    return records


def get_lesson_attendance(schedule_id, fill_missing=True):
    """
    Attendance entries for a lesson.

    With fill_missing, every roster student without a recorded entry is
    reported as absent with recorded=False. Nothing is written.
    """
    lesson = require(Schedule, schedule_id, 'Lesson')
    recorded = {a.student_id: a.to_dict() for a in Attendance.query.filter_by(schedule_id=lesson.id).all()}
    if fill_missing:
        for student_id in lesson_roster(lesson):
            if student_id not in recorded:
                recorded[student_id] = {
                    'id': None,
                    'studentId': student_id,
                    'classId': lesson.class_id,
                    'scheduleId': lesson.id,
                    'date': lesson.schedule_date.isoformat(),
                    'status': DEFAULT_STATUS,
                    'comment': None,
                    'recorded': False,
                }
    return [recorded[student_id] for student_id in sorted(recorded)]


def attendance_summary(class_id, student_id=None, start=None, end=None):
    """
    Count recorded statuses per student for a class.

    Returns:
        dict: {student_id: {'present': n, 'absent': n, 'late': n, 'total': n}}
    """
    require(Class, class_id, 'Class')
    query = Attendance.query.filter(Attendance.class_id == class_id)
    if student_id is not None:
        query = query.filter(Attendance.student_id == student_id)
    if start is not None:
        query = query.filter(Attendance.date >= start)
    if end is not None:
        query = query.filter(Attendance.date <= end)

    summary = {}
    for record in query.all():
        counts = summary.setdefault(record.student_id, {status: 0 for status in ATTENDANCE_STATUSES})
        counts[record.status] += 1
    for counts in summary.values():
        counts['total'] = sum(counts[status] for status in ATTENDANCE_STATUSES)
    return summary

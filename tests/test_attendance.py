from datetime import date

import pytest

from error_handler import LessonNotConducted, NotFound, ValidationError
from models import Attendance
from services import attendance_summary, create_subgroup, get_lesson_attendance, record_attendance


def entries(*pairs):
    return [{'student_id': student_id, 'status': status} for student_id, status in pairs]


def test_requires_a_conducted_lesson(school, make_lesson):
    lesson_id = make_lesson(school)

    with pytest.raises(LessonNotConducted):
        record_attendance(lesson_id, entries((school.student_ids[0], 'present')))


def test_unknown_lesson(school):
    with pytest.raises(NotFound):
        record_attendance(999, entries((school.student_ids[0], 'present')))


def test_bulk_upsert_keeps_one_record_per_student(school, make_lesson):
    lesson_id = make_lesson(school, conducted=True)
    first, second = school.student_ids[:2]

    record_attendance(lesson_id, entries((first, 'present'), (second, 'late')))
    record_attendance(lesson_id, entries((first, 'absent')))

    rows = {a.student_id: a.status for a in Attendance.query.filter_by(schedule_id=lesson_id).all()}
    assert rows == {first: 'absent', second: 'late'}


def test_one_bad_entry_rejects_the_batch(school, make_lesson):
    lesson_id = make_lesson(school, conducted=True)

    with pytest.raises(ValidationError):
        record_attendance(lesson_id, entries((school.student_ids[0], 'present'), (school.student_ids[1], 'sick')))

    assert Attendance.query.count() == 0


def test_date_defaults_to_lesson_date(school, make_lesson):
    lesson_id = make_lesson(school, conducted=True)

    records = record_attendance(lesson_id, entries((school.student_ids[0], 'present')))

    assert records[0].date == date(2024, 10, 1)


def test_read_fills_missing_roster_students_as_absent(school, make_lesson):
    lesson_id = make_lesson(school, conducted=True)
    record_attendance(lesson_id, entries((school.student_ids[0], 'present')))

    view = get_lesson_attendance(lesson_id)

    assert [(e['studentId'], e['status'], e['recorded']) for e in view] == [
        (school.student_ids[0], 'present', True),
        (school.student_ids[1], 'absent', False),
        (school.student_ids[2], 'absent', False),
    ]
    assert Attendance.query.count() == 1


def test_subgroup_lesson_roster_is_the_subgroup(school, make_lesson):
    subgroup = create_subgroup(school.class_id, 'Group 1', student_ids=school.student_ids[1:2])
    lesson_id = make_lesson(school, conducted=True, subgroup_id=subgroup.id)

    view = get_lesson_attendance(lesson_id)

    assert [e['studentId'] for e in view] == [school.student_ids[1]]


def test_read_without_fill(school, make_lesson):
    lesson_id = make_lesson(school, conducted=True)

    assert get_lesson_attendance(lesson_id, fill_missing=False) == []


def test_summary_counts_statuses(school, make_lesson):
    first = make_lesson(school, conducted=True)
    second = make_lesson(school, conducted=True, day=date(2024, 10, 2))
    student_id = school.student_ids[0]
    record_attendance(first, entries((student_id, 'present')))
    record_attendance(second, entries((student_id, 'late')))

    summary = attendance_summary(school.class_id)

    assert summary[student_id] == {'present': 1, 'absent': 0, 'late': 1, 'total': 2}

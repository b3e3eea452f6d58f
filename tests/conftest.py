"""
Shared fixtures: an application on an in-memory database plus a small
school roster (one class, one subject, three enrolled students).
"""

from datetime import date, datetime, time
from types import SimpleNamespace

import pytest

from app import create_app
from config import TestingConfig
from extensions import db
from services import create_class, create_subject, create_student, enroll_student, create_lesson, set_lesson_status

LESSON_DAY = date(2024, 10, 1)
AFTER_LESSON = datetime(2024, 10, 1, 12, 0)
TEACHER_ID = 7


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _build_school(grading_system):
    klass = create_class('7A', grading_system=grading_system, school_id=1, academic_year=2024)
    subject = create_subject('Mathematics', school_id=1)
    students = [create_student(first, 'Pupil') for first in ('Ann', 'Ben', 'Cat')]
    for student in students:
        enroll_student(klass.id, student.id)
    return SimpleNamespace(
        class_id=klass.id,
        subject_id=subject.id,
        student_ids=[s.id for s in students],
        teacher_id=TEACHER_ID,
    )


@pytest.fixture
def school(app):
    """Five-point class."""
    return _build_school('five_point')


@pytest.fixture
def cumulative_school(app):
    return _build_school('cumulative')


@pytest.fixture
def make_lesson():
    """Factory for lessons on LESSON_DAY, optionally already conducted."""
    def _make(roster, conducted=False, subgroup_id=None, day=LESSON_DAY, start=time(9, 0), end=time(9, 45)):
        lesson = create_lesson(
            class_id=roster.class_id,
            subject_id=roster.subject_id,
            teacher_id=roster.teacher_id,
            schedule_date=day,
            start_time=start,
            end_time=end,
            subgroup_id=subgroup_id,
        )
        if conducted:
            set_lesson_status(lesson.id, 'conducted', now=datetime.combine(day, end))
        return lesson.id
    return _make

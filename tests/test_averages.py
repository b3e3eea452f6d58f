"""
Averages computed from the database: period windows, subject pooling,
grade-type weights and journal scoping.
"""

from datetime import date

import pytest

from error_handler import NotFound, ValidationError
from extensions import db
from services import class_averages, create_class, create_subgroup, create_subject, journal_averages, record_grade
from services.performance import NO_DATA
from services.resolver import load_journal


def grade_for(roster, value, student=0, subject_id=None, grade_type='classwork', day=date(2024, 10, 1), **kwargs):
    return record_grade(roster.student_ids[student], subject_id or roster.subject_id, roster.class_id,
                        roster.teacher_id, value, grade_type=grade_type, date=day, **kwargs)


def student_row(roster, student=0, period='quarter1'):
    return class_averages(roster.class_id, period, 2024)['students'][roster.student_ids[student]]


class TestClassAverages:

    def test_grades_outside_the_period_are_left_out(self, school):
        grade_for(school, 5, day=date(2024, 10, 1))
        grade_for(school, 1, day=date(2024, 11, 15))

        row = student_row(school)

        assert row[school.subject_id]['average'] == 5.0
        assert row[school.subject_id]['gradeCount'] == 1

    def test_grade_without_timestamp_counts_in_every_period(self, school):
        grade = grade_for(school, 3)
        grade.created_at = None
        db.session.commit()

        assert student_row(school, period='quarter1')[school.subject_id]['average'] == 3.0
        assert student_row(school, period='quarter3')[school.subject_id]['average'] == 3.0

    def test_overall_pools_every_subject(self, school):
        physics = create_subject('Physics', school_id=1)
        grade_for(school, 5)
        grade_for(school, 3, subject_id=physics.id)

        row = student_row(school)

        assert row[school.subject_id]['average'] == 5.0
        assert row[physics.id]['average'] == 3.0
        assert row['overall']['average'] == 4.0
        assert row['overall']['gradeCount'] == 2

    def test_test_grade_counts_twice(self, school):
        grade_for(school, 5, grade_type='test')
        grade_for(school, 2, grade_type='classwork')

        result = student_row(school)[school.subject_id]

        assert result['average'] == 4.0
        assert result['percentage'] == 80.0

    def test_student_without_grades_has_no_data(self, school):
        grade_for(school, 4)

        row = student_row(school, student=1)

        assert row[school.subject_id] is NO_DATA
        assert row['overall'] is NO_DATA

    def test_unknown_class(self, app):
        with pytest.raises(NotFound):
            class_averages(999, 'quarter1', 2024)


class TestJournalAverages:

    def test_subgroup_journal_holds_only_its_grades(self, school, make_lesson):
        subgroup = create_subgroup(school.class_id, 'Group 1', student_ids=school.student_ids[:1])
        lesson_id = make_lesson(school, conducted=True, subgroup_id=subgroup.id)
        grade_for(school, 4, schedule_id=lesson_id)
        grade_for(school, 2, student=1)

        sub = journal_averages(school.class_id, school.subject_id, subgroup_id=subgroup.id,
                               period='quarter1', academic_year=2024)
        main = journal_averages(school.class_id, school.subject_id, period='quarter1', academic_year=2024)

        assert list(sub['students']) == [school.student_ids[0]]
        assert sub['students'][school.student_ids[0]]['average'] == 4.0
        assert main['students'][school.student_ids[1]]['average'] == 2.0
        assert main['students'][school.student_ids[0]] is NO_DATA

    def test_unknown_subgroup(self, school):
        with pytest.raises(NotFound):
            journal_averages(school.class_id, school.subject_id, subgroup_id=999)

    def test_subgroup_of_another_class(self, school):
        other = create_class('8B', grading_system='five_point', school_id=1, academic_year=2024)
        foreign = create_subgroup(other.id, 'Group X')

        with pytest.raises(ValidationError):
            journal_averages(school.class_id, school.subject_id, subgroup_id=foreign.id)
        with pytest.raises(ValidationError):
            load_journal(school.class_id, school.subject_id, foreign.id)

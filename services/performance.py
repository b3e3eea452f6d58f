"""
Performance aggregation.

Averages are computed per student and subject (plus an overall figure)
over the grades that qualify for a reporting period. The class's grading
system picks one of two pure algorithms:

* five_point: weighted mean of the grade values, weighted by grade type
* cumulative: points earned over points possible, as a percentage

Both share ``qualifying_grades``. A student with nothing to average gets
the ``NO_DATA`` sentinel, never a zero.
"""

from contextlib import contextmanager

from flask import current_app

from extensions import db
from models import Class, Subject, Schedule, Assignment, Grade, Enrollment, SubgroupMember
from .periods import period_bounds, resolve_period
from .resolver import load_subject_records, require_class_subgroup, resolve_journal
from .utils import require

DEFAULT_WEIGHTS = {
    'exam': 3,
    'test': 2,
    'project': 2,
    'control_work': 2,
    'test_work': 2,
    'project_work': 2,
    'homework': 1,
    'classwork': 1,
}
OVERALL = 'overall'


class _NoData:
    """Result for a student/subject/period without a single qualifying grade."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'NO_DATA'

    def to_dict(self):
        return {'average': None, 'percentage': None, 'gradeCount': 0, 'noData': True}


NO_DATA = _NoData()


def qualifying_grades(grades, start, end, assignments, lessons):
    """
    Grades that count toward a period.

    Args:
        grades: grade records with created_at and assignment_id
        start, end: inclusive datetime bounds
        assignments: assignment id -> record with planned_for and schedule_id
        lessons: lesson id -> record with status

    A grade counts when its created_at lies within the bounds (grades with
    no timestamp always count) and it is not tied to a planned assignment
    whose lesson has not been conducted yet.
    """
    result = []
    for grade in grades:
        if grade.created_at is not None and not (start <= grade.created_at <= end):
            continue
        assignment = assignments.get(grade.assignment_id) if grade.assignment_id is not None else None
        if assignment is not None and assignment.planned_for:
            lesson = lessons.get(assignment.schedule_id)
            if lesson is None or lesson.status != 'conducted':
                continue
        result.append(grade)
    return result


def ordinal_average(grades, weights=None):
    """
    Weighted mean on the five-point scale.

    Returns:
        dict or NO_DATA: {'average', 'percentage', 'gradeCount'}
    """
    weights = weights if weights is not None else DEFAULT_WEIGHTS
    grades = list(grades)
    if not grades:
        return NO_DATA
    total = 0.0
    weight_sum = 0.0
    for grade in grades:
        weight = weights.get(grade.grade_type, 1)
        total += grade.grade * weight
        weight_sum += weight
    if weight_sum <= 0:
        return NO_DATA
    average = round(total / weight_sum, 1)
    return {
        'average': average,
        'percentage': round(average / 5 * 100, 1),
        'gradeCount': len(grades),
    }


def cumulative_percentage(grades, max_scores):
    """
    Points earned over points possible.

    Args:
        grades: grade records with grade and assignment_id
        max_scores: assignment id -> max score

    Grades whose assignment cannot be resolved are left out of both sums.

    Returns:
        dict or NO_DATA: {'average', 'percentage', 'gradeCount', 'earned', 'possible'}
    """
    earned = 0.0
    possible = 0.0
    count = 0
    for grade in grades:
        max_score = max_scores.get(grade.assignment_id) if grade.assignment_id is not None else None
        if not max_score:
            continue
        earned += grade.grade
        possible += max_score
        count += 1
    if count == 0:
        return NO_DATA
    return {
        'average': round(earned, 2),
        'percentage': round(earned / possible * 100, 1),
        'gradeCount': count,
        'earned': round(earned, 2),
        'possible': round(possible, 2),
    }


def compute_average(grading_system, grades, max_scores, weights=None):
    """Dispatch to the algorithm of the given grading system."""
    if grading_system == 'cumulative':
        return cumulative_percentage(grades, max_scores)
    return ordinal_average(grades, weights)


def serialize_result(result):
    return result.to_dict() if result is NO_DATA else dict(result, noData=False)


@contextmanager
def consistent_snapshot():
    """
    Run the enclosed reads inside one transaction.

    On PostgreSQL a fresh transaction is opened at REPEATABLE READ so every
    query sees the same snapshot; the transaction is rolled back afterwards.
    """
    session = db.session()
    started = not session.in_transaction()
    if started and db.engine.dialect.name == 'postgresql':
        session.connection(execution_options={'isolation_level': 'REPEATABLE READ'})
    try:
        yield session
    finally:
        if started:
            session.rollback()


def _load_context(grades):
    """Assignments and lessons referenced by a set of grades."""
    assignment_ids = {g.assignment_id for g in grades if g.assignment_id is not None}
    assignments = {a.id: a for a in Assignment.query.filter(Assignment.id.in_(sorted(assignment_ids))).all()} \
        if assignment_ids else {}
    lesson_ids = {a.schedule_id for a in assignments.values()}
    lessons = {s.id: s for s in Schedule.query.filter(Schedule.id.in_(sorted(lesson_ids))).all()} if lesson_ids else {}
    return assignments, lessons


def _weights():
    return current_app.config.get('GRADE_TYPE_WEIGHTS') or DEFAULT_WEIGHTS


def _window(period, academic_year, from_date, to_date, today):
    start_date, end_date = resolve_period(period, academic_year, from_date, to_date, today)
    start, end = period_bounds(start_date, end_date)
    return start_date, end_date, start, end


def class_averages(class_id, period='year', academic_year=None, from_date=None, to_date=None,
                   student_id=None, today=None):
    """
    Averages for every student of a class, per subject and overall.

    Returns:
        dict: {
            'classId', 'gradingSystem', 'startDate', 'endDate',
            'students': {student_id: {subject_id: result, 'overall': result}}
        }
        where each result is a dict or NO_DATA.
    """
    with consistent_snapshot():
        klass = require(Class, class_id, 'Class')
        start_date, end_date, start, end = _window(period, academic_year, from_date, to_date, today)

        grade_query = Grade.query.filter(Grade.class_id == klass.id)
        if student_id is not None:
            grade_query = grade_query.filter(Grade.student_id == student_id)
        grades = grade_query.all()
        assignments, lessons = _load_context(grades)
        max_scores = {a.id: a.max_score for a in assignments.values()}
        counted = qualifying_grades(grades, start, end, assignments, lessons)

        if student_id is not None:
            student_ids = {student_id}
        else:
            student_ids = {e.student_id for e in Enrollment.query.filter_by(class_id=klass.id, is_active=True).all()}
            student_ids.update(g.student_id for g in grades)
        subject_ids = {g.subject_id for g in grades}
        subject_ids.update(s.subject_id for s in Schedule.query.filter_by(class_id=klass.id).all())

        weights = _weights()
        students = {}
        for sid in sorted(student_ids):
            own = [g for g in counted if g.student_id == sid]
            row = {}
            for subject_id in sorted(subject_ids):
                subject_grades = [g for g in own if g.subject_id == subject_id]
                row[subject_id] = compute_average(klass.grading_system, subject_grades, max_scores, weights)
            row[OVERALL] = compute_average(klass.grading_system, own, max_scores, weights)
            students[sid] = row

        current_app.logger.debug(f"Computed averages for {len(students)} student(s) of class {klass.id}")
        return {
            'classId': klass.id,
            'gradingSystem': klass.grading_system,
            'startDate': start_date,
            'endDate': end_date,
            'students': students,
        }


def journal_averages(class_id, subject_id, subgroup_id=None, period='year', academic_year=None,
                     from_date=None, to_date=None, today=None):
    """
    Averages over exactly the grades one journal of a subject shows.

    Returns:
        dict: {'classId', 'subjectId', 'subgroupId', 'gradingSystem',
               'startDate', 'endDate', 'students': {student_id: result}}
    """
    with consistent_snapshot():
        klass = require(Class, class_id, 'Class')
        require(Subject, subject_id, 'Subject')
        if subgroup_id is not None:
            require_class_subgroup(klass.id, subgroup_id)
        start_date, end_date, start, end = _window(period, academic_year, from_date, to_date, today)

        lessons, assignments, grades, memberships = load_subject_records(klass.id, subject_id)
        view = resolve_journal(lessons, assignments, grades, memberships, subgroup_id)
        assignment_map, lesson_map = _load_context(view['grades'])
        max_scores = {a.id: a.max_score for a in assignment_map.values()}
        counted = qualifying_grades(view['grades'], start, end, assignment_map, lesson_map)

        if subgroup_id is not None:
            rows = SubgroupMember.query.filter_by(subgroup_id=subgroup_id).all()
        else:
            rows = Enrollment.query.filter_by(class_id=klass.id, is_active=True).all()
        student_ids = {row.student_id for row in rows}
        student_ids.update(g.student_id for g in view['grades'])

        weights = _weights()
        students = {}
        for sid in sorted(student_ids):
            own = [g for g in counted if g.student_id == sid]
            students[sid] = compute_average(klass.grading_system, own, max_scores, weights)
        return {
            'classId': klass.id,
            'subjectId': subject_id,
            'subgroupId': subgroup_id,
            'gradingSystem': klass.grading_system,
            'startDate': start_date,
            'endDate': end_date,
            'students': students,
        }


def assignment_averages(class_id, subject_id=None):
    """
    Mean score per assignment of a class.

    Returns:
        list: [{'assignmentId', 'scheduleId', 'subjectId', 'maxScore', 'average', 'percentage', 'gradeCount'}]
    """
    with consistent_snapshot():
        klass = require(Class, class_id, 'Class')
        query = Assignment.query.filter(Assignment.class_id == klass.id)
        if subject_id is not None:
            query = query.filter(Assignment.subject_id == subject_id)
        result = []
        for assignment in query.order_by(Assignment.schedule_id, Assignment.display_order, Assignment.id).all():
            scores = [g.grade for g in Grade.query.filter_by(assignment_id=assignment.id).all()]
            average = round(sum(scores) / len(scores), 2) if scores else None
            result.append({
                'assignmentId': assignment.id,
                'scheduleId': assignment.schedule_id,
                'subjectId': assignment.subject_id,
                'maxScore': assignment.max_score,
                'average': average,
                'percentage': round(average / assignment.max_score * 100, 1) if average is not None else None,
                'gradeCount': len(scores),
            })
        return result

"""
Subgroup attribution resolver.

Every grade of a subject belongs to exactly one journal: the main class
journal or one subgroup's journal. Attribution is decided by
``attribute_grade``, and every journal view is derived from it, so the
views of one subject are disjoint and together hold every grade.

The functions here are pure. They work on any objects exposing the
attributes used (ORM rows or simple records), which keeps the policy
testable without a database.
"""

from error_handler import ValidationError
from models import Class, Subject, Schedule, Assignment, Grade, Subgroup, SubgroupMember
from .utils import require

MAIN = None


def lesson_subgroups(lessons):
    """Map lesson id -> owning subgroup id (None for main class lessons)."""
    return {lesson.id: lesson.subgroup_id for lesson in lessons}


def known_subgroups(lessons):
    """Subgroups that own at least one lesson of the subject."""
    return {lesson.subgroup_id for lesson in lessons if lesson.subgroup_id is not None}


def attribute_grade(grade, lesson_owner, known, memberships):
    """
    Decide which journal a grade belongs to.

    Args:
        grade: object with schedule_id, subgroup_id and student_id
        lesson_owner: lesson id -> subgroup id, as built by lesson_subgroups()
        known: subgroup ids that own lessons of the subject
        memberships: subgroup id -> set of member student ids

    Returns:
        int or None: the owning subgroup id, or MAIN for the class journal
    """
    # The lesson a grade was given in is the strongest signal
    if grade.schedule_id is not None and lesson_owner.get(grade.schedule_id) is not None:
        return lesson_owner[grade.schedule_id]
    if grade.subgroup_id is not None and grade.subgroup_id in known:
        return grade.subgroup_id
    # Untagged grades without a lesson fall back to roster membership
    if grade.schedule_id is None:
        candidates = sorted(sg for sg in known if grade.student_id in memberships.get(sg, ()))
        if candidates:
            return candidates[0]
    return MAIN


def partition_grades(lessons, grades, memberships):
    """Group grades by owning journal: {MAIN: [...], subgroup_id: [...]}."""
    owner = lesson_subgroups(lessons)
    known = known_subgroups(lessons)
    journals = {MAIN: []}
    for sg in known:
        journals[sg] = []
    for grade in grades:
        journals.setdefault(attribute_grade(grade, owner, known, memberships), []).append(grade)
    return journals


def resolve_journal(lessons, assignments, grades, memberships, subgroup_id=MAIN):
    """
    Lessons, assignments and grades visible in one journal of a subject.

    Lessons belong to the subgroup that owns them (main when unowned) and
    assignments follow their lesson.
    """
    lessons = list(lessons)
    visible_lessons = [lesson for lesson in lessons if lesson.subgroup_id == subgroup_id]
    visible_ids = {lesson.id for lesson in visible_lessons}
    visible_assignments = [a for a in assignments if a.schedule_id in visible_ids]
    visible_grades = partition_grades(lessons, grades, memberships).get(subgroup_id, [])
    return {
        'lessons': visible_lessons,
        'assignments': visible_assignments,
        'grades': visible_grades,
    }


def class_memberships(class_id):
    """Subgroup id -> member student ids for every subgroup of a class."""
    memberships = {sg.id: set() for sg in Subgroup.query.filter_by(class_id=class_id).all()}
    rows = SubgroupMember.query.join(Subgroup).filter(Subgroup.class_id == class_id).all()
    for row in rows:
        memberships.setdefault(row.subgroup_id, set()).add(row.student_id)
    return memberships


def load_subject_records(class_id, subject_id):
    """Everything the resolver needs for one class and subject, read from the database."""
    lessons = Schedule.query.filter_by(class_id=class_id, subject_id=subject_id) \
        .order_by(Schedule.schedule_date, Schedule.start_time, Schedule.id).all()
    lesson_ids = [lesson.id for lesson in lessons]
    assignments = Assignment.query.filter(Assignment.schedule_id.in_(lesson_ids)) \
        .order_by(Assignment.schedule_id, Assignment.display_order, Assignment.id).all() if lesson_ids else []
    grades = Grade.query.filter_by(class_id=class_id, subject_id=subject_id).order_by(Grade.id).all()
    return lessons, assignments, grades, class_memberships(class_id)


def require_class_subgroup(class_id, subgroup_id):
    """Load a subgroup and check it belongs to the class."""
    subgroup = require(Subgroup, subgroup_id, 'Subgroup')
    if subgroup.class_id != class_id:
        raise ValidationError(f"Subgroup {subgroup_id} does not belong to class {class_id}.", field='subgroupId')
    return subgroup


def load_journal(class_id, subject_id, subgroup_id=MAIN):
    require(Class, class_id, 'Class')
    require(Subject, subject_id, 'Subject')
    if subgroup_id is not MAIN:
        require_class_subgroup(class_id, subgroup_id)
    lessons, assignments, grades, memberships = load_subject_records(class_id, subject_id)
    return resolve_journal(lessons, assignments, grades, memberships, subgroup_id)

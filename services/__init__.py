"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .lessons import (
    create_lesson,
    instantiate_weekly_lessons,
    set_lesson_status,
    list_lessons,
    delete_lesson,
)
from .assignments import (
    create_assignment,
    update_assignment,
    list_assignments,
    preview_assignment_deletion,
    delete_assignment,
)
from .grades import record_grade, update_grade, delete_grade, list_grades
from .attendance import record_attendance, get_lesson_attendance, attendance_summary
from .subgroups import (
    create_subgroup,
    add_subgroup_members,
    remove_subgroup_members,
    list_subgroups,
    delete_subgroup,
)
from .roster import (
    create_class,
    set_grading_system,
    create_subject,
    create_student,
    enroll_student,
    class_roster,
)
from .resolver import attribute_grade, partition_grades, resolve_journal, load_journal
from .performance import (
    NO_DATA,
    ordinal_average,
    cumulative_percentage,
    class_averages,
    journal_averages,
    assignment_averages,
)
from .periods import period_range, academic_year_for
from .activity_log import log_activity, get_activity_log

__all__ = [
    'create_lesson',
    'instantiate_weekly_lessons',
    'set_lesson_status',
    'list_lessons',
    'delete_lesson',
    'create_assignment',
    'update_assignment',
    'list_assignments',
    'preview_assignment_deletion',
    'delete_assignment',
    'record_grade',
    'update_grade',
    'delete_grade',
    'list_grades',
    'record_attendance',
    'get_lesson_attendance',
    'attendance_summary',
    'create_subgroup',
    'add_subgroup_members',
    'remove_subgroup_members',
    'list_subgroups',
    'delete_subgroup',
    'create_class',
    'set_grading_system',
    'create_subject',
    'create_student',
    'enroll_student',
    'class_roster',
    'attribute_grade',
    'partition_grades',
    'resolve_journal',
    'load_journal',
    'NO_DATA',
    'ordinal_average',
    'cumulative_percentage',
    'class_averages',
    'journal_averages',
    'assignment_averages',
    'period_range',
    'academic_year_for',
    'log_activity',
    'get_activity_log',
]

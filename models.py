import json
from datetime import datetime
from extensions import db


GRADING_SYSTEMS = ('five_point', 'cumulative')
LESSON_STATUSES = ('not_conducted', 'conducted')
ATTENDANCE_STATUSES = ('present', 'absent', 'late')
ASSIGNMENT_TYPES = (
    'control_work',
    'test_work',
    'current_work',
    'homework',
    'classwork',
    'project_work',
    'class_assignment',
)
# Grade categories accepted on grades that are not tied to an assignment
ORDINAL_GRADE_TYPES = ('classwork', 'homework', 'test', 'exam', 'project')
GRADE_TYPES = ORDINAL_GRADE_TYPES + tuple(t for t in ASSIGNMENT_TYPES if t not in ORDINAL_GRADE_TYPES)


def _iso(value):
    return value.isoformat() if value is not None else None


class Class(db.Model):
    """
    A class (homeroom) of students. The grading system chosen here decides
    how every grade recorded for the class is validated and averaged.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    school_id = db.Column(db.Integer, nullable=True)
    grade_level = db.Column(db.Integer, nullable=True)
    academic_year = db.Column(db.Integer, nullable=True)  # Year in which September falls
    grading_system = db.Column(db.String(20), nullable=False, default='five_point')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'schoolId': self.school_id,
            'gradeLevel': self.grade_level,
            'academicYear': self.academic_year,
            'gradingSystem': self.grading_system,
        }

    def __repr__(self):
        return f"Class('{self.name}', Grading: {self.grading_system})"


class Subject(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    school_id = db.Column(db.Integer, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'schoolId': self.school_id,
        }

    def __repr__(self):
        return f"Subject('{self.name}')"


class Student(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
        }

    def __repr__(self):
        return f"Student('{self.first_name} {self.last_name}')"


class Enrollment(db.Model):
    """
    Model for tracking student enrollment in classes.
    """
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=datetime.utcnow)
    is_active = db.Column(db.Boolean, default=True)

    student = db.relationship('Student', backref='enrollments')
    class_info = db.relationship('Class', backref='enrollments')

    __table_args__ = (db.UniqueConstraint('student_id', 'class_id', name='unique_student_class'),)

    def __repr__(self):
        return f"Enrollment(Student: {self.student_id}, Class: {self.class_id})"


class Subgroup(db.Model):
    """
    A named subset of a class roster. Lessons, assignments and grades scoped
    to a subgroup are kept out of the main class journal.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    school_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    class_info = db.relationship('Class', backref='subgroups')

    @property
    def student_ids(self):
        return sorted(m.student_id for m in self.members)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'classId': self.class_id,
            'schoolId': self.school_id,
            'studentIds': self.student_ids,
        }

    def __repr__(self):
        return f"Subgroup('{self.name}', Class: {self.class_id})"


class SubgroupMember(db.Model):
    """
    Model for tracking which students belong to which subgroups.
    """
    id = db.Column(db.Integer, primary_key=True)
    subgroup_id = db.Column(db.Integer, db.ForeignKey('subgroup.id'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    subgroup = db.relationship('Subgroup', backref=db.backref('members', cascade='all, delete-orphan'))
    student = db.relationship('Student', backref='subgroup_memberships')

    __table_args__ = (db.UniqueConstraint('subgroup_id', 'student_id', name='unique_subgroup_student'),)

    def __repr__(self):
        return f"SubgroupMember(Subgroup: {self.subgroup_id}, Student: {self.student_id})"


class Schedule(db.Model):
    """
    One lesson occurrence: a subject taught to a class (or one of its
    subgroups) on a given date between start_time and end_time.
    """
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    teacher_id = db.Column(db.Integer, nullable=True)
    subgroup_id = db.Column(db.Integer, db.ForeignKey('subgroup.id'), nullable=True)
    schedule_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    room = db.Column(db.String(50), nullable=True)
    status = db.Column(db.String(20), nullable=False, default='not_conducted')

    class_info = db.relationship('Class', backref='schedules')
    subject = db.relationship('Subject', backref='schedules')
    subgroup = db.relationship('Subgroup', backref='schedules')

    @property
    def ends_at(self):
        """Naive wall-clock timestamp at which the lesson is over."""
        return datetime.combine(self.schedule_date, self.end_time)

    @property
    def is_conducted(self):
        return self.status == 'conducted'

    def to_dict(self):
        return {
            'id': self.id,
            'classId': self.class_id,
            'subjectId': self.subject_id,
            'teacherId': self.teacher_id,
            'subgroupId': self.subgroup_id,
            'scheduleDate': _iso(self.schedule_date),
            'startTime': self.start_time.strftime('%H:%M'),
            'endTime': self.end_time.strftime('%H:%M'),
            'room': self.room,
            'status': self.status,
        }

    def __repr__(self):
        return f"Schedule(Class: {self.class_id}, Subject: {self.subject_id}, Date: {self.schedule_date}, Status: {self.status})"


class Assignment(db.Model):
    """
    A gradable work item attached to exactly one lesson occurrence.
    """
    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey('schedule.id'), nullable=False)
    assignment_type = db.Column(db.String(30), nullable=False)
    max_score = db.Column(db.Float, nullable=False)
    description = db.Column(db.Text, nullable=True)
    planned_for = db.Column(db.Boolean, nullable=False, default=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    teacher_id = db.Column(db.Integer, nullable=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    subgroup_id = db.Column(db.Integer, db.ForeignKey('subgroup.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    schedule = db.relationship('Schedule', backref=db.backref('assignments', lazy=True,
                                                              order_by='Assignment.display_order'))

    def to_dict(self):
        return {
            'id': self.id,
            'scheduleId': self.schedule_id,
            'assignmentType': self.assignment_type,
            'maxScore': self.max_score,
            'description': self.description,
            'plannedFor': self.planned_for,
            'displayOrder': self.display_order,
            'teacherId': self.teacher_id,
            'classId': self.class_id,
            'subjectId': self.subject_id,
            'subgroupId': self.subgroup_id,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"Assignment(Schedule: {self.schedule_id}, Type: {self.assignment_type}, Max: {self.max_score})"


class Grade(db.Model):
    """
    Model for storing student grades. created_at anchors the grade to a
    reporting period; rows imported without one count in every period.
    """
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    teacher_id = db.Column(db.Integer, nullable=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey('schedule.id'), nullable=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=True)
    subgroup_id = db.Column(db.Integer, db.ForeignKey('subgroup.id'), nullable=True)
    grade = db.Column(db.Float, nullable=False)
    grade_type = db.Column(db.String(30), nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=True, default=datetime.utcnow)

    student = db.relationship('Student', backref='grades', lazy=True)
    schedule = db.relationship('Schedule', backref='grades', lazy=True)
    assignment = db.relationship('Assignment', backref='grades', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'studentId': self.student_id,
            'subjectId': self.subject_id,
            'classId': self.class_id,
            'teacherId': self.teacher_id,
            'scheduleId': self.schedule_id,
            'assignmentId': self.assignment_id,
            'subgroupId': self.subgroup_id,
            'grade': self.grade,
            'gradeType': self.grade_type,
            'comment': self.comment,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"Grade(Student: {self.student_id}, Subject: {self.subject_id}, Value: {self.grade})"


class Attendance(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    schedule_id = db.Column(db.Integer, db.ForeignKey('schedule.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(32), nullable=False)  # present, absent, late
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship('Student', backref='attendance_records')
    schedule = db.relationship('Schedule', backref='attendance_records')

    __table_args__ = (db.UniqueConstraint('student_id', 'schedule_id', name='unique_student_schedule_attendance'),)

    def to_dict(self):
        return {
            'id': self.id,
            'studentId': self.student_id,
            'classId': self.class_id,
            'scheduleId': self.schedule_id,
            'date': _iso(self.date),
            'status': self.status,
            'comment': self.comment,
            'recorded': True,
        }

    def __repr__(self):
        return f"Attendance(Student: {self.student_id}, Schedule: {self.schedule_id}, Status: {self.status})"


class ActivityLog(db.Model):
    """
    Model for tracking journal changes for auditing purposes.
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'action': self.action,
            'details': json.loads(self.details) if self.details else None,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"ActivityLog(User: {self.user_id}, Action: {self.action})"

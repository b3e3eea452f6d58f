"""
HTTP tests for the journal API.
"""

import pytest


def post(client, url, body):
    return client.post(url, json=body)


@pytest.fixture
def roster(client):
    """A cumulative class with two enrolled students, built through the API."""
    klass = post(client, '/api/classes', {'name': '9C', 'gradingSystem': 'cumulative'}).get_json()
    subject = post(client, '/api/subjects', {'name': 'Physics'}).get_json()
    students = [post(client, '/api/students', {'firstName': name, 'lastName': 'Pupil'}).get_json()
                for name in ('Dan', 'Eve')]
    for student in students:
        post(client, f"/api/classes/{klass['id']}/students", {'studentId': student['id']})
    return {'classId': klass['id'], 'subjectId': subject['id'], 'studentIds': [s['id'] for s in students]}


def make_schedule(client, roster, day='2024-10-01', **extra):
    body = {
        'classId': roster['classId'],
        'subjectId': roster['subjectId'],
        'teacherId': 3,
        'scheduleDate': day,
        'startTime': '09:00',
        'endTime': '09:45',
    }
    body.update(extra)
    response = post(client, '/api/schedules', body)
    assert response.status_code == 201
    return response.get_json()


class TestSchedules:

    def test_create_and_filter(self, client, roster):
        lesson = make_schedule(client, roster)

        response = client.get(f"/api/schedules?classId={roster['classId']}")

        assert response.status_code == 200
        assert [l['id'] for l in response.get_json()] == [lesson['id']]
        assert lesson['status'] == 'not_conducted'
        assert lesson['startTime'] == '09:00'

    def test_past_lesson_can_be_conducted(self, client, roster):
        lesson = make_schedule(client, roster)

        response = client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})

        assert response.status_code == 200
        assert response.get_json()['status'] == 'conducted'

    def test_future_lesson_cannot_be_conducted(self, client, roster):
        lesson = make_schedule(client, roster, day='2099-01-01')

        response = client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})

        assert response.status_code == 409
        assert response.get_json()['error']['kind'] == 'InvalidTransition'

    def test_invalid_status(self, client, roster):
        lesson = make_schedule(client, roster)

        response = client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'cancelled'})

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'ValidationError'

    def test_bad_time_format(self, client, roster):
        response = post(client, '/api/schedules', {
            'classId': roster['classId'], 'subjectId': roster['subjectId'],
            'scheduleDate': '2024-10-01', 'startTime': '9am', 'endTime': '10:00',
        })

        assert response.status_code == 400

    def test_weekly_instantiation(self, client, roster):
        response = post(client, '/api/schedules/weekly', {
            'classId': roster['classId'], 'subjectId': roster['subjectId'], 'dayOfWeek': 0,
            'startTime': '08:00', 'endTime': '08:45', 'fromDate': '2024-09-01', 'toDate': '2024-09-30',
        })

        assert response.status_code == 201
        assert [l['scheduleDate'] for l in response.get_json()] == [
            '2024-09-02', '2024-09-09', '2024-09-16', '2024-09-23', '2024-09-30']


class TestGradingFlow:

    def test_planned_assignment_flow(self, client, roster):
        lesson = make_schedule(client, roster)
        assignment = post(client, '/api/assignments', {
            'scheduleId': lesson['id'], 'assignmentType': 'control_work', 'maxScore': 10, 'plannedFor': True,
        }).get_json()
        grade_body = {
            'studentId': roster['studentIds'][0], 'subjectId': roster['subjectId'], 'classId': roster['classId'],
            'teacherId': 3, 'grade': 8, 'assignmentId': assignment['id'], 'date': '2024-10-01',
        }

        blocked = post(client, '/api/grades', grade_body)
        assert blocked.status_code == 409
        assert blocked.get_json()['error']['kind'] == 'LessonNotConducted'

        client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})
        created = post(client, '/api/grades', grade_body)
        assert created.status_code == 201

        duplicate = post(client, '/api/grades', dict(grade_body, grade=6))
        assert duplicate.status_code == 409
        error = duplicate.get_json()['error']
        assert error['kind'] == 'DuplicateGrade'
        assert error['existingGradeId'] == created.get_json()['id']

        updated = client.patch(f"/api/grades/{error['existingGradeId']}", json={'grade': 7})
        assert updated.status_code == 200

        averages = client.get(f"/api/averages?classId={roster['classId']}&period=quarter1&academicYear=2024")
        data = averages.get_json()
        student_key = str(roster['studentIds'][0])
        assert data[student_key][str(roster['subjectId'])]['percentage'] == 70.0
        assert data[student_key]['overall']['gradeCount'] == 1
        assert data[str(roster['studentIds'][1])]['overall'] == {
            'average': None, 'percentage': None, 'gradeCount': 0, 'noData': True}

    def test_out_of_range_grade(self, client, roster):
        lesson = make_schedule(client, roster)
        client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})
        assignment = post(client, '/api/assignments', {
            'scheduleId': lesson['id'], 'assignmentType': 'test_work', 'maxScore': 10,
        }).get_json()

        response = post(client, '/api/grades', {
            'studentId': roster['studentIds'][0], 'subjectId': roster['subjectId'], 'classId': roster['classId'],
            'grade': 12, 'assignmentId': assignment['id'],
        })

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'OutOfRange'

    def test_delete_grade_twice(self, client, roster):
        response = client.delete('/api/grades/12345')

        assert response.status_code == 200
        assert response.get_json() == {'id': 12345, 'deleted': False}

    def test_assignment_delete_requires_confirmation(self, client, roster):
        lesson = make_schedule(client, roster)
        assignment = post(client, '/api/assignments', {
            'scheduleId': lesson['id'], 'assignmentType': 'homework', 'maxScore': 5,
        }).get_json()

        unconfirmed = client.delete(f"/api/assignments/{assignment['id']}")
        assert unconfirmed.status_code == 409
        assert unconfirmed.get_json()['error']['kind'] == 'ConfirmationRequired'
        assert unconfirmed.get_json()['error']['preview']['gradeCount'] == 0

        confirmed = client.delete(f"/api/assignments/{assignment['id']}?confirm=true")
        assert confirmed.get_json()['deleted'] is True

        again = client.delete(f"/api/assignments/{assignment['id']}?confirm=true")
        assert again.status_code == 200
        assert again.get_json()['deleted'] is False

    def test_missing_body(self, client, roster):
        response = client.post('/api/grades', data='not json', content_type='text/plain')

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'ValidationError'


class TestAttendanceApi:

    def test_bulk_list_then_read_with_fill(self, client, roster):
        lesson = make_schedule(client, roster)
        client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})
        first = roster['studentIds'][0]

        saved = post(client, '/api/attendance', [
            {'studentId': first, 'scheduleId': lesson['id'], 'classId': roster['classId'],
             'status': 'late', 'date': '2024-10-01'},
        ])
        assert saved.status_code == 201

        view = client.get(f"/api/attendance?scheduleId={lesson['id']}").get_json()
        assert [(e['studentId'], e['status']) for e in view] == [(first, 'late'), (roster['studentIds'][1], 'absent')]

    def test_unconducted_lesson(self, client, roster):
        lesson = make_schedule(client, roster)

        response = post(client, '/api/attendance', {
            'scheduleId': lesson['id'], 'entries': [{'studentId': roster['studentIds'][0], 'status': 'present'}],
        })

        assert response.status_code == 409
        assert response.get_json()['error']['kind'] == 'LessonNotConducted'


class TestJournalApi:

    def test_subgroup_grades_leave_the_main_journal(self, client, roster):
        subgroup = post(client, '/api/subgroups', {
            'classId': roster['classId'], 'name': 'Lab A', 'studentIds': roster['studentIds'][:1],
        }).get_json()
        main_lesson = make_schedule(client, roster)
        group_lesson = make_schedule(client, roster, startTime='10:00', endTime='10:45', subgroupId=subgroup['id'])
        for lesson in (main_lesson, group_lesson):
            client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})
            assignment = post(client, '/api/assignments', {
                'scheduleId': lesson['id'], 'assignmentType': 'classwork', 'maxScore': 10,
            }).get_json()
            post(client, '/api/grades', {
                'studentId': roster['studentIds'][0], 'subjectId': roster['subjectId'],
                'classId': roster['classId'], 'grade': 9, 'assignmentId': assignment['id'], 'date': '2024-10-01',
            })

        base = f"/api/journal?classId={roster['classId']}&subjectId={roster['subjectId']}"
        main = client.get(base).get_json()
        group = client.get(f"{base}&subgroupId={subgroup['id']}").get_json()

        assert [l['id'] for l in main['lessons']] == [main_lesson['id']]
        assert [l['id'] for l in group['lessons']] == [group_lesson['id']]
        assert len(main['grades']) == 1 and len(group['grades']) == 1
        assert main['grades'][0]['id'] != group['grades'][0]['id']

        averages = client.get(
            f"/api/averages/journal?classId={roster['classId']}&subjectId={roster['subjectId']}"
            f"&subgroupId={subgroup['id']}&fromDate=2024-09-01&toDate=2024-12-31"
        ).get_json()
        assert list(averages['students']) == [str(roster['studentIds'][0])]
        assert averages['students'][str(roster['studentIds'][0])]['percentage'] == 90.0

    def test_assignment_averages(self, client, roster):
        lesson = make_schedule(client, roster)
        client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})
        assignment = post(client, '/api/assignments', {
            'scheduleId': lesson['id'], 'assignmentType': 'homework', 'maxScore': 10,
        }).get_json()
        for student_id, value in zip(roster['studentIds'], (6, 9)):
            post(client, '/api/grades', {
                'studentId': student_id, 'subjectId': roster['subjectId'], 'classId': roster['classId'],
                'grade': value, 'assignmentId': assignment['id'],
            })

        data = client.get(f"/api/classes/{roster['classId']}/assignment-averages").get_json()

        assert data == [{
            'assignmentId': assignment['id'], 'scheduleId': lesson['id'], 'subjectId': roster['subjectId'],
            'maxScore': 10.0, 'average': 7.5, 'percentage': 75.0, 'gradeCount': 2,
        }]

    def test_unknown_class(self, client):
        response = client.get('/api/averages?classId=999')

        assert response.status_code == 404
        assert response.get_json()['error']['kind'] == 'NotFound'


class TestRosterApi:

    def test_switch_grading_system(self, client, roster):
        response = client.patch(f"/api/classes/{roster['classId']}", json={'gradingSystem': 'five_point'})

        assert response.status_code == 200
        assert response.get_json()['gradingSystem'] == 'five_point'

    def test_unknown_grading_system(self, client, roster):
        response = client.patch(f"/api/classes/{roster['classId']}", json={'gradingSystem': 'letters'})

        assert response.status_code == 400

    def test_subgroup_membership(self, client, roster):
        subgroup = post(client, '/api/subgroups', {'classId': roster['classId'], 'name': 'Lab B'}).get_json()
        url = f"/api/subgroups/{subgroup['id']}/students"

        added = post(client, url, {'studentIds': roster['studentIds']}).get_json()
        assert added['studentIds'] == sorted(roster['studentIds'])
        assert added['added'] == 2

        removed = client.delete(url, json={'studentIds': roster['studentIds'][:1]}).get_json()
        assert removed['studentIds'] == roster['studentIds'][1:]

    def test_member_must_be_enrolled(self, client, roster):
        outsider = post(client, '/api/students', {'firstName': 'Zed', 'lastName': 'Pupil'}).get_json()
        subgroup = post(client, '/api/subgroups', {'classId': roster['classId'], 'name': 'Lab C'}).get_json()

        response = post(client, f"/api/subgroups/{subgroup['id']}/students", {'studentIds': [outsider['id']]})

        assert response.status_code == 400


class TestActivityApi:

    def test_changes_are_listed_newest_first(self, client, roster):
        lesson = make_schedule(client, roster)
        client.patch(f"/api/schedules/{lesson['id']}/status", json={'status': 'conducted'})

        entries = client.get('/api/activity?userId=3').get_json()

        assert [e['action'] for e in entries] == ['schedule_status_updated', 'schedule_created']
        assert entries[0]['details'] == {'scheduleId': lesson['id'], 'from': 'not_conducted', 'to': 'conducted'}

    def test_filter_by_action(self, client, roster):
        make_schedule(client, roster)
        make_schedule(client, roster, day='2024-10-02')

        entries = client.get('/api/activity?action=schedule_created&limit=1').get_json()

        assert len(entries) == 1
        assert entries[0]['userId'] == 3

    def test_limit_out_of_range(self, client, roster):
        response = client.get('/api/activity?limit=0')

        assert response.status_code == 400

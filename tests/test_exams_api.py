"""API tests for exams, attempts, grading and results."""

import re
from types import SimpleNamespace

import pytest

API = "/api/v1"

# The pinned clock in conftest is 2026-03-02T10:00:00Z
ACTIVE = ("2026-03-02T09:00:00Z", "2026-03-02T11:30:00Z")
UPCOMING = ("2026-03-03T09:00:00Z", "2026-03-03T11:00:00Z")
ENDED = ("2026-03-01T09:00:00Z", "2026-03-01T11:00:00Z")


@pytest.fixture
def school(client):
    classes = {c["name"]: c["id"] for c in client.post(f"{API}/classes/initialize").json()}
    subject = client.post(
        f"{API}/subjects",
        json={"name": "Mathematics", "code": "MTH", "class_ids": [classes["SS1"]]},
    ).json()
    students = [
        client.post(
            f"{API}/students",
            json={"full_name": name, "admission_number": f"ADM{i:03d}", "class_id": classes["SS1"]},
        ).json()
        for i, name in enumerate(["Ada Obi", "Bola Ade", "Chidi Eze"], start=1)
    ]
    return SimpleNamespace(
        classes=classes,
        class_id=classes["SS1"],
        subject_id=subject["id"],
        student_ids=[s["id"] for s in students],
    )


def create_exam(client, school, window=ACTIVE, **overrides):
    payload = {
        "title": "Mathematics Mid-term",
        "subject_id": school.subject_id,
        "class_id": school.class_id,
        "start_time": window[0],
        "end_time": window[1],
        "total_marks": 50,
        **overrides,
    }
    return client.post(f"{API}/exams", json=payload)


def submit(client, exam_id, student_id, **payload):
    return client.post(f"{API}/exams/{exam_id}/attempts", json={"student_id": student_id, **payload})


class TestExamScheduling:
    def test_create_generates_exam_code(self, client, school):
        response = create_exam(client, school)
        assert response.status_code == 200
        assert re.fullmatch(r"[A-Z0-9]{6}", response.json()["exam_code"])

    def test_explicit_exam_code_must_be_unique(self, client, school):
        first = create_exam(client, school, exam_code="mth-001")
        assert first.json()["exam_code"] == "MTH-001"

        response = create_exam(client, school, exam_code="MTH-001")
        assert response.status_code == 409

    @pytest.mark.parametrize(
        "window",
        [
            ("2026-03-02T11:00:00Z", "2026-03-02T09:00:00Z"),
            ("2026-03-02T09:00:00Z", "2026-03-02T09:00:00Z"),
        ],
    )
    def test_window_must_be_ordered(self, client, school, window):
        response = create_exam(client, school, window=window)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_TIME_WINDOW"

    def test_window_with_offsets_is_compared_in_utc(self, client, school):
        # 10:30+01:00 is 09:30Z, so the window is ordered
        response = create_exam(
            client,
            school,
            window=("2026-03-02T09:00:00Z", "2026-03-02T10:30:00+01:00"),
        )
        assert response.status_code == 200

    def test_passing_marks_cannot_exceed_total(self, client, school):
        response = create_exam(client, school, passing_marks=60)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_subject(self, client, school):
        response = create_exam(client, school, subject_id=999)
        assert response.status_code == 404

    def test_get_missing_exam(self, client, school):
        response = client.get(f"{API}/exams/999")
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Exam not found"

    def test_lifecycle_of_active_exam(self, client, school):
        exam = create_exam(client, school).json()

        data = client.get(f"{API}/exams/{exam['id']}/lifecycle").json()

        assert data == {"phase": "Active", "remaining_seconds": 5400.0, "remaining_minutes": 90}

    def test_list_shows_phase_of_each_exam(self, client, school):
        create_exam(client, school, window=ENDED, title="Ended")
        create_exam(client, school, window=ACTIVE, title="Active")
        create_exam(client, school, window=UPCOMING, title="Upcoming")

        data = client.get(f"{API}/exams").json()

        assert [(e["title"], e["lifecycle"]["phase"]) for e in data] == [
            ("Upcoming", "Upcoming"),
            ("Active", "Active"),
            ("Ended", "Ended"),
        ]
        assert all(e["badge"]["label"] == "No Submissions" for e in data)

    def test_lookup_by_exam_code(self, client, school):
        exam = create_exam(client, school, exam_code="MTH-002").json()

        response = client.get(f"{API}/exams/code/mth-002")

        assert response.status_code == 200
        assert response.json()["id"] == exam["id"]

    def test_lookup_by_unknown_exam_code(self, client, school):
        create_exam(client, school, exam_code="MTH-002")
        response = client.get(f"{API}/exams/code/NOPE01")
        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"identifier": "NOPE01"}

    def test_active_exams_for_class(self, client, school):
        create_exam(client, school, window=ACTIVE, title="SS1 Active")
        create_exam(client, school, window=ENDED, title="SS1 Ended")
        create_exam(client, school, window=UPCOMING, title="SS1 Upcoming")
        create_exam(client, school, window=ACTIVE, title="JSS1 Active", class_id=school.classes["JSS1"])

        ss1 = client.get(f"{API}/exams/active", params={"class_id": school.class_id}).json()
        assert [e["title"] for e in ss1] == ["SS1 Active"]
        assert ss1[0]["lifecycle"]["remaining_minutes"] == 90

        every_class = client.get(f"{API}/exams/active").json()
        assert sorted(e["title"] for e in every_class) == ["JSS1 Active", "SS1 Active"]

    def test_phase_filter(self, client, school):
        create_exam(client, school, window=ENDED, title="Ended")
        create_exam(client, school, window=ACTIVE, title="Active")
        create_exam(client, school, window=UPCOMING, title="Upcoming")

        def titles(phase):
            return [e["title"] for e in client.get(f"{API}/exams", params={"phase": phase}).json()]

        assert titles("Upcoming") == ["Upcoming"]
        assert titles("Active") == ["Active"]
        assert titles("Ended") == ["Ended"]
        assert client.get(f"{API}/exams", params={"phase": "Draft"}).status_code == 422


class TestAttemptsAndGrading:
    def test_submission_and_grading_flow(self, client, school):
        ada, bola, chidi = school.student_ids
        exam = create_exam(client, school, passing_marks=25).json()
        exam_id = exam["id"]

        first = submit(client, exam_id, ada, score=40)
        assert first.status_code == 200
        assert first.json()["grading_status"] == "Pending"
        assert first.json()["student_name"] == "Ada Obi"
        assert first.json()["submitted_at"] is not None
        submit(client, exam_id, bola, score=25)
        submit(client, exam_id, chidi, is_completed=False)

        stats = client.get(f"{API}/exams/{exam_id}/stats").json()
        assert stats == {"total_submissions": 2, "pending_grading": 2, "graded": 0}

        graded = client.put(
            f"{API}/exams/{exam_id}/attempts/{first.json()['id']}/grade",
            json={"score": 45},
        )
        assert graded.status_code == 200
        body = graded.json()
        assert body["actual_score"] == 45.0
        assert body["actual_percentage"] == 90.0
        assert body["grading_status"] == "Completed"
        assert body["graded_at"] is not None

        stats = client.get(f"{API}/exams/{exam_id}/stats").json()
        assert stats == {"total_submissions": 2, "pending_grading": 1, "graded": 1}

        item = client.get(f"{API}/exams").json()[0]
        assert item["badge"] == {"label": "1 Pending", "tone": "warning"}

        scores = client.get(f"{API}/results/exams/{exam_id}/scores").json()
        assert [(s["student_name"], s["score_text"], s["percentage"], s["grade"]) for s in scores] == [
            ("Ada Obi", "45/50", 90.0, "A"),
            ("Bola Ade", "25/50", 50.0, "D"),
        ]

        analytics = client.get(f"{API}/exams/{exam_id}/analytics").json()
        assert analytics["total_attempts"] == 3
        assert analytics["completed_attempts"] == 2
        assert analytics["average_percentage"] == 70.0
        assert analytics["pass_rate"] == 100.0

    def test_student_attempts_an_exam_once(self, client, school):
        exam_id = create_exam(client, school).json()["id"]
        submit(client, exam_id, school.student_ids[0], score=10)

        response = submit(client, exam_id, school.student_ids[0], score=20)

        assert response.status_code == 409
        assert len(client.get(f"{API}/exams/{exam_id}/attempts").json()) == 1

    def test_regrade_to_zero_replaces_submitted_score(self, client, school):
        exam_id = create_exam(client, school, total_marks=100).json()["id"]
        attempt = submit(client, exam_id, school.student_ids[0], score=30, percentage=30).json()

        graded = client.put(f"{API}/exams/{exam_id}/attempts/{attempt['id']}/grade", json={"score": 0})

        assert graded.json()["actual_score"] == 0.0
        assert graded.json()["actual_percentage"] == 0.0
        scores = client.get(f"{API}/results/exams/{exam_id}/scores").json()
        assert [(s["score_text"], s["percentage"], s["grade"]) for s in scores] == [("0/100", 0.0, "F")]

    def test_score_cannot_exceed_total(self, client, school):
        exam_id = create_exam(client, school).json()["id"]
        response = submit(client, exam_id, school.student_ids[0], score=51)
        assert response.status_code == 422

    def test_incomplete_attempt_cannot_be_graded(self, client, school):
        exam_id = create_exam(client, school).json()["id"]
        attempt = submit(client, exam_id, school.student_ids[0], is_completed=False).json()
        assert attempt["submitted_at"] is None

        response = client.put(f"{API}/exams/{exam_id}/attempts/{attempt['id']}/grade", json={"score": 10})

        assert response.status_code == 422

    def test_grading_unknown_attempt(self, client, school):
        exam_id = create_exam(client, school).json()["id"]
        response = client.put(f"{API}/exams/{exam_id}/attempts/999/grade", json={"score": 10})
        assert response.status_code == 404

    def test_grading_filters(self, client, school):
        ada, bola, _ = school.student_ids
        graded_exam = create_exam(client, school, title="Graded").json()["id"]
        pending_exam = create_exam(client, school, title="Pending").json()["id"]
        create_exam(client, school, title="Empty")

        attempt = submit(client, graded_exam, ada, score=30).json()
        client.put(f"{API}/exams/{graded_exam}/attempts/{attempt['id']}/grade", json={"score": 30})
        submit(client, pending_exam, bola, score=20)

        def titles(**params):
            return sorted(e["title"] for e in client.get(f"{API}/exams", params=params).json())

        assert titles(grading="graded") == ["Graded"]
        assert titles(grading="pending") == ["Pending"]
        assert titles(grading="no-submissions") == ["Empty"]
        assert titles(with_submissions=True) == ["Graded", "Pending"]


class TestResults:
    def test_overview_and_top_performers(self, client, school):
        ada, bola, chidi = school.student_ids
        active = create_exam(client, school).json()["id"]
        ended = create_exam(client, school, window=ENDED).json()["id"]
        create_exam(client, school, window=UPCOMING)

        for exam_id, student_id, score in [(active, ada, 40), (ended, ada, 30), (ended, bola, 45)]:
            attempt = submit(client, exam_id, student_id, score=score).json()
            client.put(
                f"{API}/exams/{exam_id}/attempts/{attempt['id']}/grade",
                json={"score": score},
            )
        submit(client, active, chidi, score=50)

        overview = client.get(f"{API}/results/overview").json()
        assert overview["grading"] == {
            "total_exams": 3,
            "total_submissions": 4,
            "pending_grading": 1,
            "graded": 3,
            "grading_progress_pct": 75,
        }
        assert overview["phases"] == {"upcoming": 1, "active": 1, "ended": 1}

        performers = client.get(f"{API}/results/top-performers").json()
        assert [(p["student_name"], p["average_percentage"]) for p in performers] == [
            ("Bola Ade", 90.0),
            ("Ada Obi", 70.0),
        ]

        top_one = client.get(f"{API}/results/top-performers", params={"limit": 1}).json()
        assert len(top_one) == 1

    def test_overview_of_empty_school(self, client):
        overview = client.get(f"{API}/results/overview").json()
        assert overview["grading"]["grading_progress_pct"] == 0
        assert overview["phases"] == {"upcoming": 0, "active": 0, "ended": 0}

    @pytest.mark.parametrize(
        "percentage, letter, clamped",
        [(85, "A", 85.0), (120, "A", 100.0), (-3, "F", 0.0), (55.5, "D", 55.5)],
    )
    def test_grade_lookup(self, client, percentage, letter, clamped):
        data = client.get(f"{API}/results/grade", params={"percentage": percentage}).json()
        assert data["letter"] == letter
        assert data["percentage"] == clamped

    def test_grade_bands(self, client):
        bands = client.get(f"{API}/results/grade-bands").json()
        assert [b["letter"] for b in bands] == ["A", "B", "C", "D", "F"]
        assert [b["tone"] for b in bands] == ["success", "info", "warning", "caution", "danger"]

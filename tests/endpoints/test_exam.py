from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from tests.helpers.asserts import api_call, assert_error, student_headers

EXAM_PAYLOAD = {
    "title": "Unit 1 Exam",
    "course_id": 1,
    "questions": [
        {
            "id": "q1",
            "type": "mcq",
            "question_text": "What is the capital of France?",
            "options": [{"id": "a", "text": "Paris"}, {"id": "b", "text": "London"}],
            "correct_answer": "a",
            "marks": 10
        }
    ]
}

class TestExamEndpoints:
    def test_create_exam_smoke(self, client: TestClient):
        response = client.post("/exams/", json=EXAM_PAYLOAD)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["total_marks"] == 10
        assert data["questions"][0]["correct_answer"] == "a"

    def test_create_exam_validation_error(self, client: TestClient):
        response = client.post("/exams/", json={"title": "No questions", "course_id": 1, "questions": []})
        body = assert_error(response, 422, "VALIDATION_ERROR")
        assert body["error"]["details"]["validation_errors"]

    def test_get_exam_smoke(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = client.get(f"/exams/{exam.id}")
        assert 200 <= response.status_code < 300

    def test_get_missing_exam(self, client: TestClient):
        response = client.get("/exams/9999")
        assert_error(response, 404, "NOT_FOUND")
        assert response.headers.get("X-Request-ID")

    def test_update_exam_smoke(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = client.put(f"/exams/{exam.id}", json={"title": "Updated Exam Title"})
        assert 200 <= response.status_code < 300
        assert response.json()["data"]["title"] == "Updated Exam Title"

    def test_update_exam_rejects_null_for_required_fields(self, client: TestClient, exam_factory):
        exam = exam_factory()
        for field in ("title", "duration_minutes", "is_published", "questions"):
            response = client.put(f"/exams/{exam.id}", json={field: None})
            assert_error(response, 422, "VALIDATION_ERROR")
        assert api_call(client, "GET", f"/exams/{exam.id}").json()["data"]["title"] == exam.title

    def test_update_exam_can_clear_optional_fields(self, client: TestClient, exam_factory):
        exam = exam_factory(description="Old", passing_score=80)
        response = api_call(client, "PUT", f"/exams/{exam.id}", json={"description": None, "passing_score": None})
        data = response.json()["data"]
        assert data["description"] is None
        assert data["passing_score"] is None

    def test_delete_exam_smoke(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = client.delete(f"/exams/{exam.id}")
        assert 200 <= response.status_code < 300
        assert_error(client.get(f"/exams/{exam.id}"), 404, "NOT_FOUND")

    def test_take_exam_hides_answers(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = api_call(client, "GET", f"/exams/{exam.id}/take", headers=student_headers(7))
        data = response.json()["data"]
        assert data["is_completed"] is False
        for question in data["questions"]:
            assert "correct_answer" not in question

    def test_student_header_is_required(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = client.get(f"/exams/{exam.id}/take")
        assert_error(response, 422, "VALIDATION_ERROR")

    def test_course_exams_smoke(self, client: TestClient, exam_factory):
        exam_factory(course_id=4)
        response = api_call(client, "GET", "/exams/course/4", headers=student_headers(7))
        assert len(response.json()["data"]) == 1


class TestSubmissionEndpoints:
    def test_submit_and_read_result(self, client: TestClient, exam_factory):
        exam = exam_factory()
        headers = student_headers(7)
        response = api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers,
                            json={"answers": {"q1": "a", "q2": "صحيح", "q3": "Text"}, "time_spent": 60})
        body = response.json()
        assert body["message"] == "Exam submitted successfully"
        assert body["data"]["percentage"] == 100
        assert body["data"]["grade"] == "A+"
        assert body["data"]["answers"][1]["is_correct"] is True

        result = api_call(client, "GET", f"/exams/{exam.id}/result", headers=headers).json()["data"]
        assert result["score"] == 6

        submission = api_call(client, "GET", f"/exams/{exam.id}/submission", headers=headers).json()["data"]
        assert submission["answers"]["q1"] == "a"
        assert submission["time_spent"] == 60

    def test_locked_resubmit_returns_conflict(self, client: TestClient, exam_factory):
        exam = exam_factory()
        headers = student_headers(7)
        api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers, json={"answers": {"q1": "b"}})

        response = client.post(f"/exams/{exam.id}/submit", headers=headers, json={"answers": {"q1": "a"}})
        body = assert_error(response, 409, "ALREADY_COMPLETED")
        assert body["error"]["details"]["previous_result"]["score"] == 0
        assert body["error"]["details"]["previous_result"]["grade"] == "F"

    def test_reopen_and_lock(self, client: TestClient, exam_factory):
        exam = exam_factory()
        headers = student_headers(7)
        api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers, json={"answers": {}})

        reopened = api_call(client, "POST", f"/exams/{exam.id}/submissions/7/reopen").json()["data"]
        assert reopened["is_editable"] is True

        resubmitted = api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers, json={"answers": {"q1": "a"}}).json()
        assert resubmitted["message"] == "Exam resubmitted successfully"
        assert resubmitted["data"]["is_resubmission"] is True

        locked = api_call(client, "POST", f"/exams/{exam.id}/submissions/7/lock").json()["data"]
        assert locked["is_editable"] is False

    def test_result_before_submit(self, client: TestClient, exam_factory):
        exam = exam_factory()
        assert_error(client.get(f"/exams/{exam.id}/result", headers=student_headers(7)), 404, "NOT_FOUND")

    def test_course_results_and_performance(self, client: TestClient, exam_factory, db_session: Session):
        exam = exam_factory(course_id=2)
        headers = student_headers(8)
        api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers, json={"answers": {"q1": "a", "q2": True}})

        results = api_call(client, "GET", "/exams/results/course/2", headers=headers).json()["data"]
        assert results["total_exams"] == 1
        assert results["results"][0]["exam_title"] == exam.title

        performance = api_call(client, "GET", "/exams/performance/me", headers=headers).json()["data"]
        assert performance["overview"]["total_exams"] == 1
        assert performance["grade_distribution"]["F"] == 1

    def test_course_progress_follows_submissions(self, client: TestClient, exam_factory):
        exam = exam_factory(course_id=6)
        exam_factory(course_id=6)
        headers = student_headers(9)

        before = api_call(client, "GET", "/exams/progress/course/6", headers=headers).json()["data"]
        assert before["completed_exams"] == 0
        assert before["progress"] == 0

        api_call(client, "POST", f"/exams/{exam.id}/submit", headers=headers, json={"answers": {"q1": "a"}})
        after = api_call(client, "GET", "/exams/progress/course/6", headers=headers).json()["data"]
        assert after["total_exams"] == 2
        assert after["completed_exams"] == 1
        assert after["progress"] == 50
        assert after["completions"][0]["exam_id"] == exam.id
        assert after["completions"][0]["grade"] == "F"

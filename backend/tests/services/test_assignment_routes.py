"""Assignment routes - CRUD, grade entry and gradebook statistics over HTTP.

Invariants:
    - Unknown path ids → 404; unknown body references → 400
    - One grade per (assignment, student): second entry → 409
    - Scores outside 0..max_points → 400
    - Every write is audited with the X-User actor
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect

from sis.models.assignment import Assignment
from sis.models.course import Course


@pytest.fixture
async def assignment(client, seed_course):
    res = await client.post("/api/v1/assignments", json={
        "course_id": seed_course.id,
        "title": "  Quiz 1  ",
        "max_points": 50,
        "term": "Fall",
    }, headers={"X-User": "teacher1"})
    assert res.status_code == 201
    return res.json()


async def test_create_assignment_strips_title_and_records_creator(assignment):
    assert assignment["title"] == "Quiz 1"
    assert assignment["created_by"] == "teacher1"
    assert assignment["published"] is False


async def test_create_assignment_unknown_course_is_400(client):
    res = await client.post("/api/v1/assignments", json={"course_id": 999, "title": "X"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_REQUEST"


async def test_create_assignment_rejects_non_positive_max_points(client, seed_course):
    res = await client.post("/api/v1/assignments", json={
        "course_id": seed_course.id, "title": "X", "max_points": 0,
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_get_unknown_assignment_is_404(client):
    res = await client.get("/api/v1/assignments/4242")
    assert res.status_code == 404


async def test_update_is_partial(client, assignment):
    res = await client.put(
        f"/api/v1/assignments/{assignment['id']}", json={"category": "Quiz"},
    )
    body = res.json()
    assert res.status_code == 200
    assert body["category"] == "Quiz"
    assert body["title"] == "Quiz 1"
    assert body["max_points"] == 50


async def test_publish_then_unpublish(client, assignment):
    res = await client.post(f"/api/v1/assignments/{assignment['id']}/publish")
    assert res.json()["published"] is True
    res = await client.post(f"/api/v1/assignments/{assignment['id']}/unpublish")
    assert res.json()["published"] is False


async def test_update_with_blank_title_is_400(client, assignment):
    res = await client.put(f"/api/v1/assignments/{assignment['id']}", json={"title": "   "})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_delete_assignment(client, assignment):
    res = await client.delete(f"/api/v1/assignments/{assignment['id']}")
    assert res.status_code == 204
    res = await client.get(f"/api/v1/assignments/{assignment['id']}")
    assert res.status_code == 404


# --- Grades ---------------------------------------------------------------------

async def test_enter_grade_computes_percentage_and_letter(client, assignment, seed_students):
    res = await client.post("/api/v1/assignments/grades/enter", json={
        "student_id": seed_students[0].id,
        "assignment_id": assignment["id"],
        "score": 43,
    })
    body = res.json()
    assert res.status_code == 201
    assert body["percentage"] == 86.0
    assert body["letter_grade"] == "B"
    assert body["status"] == "GRADED"


async def test_duplicate_grade_is_409(client, assignment, seed_students):
    payload = {"student_id": seed_students[0].id, "assignment_id": assignment["id"], "score": 40}
    await client.post("/api/v1/assignments/grades/enter", json=payload)
    res = await client.post("/api/v1/assignments/grades/enter", json=payload)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_RESOURCE"


async def test_score_above_max_points_is_400(client, assignment, seed_students):
    res = await client.post("/api/v1/assignments/grades/enter", json={
        "student_id": seed_students[0].id, "assignment_id": assignment["id"], "score": 51,
    })
    assert res.status_code == 400


async def test_grade_for_unknown_student_is_400(client, assignment):
    res = await client.post("/api/v1/assignments/grades/enter", json={
        "student_id": 999, "assignment_id": assignment["id"], "score": 10,
    })
    assert res.status_code == 400
    assert res.json()["error"]["context"]["field"] == "student_id"


async def test_excuse_then_missing_clears_score(client, assignment, seed_students):
    res = await client.post("/api/v1/assignments/grades/enter", json={
        "student_id": seed_students[0].id, "assignment_id": assignment["id"], "score": 20,
    })
    grade_id = res.json()["id"]

    res = await client.put(
        f"/api/v1/assignments/grades/{grade_id}/mark-excused", json={"reason": "Illness"},
    )
    assert res.json()["status"] == "EXCUSED"
    assert res.json()["score"] is None
    assert res.json()["excused_reason"] == "Illness"

    res = await client.put(f"/api/v1/assignments/grades/{grade_id}/mark-missing")
    assert res.json()["status"] == "MISSING"
    assert res.json()["excused_reason"] is None

    res = await client.get(
        f"/api/v1/assignments/grades/student/{seed_students[0].id}"
        f"/course/{assignment['course_id']}/missing",
    )
    assert res.json()["missing_count"] == 1
    assert res.json()["assignments"][0]["id"] == assignment["id"]


async def test_update_unknown_grade_is_404(client):
    res = await client.put("/api/v1/assignments/grades/77", json={"score": 1})
    assert res.status_code == 404


# --- Statistics -----------------------------------------------------------------

async def test_statistics_and_class_average(client, assignment, seed_students):
    for student, score in zip(seed_students, (50, 40, 30)):
        await client.post("/api/v1/assignments/grades/enter", json={
            "student_id": student.id, "assignment_id": assignment["id"], "score": score,
        })

    stats = (await client.get(f"/api/v1/assignments/{assignment['id']}/statistics")).json()
    assert stats["graded_count"] == 3
    assert stats["average"] == 40.0
    assert stats["average_percentage"] == 80.0
    assert stats["grade_distribution"]["A"] == 1

    avg = (await client.get(f"/api/v1/assignments/{assignment['id']}/class-average")).json()
    assert avg == {"assignment_id": assignment["id"], "class_average": 40.0, "has_grades": True}


async def test_class_average_without_grades(client, assignment):
    avg = (await client.get(f"/api/v1/assignments/{assignment['id']}/class-average")).json()
    assert avg["has_grades"] is False
    assert avg["class_average"] == 0.0


async def test_course_queries(client, seed_course):
    now = datetime.now(timezone.utc)
    for title, due, published in (
        ("Soon", now + timedelta(days=2), True),
        ("Late", now - timedelta(days=2), True),
        ("Draft", now + timedelta(days=1), False),
    ):
        await client.post("/api/v1/assignments", json={
            "course_id": seed_course.id, "title": title,
            "due_date": due.isoformat(), "published": published,
        })

    upcoming = (await client.get(f"/api/v1/assignments/course/{seed_course.id}/upcoming")).json()
    assert [a["title"] for a in upcoming] == ["Soon"]
    past_due = (await client.get(f"/api/v1/assignments/course/{seed_course.id}/past-due")).json()
    assert [a["title"] for a in past_due] == ["Late"]
    published = (await client.get(f"/api/v1/assignments/course/{seed_course.id}/published")).json()
    assert len(published) == 2
    count = (await client.get(f"/api/v1/assignments/course/{seed_course.id}/count")).json()
    assert count == {"total": 3, "graded": 0, "ungraded": 3}


async def test_writes_are_audited_with_actor(client, assignment):
    res = await client.get(
        "/api/v1/audit-logs",
        params={"entity_type": "Assignment", "entity_id": str(assignment["id"])},
    )
    entries = res.json()
    assert any(e["action"] == "CREATE" and e["actor"] == "teacher1" for e in entries)


# --- Mapping ---

@pytest.mark.parametrize("model, collection", [(Course, "assignments"), (Assignment, "grades")])
def test_child_collections_are_never_lazy_loaded(model, collection):
    rel = inspect(model).relationships[collection]
    assert rel.lazy == "raise"
    assert rel.passive_deletes is True

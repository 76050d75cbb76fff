"""Re-enrollment workflow - records review, fees, two-step decision and completion.

Invariants:
    - Numbers are RNE-YYYY-NNNNNN; one pending request per student
    - Submission requires transcript, immunization and health reviews plus paid fees
    - Principal decides only after the assigned counselor
    - Completion reactivates the student at the assigned grade
"""

import pytest

BASE = "/api/v1/re-enrollments"


@pytest.fixture
async def request_(client, seed_students, seed_staff):
    res = await client.post(BASE, json={
        "student_id": seed_students[2].id,
        "requested_grade": "10th Grade",
        "intended_enrollment_date": "2026-08-20",
        "previous_withdrawal_date": "2026-01-10",
        "withdrawal_reason": "MOVED",
        "staff_id": seed_staff["registrar"].id,
    })
    assert res.status_code == 201
    return res.json()


async def _ready_for_decision(client, record_id, counselor_id):
    await client.post(f"{BASE}/{record_id}/assign-counselor", json={"counselor_id": counselor_id})
    await client.post(f"{BASE}/{record_id}/review-records", json={
        "transcript": True, "immunizations": True, "health": True, "reviewer_id": counselor_id,
    })
    res = await client.post(f"{BASE}/{record_id}/submit")
    assert res.status_code == 200
    return res.json()


async def test_create_numbers_and_months_away(request_):
    assert request_["re_enrollment_number"].startswith("RNE-")
    assert request_["re_enrollment_number"].endswith("-000001")
    assert request_["status"] == "DRAFT"
    assert request_["months_away"] == 7
    assert request_["withdrawal_reason"] == "MOVED"


async def test_number_not_reused_after_deleting_a_draft(client, request_, seed_students):
    second = await client.post(BASE, json={
        "student_id": seed_students[1].id,
        "requested_grade": "9th Grade",
        "intended_enrollment_date": "2026-09-01",
    })
    assert second.status_code == 201
    assert (await client.delete(f"{BASE}/{request_['id']}")).status_code == 204

    res = await client.post(BASE, json={
        "student_id": seed_students[2].id,
        "requested_grade": "10th Grade",
        "intended_enrollment_date": "2026-08-20",
    })
    assert res.status_code == 201
    assert res.json()["re_enrollment_number"].endswith("-000003")


async def test_second_pending_request_is_409(client, request_, seed_students):
    res = await client.post(BASE, json={
        "student_id": seed_students[2].id,
        "requested_grade": "10th Grade",
        "intended_enrollment_date": "2026-09-01",
    })
    assert res.status_code == 409


async def test_unknown_counselor_is_400(client, request_):
    res = await client.post(
        f"{BASE}/{request_['id']}/assign-counselor", json={"counselor_id": 999},
    )
    assert res.status_code == 400


async def test_review_moves_draft_to_pending_review(client, request_, seed_staff):
    res = await client.post(f"{BASE}/{request_['id']}/review-records", json={
        "transcript": True, "immunizations": False, "health": True,
        "reviewer_id": seed_staff["counselor"].id,
    })
    body = res.json()
    assert body["status"] == "PENDING_REVIEW"
    assert body["records_reviewed_by"] == "mcounsel"

    pending = (await client.get(f"{BASE}/pending-review")).json()
    assert [r["id"] for r in pending] == [request_["id"]]


async def test_submit_requires_reviews_and_paid_fees(client, request_):
    await client.post(f"{BASE}/{request_['id']}/review-records", json={
        "transcript": True, "immunizations": True, "health": True,
    })
    await client.post(f"{BASE}/{request_['id']}/fees", json={"amount": "45.50"})

    res = await client.post(f"{BASE}/{request_['id']}/submit")
    assert res.status_code == 409
    assert "payment of outstanding fees" in res.json()["error"]["message"]

    await client.post(f"{BASE}/{request_['id']}/fees/paid")
    res = await client.post(f"{BASE}/{request_['id']}/submit")
    assert res.json()["status"] == "PENDING_APPROVAL"


async def test_submit_without_reviews_lists_them(client, request_):
    res = await client.post(f"{BASE}/{request_['id']}/submit")
    message = res.json()["error"]["message"]
    assert "transcript review" in message
    assert "immunization review" in message
    assert "health records review" in message


async def test_only_assigned_counselor_decides(client, request_, seed_staff):
    await _ready_for_decision(client, request_["id"], seed_staff["counselor"].id)
    res = await client.post(f"{BASE}/{request_['id']}/counselor-decision", json={
        "counselor_id": seed_staff["principal"].id, "decision": "APPROVED",
    })
    assert res.status_code == 409


async def test_principal_needs_counselor_decision(client, request_, seed_staff):
    await _ready_for_decision(client, request_["id"], seed_staff["counselor"].id)
    res = await client.post(f"{BASE}/{request_['id']}/principal-decision", json={
        "principal_id": seed_staff["principal"].id, "decision": "APPROVED",
    })
    assert res.status_code == 409


async def test_full_approval_and_completion(client, request_, seed_staff, seed_students):
    record_id = request_["id"]
    await _ready_for_decision(client, record_id, seed_staff["counselor"].id)
    await client.post(f"{BASE}/{record_id}/counselor-decision", json={
        "counselor_id": seed_staff["counselor"].id, "decision": "CONDITIONAL",
        "notes": "Needs plan",
    })
    res = await client.post(f"{BASE}/{record_id}/principal-decision", json={
        "principal_id": seed_staff["principal"].id, "decision": "CONDITIONAL",
    })
    assert res.json()["status"] == "APPROVED"
    assert res.json()["conditional_approval"] is True

    res = await client.post(f"{BASE}/{record_id}/conditions", json={
        "conditions": "Weekly check-in", "probation": True, "probation_days": 30,
    })
    assert res.json()["probation_days"] == 30

    res = await client.post(f"{BASE}/{record_id}/complete", json={
        "assigned_grade": "10th Grade", "homeroom": "B-12",
    })
    assert res.json()["status"] == "ENROLLED"

    student = (await client.get(f"/api/v1/students/{seed_students[2].id}")).json()
    assert student["active"] is True
    assert student["grade_level"] == "10th Grade"

    stats = (await client.get(f"{BASE}/statistics")).json()
    assert stats["by_status"]["ENROLLED"] == 1
    assert stats["conditional_approvals"] == 1


async def test_principal_denial_rejects(client, request_, seed_staff):
    record_id = request_["id"]
    await _ready_for_decision(client, record_id, seed_staff["counselor"].id)
    await client.post(f"{BASE}/{record_id}/counselor-decision", json={
        "counselor_id": seed_staff["counselor"].id, "decision": "DENIED",
    })
    res = await client.post(f"{BASE}/{record_id}/principal-decision", json={
        "principal_id": seed_staff["principal"].id, "decision": "DENIED", "notes": "Expelled",
    })
    assert res.json()["status"] == "REJECTED"
    assert res.json()["rejection_reason"] == "Expelled"


async def test_complete_requires_approval(client, request_):
    res = await client.post(f"{BASE}/{request_['id']}/complete", json={"assigned_grade": "10th Grade"})
    assert res.status_code == 409


async def test_cancel_appends_note_and_closes(client, request_):
    res = await client.post(f"{BASE}/{request_['id']}/cancel", json={"reason": "Family moved again"})
    assert res.json()["status"] == "CANCELLED"
    assert res.json()["administrative_notes"] == "CANCELLED: Family moved again"

    res = await client.put(f"{BASE}/{request_['id']}", json={"requested_grade": "11th Grade"})
    assert res.status_code == 409


async def test_queries(client, request_, seed_staff, seed_students):
    assert [r["id"] for r in (await client.get(f"{BASE}/unassigned")).json()] == [request_["id"]]
    assert (await client.get(f"{BASE}/by-reason")).json() == {"MOVED": 1}
    found = (await client.get(f"{BASE}/search", params={"name": "hopp"})).json()
    assert [r["id"] for r in found] == [request_["id"]]
    by_student = (await client.get(f"{BASE}/student/{seed_students[2].id}")).json()
    assert len(by_student) == 1
    assert (await client.get(f"{BASE}/student/999")).status_code == 404
    assert (await client.get(f"{BASE}/needing-attention")).json() == []

    await client.post(
        f"{BASE}/{request_['id']}/assign-counselor",
        json={"counselor_id": seed_staff["counselor"].id},
    )
    mine = (await client.get(f"{BASE}/counselor/{seed_staff['counselor'].id}")).json()
    assert [r["id"] for r in mine] == [request_["id"]]


async def test_delete_only_in_draft(client, request_):
    await client.post(f"{BASE}/{request_['id']}/review-records", json={
        "transcript": True, "immunizations": True, "health": True,
    })
    res = await client.delete(f"{BASE}/{request_['id']}")
    assert res.status_code == 409

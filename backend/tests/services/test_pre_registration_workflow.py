"""Pre-registration workflow - numbering, fees, submission checks and status transitions.

Invariants:
    - Numbers are PRE-YYYY-NNNNNN, sequential within a year
    - One non-cancelled registration per (student, school year): second → 409
    - Submission needs accuracy acknowledgment and a parent signature
    - DRAFT → SUBMITTED → APPROVED | REJECTED; anything but APPROVED/CANCELLED can be cancelled
"""

from datetime import datetime, timezone

import pytest

BASE = "/api/v1/pre-registrations"


@pytest.fixture
async def registration(client, seed_students):
    res = await client.post(BASE, json={
        "student_id": seed_students[0].id,
        "target_school_year": "2027-2028",
        "parent_name": "Pat Lovelace",
    }, headers={"X-User": "registrar1"})
    assert res.status_code == 201
    return res.json()


async def _sign(client, registration_id):
    res = await client.put(f"{BASE}/{registration_id}", json={
        "acknowledged_accuracy": True, "parent_signature": "Pat Lovelace",
    })
    assert res.status_code == 200


async def test_create_assigns_number_grade_and_fees(registration):
    year = datetime.now(timezone.utc).year
    assert registration["registration_number"] == f"PRE-{year}-000001"
    assert registration["status"] == "DRAFT"
    assert registration["current_grade"] == "9th Grade"
    assert registration["next_grade"] == "10th Grade"
    assert float(registration["estimated_total_fees"]) == 125.0
    assert registration["created_by"] == "registrar1"


async def test_numbers_are_sequential(client, registration, seed_students):
    res = await client.post(BASE, json={
        "student_id": seed_students[1].id, "target_school_year": "2027-2028",
    })
    assert res.json()["registration_number"].endswith("-000002")


async def test_number_not_reused_after_deleting_a_draft(client, registration, seed_students):
    second = await client.post(BASE, json={
        "student_id": seed_students[1].id, "target_school_year": "2027-2028",
    })
    assert (await client.delete(f"{BASE}/{registration['id']}")).status_code == 204

    res = await client.post(BASE, json={
        "student_id": seed_students[0].id, "target_school_year": "2027-2028",
    })
    assert res.status_code == 201
    assert second.json()["registration_number"].endswith("-000002")
    assert res.json()["registration_number"].endswith("-000003")


async def test_duplicate_for_same_year_is_409(client, registration, seed_students):
    res = await client.post(BASE, json={
        "student_id": seed_students[0].id, "target_school_year": "2027-2028",
    })
    assert res.status_code == 409


async def test_school_year_must_be_consecutive(client, seed_students):
    res = await client.post(BASE, json={
        "student_id": seed_students[0].id, "target_school_year": "2027-2029",
    })
    assert res.status_code == 400


async def test_unknown_student_is_400(client):
    res = await client.post(BASE, json={"student_id": 404, "target_school_year": "2027-2028"})
    assert res.status_code == 400


async def test_fee_waivers_recalculate_total(client, registration):
    res = await client.put(f"{BASE}/{registration['id']}", json={
        "technology_fee_waiver_requested": True,
    })
    assert float(res.json()["estimated_total_fees"]) == 75.0


async def test_submit_lists_missing_items(client, registration):
    res = await client.post(f"{BASE}/{registration['id']}/submit")
    assert res.status_code == 409
    message = res.json()["error"]["message"]
    assert "accuracy acknowledgment" in message
    assert "parent signature" in message


async def test_submit_then_approve(client, registration):
    await _sign(client, registration["id"])
    res = await client.post(f"{BASE}/{registration['id']}/submit")
    assert res.json()["status"] == "SUBMITTED"
    assert res.json()["submitted_at"] is not None

    res = await client.post(
        f"{BASE}/{registration['id']}/approve", headers={"X-User": "principal1"},
    )
    assert res.json()["status"] == "APPROVED"
    assert res.json()["reviewed_by"] == "principal1"


async def test_update_after_submit_is_409(client, registration):
    await _sign(client, registration["id"])
    await client.post(f"{BASE}/{registration['id']}/submit")
    res = await client.put(f"{BASE}/{registration['id']}", json={"parent_name": "X"})
    assert res.status_code == 409


async def test_approve_draft_is_409(client, registration):
    res = await client.post(f"{BASE}/{registration['id']}/approve")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_STATE"


async def test_reject_records_reason(client, registration):
    await _sign(client, registration["id"])
    await client.post(f"{BASE}/{registration['id']}/submit")
    res = await client.post(f"{BASE}/{registration['id']}/reject", json={"reason": "Incomplete"})
    assert res.json()["status"] == "REJECTED"
    assert res.json()["rejection_reason"] == "Incomplete"


async def test_cancel_frees_the_school_year(client, registration, seed_students):
    res = await client.post(f"{BASE}/{registration['id']}/cancel", json={"reason": "Moving"})
    assert res.json()["status"] == "CANCELLED"

    res = await client.post(f"{BASE}/{registration['id']}/cancel", json={"reason": "Again"})
    assert res.status_code == 409

    res = await client.post(BASE, json={
        "student_id": seed_students[0].id, "target_school_year": "2027-2028",
    })
    assert res.status_code == 201


async def test_lookup_by_number_and_statistics(client, registration):
    res = await client.get(f"{BASE}/number/{registration['registration_number']}")
    assert res.json()["id"] == registration["id"]

    stats = (await client.get(f"{BASE}/statistics", params={"school_year": "2027-2028"})).json()
    assert stats["total"] == 1
    assert stats["by_status"]["DRAFT"] == 1


async def test_search_by_status(client, registration):
    res = await client.get(BASE, params={"status": "DRAFT"})
    assert [r["id"] for r in res.json()] == [registration["id"]]
    res = await client.get(BASE, params={"status": "APPROVED"})
    assert res.json() == []


async def test_delete_only_in_draft(client, registration):
    res = await client.delete(f"{BASE}/{registration['id']}")
    assert res.status_code == 204
    assert (await client.get(f"{BASE}/{registration['id']}")).status_code == 404

"""Collaboration routes - permissions, comments with mentions, edits, links and tasks.

Invariants:
    - Owner is a collaborator with OWNER permission and cannot be removed
    - VIEWER cannot comment or edit → 409
    - Edits bump the minor version; the activity feed is newest first
"""

import pytest

from sis.services.collaboration import bump_minor, extract_mentions

BASE = "/api/v1/analytics/collaboration"


@pytest.fixture
async def collab(client):
    res = await client.post(BASE, json={
        "report_id": 7, "report_name": "Chronic absenteeism", "owner": "principal",
    })
    assert res.status_code == 201
    return res.json()


# --- Helpers ---

def test_extract_mentions_dedupes_and_strips_punctuation():
    assert extract_mentions("cc @ms.jones. and @counselor, @ms.jones") == ["ms.jones", "counselor"]
    assert extract_mentions("mail me at a@b.org") == []


def test_bump_minor():
    assert bump_minor("1.0") == "1.1"
    assert bump_minor("2.9") == "2.10"


# --- Collaborators ---

async def test_owner_is_collaborator(collab):
    assert collab["collaborators"]["principal"]["permission"] == "OWNER"
    assert collab["version"] == "1.0"


async def test_owner_cannot_be_removed_or_duplicated(client, collab):
    cid = collab["collaboration_id"]
    res = await client.delete(f"{BASE}/{cid}/collaborators/principal")
    assert res.status_code == 409
    res = await client.post(f"{BASE}/{cid}/collaborators", json={"user": "x", "permission": "OWNER"})
    assert res.status_code == 409


async def test_remove_unknown_collaborator_is_404(client, collab):
    res = await client.delete(f"{BASE}/{collab['collaboration_id']}/collaborators/nobody")
    assert res.status_code == 404


# --- Comments ---

async def test_viewer_cannot_comment(client, collab):
    cid = collab["collaboration_id"]
    await client.post(f"{BASE}/{cid}/collaborators", json={"user": "parent", "permission": "VIEWER"})
    res = await client.post(f"{BASE}/{cid}/comments", json={"author": "parent", "text": "Hi"})
    assert res.status_code == 409


async def test_comment_mentions_and_resolve(client, collab):
    cid = collab["collaboration_id"]
    await client.post(f"{BASE}/{cid}/collaborators", json={"user": "teacher", "permission": "COMMENTER"})
    res = await client.post(f"{BASE}/{cid}/comments", json={
        "author": "teacher", "text": "@principal please review", "comment_type": "QUESTION",
    })
    assert res.status_code == 201
    comment = res.json()
    assert comment["mentions"] == ["principal"]

    reply = await client.post(f"{BASE}/{cid}/comments", json={
        "author": "principal", "text": "Done", "parent_comment_id": comment["comment_id"],
    })
    assert reply.status_code == 201

    res = await client.post(
        f"{BASE}/{cid}/comments/{comment['comment_id']}/resolve", headers={"X-User": "principal"},
    )
    assert res.json()["resolved_by"] == "principal"
    unresolved = (await client.get(f"{BASE}/{cid}/comments", params={"unresolved_only": True})).json()
    assert [c["text"] for c in unresolved] == ["Done"]


async def test_reply_to_unknown_comment_is_404(client, collab):
    res = await client.post(f"{BASE}/{collab['collaboration_id']}/comments", json={
        "author": "principal", "text": "?", "parent_comment_id": "nope",
    })
    assert res.status_code == 404


# --- Edits, links, tasks ---

async def test_edit_requires_editor_and_bumps_version(client, collab):
    cid = collab["collaboration_id"]
    await client.post(f"{BASE}/{cid}/collaborators", json={"user": "teacher", "permission": "COMMENTER"})
    res = await client.post(f"{BASE}/{cid}/edits", json={"user": "teacher"})
    assert res.status_code == 409

    res = await client.post(f"{BASE}/{cid}/edits", json={"user": "principal", "description": "fix"})
    assert res.json()["version"] == "1.1"
    assert res.json()["total_edits"] == 1


async def test_shared_link_expiry(client, collab):
    res = await client.post(f"{BASE}/{collab['collaboration_id']}/shared-links", json={
        "created_by": "principal", "expires_in_days": 7,
    })
    assert res.status_code == 201
    assert res.json()["url"].startswith("/share/")
    assert res.json()["expires_at"] is not None


async def test_task_completion_once(client, collab):
    cid = collab["collaboration_id"]
    res = await client.post(f"{BASE}/{cid}/tasks", json={
        "title": "Call families", "assignee": "counselor", "priority": "HIGH",
    }, headers={"X-User": "principal"})
    task = res.json()
    assert task["created_by"] == "principal"

    res = await client.post(f"{BASE}/{cid}/tasks/{task['task_id']}/complete", headers={"X-User": "counselor"})
    assert res.json()["status"] == "COMPLETED"
    res = await client.post(f"{BASE}/{cid}/tasks/{task['task_id']}/complete")
    assert res.status_code == 409


# --- Feature toggles ---

@pytest.mark.parametrize("flag, path, payload", [
    ("comments_enabled", "comments", {"author": "principal", "text": "Looks right"}),
    ("allow_link_sharing", "shared-links", {"created_by": "principal"}),
    ("tasks_enabled", "tasks", {"title": "Call families", "assignee": "counselor"}),
])
async def test_disabled_feature_is_409(client, flag, path, payload):
    res = await client.post(BASE, json={
        "report_id": 8, "report_name": "Daily attendance", "owner": "principal", flag: False,
    })
    assert res.status_code == 201
    assert res.json()[flag] is False

    res = await client.post(f"{BASE}/{res.json()['collaboration_id']}/{path}", json=payload)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_STATE"


async def test_features_enabled_by_default(collab):
    assert collab["comments_enabled"] and collab["tasks_enabled"] and collab["allow_link_sharing"]


async def test_activity_feed_newest_first(client, collab):
    cid = collab["collaboration_id"]
    await client.post(f"{BASE}/{cid}/views", json={"user": "principal"})
    feed = (await client.get(f"{BASE}/{cid}/activity", params={"limit": 1})).json()
    assert [a["activity_type"] for a in feed] == ["VIEWED"]

    stats = (await client.get(f"{BASE}/statistics")).json()
    assert stats["total_collaborations"] == 1
    assert stats["by_type"]["ASYNCHRONOUS"] == 1

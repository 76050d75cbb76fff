"""Reference data routes - students, staff, courses and attendance marks."""


async def test_create_student_strips_and_rejects_duplicates(client):
    payload = {
        "student_number": " S100 ", "first_name": "Kay", "last_name": "Nguyen",
        "grade_level": "5th Grade",
    }
    res = await client.post("/api/v1/students", json=payload)
    assert res.status_code == 201
    assert res.json()["student_number"] == "S100"

    res = await client.post("/api/v1/students", json=payload)
    assert res.status_code == 409


async def test_blank_student_name_is_400(client):
    res = await client.post("/api/v1/students", json={
        "student_number": "S1", "first_name": "   ", "last_name": "X", "grade_level": "K",
    })
    assert res.status_code == 400


async def test_list_students_filters_active(client, seed_students):
    res = await client.get("/api/v1/students", params={"active": "true"})
    assert [s["last_name"] for s in res.json()] == ["Lovelace", "Turing"]


async def test_unknown_student_is_404(client):
    assert (await client.get("/api/v1/students/999")).status_code == 404


async def test_staff_role_validated(client):
    res = await client.post("/api/v1/staff", json={
        "username": "x", "full_name": "X", "role": "JANITOR",
    })
    assert res.status_code == 400


async def test_create_course_and_fetch(client):
    res = await client.post("/api/v1/courses", json={"code": "BIO", "name": "Biology"})
    course_id = res.json()["id"]
    assert (await client.get(f"/api/v1/courses/{course_id}")).json()["name"] == "Biology"


async def test_attendance_for_unknown_student_is_400(client):
    res = await client.post("/api/v1/attendance", json={
        "student_id": 999, "attendance_date": "2026-10-05", "status": "PRESENT",
    })
    assert res.status_code == 400


async def test_attendance_remark_updates_in_place(client, seed_students):
    mark = {"student_id": seed_students[0].id, "attendance_date": "2026-10-05", "status": "ABSENT"}
    first = await client.post("/api/v1/attendance", json=mark)
    second = await client.post("/api/v1/attendance", json={**mark, "status": "EXCUSED_ABSENT"})

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    listed = (await client.get("/api/v1/attendance", params={"attendance_date": "2026-10-05"})).json()
    assert [r["status"] for r in listed] == ["EXCUSED_ABSENT"]

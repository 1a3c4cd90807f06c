# tests/functional/api/endpoints/test_schools_endpoints.py

import uuid

import pytest

pytestmark = pytest.mark.asyncio

SCHOOL_PAYLOAD = {"name": "Gamma College", "address": "7 Elm Road", "contactEmail": "office@gamma.edu"}


async def test_create_school(client, super_headers, superadmin):
    response = await client.post("/api/schools", json=SCHOOL_PAYLOAD, headers=super_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "School created successfully"
    data = body["data"]
    assert data["name"] == "Gamma College"
    assert data["contactEmail"] == "office@gamma.edu"
    assert data["createdBy"] == {"_id": str(superadmin.id), "name": "Super Admin", "email": "super@example.com"}
    assert {"_id", "createdAt", "updatedAt"} <= set(data)


async def test_schooladmin_cannot_create_school(client, headers_a):
    response = await client.post("/api/schools", json=SCHOOL_PAYLOAD, headers=headers_a)
    assert response.status_code == 403
    assert response.json()["message"] == "User role 'schooladmin' is not authorized to access this route"


async def test_duplicate_school_name_is_400(client, super_headers, school_a):
    response = await client.post("/api/schools", json={**SCHOOL_PAYLOAD, "name": "Alpha High"}, headers=super_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "School with this name already exists"


async def test_list_schools_envelope(client, super_headers, make_school, at):
    for i in range(25):
        await make_school(f"School {i:02d}", created_at=at(i))

    response = await client.get("/api/schools", params={"page": 2, "limit": 10}, headers=super_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Schools retrieved successfully"
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "totalItems": 25,
        "itemsPerPage": 10,
        "hasNextPage": True,
        "hasPrevPage": True,
    }
    assert [s["name"] for s in body["data"]] == [f"School {i:02d}" for i in range(14, 4, -1)]


async def test_schooladmin_only_sees_own_school(client, headers_a, school_a, school_b):
    response = await client.get("/api/schools", headers=headers_a)
    assert [s["_id"] for s in response.json()["data"]] == [str(school_a.id)]

    assert (await client.get(f"/api/schools/{school_a.id}", headers=headers_a)).status_code == 200
    response = await client.get(f"/api/schools/{school_b.id}", headers=headers_a)
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to access this school"


async def test_unknown_school_is_404(client, super_headers):
    response = await client.get(f"/api/schools/{uuid.uuid4()}", headers=super_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "School not found"


async def test_update_school(client, super_headers, school_a):
    response = await client.put(f"/api/schools/{school_a.id}", json={"address": "1 New Road"}, headers=super_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "School updated successfully"
    assert response.json()["data"]["address"] == "1 New Road"


async def test_delete_school(client, super_headers, school_a):
    response = await client.delete(f"/api/schools/{school_a.id}", headers=super_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "School deleted successfully", "data": {}}


async def test_delete_school_with_classrooms_is_blocked(client, super_headers, school_a, make_classroom):
    await make_classroom(school_a.id, "1A")
    response = await client.delete(f"/api/schools/{school_a.id}", headers=super_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete a school that still has classrooms or students"

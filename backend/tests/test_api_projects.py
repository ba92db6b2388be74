"""
Portfolio API — Project Endpoint Tests
=======================================

What:  End-to-end tests of /api/projects through the ASGI app.
How:   HTTPX AsyncClient + in-memory MongoDB + temporary upload directory.

Test Strategy:
    ✅ Create assigns sequential ids and stores the image
    ✅ Uploaded image is served back under /uploads
    ✅ Rejected uploads (type, size, missing) create nothing
    ✅ List order, get by id, unknown and malformed ids
    ✅ Update keeps createdAt and refreshes updatedAt
    ✅ Delete, then 404
"""

from datetime import datetime

import pytest


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def create_project(client, png: bytes, /, **fields):
    data = {"title": "A", "category": "web"}
    data.update(fields)
    return await client.post(
        "/api/projects",
        data=data,
        files={"img": ("shot.png", png, "image/png")},
    )


class TestCreateProject:

    @pytest.mark.asyncio
    async def test_ids_are_sequential(self, test_client, sample_png):
        first = await create_project(test_client, sample_png)
        second = await create_project(test_client, sample_png, title="B")

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] == 1
        assert second.json()["id"] == 2

    @pytest.mark.asyncio
    async def test_created_record_shape(self, test_client, sample_png):
        response = await create_project(
            test_client,
            sample_png,
            description="Landing page",
            technologies=["python", "mongodb"],
            client='{"name": "Acme"}',
        )

        body = response.json()
        assert body["img"].startswith("/uploads/projects/")
        assert body["img"].endswith("-shot.png")
        assert body["technologies"] == ["python", "mongodb"]
        assert body["client"] == {"name": "Acme"}
        assert isinstance(body["_id"], str)
        assert body["createdAt"] == body["updatedAt"]

    @pytest.mark.asyncio
    async def test_technologies_as_json_array(self, test_client, sample_png):
        response = await create_project(test_client, sample_png, technologies='["react", "node"]')
        assert response.json()["technologies"] == ["react", "node"]

    @pytest.mark.asyncio
    async def test_uploaded_image_is_served(self, test_client, sample_png, temp_storage):
        created = await create_project(test_client, sample_png)
        img = created.json()["img"]

        stored = list((temp_storage / "projects").iterdir())
        assert [path.name for path in stored] == [img.rsplit("/", 1)[1]]

        response = await test_client.get(img)
        assert response.status_code == 200
        assert response.content == sample_png
        assert response.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_pdf_rejected(self, test_client, database, temp_storage):
        response = await test_client.post(
            "/api/projects",
            data={"title": "A", "category": "web"},
            files={"img": ("brief.pdf", b"%PDF-1.7 minimal", "application/pdf")},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "img"
        assert await database.projects.count_documents({}) == 0
        assert not (temp_storage / "projects").exists()

    @pytest.mark.asyncio
    async def test_oversized_image_rejected(self, test_client, database):
        oversized = b"\x89PNG\r\n\x1a\n" + b"\x00" * (5 * 1024 * 1024 + 1 - 8)
        response = await test_client.post(
            "/api/projects",
            data={"title": "A", "category": "web"},
            files={"img": ("huge.png", oversized, "image/png")},
        )

        assert response.status_code == 400
        assert "too large" in response.json()["message"]
        assert await database.projects.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_missing_image_and_title_both_listed(self, test_client, database):
        response = await test_client.post("/api/projects", data={"category": "web"})

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"title", "img"}
        assert await database.projects.count_documents({}) == 0


class TestReadProjects:

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, sample_png):
        for title in ("first", "second", "third"):
            await create_project(test_client, sample_png, title=title)

        response = await test_client.get("/api/projects")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/api/projects")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_by_id(self, test_client, sample_png):
        await create_project(test_client, sample_png, title="first")
        await create_project(test_client, sample_png, title="second")

        response = await test_client.get("/api/projects/2")

        assert response.status_code == 200
        assert response.json()["title"] == "second"

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client, database):
        response = await test_client.get("/api/projects/999")

        assert response.status_code == 404
        assert response.json()["message"] == "Project not found"
        assert await database.projects.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_non_integer_id(self, test_client):
        response = await test_client.get("/api/projects/abc")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "project_id"


class TestUpdateProject:

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at_only(self, test_client, sample_png):
        created = (await create_project(test_client, sample_png)).json()

        response = await test_client.put(
            "/api/projects/1",
            json={
                "title": "Renamed",
                "category": "mobile",
                "img": created["img"],
                "technologies": ["kotlin"],
                "createdAt": "1999-01-01T00:00:00Z",
                "id": 42,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["technologies"] == ["kotlin"]
        assert body["id"] == 1
        assert body["createdAt"] == created["createdAt"]
        assert parse_timestamp(body["updatedAt"]) > parse_timestamp(created["updatedAt"])

    @pytest.mark.asyncio
    async def test_update_missing_required_fields(self, test_client, sample_png):
        await create_project(test_client, sample_png)

        response = await test_client.put("/api/projects/1", json={"title": "Renamed"})

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"category", "img"}

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client, database):
        response = await test_client.put(
            "/api/projects/7",
            json={"title": "A", "category": "web", "img": "/uploads/projects/x.png"},
        )

        assert response.status_code == 404
        assert await database.projects.count_documents({}) == 0


class TestDeleteProject:

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, test_client, sample_png):
        await create_project(test_client, sample_png)

        deleted = await test_client.delete("/api/projects/1")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Project deleted successfully"}

        assert (await test_client.get("/api/projects/1")).status_code == 404
        assert (await test_client.delete("/api/projects/1")).status_code == 404

    @pytest.mark.asyncio
    async def test_id_after_delete_continues_from_max(self, test_client, sample_png):
        await create_project(test_client, sample_png)
        await create_project(test_client, sample_png)
        await test_client.delete("/api/projects/1")

        response = await create_project(test_client, sample_png)
        assert response.json()["id"] == 3


class TestFormAndPathEdges:

    @pytest.mark.asyncio
    async def test_bracketed_text_is_one_technology(self, test_client, sample_png):
        response = await create_project(test_client, sample_png, technologies="[beta] SDK")

        assert response.status_code == 201
        assert response.json()["technologies"] == ["[beta] SDK"]

    @pytest.mark.asyncio
    async def test_boolean_client_kept(self, test_client, sample_png):
        created = (await create_project(test_client, sample_png)).json()

        response = await test_client.put(
            "/api/projects/1",
            json={"title": "A", "category": "web", "img": created["img"], "client": False},
        )

        assert response.status_code == 200
        assert response.json()["client"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_id", [str(2 ** 63), str(10 ** 30), "0", "-1"])
    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    async def test_out_of_range_id_is_400(self, test_client, method, project_id):
        response = await test_client.request(method, f"/api/projects/{project_id}")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "project_id"

    @pytest.mark.asyncio
    async def test_largest_id_is_not_found(self, test_client):
        response = await test_client.get(f"/api/projects/{2 ** 63 - 1}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_with_oversized_client_number(self, test_client, sample_png):
        created = (await create_project(test_client, sample_png)).json()

        response = await test_client.put(
            "/api/projects/1",
            json={"title": "A", "category": "web", "img": created["img"], "client": {"revenue": 10 ** 30}},
        )

        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == ["client"]

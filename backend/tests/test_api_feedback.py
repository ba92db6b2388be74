"""
Portfolio API — Feedback Endpoint Tests
========================================

Test Strategy:
    ✅ Submission validation lists the offending fields
    ✅ New feedback is unapproved, email lower-cased, markup escaped
    ✅ Approval is idempotent
    ✅ Unknown and malformed ids are 404
    ✅ Delete acknowledges once, then 404
"""

import pytest
from bson import ObjectId


FEEDBACK = {
    "name": "Ada Lovelace",
    "role": "CTO",
    "company": "Analytical Engines",
    "email": "Ada@Analytical-Engines.IO",
    "subject": "Great work",
    "message": "Loved the dashboard project.",
}


async def submit(client, **overrides):
    return await client.post("/api/feedback", json={**FEEDBACK, **overrides})


class TestSubmitFeedback:

    @pytest.mark.asyncio
    async def test_created_unapproved(self, test_client):
        response = await submit(test_client)

        assert response.status_code == 201
        body = response.json()
        assert body["approved"] is False
        assert body["email"] == "ada@analytical-engines.io"
        assert ObjectId.is_valid(body["_id"])
        assert "createdAt" in body

    @pytest.mark.asyncio
    async def test_missing_email(self, test_client, database):
        payload = {key: value for key, value in FEEDBACK.items() if key != "email"}
        response = await test_client.post("/api/feedback", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert [error["field"] for error in body["errors"]] == ["email"]
        assert await database.feedback.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_malformed_email(self, test_client):
        response = await submit(test_client, email="ada@")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_markup_escaped(self, test_client):
        response = await submit(test_client, subject="<b>hi</b>")
        assert response.json()["subject"] == "&lt;b&gt;hi&lt;&#x2F;b&gt;"

    @pytest.mark.asyncio
    async def test_client_supplied_approval_ignored(self, test_client):
        response = await submit(test_client, approved=True)
        assert response.json()["approved"] is False

    @pytest.mark.asyncio
    async def test_non_object_body(self, test_client):
        response = await test_client.post("/api/feedback", json=["not", "an", "object"])
        assert response.status_code == 400


class TestListFeedback:

    @pytest.mark.asyncio
    async def test_newest_first_including_unapproved(self, test_client):
        first = (await submit(test_client, subject="first")).json()
        await submit(test_client, subject="second")
        await test_client.put(f"/api/feedback/{first['_id']}/approve")

        response = await test_client.get("/api/feedback")

        assert response.status_code == 200
        body = response.json()
        assert [f["subject"] for f in body] == ["second", "first"]
        assert [f["approved"] for f in body] == [False, True]


class TestApproveFeedback:

    @pytest.mark.asyncio
    async def test_approve_twice(self, test_client):
        created = (await submit(test_client)).json()

        first = await test_client.put(f"/api/feedback/{created['_id']}/approve")
        second = await test_client.put(f"/api/feedback/{created['_id']}/approve")

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["approved"] is True
        assert second.json() == first.json()

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client):
        response = await test_client.put(f"/api/feedback/{ObjectId()}/approve")
        assert response.status_code == 404
        assert response.json()["message"] == "Feedback not found"

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client):
        response = await test_client.put("/api/feedback/not-an-id/approve")
        assert response.status_code == 404


class TestDeleteFeedback:

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, test_client, database):
        created = (await submit(test_client)).json()

        response = await test_client.delete(f"/api/feedback/{created['_id']}/delete")

        assert response.status_code == 200
        assert response.json() == {"acknowledged": True, "deletedCount": 1}
        assert await database.feedback.count_documents({}) == 0

        again = await test_client.delete(f"/api/feedback/{created['_id']}/delete")
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client):
        response = await test_client.delete("/api/feedback/12345/delete")
        assert response.status_code == 404

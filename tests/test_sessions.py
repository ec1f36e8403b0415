import uuid

import pytest
from httpx import AsyncClient

from conftest import create_guest


@pytest.mark.asyncio
async def test_get_session(client: AsyncClient, chat_session):
    headers1, user1_id, headers2, user2_id, session_id = chat_session

    response = await client.get(f"/api/v1/sessions/{session_id}", headers=headers1)

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == session_id
    assert data["user1_id"] == user1_id
    assert data["user2_id"] == user2_id
    assert data["status"] == "active"
    assert data["ended_at"] is None
    assert data["partner"]["user_id"] == user2_id


@pytest.mark.asyncio
async def test_get_session_partner_is_relative_to_viewer(client: AsyncClient, chat_session):
    headers1, user1_id, headers2, user2_id, session_id = chat_session

    response = await client.get(f"/api/v1/sessions/{session_id}", headers=headers2)

    assert response.json()["partner"]["user_id"] == user1_id


@pytest.mark.asyncio
async def test_get_session_outsider_forbidden(client: AsyncClient, chat_session):
    _, _, _, _, session_id = chat_session
    outsider, _ = await create_guest(client)

    response = await client.get(f"/api/v1/sessions/{session_id}", headers=outsider)

    assert response.status_code == 403
    assert response.json()["code"] == "AUTHZ_FORBIDDEN"


@pytest.mark.asyncio
async def test_get_missing_session_does_not_reveal_existence(client: AsyncClient):
    headers, _ = await create_guest(client)

    response = await client.get(f"/api/v1/sessions/{uuid.uuid4()}", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_end_session(client: AsyncClient, chat_session):
    headers1, user1_id, _, _, session_id = chat_session

    response = await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ended"
    assert data["ended_at"] is not None
    assert data["ended_by"] == user1_id


@pytest.mark.asyncio
async def test_end_session_is_idempotent(client: AsyncClient, chat_session):
    headers1, user1_id, headers2, _, session_id = chat_session

    first = await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)
    second = await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers2)

    assert second.status_code == 200
    # The first end wins
    assert second.json()["ended_by"] == user1_id
    assert second.json()["ended_at"] == first.json()["ended_at"]


@pytest.mark.asyncio
async def test_end_session_visible_to_partner(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session

    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)
    response = await client.get(f"/api/v1/sessions/{session_id}", headers=headers2)

    assert response.json()["status"] == "ended"


@pytest.mark.asyncio
async def test_end_session_outsider_forbidden(client: AsyncClient, chat_session):
    _, _, _, _, session_id = chat_session
    outsider, _ = await create_guest(client)

    response = await client.post(f"/api/v1/sessions/{session_id}/end", headers=outsider)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_end_missing_session(client: AsyncClient):
    headers, _ = await create_guest(client)

    response = await client.post(f"/api/v1/sessions/{uuid.uuid4()}/end", headers=headers)

    assert response.status_code == 404
    assert response.json()["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.asyncio
async def test_ended_session_clears_match_status(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session

    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)
    response = await client.get("/api/v1/matching/status", headers=headers2)

    assert response.json()["status"] == "idle"

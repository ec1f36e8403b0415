import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.report import Report

from conftest import create_guest


@pytest.mark.asyncio
async def test_report_session_defaults_to_partner(
    client: AsyncClient, db_session: AsyncSession, chat_session
):
    headers1, user1_id, _, user2_id, session_id = chat_session

    response = await client.post(
        "/api/v1/reports/",
        json={"session_id": session_id, "reason": "harassment", "details": "rude"},
        headers=headers1,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["reported_user_id"] == user2_id
    assert data["session_id"] == session_id
    assert data["reason"] == "harassment"
    assert data["status"] == "pending"

    report = (await db_session.execute(select(Report))).scalar_one()
    assert str(report.reporter_user_id) == user1_id


@pytest.mark.asyncio
async def test_report_user_without_session(client: AsyncClient):
    headers, _ = await create_guest(client)
    reported = str(uuid.uuid4())

    response = await client.post(
        "/api/v1/reports/",
        json={"reported_user_id": reported, "reason": "spam"},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["reported_user_id"] == reported
    assert response.json()["session_id"] is None


@pytest.mark.asyncio
async def test_report_after_session_ended(client: AsyncClient, chat_session):
    headers1, _, headers2, user2_id, session_id = chat_session
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers2)

    response = await client.post(
        "/api/v1/reports/",
        json={"session_id": session_id, "reason": "inappropriate_content"},
        headers=headers1,
    )

    assert response.status_code == 201
    assert response.json()["reported_user_id"] == user2_id


@pytest.mark.asyncio
async def test_report_requires_target(client: AsyncClient):
    headers, _ = await create_guest(client)

    response = await client.post(
        "/api/v1/reports/",
        json={"reason": "spam"},
        headers=headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_report_invalid_reason(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session

    response = await client.post(
        "/api/v1/reports/",
        json={"session_id": session_id, "reason": "bored"},
        headers=headers1,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_report_foreign_session_forbidden(client: AsyncClient, chat_session):
    _, _, _, _, session_id = chat_session
    outsider, _ = await create_guest(client)

    response = await client.post(
        "/api/v1/reports/",
        json={"session_id": session_id, "reason": "spam"},
        headers=outsider,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_report_missing_session(client: AsyncClient):
    headers, _ = await create_guest(client)

    response = await client.post(
        "/api/v1/reports/",
        json={"session_id": str(uuid.uuid4()), "reason": "spam"},
        headers=headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_report_user_outside_session(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session

    response = await client.post(
        "/api/v1/reports/",
        json={
            "session_id": session_id,
            "reported_user_id": str(uuid.uuid4()),
            "reason": "spam",
        },
        headers=headers1,
    )

    assert response.status_code == 422
    assert response.json()["field"] == "reported_user_id"


@pytest.mark.asyncio
async def test_report_self(client: AsyncClient):
    headers, user_id = await create_guest(client)

    response = await client.post(
        "/api/v1/reports/",
        json={"reported_user_id": user_id, "reason": "other"},
        headers=headers,
    )

    assert response.status_code == 422

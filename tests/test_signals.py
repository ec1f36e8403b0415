from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.call_signal import CallSignal
from app.services import signal_service

from conftest import create_guest

OFFER = {"type": "offer", "sdp": "v=0\r\no=- 0 0 IN IP4 127.0.0.1\r\n"}


@pytest.mark.asyncio
async def test_send_signal_is_addressed_to_partner(client: AsyncClient, chat_session):
    headers1, user1_id, _, user2_id, session_id = chat_session

    response = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "offer", "signal_data": OFFER},
        headers=headers1,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["from_user_id"] == user1_id
    assert data["to_user_id"] == user2_id
    assert data["signal_type"] == "offer"
    assert data["signal_data"] == OFFER


@pytest.mark.asyncio
async def test_partner_receives_signal(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session
    await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "offer", "signal_data": OFFER},
        headers=headers1,
    )

    inbox = await client.get(f"/api/v1/sessions/{session_id}/signals", headers=headers2)
    own = await client.get(f"/api/v1/sessions/{session_id}/signals", headers=headers1)

    assert [s["signal_type"] for s in inbox.json()["signals"]] == ["offer"]
    # The sender does not see its own signals
    assert own.json()["signals"] == []


@pytest.mark.asyncio
async def test_signals_since(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session
    first = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "offer", "signal_data": OFFER},
        headers=headers1,
    )
    await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "ice_candidate", "signal_data": {"candidate": "candidate:1"}},
        headers=headers1,
    )

    inbox = await client.get(f"/api/v1/sessions/{session_id}/signals", headers=headers2)
    offer = inbox.json()["signals"][0]
    assert offer["id"] == first.json()["id"]

    response = await client.get(
        f"/api/v1/sessions/{session_id}/signals",
        params={"since": offer["created_at"]},
        headers=headers2,
    )

    assert [s["signal_type"] for s in response.json()["signals"]] == ["ice_candidate"]


@pytest.mark.asyncio
async def test_invalid_signal_type(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session

    response = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "telepathy", "signal_data": {}},
        headers=headers1,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_signal_outsider_forbidden(client: AsyncClient, chat_session):
    _, _, _, _, session_id = chat_session
    outsider, _ = await create_guest(client)

    response = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "hangup"},
        headers=outsider,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_signal_after_session_end(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)

    response = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "hangup"},
        headers=headers1,
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_signal_outsider_on_ended_session(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)
    outsider, _ = await create_guest(client)

    response = await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "hangup"},
        headers=outsider,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_purge_expired_signals(
    client: AsyncClient, db_session: AsyncSession, chat_session
):
    headers1, _, headers2, _, session_id = chat_session
    await client.post(
        f"/api/v1/sessions/{session_id}/signals",
        json={"signal_type": "offer", "signal_data": OFFER},
        headers=headers1,
    )

    later = datetime.now(timezone.utc) + timedelta(seconds=settings.SIGNAL_TTL_SECONDS + 1)
    deleted = await signal_service.purge_expired_signals(db_session, now=later)

    assert deleted == 1
    count = await db_session.execute(select(func.count()).select_from(CallSignal))
    assert count.scalar_one() == 0

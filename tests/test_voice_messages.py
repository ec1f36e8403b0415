import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.voice_message import VoiceMessage
from app.services import voice_service

from conftest import create_guest

AUDIO_BYTES = b"RIFF\x00\x00\x00\x00WEBMfake-audio-payload"


async def upload(
    client: AsyncClient,
    session_id: str,
    headers: dict,
    content: bytes = AUDIO_BYTES,
    content_type: str = "audio/webm",
    duration: str = "3.5",
):
    return await client.post(
        f"/api/v1/sessions/{session_id}/voice-messages",
        files={"audio": ("voice.webm", content, content_type)},
        data={"duration": duration},
        headers=headers,
    )


async def count_voice_messages(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(VoiceMessage))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_upload_voice_message(client: AsyncClient, chat_session):
    headers1, user1_id, _, _, session_id = chat_session

    response = await upload(client, session_id, headers1)

    assert response.status_code == 201
    data = response.json()
    assert data["session_id"] == session_id
    assert data["user_id"] == user1_id
    assert data["mime_type"] == "audio/webm"
    assert data["duration"] == 3.5
    assert data["file_size"] == len(AUDIO_BYTES)
    assert data["file_url"].startswith("/uploads/voice/")
    assert data["file_url"].endswith(".webm")


@pytest.mark.asyncio
async def test_uploaded_blob_is_stored_and_served(
    client: AsyncClient, db_session: AsyncSession, chat_session
):
    headers1, _, _, _, session_id = chat_session

    data = (await upload(client, session_id, headers1)).json()

    voice_message = await db_session.get(VoiceMessage, uuid.UUID(data["id"]))
    assert Path(voice_message.file_path).read_bytes() == AUDIO_BYTES

    served = await client.get(data["file_url"])
    assert served.status_code == 200
    assert served.content == AUDIO_BYTES


@pytest.mark.asyncio
async def test_list_voice_messages(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session
    await upload(client, session_id, headers1)
    await upload(client, session_id, headers2, duration="1")

    response = await client.get(
        f"/api/v1/sessions/{session_id}/voice-messages", headers=headers2
    )

    assert response.status_code == 200
    durations = [v["duration"] for v in response.json()["voice_messages"]]
    assert durations == [3.5, 1.0]


@pytest.mark.asyncio
async def test_upload_rejects_non_audio(
    client: AsyncClient, db_session: AsyncSession, chat_session
):
    headers1, _, _, _, session_id = chat_session

    response = await upload(client, session_id, headers1, content_type="image/png")

    assert response.status_code == 422
    assert response.json()["field"] == "audio"
    assert await count_voice_messages(db_session) == 0


@pytest.mark.asyncio
async def test_upload_rejects_oversized_file(client: AsyncClient, chat_session, monkeypatch):
    headers1, _, _, _, session_id = chat_session
    monkeypatch.setattr(settings, "VOICE_MAX_SIZE_BYTES", 10)

    response = await upload(client, session_id, headers1)

    assert response.status_code == 422
    assert response.json()["metadata"]["max_size_bytes"] == 10


@pytest.mark.asyncio
async def test_upload_rejects_bad_duration(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session

    response = await upload(client, session_id, headers1, duration="0")

    assert response.status_code == 422
    assert response.json()["field"] == "duration"


@pytest.mark.asyncio
async def test_upload_to_ended_session(client: AsyncClient, chat_session):
    headers1, _, headers2, _, session_id = chat_session
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers2)

    response = await upload(client, session_id, headers1)

    assert response.status_code == 409
    assert response.json()["code"] == "SESSION_CLOSED"


@pytest.mark.asyncio
async def test_upload_outsider_forbidden(client: AsyncClient, chat_session):
    _, _, _, _, session_id = chat_session
    outsider, _ = await create_guest(client)

    response = await upload(client, session_id, outsider)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_upload_outsider_on_ended_session(client: AsyncClient, chat_session):
    headers1, _, _, _, session_id = chat_session
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers1)
    outsider, _ = await create_guest(client)

    response = await upload(client, session_id, outsider)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_purge_expired_voice_messages(
    client: AsyncClient, db_session: AsyncSession, chat_session
):
    headers1, _, _, _, session_id = chat_session
    data = (await upload(client, session_id, headers1)).json()
    voice_message = await db_session.get(VoiceMessage, uuid.UUID(data["id"]))
    file_path = Path(voice_message.file_path)

    later = datetime.now(timezone.utc) + timedelta(hours=settings.MESSAGE_RETENTION_HOURS + 1)
    deleted = await voice_service.purge_expired_voice_messages(db_session, now=later)

    assert deleted == 1
    assert await count_voice_messages(db_session) == 0
    assert not file_path.exists()

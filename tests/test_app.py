import pytest
from httpx import AsyncClient

from conftest import create_guest


@pytest.mark.asyncio
async def test_health_reports_store(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}


@pytest.mark.asyncio
async def test_error_echoes_client_request_id(client: AsyncClient):
    response = await client.get(
        "/api/v1/matching/status", headers={"X-Request-ID": "client-trace-42"}
    )

    assert response.status_code == 401
    assert response.headers["X-Request-ID"] == "client-trace-42"


@pytest.mark.asyncio
async def test_error_gets_generated_request_id(client: AsyncClient):
    response = await client.get("/api/v1/no-such-route")

    assert response.status_code == 404
    assert response.json()["code"] == "RESOURCE_NOT_FOUND"
    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_request_validation_names_field(client: AsyncClient):
    headers, _ = await create_guest(client)

    response = await client.post(
        "/api/v1/matching/",
        json={"interests": ["music"], "age_group": "18-24"},
        headers=headers,
    )

    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["field"] == "language"
    assert isinstance(data["detail"], list)

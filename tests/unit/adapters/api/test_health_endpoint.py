import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_health_reports_in_memory_store(async_client):
    response = await async_client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "ok"
    assert body["env"] == "test"
    assert body["services"]["account_store"] == {"status": "healthy", "backend": "memory"}
    assert body["services"]["email"] == {"backend": "memory"}

"""
Integration Tests for health endpoints
"""
import pytest
from httpx import AsyncClient


class TestHealth:

    @pytest.mark.asyncio
    async def test_root_health(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get('/api/v1/health/live')
        assert response.json()['status'] == 'alive'

    @pytest.mark.asyncio
    async def test_readiness_with_tables(self, client: AsyncClient):
        response = await client.get('/api/v1/health/ready')

        assert response.status_code == 200
        assert response.json()['checks']['database']['tables_ready'] is True

    @pytest.mark.asyncio
    async def test_responses_carry_request_id(self, client: AsyncClient):
        response = await client.get('/api/v1/health/live')
        assert response.headers.get('X-Request-ID')

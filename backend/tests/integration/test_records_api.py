"""
Integration Tests for Record API Endpoints
"""
import pytest
from httpx import AsyncClient

from app.core.types import generate_uuid


class TestRecordCrud:
    """Create, read, update and delete records"""

    @pytest.mark.asyncio
    async def test_create_stamps_creator(self, client: AsyncClient, auth_headers, counselor_user):
        response = await client.post('/api/v1/records', headers=auth_headers, json={
            'client_name': 'Jordan Client',
            'session_number': 2,
            'session_type': 'Individual',
        })

        assert response.status_code == 201
        data = response.json()
        assert data['created_by_id'] == str(counselor_user.id)
        assert data['created_by_role'] == 'counselor'
        assert data['counselor'] == counselor_user.full_name
        assert data['status'] == 'Ongoing'

    @pytest.mark.asyncio
    async def test_create_requires_client_name(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/records', headers=auth_headers, json={'session_number': 1})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_and_search(self, client: AsyncClient, auth_headers, record):
        response = await client.get('/api/v1/records', headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 1
        assert data['items'][0]['id'] == record.id

        response = await client.get('/api/v1/records', headers=auth_headers, params={'search': 'zzz-no-match'})
        assert response.json()['total'] == 0

    @pytest.mark.asyncio
    async def test_get_unknown_record(self, client: AsyncClient, auth_headers):
        response = await client.get(f'/api/v1/records/{generate_uuid()}', headers=auth_headers)

        assert response.status_code == 404
        body = response.json()
        assert body['success'] is False
        assert body['error']['code'] == 'RECORD_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_owner_updates(self, client: AsyncClient, auth_headers, record, counselor_user):
        response = await client.put(f'/api/v1/records/{record.id}', headers=auth_headers, json={
            'notes': 'Follow-up scheduled',
        })

        assert response.status_code == 200
        data = response.json()
        assert data['notes'] == 'Follow-up scheduled'
        assert data['last_modified_by_id'] == str(counselor_user.id)

    @pytest.mark.asyncio
    async def test_other_counselor_cannot_update(self, client: AsyncClient, other_auth_headers, record):
        response = await client.put(f'/api/v1/records/{record.id}', headers=other_auth_headers, json={
            'notes': 'Not mine',
        })

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'NOT_AUTHORIZED'

    @pytest.mark.asyncio
    async def test_admin_updates_any_record(self, client: AsyncClient, admin_auth_headers, record):
        response = await client.put(f'/api/v1/records/{record.id}', headers=admin_auth_headers, json={
            'status': 'Completed',
        })

        assert response.status_code == 200
        assert response.json()['status'] == 'Completed'

    @pytest.mark.asyncio
    async def test_soft_delete(self, client: AsyncClient, auth_headers, record):
        response = await client.delete(f'/api/v1/records/{record.id}', headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f'/api/v1/records/{record.id}', headers=auth_headers)
        assert response.status_code == 404


class TestEditGate:
    """Mutations are refused while someone else holds the lock"""

    @pytest.mark.asyncio
    async def test_update_blocked_by_other_holder(
        self, client: AsyncClient, auth_headers, admin_auth_headers, record, counselor_user
    ):
        lock = await client.post(f'/api/v1/records/{record.id}/lock', headers=auth_headers)
        assert lock.status_code == 200

        response = await client.put(f'/api/v1/records/{record.id}', headers=admin_auth_headers, json={
            'notes': 'Overwritten',
        })

        assert response.status_code == 423
        error = response.json()['error']
        assert error['code'] == 'RECORD_LOCKED'
        assert error['details']['locked_by']['user_id'] == str(counselor_user.id)
        assert 'Editing is not allowed' in error['message']

        current = await client.get(f'/api/v1/records/{record.id}', headers=auth_headers)
        assert current.json()['notes'] == 'Initial intake'

    @pytest.mark.asyncio
    async def test_holder_can_edit(self, client: AsyncClient, auth_headers, record):
        await client.post(f'/api/v1/records/{record.id}/lock', headers=auth_headers)

        response = await client.put(f'/api/v1/records/{record.id}', headers=auth_headers, json={
            'notes': 'Edited under lock',
        })

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_blocked_by_other_holder(
        self, client: AsyncClient, auth_headers, admin_auth_headers, record
    ):
        await client.post(f'/api/v1/records/{record.id}/lock', headers=admin_auth_headers)

        response = await client.delete(f'/api/v1/records/{record.id}', headers=auth_headers)
        assert response.status_code == 423

        still_there = await client.get(f'/api/v1/records/{record.id}', headers=auth_headers)
        assert still_there.status_code == 200

    @pytest.mark.asyncio
    async def test_blocked_edit_is_audited(
        self, client: AsyncClient, auth_headers, admin_auth_headers, record
    ):
        await client.post(f'/api/v1/records/{record.id}/lock', headers=auth_headers)
        await client.put(f'/api/v1/records/{record.id}', headers=admin_auth_headers, json={'notes': 'x'})

        logs = await client.get(f'/api/v1/records/{record.id}/lock-logs', headers=auth_headers)
        actions = [entry['action'] for entry in logs.json()['logs']]
        assert actions == ['EDIT_ATTEMPT_BLOCKED', 'LOCK']

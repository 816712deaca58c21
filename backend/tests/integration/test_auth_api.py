"""
Integration Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

fake = Faker()


class TestRegistration:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_defaults_to_counselor(self, client: AsyncClient):
        user_data = {
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        data = response.json()
        assert data['email'] == user_data['email']
        assert data['role'] == 'counselor'
        assert 'hashed_password' not in data

    @pytest.mark.asyncio
    async def test_register_admin(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': 'securePassword123!',
            'role': 'admin',
        })

        assert response.status_code == 201
        assert response.json()['role'] == 'admin'

    @pytest.mark.asyncio
    async def test_register_unknown_role_rejected(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': 'securePassword123!',
            'role': 'student',
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, counselor_user):
        response = await client.post('/api/v1/auth/register', json={
            'email': counselor_user.email,
            'password': 'securePassword123!',
        })

        assert response.status_code == 400
        assert 'already registered' in response.json()['detail'].lower()

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={
            'email': fake.email(),
            'password': 'short',
        })

        assert response.status_code == 422


class TestLogin:
    """Test login, refresh and /me"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, counselor_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': counselor_user.email,
            'password': 'testpassword123',
        })

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token']
        assert data['refresh_token']
        assert data['user']['id'] == str(counselor_user.id)
        assert data['user']['role'] == 'counselor'

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, counselor_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': counselor_user.email,
            'password': 'wrongpassword',
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_account(self, client: AsyncClient, db_session, counselor_user):
        counselor_user.is_active = False
        await db_session.commit()

        response = await client.post('/api/v1/auth/login', json={
            'email': counselor_user.email,
            'password': 'testpassword123',
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, auth_headers, counselor_user):
        response = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['email'] == counselor_user.email

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_me_rejects_refresh_token(self, client: AsyncClient, counselor_user):
        from app.core.security import create_refresh_token

        token = create_refresh_token({'sub': str(counselor_user.id)})
        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient, counselor_user):
        login = await client.post('/api/v1/auth/login', json={
            'email': counselor_user.email,
            'password': 'testpassword123',
        })

        response = await client.post('/api/v1/auth/refresh', json={
            'refresh_token': login.json()['refresh_token']
        })

        assert response.status_code == 200
        assert response.json()['access_token']

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, counselor_user):
        login = await client.post('/api/v1/auth/login', json={
            'email': counselor_user.email,
            'password': 'testpassword123',
        })

        response = await client.post('/api/v1/auth/refresh', json={
            'refresh_token': login.json()['access_token']
        })

        assert response.status_code == 401

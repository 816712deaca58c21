"""
Counseling Records - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''
os.environ['LOCK_SWEEP_ENABLED'] = 'false'

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User, UserRole
from app.models.record import Record
from app.modules.auth.actor import Actor
from app.core.security import get_password_hash, create_access_token

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory(db_session: AsyncSession) -> Callable[[], AsyncSession]:
    """Factory for extra sessions on the same test database (tables already created)"""
    return TestSessionLocal


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, role: UserRole, password: str) -> User:
    user = User(
        email=fake.unique.email(),
        hashed_password=get_password_hash(password),
        full_name=fake.name(),
        role=role,
        is_active=True
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await _create_user(db_session, UserRole.ADMIN, 'adminpassword123')


@pytest.fixture
async def counselor_user(db_session: AsyncSession) -> User:
    """Create a counselor test user"""
    return await _create_user(db_session, UserRole.COUNSELOR, 'testpassword123')


@pytest.fixture
async def other_counselor(db_session: AsyncSession) -> User:
    """A second counselor who does not own the test record"""
    return await _create_user(db_session, UserRole.COUNSELOR, 'otherpassword123')


@pytest.fixture
def admin(admin_user: User) -> Actor:
    return Actor.from_user(admin_user)


@pytest.fixture
def counselor(counselor_user: User) -> Actor:
    return Actor.from_user(counselor_user)


@pytest.fixture
def other(other_counselor: User) -> Actor:
    return Actor.from_user(other_counselor)


@pytest.fixture
async def record(db_session: AsyncSession, counselor_user: User) -> Record:
    """A record created by counselor_user"""
    rec = Record(
        client_name=fake.name(),
        session_number=1,
        session_type='Individual',
        notes='Initial intake',
        counselor=counselor_user.full_name,
        created_by_id=str(counselor_user.id),
        created_by_name=counselor_user.full_name,
        created_by_role=UserRole.COUNSELOR.value,
    )
    db_session.add(rec)
    await db_session.commit()
    await db_session.refresh(rec)
    return rec


def _headers_for(user: User) -> dict:
    token_data = {
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return _headers_for(admin_user)


@pytest.fixture
def auth_headers(counselor_user: User) -> dict:
    """Generate authentication headers for the record-owning counselor"""
    return _headers_for(counselor_user)


@pytest.fixture
def other_auth_headers(other_counselor: User) -> dict:
    """Generate authentication headers for the second counselor"""
    return _headers_for(other_counselor)

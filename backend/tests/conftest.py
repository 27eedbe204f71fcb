"""
DrawHub - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator, Callable, Awaitable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment (before any drawhub import reads settings)
_TEST_DIR = tempfile.mkdtemp(prefix="drawhub-tests-")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"

os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = TEST_DATABASE_URL
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['UPLOAD_PATH'] = os.path.join(_TEST_DIR, 'uploads')
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from drawhub.main import app
from drawhub.core.config import settings
from drawhub.core.database import Base, get_db
from drawhub.core.security import get_password_hash, create_access_token
from drawhub.models import User, UserRole, UserSession, Project, ProjectAssignment

fake = Faker()

TEST_PASSWORD = 'testpassword123'
CORPORATE_DOMAIN = settings.DEFAULT_EMAIL_DOMAINS[0]

# Test database setup
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


def corporate_email() -> str:
    return f"{fake.unique.user_name()}@{CORPORATE_DOMAIN}"


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
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory: await make_user(UserRole.ANALISTA, is_active=False)"""
    async def _make(role: UserRole = UserRole.PROJETISTA, **overrides) -> User:
        user = User(
            name=overrides.pop('name', fake.name()),
            email=overrides.pop('email', corporate_email()),
            hashed_password=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
            role=role,
            is_active=overrides.pop('is_active', True),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMINISTRADOR)


@pytest.fixture
async def gestor_user(make_user) -> User:
    return await make_user(UserRole.GESTOR)


@pytest.fixture
async def gestor_final_user(make_user) -> User:
    return await make_user(UserRole.GESTOR_FINAL)


@pytest.fixture
async def analista_user(make_user) -> User:
    return await make_user(UserRole.ANALISTA)


@pytest.fixture
def make_project(db_session: AsyncSession):
    """Factory: await make_project(creator, assigned=[user, ...])"""
    async def _make(creator: User, assigned=(), **overrides) -> Project:
        project = Project(
            name=overrides.pop('name', fake.catch_phrase()),
            description=overrides.pop('description', fake.sentence()),
            created_by_id=creator.id,
            **overrides,
        )
        db_session.add(project)
        await db_session.flush()
        for user in assigned:
            db_session.add(ProjectAssignment(project_id=project.id, user_id=user.id))
        await db_session.commit()
        await db_session.refresh(project)
        return project
    return _make


@pytest.fixture
def auth_headers_for(db_session: AsyncSession):
    """Open a login session for a user and return its bearer header"""
    async def _headers(user: User) -> dict:
        session = UserSession.open(user.id, settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        db_session.add(session)
        await db_session.commit()
        token = create_access_token({
            'sub': str(user.id),
            'sid': session.id,
            'role': user.role.value,
        })
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
async def admin_headers(admin_user: User, auth_headers_for) -> dict:
    return await auth_headers_for(admin_user)


@pytest.fixture
async def gestor_headers(gestor_user: User, auth_headers_for) -> dict:
    return await auth_headers_for(gestor_user)


@pytest.fixture
async def analista_headers(analista_user: User, auth_headers_for) -> dict:
    return await auth_headers_for(analista_user)


@pytest.fixture
async def gestor_final_headers(gestor_final_user: User, auth_headers_for) -> dict:
    return await auth_headers_for(gestor_final_user)

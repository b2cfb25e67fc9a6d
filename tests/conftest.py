"""
Test configuration and fixtures for the cryptolend engine tests.
"""
import pytest
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from cryptolend.core.config import Settings
from cryptolend.core.database import Base, init_models
from cryptolend.core.store import InMemoryDocumentStore, SqlAlchemyDocumentStore
from cryptolend.engine import LendingEngine


# ============================================================
# Settings
# ============================================================

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file"""
    return Settings(_env_file=None, DATABASE_URL=TEST_DATABASE_URL, LOAN_REQUEST_EXPIRY_DAYS=30)


# ============================================================
# Database Fixtures
# ============================================================

@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    
    await init_models(engine)
    
    yield engine
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for each test"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    
    async with async_session() as session:
        yield session
        await session.rollback()


# ============================================================
# Store / Engine Fixtures
# ============================================================

@pytest.fixture
def sql_store(db_session) -> SqlAlchemyDocumentStore:
    return SqlAlchemyDocumentStore(db_session)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def engine(sql_store, test_settings) -> LendingEngine:
    """Engine over the SQLite-backed store"""
    return LendingEngine(sql_store, test_settings)


@pytest.fixture
def memory_engine(memory_store, test_settings) -> LendingEngine:
    """Engine over the in-memory store"""
    return LendingEngine(memory_store, test_settings)


# ============================================================
# Reference Data Fixtures
# ============================================================

@pytest.fixture
async def test_user(engine):
    """Create a test user"""
    return await engine.save("user", {"email": "test@example.com", "password": "Password123"})


@pytest.fixture
async def test_lender(engine):
    """Create a second user acting as lender"""
    return await engine.save("user", {"email": "lender@example.com", "password": "Password123"})


@pytest.fixture
async def test_cryptocurrency(engine):
    """Create a test cryptocurrency"""
    return await engine.save("cryptocurrency", {"name": "Bitcoin", "symbol": "BTC"})


@pytest.fixture
async def test_interest_term(engine):
    """Create a six month interest term"""
    return await engine.save("interest_term", {"loan_length": 6, "interest_rate": 10})


@pytest.fixture
async def test_loan_request(engine, test_user, test_cryptocurrency, test_interest_term):
    """Create a pending loan request"""
    return await engine.save("loan_request", {
        "borrower_id": test_user.id,
        "cryptocurrency": test_cryptocurrency.id,
        "request_amount": 1000,
        "interest_term": test_interest_term.id
    })


@pytest.fixture
def backdate(db_session, sql_store):
    """Rewrite the creation time of a stored row; stores otherwise assign it"""
    async def _backdate(document, created_at):
        row = await db_session.get(document.orm_model, document.id)
        row.created_at = created_at
        await db_session.flush()
        await db_session.refresh(row)
        return await sql_store.find_by_id(document.kind, document.id)
    return _backdate

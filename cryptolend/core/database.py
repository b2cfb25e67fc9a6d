from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator, Optional
from cryptolend.core.config import Settings, get_settings

Base = declarative_base()


def create_engine(url: Optional[str] = None, settings: Optional[Settings] = None, **kwargs) -> AsyncEngine:
    """Create an async engine for the configured database"""
    settings = settings or get_settings()
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=settings.DEBUG,
        future=True,
        pool_pre_ping=True,
        **kwargs
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Async session factory bound to an engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables (for development - use migrations in production)"""
    # Models register themselves on Base when imported
    import cryptolend.modules  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Get async database session"""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

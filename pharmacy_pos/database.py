from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from pharmacy_pos.config import settings
from pharmacy_pos.core.exceptions import POSError
import logging

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the configured store.
    SQLite gets a busy timeout so concurrent writers wait on the
    database lock instead of failing straight away.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": settings.DATABASE_TIMEOUT_SECONDS}
        )

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False
    )


# Create async engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)

# Create declarative base
Base = declarative_base()


async def get_db():
    """
    Dependency for getting async database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            # Domain errors are reported by the exception handlers
            if not isinstance(e, POSError):
                logger.error(f"Database session error: {str(e)}")
            raise
        finally:
            await session.close()


async def create_tables(bind: AsyncEngine):
    """
    Create all tables on the given engine
    """
    async with bind.begin() as conn:
        # Import all models here to register them with Base.metadata
        from pharmacy_pos import models

        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """
    Initialize database - create tables
    """
    await create_tables(engine)
    logger.info("Database tables created successfully")


async def close_db():
    """
    Close database connections
    """
    await engine.dispose()
    logger.info("Database connections closed")

"""
Database connection management
"""
from typing import AsyncIterator, Optional
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from healthlog.config import settings
from healthlog.utils.url_builder import build_async_url, build_url_from_parts, normalize_database_url


# Global database objects
engine: Optional[AsyncEngine] = None
async_session: Optional[sessionmaker] = None


def resolve_database_url() -> str:
    """DATABASE_URL wins; otherwise assemble one from the DB_* settings"""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return build_url_from_parts(
        settings.DB_HOST,
        settings.DB_PORT,
        settings.DB_USER,
        settings.DB_PASSWORD,
        settings.DB_DATABASE,
    )


def init_database() -> bool:
    """
    Initialize database connection

    Returns:
        True if initialization successful, False otherwise
    """
    global engine, async_session

    database_url = resolve_database_url()
    if not database_url:
        print("Warning: DATABASE_URL / DB_HOST not set, database features will be unavailable")
        return False

    try:
        database_url = normalize_database_url(database_url)
        async_database_url = build_async_url(database_url)

        connect_args = {
            "connect_timeout": 20,
            "init_command": "SET NAMES 'utf8mb4'",
        }

        # Requests queue for a free connection once the pool is exhausted
        engine = create_async_engine(
            async_database_url,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_recycle=3600,  # MySQL drops idle connections after wait_timeout
            pool_timeout=30,
            connect_args=connect_args,
            echo=False,
        )

        async_session = sessionmaker(
            bind=engine,
            expire_on_commit=False,
            class_=AsyncSession
        )

        print("Database engine initialized successfully")
        return True

    except Exception as e:
        print(f"Warning: Failed to initialize database engine: {e}")
        import traceback
        traceback.print_exc()
        return False


def get_session() -> Optional[sessionmaker]:
    """
    Get database session maker

    Returns:
        Session maker or None if not initialized
    """
    return async_session


def is_initialized() -> bool:
    """
    Check if database is initialized

    Returns:
        True if initialized, False otherwise
    """
    return engine is not None and async_session is not None


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session for the duration of one request"""
    if not is_initialized():
        raise HTTPException(status_code=503, detail="Database not configured")

    session_maker = get_session()
    if not session_maker:
        raise HTTPException(status_code=503, detail="Database not configured")

    async with session_maker() as session:
        yield session

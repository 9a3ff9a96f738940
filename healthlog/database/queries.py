"""
Database query utilities with retry logic
"""
import asyncio
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession


def is_transient_error(error: Exception) -> bool:
    """Connection drops, pool exhaustion and deadlocks are worth another attempt"""
    error_str = str(error).lower()
    error_type = type(error).__name__

    is_pool_error = (
        "too many connections" in error_str or
        "queuepool limit" in error_str or
        "connection pool" in error_str
    )

    is_connection_error = (
        "lost connection" in error_str or
        "server has gone away" in error_str or
        "can't connect" in error_str or
        ("connection" in error_str and ("closed" in error_str or "reset" in error_str))
    )

    is_deadlock = "deadlock found" in error_str or "lock wait timeout" in error_str

    is_timeout = (
        error_type == "TimeoutError" or
        "timeout" in error_str or
        "CancelledError" in error_type
    )

    return is_pool_error or is_connection_error or is_deadlock or is_timeout


async def execute_with_retry(
    session: AsyncSession,
    query: Any,
    max_retries: int = 3,
    initial_delay: float = 0.5
) -> Optional[Any]:
    """
    Execute query with retry logic for transient database errors

    Args:
        session: Database session
        query: SQLAlchemy query object
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay between retries (exponential backoff)

    Returns:
        Query result
    """
    for attempt in range(max_retries):
        try:
            return await session.execute(query)
        except Exception as e:
            error_str = str(e)
            error_type = type(e).__name__

            print(f"Database error on attempt {attempt + 1}/{max_retries}: {error_type}: {error_str[:200]}")

            if not is_transient_error(e):
                print(f"Non-retryable error: {error_type}: {error_str[:200]}")
                raise

            if attempt == max_retries - 1:
                print(f"Max retries reached, failing with: {error_type}: {error_str[:200]}")
                raise

            # A failed statement leaves the session unusable until rolled back
            await session.rollback()

            # Exponential backoff: 0.5s, 1s, 2s
            delay = initial_delay * (2 ** attempt)
            print(f"Retrying after {delay}s...")
            await asyncio.sleep(delay)

    raise RuntimeError("execute_with_retry completed without result or error")


async def fetch_all(session: AsyncSession, query: Any) -> List[Dict[str, Any]]:
    """Run a read query and return every row as a plain dict"""
    result = await execute_with_retry(session, query)
    return [dict(row) for row in result.mappings().all()]


async def fetch_one(session: AsyncSession, query: Any) -> Optional[Dict[str, Any]]:
    """Run a read query and return the first row as a dict, or None"""
    result = await execute_with_retry(session, query)
    row = result.mappings().first()
    return dict(row) if row is not None else None

"""
Health check endpoints
"""
from fastapi import APIRouter
from sqlalchemy import text

from healthlog.database.connection import get_session, is_initialized

router = APIRouter()


@router.get("/healthz")
async def healthcheck():
    """Liveness plus a round trip to MySQL when the pool is configured"""
    if not is_initialized():
        return {"status": "ok", "database": "not_configured"}

    session_maker = get_session()
    try:
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception as e:
        print(f"Health check: database unreachable: {type(e).__name__}: {e}")
        db_status = "unavailable"
    return {"status": "ok", "database": db_status}

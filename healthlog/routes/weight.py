"""
Weight and height endpoints
"""
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import HeightPayload, WeightPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import parse_datetime

router = APIRouter(prefix="/api/weight")

RECENT_LIMIT = 15


@router.get("")
async def get_recent_weights(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    The latest weights plus the user's height.

    The query takes the newest rows; they are returned oldest first so a chart
    can plot them left to right.
    """
    try:
        rows = await fetch_all(
            session,
            text(f"""
                SELECT * FROM weight_logs
                WHERE user_id = :uid
                ORDER BY log_datetime DESC
                LIMIT {RECENT_LIMIT}
            """).bindparams(uid=user_id)
        )
        user = await fetch_one(
            session,
            text("SELECT height_cm FROM users WHERE id = :uid").bindparams(uid=user_id)
        )
        return {
            "weights": list(reversed(rows)),
            "height": user["height_cm"] if user else None,
        }
    except Exception as e:
        return server_error("get_recent_weights", e)


@router.get("/history")
async def get_weight_history(
    start_datetime: Optional[str] = Query(None),
    end_datetime: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    if not start_datetime or not end_datetime:
        raise HTTPException(status_code=400, detail="Start and end datetime are required")
    start = parse_datetime(start_datetime, "start_datetime")
    end = parse_datetime(end_datetime, "end_datetime")

    try:
        return await fetch_all(
            session,
            text("""
                SELECT * FROM weight_logs
                WHERE user_id = :uid AND log_datetime BETWEEN :start AND :end
                ORDER BY log_datetime ASC
            """).bindparams(uid=user_id, start=start, end=end)
        )
    except Exception as e:
        return server_error("get_weight_history", e)


@router.post("", status_code=201)
async def add_weight(
    body: WeightPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    if not body.weight or body.weight <= 0 or not body.log_datetime:
        raise HTTPException(status_code=400, detail="A positive weight and its datetime are required")
    logged_at = parse_datetime(body.log_datetime, "log_datetime")

    try:
        result = await execute_with_retry(
            session,
            text("""
                INSERT INTO weight_logs (user_id, log_datetime, weight)
                VALUES (:uid, :logged_at, :weight)
            """).bindparams(uid=user_id, logged_at=logged_at, weight=body.weight)
        )
        await session.commit()
        return {"id": result.lastrowid, "message": "Weight saved"}
    except Exception as e:
        return server_error("add_weight", e)


@router.put("/height")
async def update_height(
    body: HeightPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        height = float(body.height)
    except (TypeError, ValueError):
        height = None
    if height is None or not math.isfinite(height) or height <= 0:
        raise HTTPException(status_code=400, detail="Invalid height value")

    try:
        await execute_with_retry(
            session,
            text("UPDATE users SET height_cm = :height WHERE id = :uid").bindparams(height=height, uid=user_id)
        )
        await session.commit()
        return {"message": "Height updated", "height": height}
    except Exception as e:
        return server_error("update_height", e)


@router.delete("/{log_id}")
async def delete_weight(
    log_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM weight_logs WHERE id = :id AND user_id = :uid").bindparams(id=log_id, uid=user_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Weight record not found")
        return {"message": "Weight record deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_weight", e)

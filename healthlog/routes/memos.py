"""
Memo (to-do) endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import MemoPayload, MemoStatusPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import like_pattern, require_fields, validate_choice

router = APIRouter(prefix="/api/memos")

PRIORITIES = ("high", "medium", "low")


@router.get("")
async def list_memos(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Open memos first, then by priority (high to low), then newest first"""
    try:
        return await fetch_all(
            session,
            text("""
                SELECT * FROM memos
                WHERE user_id = :uid
                ORDER BY
                    is_completed ASC,
                    FIELD(priority, 'high', 'medium', 'low'),
                    created_at DESC
            """).bindparams(uid=user_id)
        )
    except Exception as e:
        return server_error("list_memos", e)


@router.post("", status_code=201)
async def create_memo(
    body: MemoPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Task content is required", body.task_name)
    priority = validate_choice(body.priority or "medium", PRIORITIES, "priority")

    try:
        result = await session.execute(
            text("INSERT INTO memos (user_id, task_name, priority) VALUES (:uid, :task_name, :priority)").bindparams(
                uid=user_id, task_name=body.task_name.strip(), priority=priority
            )
        )
        await session.commit()
        return await fetch_one(
            session,
            text("SELECT * FROM memos WHERE id = :id").bindparams(id=result.lastrowid)
        )
    except Exception as e:
        return server_error("create_memo", e)


@router.put("/{memo_id}/status")
async def update_memo_status(
    memo_id: int,
    body: MemoStatusPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Completing a memo stamps completed_at; reopening clears it"""
    completed_at = datetime.now() if body.is_completed else None

    try:
        result = await execute_with_retry(
            session,
            text("""
                UPDATE memos SET is_completed = :is_completed, completed_at = :completed_at
                WHERE id = :id AND user_id = :uid
            """).bindparams(
                is_completed=body.is_completed,
                completed_at=completed_at,
                id=memo_id,
                uid=user_id,
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Memo not found")
        return {"message": "Status updated"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("update_memo_status", e)


@router.delete("/{memo_id}", status_code=204)
async def delete_memo(
    memo_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM memos WHERE id = :id AND user_id = :uid").bindparams(id=memo_id, uid=user_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Memo not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_memo", e)


@router.get("/history/search")
async def search_completed_memos(
    q: str = Query(""),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Text search over completed memos; an empty query yields an empty list"""
    if not q:
        return []

    try:
        return await fetch_all(
            session,
            text("""
                SELECT * FROM memos
                WHERE user_id = :uid AND is_completed = TRUE AND task_name LIKE :pattern
                ORDER BY completed_at DESC
            """).bindparams(uid=user_id, pattern=like_pattern(q))
        )
    except Exception as e:
        return server_error("search_completed_memos", e)

"""
Daily check-in endpoints - custom items and their per-day log entries
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import DailyItemPayload, DailyLogPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import like_pattern, parse_date, require_fields, validate_choice

router = APIRouter(prefix="/api/daily-logs")

ITEM_TYPES = ("daily", "one-time")
SEARCH_LIMIT = 50


# --- Custom items ---

@router.get("/items")
async def list_items(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """All daily and one-time items, oldest first"""
    try:
        return await fetch_all(
            session,
            text("SELECT * FROM daily_items WHERE user_id = :uid ORDER BY created_at ASC").bindparams(uid=user_id)
        )
    except Exception as e:
        return server_error("list_items", e)


@router.post("/items", status_code=201)
async def create_item(
    body: DailyItemPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Item name and type are required", body.item_name, body.item_type)
    item_type = validate_choice(body.item_type, ITEM_TYPES, "item_type")
    item_name = body.item_name.strip()

    try:
        result = await session.execute(
            text("""
                INSERT INTO daily_items (user_id, item_name, item_type)
                VALUES (:uid, :item_name, :item_type)
            """).bindparams(uid=user_id, item_name=item_name, item_type=item_type)
        )
        await session.commit()
        return await fetch_one(
            session,
            text("SELECT * FROM daily_items WHERE id = :id").bindparams(id=result.lastrowid)
        )
    except Exception as e:
        return server_error("create_item", e)


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete an item together with every log entry recorded under its name"""
    try:
        async with session.begin():
            result = await session.execute(
                text("SELECT item_name FROM daily_items WHERE id = :id AND user_id = :uid").bindparams(
                    id=item_id, uid=user_id
                )
            )
            row = result.first()
            if row is None:
                raise HTTPException(status_code=404, detail="Item not found")

            await session.execute(
                text("DELETE FROM daily_logs WHERE user_id = :uid AND item_name = :item_name").bindparams(
                    uid=user_id, item_name=row[0]
                )
            )
            await session.execute(
                text("DELETE FROM daily_items WHERE id = :id AND user_id = :uid").bindparams(
                    id=item_id, uid=user_id
                )
            )
        return {"message": "Item deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_item", e)


@router.put("/items/{item_id}/complete")
async def complete_item(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Mark a one-time item as done; daily items cannot be completed"""
    try:
        result = await execute_with_retry(
            session,
            text("""
                UPDATE daily_items SET status = 'completed'
                WHERE id = :id AND user_id = :uid AND item_type = 'one-time'
            """).bindparams(id=item_id, uid=user_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="One-time item not found")
        return {"message": "Item completed"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("complete_item", e)


# --- Log entries ---

@router.get("/logs/{log_date}")
async def get_logs_for_date(
    log_date: str,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    day = parse_date(log_date, "date")
    try:
        return await fetch_all(
            session,
            text("SELECT * FROM daily_logs WHERE user_id = :uid AND log_date = :day").bindparams(
                uid=user_id, day=day
            )
        )
    except Exception as e:
        return server_error("get_logs_for_date", e)


@router.post("/logs", status_code=201)
async def save_log(
    body: DailyLogPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Insert or update the entry for (date, item)"""
    require_fields("Log date and item name are required", body.log_date, body.item_name)
    day = parse_date(body.log_date, "log_date")

    try:
        await execute_with_retry(
            session,
            text("""
                INSERT INTO daily_logs (user_id, log_date, item_name, status, notes)
                VALUES (:uid, :day, :item_name, :status, :notes)
                ON DUPLICATE KEY UPDATE status = VALUES(status), notes = VALUES(notes)
            """).bindparams(
                uid=user_id,
                day=day,
                item_name=body.item_name.strip(),
                status=body.status,
                notes=body.notes,
            )
        )
        await session.commit()
        return {"message": "Log saved"}
    except Exception as e:
        return server_error("save_log", e)


@router.get("/history/search")
async def search_history(
    q: str = Query(""),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    if not q.strip():
        raise HTTPException(status_code=400, detail="Search query must not be empty")

    pattern = like_pattern(q.strip())
    try:
        return await fetch_all(
            session,
            text(f"""
                SELECT * FROM daily_logs
                WHERE user_id = :uid AND (item_name LIKE :pattern OR notes LIKE :pattern)
                ORDER BY log_date DESC
                LIMIT {SEARCH_LIMIT}
            """).bindparams(uid=user_id, pattern=pattern)
        )
    except Exception as e:
        return server_error("search_history", e)

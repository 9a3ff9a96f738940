"""
Stool log endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import StoolPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import parse_date, require_fields

router = APIRouter(prefix="/api/stool")


@router.get("")
async def list_stool_logs(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """All logs, or only those in [startDate, endDate] when both are given"""
    sql = "SELECT * FROM stool_logs WHERE user_id = :uid"
    params = {"uid": user_id}

    if start_date and end_date:
        sql += " AND log_date BETWEEN :start AND :end"
        params["start"] = parse_date(start_date, "startDate")
        params["end"] = parse_date(end_date, "endDate")

    sql += " ORDER BY log_date DESC, id DESC"

    try:
        return await fetch_all(session, text(sql).bindparams(**params))
    except Exception as e:
        return server_error("list_stool_logs", e)


@router.get("/dates")
async def list_stool_dates(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        rows = await fetch_all(
            session,
            text("""
                SELECT DISTINCT DATE_FORMAT(log_date, '%Y-%m-%d') AS log_date
                FROM stool_logs
                WHERE user_id = :uid
            """).bindparams(uid=user_id)
        )
        return [row["log_date"] for row in rows]
    except Exception as e:
        return server_error("list_stool_dates", e)


@router.get("/summary")
async def stool_summary(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Number of logs per day in the range, as {"YYYY-MM-DD": count}"""
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="Start date and end date are required")
    start = parse_date(start_date, "startDate")
    end = parse_date(end_date, "endDate")

    try:
        rows = await fetch_all(
            session,
            text("""
                SELECT DATE_FORMAT(log_date, '%Y-%m-%d') AS day, COUNT(id) AS count
                FROM stool_logs
                WHERE user_id = :uid AND log_date BETWEEN :start AND :end
                GROUP BY log_date
                ORDER BY log_date ASC
            """).bindparams(uid=user_id, start=start, end=end)
        )
        return {row["day"]: int(row["count"]) for row in rows}
    except Exception as e:
        return server_error("stool_summary", e)


@router.post("", status_code=201)
async def create_stool_log(
    body: StoolPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Log date is required", body.log_date)
    day = parse_date(body.log_date, "log_date")

    try:
        result = await session.execute(
            text("""
                INSERT INTO stool_logs (user_id, log_date, stool_type, notes)
                VALUES (:uid, :day, :stool_type, :notes)
            """).bindparams(uid=user_id, day=day, stool_type=body.stool_type, notes=body.notes)
        )
        await session.commit()
        return await fetch_one(
            session,
            text("SELECT * FROM stool_logs WHERE id = :id").bindparams(id=result.lastrowid)
        )
    except Exception as e:
        return server_error("create_stool_log", e)


@router.put("/{log_id}")
async def update_stool_log(
    log_id: int,
    body: StoolPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Log date is required", body.log_date)
    day = parse_date(body.log_date, "log_date")

    try:
        result = await execute_with_retry(
            session,
            text("""
                UPDATE stool_logs SET log_date = :day, stool_type = :stool_type, notes = :notes
                WHERE id = :id AND user_id = :uid
            """).bindparams(
                day=day,
                stool_type=body.stool_type,
                notes=body.notes,
                id=log_id,
                uid=user_id,
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Stool record not found")

        return await fetch_one(
            session,
            text("SELECT * FROM stool_logs WHERE id = :id AND user_id = :uid").bindparams(id=log_id, uid=user_id)
        )
    except HTTPException:
        raise
    except Exception as e:
        return server_error("update_stool_log", e)


@router.delete("/{log_id}", status_code=204)
async def delete_stool_log(
    log_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM stool_logs WHERE id = :id AND user_id = :uid").bindparams(id=log_id, uid=user_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Stool record not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_stool_log", e)

"""
Exercise endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all
from healthlog.models.schemas import ExercisePayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import like_pattern, parse_date, require_fields, validate_year_month

router = APIRouter(prefix="/api/exercise")


@router.post("", status_code=201)
async def create_exercise(
    body: ExercisePayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Date and exercise name are required", body.log_date, body.exercise_name)
    day = parse_date(body.log_date, "log_date")

    try:
        result = await session.execute(
            text("""
                INSERT INTO exercise_logs (user_id, log_date, exercise_name, duration_minutes, sets, reps, notes)
                VALUES (:uid, :day, :exercise_name, :duration_minutes, :sets, :reps, :notes)
            """).bindparams(
                uid=user_id,
                day=day,
                exercise_name=body.exercise_name.strip(),
                duration_minutes=body.duration_minutes,
                sets=body.sets,
                reps=body.reps,
                notes=body.notes,
            )
        )
        await session.commit()
        return {"id": result.lastrowid, **body.model_dump(), "user_id": user_id}
    except Exception as e:
        return server_error("create_exercise", e)


@router.get("/search")
async def search_exercise(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    exercise_name: Optional[str] = Query(None, alias="exerciseName"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Records between two dates, both inclusive, optionally filtered by name"""
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="Start date and end date are required")
    start = parse_date(start_date, "startDate")
    end = parse_date(end_date, "endDate")

    # log_date is a DATE column, so an inclusive bound covers the whole end day
    sql = """
        SELECT log_date, duration_minutes, sets, reps, exercise_name
        FROM exercise_logs
        WHERE user_id = :uid AND log_date BETWEEN :start AND :end
    """
    params = {"uid": user_id, "start": start, "end": end}

    if exercise_name and exercise_name.strip():
        sql += " AND exercise_name LIKE :pattern"
        params["pattern"] = like_pattern(exercise_name.strip())

    sql += " ORDER BY log_date ASC"

    try:
        return await fetch_all(session, text(sql).bindparams(**params))
    except Exception as e:
        return server_error("search_exercise", e)


@router.get("/summary/{year}/{month}")
async def month_summary(
    year: int,
    month: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Dates in the month (1-12) that have at least one record, for calendar marks"""
    first_day, last_day = validate_year_month(year, month)
    try:
        rows = await fetch_all(
            session,
            text("""
                SELECT DISTINCT DATE_FORMAT(log_date, '%Y-%m-%d') AS log_date
                FROM exercise_logs
                WHERE user_id = :uid AND log_date BETWEEN :first_day AND :last_day
                ORDER BY log_date
            """).bindparams(uid=user_id, first_day=first_day, last_day=last_day)
        )
        return [row["log_date"] for row in rows]
    except Exception as e:
        return server_error("month_summary", e)


@router.get("/{log_date}")
async def get_exercise_for_date(
    log_date: str,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    day = parse_date(log_date, "date")
    try:
        return await fetch_all(
            session,
            text("""
                SELECT * FROM exercise_logs
                WHERE user_id = :uid AND log_date = :day
                ORDER BY created_at ASC
            """).bindparams(uid=user_id, day=day)
        )
    except Exception as e:
        return server_error("get_exercise_for_date", e)


@router.delete("/{exercise_id}")
async def delete_exercise(
    exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM exercise_logs WHERE id = :id AND user_id = :uid").bindparams(
                id=exercise_id, uid=user_id
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Exercise record not found")
        return {"message": "Exercise record deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_exercise", e)

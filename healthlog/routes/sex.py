"""
Sex log endpoints - at most one record per user per day
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all
from healthlog.models.schemas import SexLogPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import parse_date, require_fields

router = APIRouter(prefix="/api/sex")


@router.get("")
async def list_sex_logs(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await fetch_all(
            session,
            text("""
                SELECT id, DATE_FORMAT(log_date, '%Y-%m-%d') AS log_date, protection_method
                FROM sex_logs
                WHERE user_id = :uid
                ORDER BY log_date DESC
            """).bindparams(uid=user_id)
        )
    except Exception as e:
        return server_error("list_sex_logs", e)


@router.post("")
async def save_sex_log(
    body: SexLogPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create the record for the day (201) or overwrite the existing one (200)"""
    require_fields("Date is required", body.log_date)
    day = parse_date(body.log_date, "log_date")
    protection_method = body.protection_method or None

    try:
        async with session.begin():
            result = await session.execute(
                text("SELECT id FROM sex_logs WHERE user_id = :uid AND log_date = :day FOR UPDATE").bindparams(
                    uid=user_id, day=day
                )
            )
            existing = result.first()

            if existing is not None:
                await session.execute(
                    text("UPDATE sex_logs SET protection_method = :method WHERE id = :id").bindparams(
                        method=protection_method, id=existing[0]
                    )
                )
                return {"id": existing[0], "message": "Record updated"}

            result = await session.execute(
                text("""
                    INSERT INTO sex_logs (user_id, log_date, protection_method)
                    VALUES (:uid, :day, :method)
                """).bindparams(uid=user_id, day=day, method=protection_method)
            )
            new_id = result.lastrowid

        return JSONResponse(status_code=201, content={"id": new_id, "message": "Record saved"})
    except HTTPException:
        raise
    except Exception as e:
        return server_error("save_sex_log", e)


@router.delete("/{log_date}")
async def delete_sex_log(
    log_date: str,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    day = parse_date(log_date, "date")
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM sex_logs WHERE user_id = :uid AND log_date = :day").bindparams(uid=user_id, day=day)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Record not found")
        return {"message": "Record deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_sex_log", e)

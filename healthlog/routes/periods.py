"""
Menstrual cycle endpoints - records and the next-cycle prediction
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all
from healthlog.models.schemas import PeriodCreate, PeriodUpdate
from healthlog.services.auth import get_current_user_id
from healthlog.services.cycle_predictor import predict_cycle
from healthlog.utils.errors import server_error
from healthlog.utils.validators import parse_date, require_fields

router = APIRouter(prefix="/api/periods")

DEFAULT_PAIN_LEVEL = "none"
DEFAULT_FLOW_VOLUME = "normal"

# Columns a client may change through PUT, in SET order
UPDATABLE_COLUMNS = ("end_date", "pain_level", "flow_volume", "notes", "color", "state")
# Blank values for these are ignored rather than written
NON_NULLABLE_COLUMNS = ("pain_level", "flow_volume")


@router.get("/predict")
async def predict(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Predict next period, ovulation and fertile window from the history"""
    try:
        records = await fetch_all(
            session,
            text("""
                SELECT start_date, end_date FROM menstrual_records
                WHERE user_id = :uid
                ORDER BY start_date ASC
            """).bindparams(uid=user_id)
        )
        return predict_cycle(records)
    except Exception as e:
        return server_error("predict", e)


@router.post("", status_code=201)
async def create_period(
    body: PeriodCreate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Start a new period; end_date is filled in later through PUT"""
    require_fields("Start date is required", body.start_date)
    start_date = parse_date(body.start_date, "start_date")

    record = {
        "user_id": user_id,
        "start_date": start_date.isoformat(),
        "end_date": None,
        "pain_level": body.pain_level or DEFAULT_PAIN_LEVEL,
        "flow_volume": body.flow_volume or DEFAULT_FLOW_VOLUME,
        "notes": body.notes or None,
        "color": body.color or None,
        "state": body.state or None,
    }

    try:
        result = await session.execute(
            text("""
                INSERT INTO menstrual_records
                    (user_id, start_date, end_date, pain_level, flow_volume, notes, color, state)
                VALUES (:uid, :start_date, NULL, :pain_level, :flow_volume, :notes, :color, :state)
            """).bindparams(
                uid=user_id,
                start_date=start_date,
                pain_level=record["pain_level"],
                flow_volume=record["flow_volume"],
                notes=record["notes"],
                color=record["color"],
                state=record["state"],
            )
        )
        await session.commit()
        return {"id": result.lastrowid, **record}
    except Exception as e:
        return server_error("create_period", e)


@router.get("")
async def list_periods(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await fetch_all(
            session,
            text("SELECT * FROM menstrual_records WHERE user_id = :uid ORDER BY start_date DESC").bindparams(
                uid=user_id
            )
        )
    except Exception as e:
        return server_error("list_periods", e)


@router.put("/{record_id}")
async def update_period(
    record_id: int,
    body: PeriodUpdate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Partial update. Only fields sent in the body are written, so end_date can
    be explicitly cleared with null while omitted fields stay untouched.
    """
    sent = body.model_dump(exclude_unset=True)
    updates = {}
    for column in UPDATABLE_COLUMNS:
        if column not in sent:
            continue
        value = sent[column]
        if column in NON_NULLABLE_COLUMNS and not value:
            continue
        if column == "end_date" and value:
            value = parse_date(value, "end_date")
        updates[column] = value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    assignments = ", ".join(f"{column} = :{column}" for column in updates)

    try:
        result = await execute_with_retry(
            session,
            text(f"UPDATE menstrual_records SET {assignments} WHERE id = :id AND user_id = :uid").bindparams(
                id=record_id, uid=user_id, **updates
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Record not found")
        return {"message": "Record updated"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("update_period", e)


@router.delete("/{record_id}")
async def delete_period(
    record_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM menstrual_records WHERE id = :id AND user_id = :uid").bindparams(
                id=record_id, uid=user_id
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Record not found")
        return {"message": "Record deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_period", e)

"""
Medication endpoints - plans, stock, and intake history
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session, get_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import MedicationPayload, TakeMedicationPayload
from healthlog.services.auth import get_current_user_id
from healthlog.utils.errors import server_error
from healthlog.utils.validators import require_fields

router = APIRouter(prefix="/api/medications")

LOG_RETENTION_DAYS = 7


async def purge_old_medication_logs(user_id: int) -> None:
    """
    Delete intake history older than the retention window.
    Runs after the response is sent; failures are logged and dropped.
    """
    session_maker = get_session()
    if not session_maker:
        return

    try:
        async with session_maker() as session:
            result = await execute_with_retry(
                session,
                text(f"""
                    DELETE FROM medication_logs
                    WHERE user_id = :uid AND taken_at < NOW() - INTERVAL {LOG_RETENTION_DAYS} DAY
                """).bindparams(uid=user_id)
            )
            await session.commit()
            if result.rowcount:
                print(f"Purged {result.rowcount} old medication logs for user {user_id}")
    except Exception as e:
        print(f"Warning: auto-cleanup of old medication logs failed: {type(e).__name__}: {e}")


@router.get("")
async def list_medications(
    background_tasks: BackgroundTasks,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """List medication plans, newest first"""
    background_tasks.add_task(purge_old_medication_logs, user_id)
    try:
        return await fetch_all(
            session,
            text("SELECT * FROM medications WHERE user_id = :uid ORDER BY id DESC").bindparams(uid=user_id)
        )
    except Exception as e:
        return server_error("list_medications", e)


@router.post("", status_code=201)
async def create_medication(
    body: MedicationPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Medication name is required", body.name)

    try:
        result = await session.execute(
            text("""
                INSERT INTO medications (user_id, name, dosage, frequency, stock, medication_times)
                VALUES (:uid, :name, :dosage, :frequency, :stock, :medication_times)
            """).bindparams(
                uid=user_id,
                name=body.name.strip(),
                dosage=body.dosage,
                frequency=body.frequency,
                stock=body.stock,
                medication_times=body.medication_times,
            )
        )
        await session.commit()
        return await fetch_one(
            session,
            text("SELECT * FROM medications WHERE id = :id").bindparams(id=result.lastrowid)
        )
    except Exception as e:
        return server_error("create_medication", e)


@router.put("/{medication_id}")
async def update_medication(
    medication_id: int,
    body: MedicationPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Medication name is required", body.name)

    try:
        result = await execute_with_retry(
            session,
            text("""
                UPDATE medications
                SET name = :name, dosage = :dosage, frequency = :frequency,
                    stock = :stock, medication_times = :medication_times
                WHERE id = :id AND user_id = :uid
            """).bindparams(
                name=body.name.strip(),
                dosage=body.dosage,
                frequency=body.frequency,
                stock=body.stock,
                medication_times=body.medication_times,
                id=medication_id,
                uid=user_id,
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Medication not found")
        return {"message": "Medication updated"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("update_medication", e)


@router.delete("/logs/{log_id}", status_code=204)
async def delete_medication_log(
    log_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a single intake entry"""
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM medication_logs WHERE id = :id AND user_id = :uid").bindparams(
                id=log_id, uid=user_id
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Log not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_medication_log", e)


@router.delete("/{medication_id}")
async def delete_medication(
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM medications WHERE id = :id AND user_id = :uid").bindparams(
                id=medication_id, uid=user_id
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Medication not found")
        return {"message": "Medication deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_medication", e)


@router.post("/{medication_id}/take", status_code=201)
async def take_medication(
    medication_id: int,
    body: TakeMedicationPayload = TakeMedicationPayload(),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Record one intake: deduct stock and append to the history in one transaction.
    Stock is never allowed to go negative. A NULL stock is not tracked, so the
    intake is logged and the stock stays NULL.
    """
    try:
        async with session.begin():
            result = await session.execute(
                text("""
                    UPDATE medications SET stock = stock - :amount
                    WHERE id = :id AND user_id = :uid AND (stock IS NULL OR stock >= :amount)
                """).bindparams(amount=body.dosage_amount, id=medication_id, uid=user_id)
            )
            if result.rowcount == 0:
                exists = await session.execute(
                    text("SELECT id FROM medications WHERE id = :id AND user_id = :uid").bindparams(
                        id=medication_id, uid=user_id
                    )
                )
                if exists.first() is None:
                    raise HTTPException(status_code=404, detail="Medication not found")
                raise HTTPException(status_code=409, detail="Not enough stock left")

            await session.execute(
                text("INSERT INTO medication_logs (user_id, medication_id) VALUES (:uid, :id)").bindparams(
                    uid=user_id, id=medication_id
                )
            )
        return {"message": "Intake recorded"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("take_medication", e)


@router.get("/{medication_id}/logs")
async def list_medication_logs(
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await fetch_all(
            session,
            text("""
                SELECT * FROM medication_logs
                WHERE medication_id = :id AND user_id = :uid
                ORDER BY taken_at DESC
            """).bindparams(id=medication_id, uid=user_id)
        )
    except Exception as e:
        return server_error("list_medication_logs", e)

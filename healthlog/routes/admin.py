"""
Admin endpoints - site statistics and user management
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import AdminFlagPayload
from healthlog.services.auth import require_admin
from healthlog.services.user_service import PROVIDER_ID_COLUMNS, UserService
from healthlog.utils.errors import server_error

router = APIRouter(prefix="/api/admin")

# Log tables reported by /stats
COUNTED_TABLES = (
    "medications",
    "medication_logs",
    "stool_logs",
    "daily_logs",
    "exercise_logs",
    "transactions",
    "memos",
    "menstrual_records",
    "weight_logs",
)


@router.get("/stats")
async def get_stats(
    admin_id: int = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        users = await fetch_one(
            session,
            text("SELECT COUNT(*) AS total, COALESCE(SUM(is_admin), 0) AS admins FROM users")
        )
        records = {}
        for table in COUNTED_TABLES:
            row = await fetch_one(session, text(f"SELECT COUNT(*) AS count FROM {table}"))
            records[table] = int(row["count"]) if row else 0

        return {
            "users": int(users["total"]) if users else 0,
            "admins": int(users["admins"]) if users else 0,
            "records": records,
        }
    except Exception as e:
        return server_error("get_stats", e)


@router.get("/users")
async def list_users(
    admin_id: int = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Every account with the OAuth providers linked to it"""
    provider_columns = ", ".join(PROVIDER_ID_COLUMNS.values())
    try:
        rows = await fetch_all(
            session,
            text(f"""
                SELECT id, username, email, is_admin, created_at, last_login_at, {provider_columns}
                FROM users
                ORDER BY id ASC
            """)
        )
        users = []
        for row in rows:
            user = {
                "id": row["id"],
                "username": row["username"],
                "email": row["email"],
                "is_admin": bool(row["is_admin"]),
                "created_at": row["created_at"],
                "last_login_at": row["last_login_at"],
                "providers": [
                    provider for provider, column in PROVIDER_ID_COLUMNS.items() if row.get(column)
                ],
            }
            users.append(user)
        return users
    except Exception as e:
        return server_error("list_users", e)


@router.put("/users/{target_id}/admin")
async def set_admin_flag(
    target_id: int,
    body: AdminFlagPayload,
    admin_id: int = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    if target_id == admin_id and not body.is_admin:
        raise HTTPException(status_code=400, detail="You cannot revoke your own admin privileges")

    try:
        updated = await UserService.set_admin(session, target_id, body.is_admin)
        if not updated:
            raise HTTPException(status_code=404, detail="User not found")
        return {"id": target_id, "is_admin": body.is_admin}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("set_admin_flag", e)


@router.delete("/users/{target_id}")
async def delete_user(
    target_id: int,
    admin_id: int = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove an account; its records go with it through ON DELETE CASCADE"""
    if target_id == admin_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM users WHERE id = :id").bindparams(id=target_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found")
        print(f"Admin {admin_id} deleted user {target_id}")
        return {"message": "User deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_user", e)

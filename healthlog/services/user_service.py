"""
User service - account lookups and OAuth identity linking
"""
from typing import Optional, Dict, Any
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.queries import execute_with_retry, fetch_one

# users column holding each provider's external id
PROVIDER_ID_COLUMNS = {
    "linuxdo": "linuxdo_id",
    "google": "google_id",
    "github": "github_id",
}

PROFILE_COLUMNS = "id, username, email, password_hash, is_admin, show_womens_health"


def public_profile(row: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a users row for the client, never exposing the hash"""
    return {
        "id": row["id"],
        "username": row["username"],
        "email": row["email"],
        "has_password": bool(row.get("password_hash")),
        "is_admin": bool(row.get("is_admin")),
        "show_womens_health": bool(row.get("show_womens_health")),
    }


class UserService:
    """Service for user-related operations"""

    @staticmethod
    async def get_profile(session: AsyncSession, user_id: int) -> Optional[Dict[str, Any]]:
        """
        Get the profile row for a user

        Returns:
            Row dict or None if the user does not exist
        """
        return await fetch_one(
            session,
            text(f"SELECT {PROFILE_COLUMNS} FROM users WHERE id = :uid").bindparams(uid=user_id)
        )

    @staticmethod
    async def find_by_login(session: AsyncSession, login: str) -> Optional[Dict[str, Any]]:
        """Find a user by username or email"""
        return await fetch_one(
            session,
            text("SELECT id, password_hash FROM users WHERE username = :login OR email = :login").bindparams(
                login=login
            )
        )

    @staticmethod
    async def is_taken(
        session: AsyncSession,
        username: str,
        email: str,
        exclude_user_id: Optional[int] = None
    ) -> bool:
        """
        Check whether a username or email is already used by another account

        Args:
            exclude_user_id: Ignore this user (profile updates)
        """
        if exclude_user_id is None:
            query = text(
                "SELECT id FROM users WHERE username = :username OR email = :email LIMIT 1"
            ).bindparams(username=username, email=email)
        else:
            query = text(
                "SELECT id FROM users WHERE (username = :username OR email = :email) AND id != :uid LIMIT 1"
            ).bindparams(username=username, email=email, uid=exclude_user_id)
        return await fetch_one(session, query) is not None

    @staticmethod
    async def create_user(
        session: AsyncSession,
        username: str,
        email: Optional[str],
        password_hash: Optional[str] = None
    ) -> int:
        """
        Insert a local account

        Returns:
            New user id
        """
        result = await session.execute(
            text("""
                INSERT INTO users (username, email, password_hash)
                VALUES (:username, :email, :password_hash)
            """).bindparams(username=username, email=email, password_hash=password_hash)
        )
        return result.lastrowid

    @staticmethod
    async def touch_last_login(session: AsyncSession, user_id: int) -> None:
        await execute_with_retry(
            session,
            text("UPDATE users SET last_login_at = NOW() WHERE id = :uid").bindparams(uid=user_id)
        )

    @staticmethod
    async def find_or_create_oauth_user(
        session: AsyncSession,
        provider: str,
        provider_user_id: str,
        username: Optional[str],
        email: Optional[str]
    ) -> int:
        """
        Resolve a third-party identity to a local user id.

        Order of resolution:
            1. a user already linked to this provider id
            2. a user with the same email, which gets linked
            3. a brand-new user named after the provider profile

        Runs inside the caller's transaction.
        """
        column = PROVIDER_ID_COLUMNS[provider]

        result = await session.execute(
            text(f"SELECT id FROM users WHERE {column} = :pid").bindparams(pid=provider_user_id)
        )
        row = result.first()
        if row:
            return row[0]

        if email:
            result = await session.execute(
                text("SELECT id FROM users WHERE email = :email").bindparams(email=email)
            )
            row = result.first()
            if row:
                await session.execute(
                    text(f"UPDATE users SET {column} = :pid WHERE id = :uid").bindparams(
                        pid=provider_user_id, uid=row[0]
                    )
                )
                print(f"Linked {provider} identity {provider_user_id} to existing user {row[0]}")
                return row[0]

        fallback_name = f"{provider}_{provider_user_id}"
        if username:
            result = await session.execute(
                text("SELECT id FROM users WHERE username = :username").bindparams(username=username)
            )
            if result.first():
                username = fallback_name

        result = await session.execute(
            text(f"INSERT INTO users (username, email, {column}) VALUES (:username, :email, :pid)").bindparams(
                username=username or fallback_name,
                email=email,
                pid=provider_user_id,
            )
        )
        print(f"Created user {result.lastrowid} from {provider} identity {provider_user_id}")
        return result.lastrowid

    @staticmethod
    async def set_admin(session: AsyncSession, user_id: int, is_admin: bool) -> bool:
        """
        Set or clear the admin flag

        Returns:
            False if the user does not exist
        """
        result = await execute_with_retry(
            session,
            text("UPDATE users SET is_admin = :flag WHERE id = :uid").bindparams(flag=is_admin, uid=user_id)
        )
        await session.commit()
        return result.rowcount > 0

"""
Session tokens, password hashing and the request-level auth dependencies.

Tokens are HS256 JWTs signed with JWT_SECRET and carry the user id as
``userId``. They expire after JWT_EXPIRES_DAYS (7 by default).

Status codes follow the frontend contract:
    - 401 when no bearer token is sent at all
    - 403 when a token is sent but fails verification or has expired
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt  # PyJWT
from fastapi import Depends, Header, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.config import settings
from healthlog.database.connection import get_db_session
from healthlog.database.queries import fetch_one

JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not configured")
    return settings.JWT_SECRET


def create_access_token(user_id: int, now: Optional[datetime] = None) -> str:
    """Issue a signed session token for the user"""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Verify signature and expiry of a session token.

    Returns:
        Decoded claims, or None if the token is invalid or expired.
    """
    try:
        claims = jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        print(f"JWT verification error: {e}")
        return None

    if not isinstance(claims.get("userId"), int):
        print("JWT verification error: token carries no userId")
        return None
    return claims


def _password_bytes(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


async def get_current_user_id(authorization: Optional[str] = Header(None)) -> int:
    """Extract and verify the bearer token, return the user id it was issued for"""
    token = None
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1].strip()

    if not token:
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    claims = decode_access_token(token)
    if not claims:
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    return claims["userId"]


async def require_admin(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
) -> int:
    """Allow the request through only for users flagged is_admin"""
    row = await fetch_one(
        session,
        text("SELECT is_admin FROM users WHERE id = :uid").bindparams(uid=user_id)
    )
    if not row or not row["is_admin"]:
        raise HTTPException(status_code=403, detail="Access denied: admin privileges required")
    return user_id

"""
Account endpoints - local register/login, profile, and third-party OAuth login
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from healthlog.config import settings
from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry
from healthlog.models.schemas import (
    RegisterPayload,
    LoginPayload,
    ProfileUpdate,
    PasswordChange,
    SettingsUpdate,
)
from healthlog.services import oauth_providers
from healthlog.services.auth import (
    create_access_token,
    get_current_user_id,
    hash_password,
    verify_password,
)
from healthlog.services.user_service import UserService, public_profile
from healthlog.utils.errors import server_error
from healthlog.utils.validators import require_fields

router = APIRouter(prefix="/api/auth")

MIN_PASSWORD_LENGTH = 6


@router.post("/register", status_code=201)
async def register(body: RegisterPayload, session: AsyncSession = Depends(get_db_session)):
    """Create a local account and sign it in"""
    require_fields("Username, email and password are required", body.username, body.email, body.password)
    username = body.username.strip()
    email = body.email.strip()

    try:
        if await UserService.is_taken(session, username, email):
            raise HTTPException(status_code=409, detail="Username or email already exists")

        user_id = await UserService.create_user(session, username, email, hash_password(body.password))
        await session.commit()
        return {"token": create_access_token(user_id), "message": "Registration successful"}
    except HTTPException:
        raise
    except IntegrityError:
        # Lost a race against a concurrent registration
        await session.rollback()
        raise HTTPException(status_code=409, detail="Username or email already exists")
    except Exception as e:
        return server_error("register", e)


@router.post("/login")
async def login(body: LoginPayload, session: AsyncSession = Depends(get_db_session)):
    """Sign in with username (or email) and password"""
    require_fields("Username and password are required", body.username, body.password)

    try:
        user = await UserService.find_by_login(session, body.username.strip())
        if not user or not verify_password(body.password, user["password_hash"]):
            raise HTTPException(status_code=401, detail="Invalid username or password")

        await UserService.touch_last_login(session, user["id"])
        await session.commit()
        return {"token": create_access_token(user["id"]), "message": "Login successful"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("login", e)


@router.get("/me")
async def get_me(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        row = await UserService.get_profile(session, user_id)
        if not row:
            raise HTTPException(status_code=404, detail="User not found")
        return public_profile(row)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("get_me", e)


@router.put("/me")
async def update_me(
    body: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Change username and email"""
    require_fields("Username and email are required", body.username, body.email)
    username = body.username.strip()
    email = body.email.strip()

    try:
        if await UserService.is_taken(session, username, email, exclude_user_id=user_id):
            raise HTTPException(status_code=409, detail="Username or email is already used by another account")

        await execute_with_retry(
            session,
            text("UPDATE users SET username = :username, email = :email WHERE id = :uid").bindparams(
                username=username, email=email, uid=user_id
            )
        )
        await session.commit()

        row = await UserService.get_profile(session, user_id)
        if not row:
            raise HTTPException(status_code=404, detail="User not found")
        return public_profile(row)
    except HTTPException:
        raise
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Username or email is already used by another account")
    except Exception as e:
        return server_error("update_me", e)


@router.put("/me/password")
async def change_password(
    body: PasswordChange,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Set or change the password.
    OAuth-only accounts have no password yet and may set one without oldPassword.
    """
    if not body.new_password or len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    try:
        row = await UserService.get_profile(session, user_id)
        if not row:
            raise HTTPException(status_code=404, detail="User not found")

        if row["password_hash"]:
            if not body.old_password:
                raise HTTPException(status_code=400, detail="Old password is required")
            if not verify_password(body.old_password, row["password_hash"]):
                raise HTTPException(status_code=401, detail="Old password is incorrect")

        await execute_with_retry(
            session,
            text("UPDATE users SET password_hash = :hash WHERE id = :uid").bindparams(
                hash=hash_password(body.new_password), uid=user_id
            )
        )
        await session.commit()
        return {"message": "Password updated"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("change_password", e)


@router.put("/me/settings")
async def update_settings(
    body: SettingsUpdate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    if not isinstance(body.show_womens_health, bool):
        raise HTTPException(status_code=400, detail="Invalid settings value")

    try:
        await execute_with_retry(
            session,
            text("UPDATE users SET show_womens_health = :flag WHERE id = :uid").bindparams(
                flag=body.show_womens_health, uid=user_id
            )
        )
        await session.commit()
        return {"message": "Settings updated"}
    except Exception as e:
        return server_error("update_settings", e)


# --- Third-party OAuth ---

def _frontend_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=f"{settings.FRONTEND_URL}{path}", status_code=302)


@router.get("/{provider}")
async def oauth_start(provider: str):
    """Send the browser to the provider's consent page"""
    config = oauth_providers.get_provider(provider)
    if config is None:
        raise HTTPException(status_code=404, detail="Unknown login provider")

    try:
        return RedirectResponse(url=oauth_providers.build_authorize_url(config), status_code=302)
    except oauth_providers.OAuthError as e:
        print(f"OAuth start failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """Finish the authorization-code flow and hand a session token to the frontend"""
    config = oauth_providers.get_provider(provider)
    if config is None:
        raise HTTPException(status_code=404, detail="Unknown login provider")

    if not code:
        return _frontend_redirect("/#/login?error=no_code")

    try:
        profile = await oauth_providers.authenticate(config, code)
        async with session.begin():
            user_id = await UserService.find_or_create_oauth_user(
                session,
                provider,
                profile.provider_user_id,
                profile.username,
                profile.email,
            )
            await session.execute(
                text("UPDATE users SET last_login_at = NOW() WHERE id = :uid").bindparams(uid=user_id)
            )
        token = create_access_token(user_id)
        return _frontend_redirect(f"/callback.html?token={token}")
    except Exception as e:
        import traceback
        print(f"{provider} OAuth error: {type(e).__name__}: {e}")
        traceback.print_exc()
        return _frontend_redirect("/#/login?error=auth_failed")

"""
Application configuration
"""
import os
from typing import Optional


class Settings:
    """Application settings"""

    # Either a full DATABASE_URL or the individual DB_* parts
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL", "")
    DB_HOST: Optional[str] = os.getenv("DB_HOST")
    DB_PORT: Optional[str] = os.getenv("DB_PORT", "3306")
    DB_USER: Optional[str] = os.getenv("DB_USER")
    DB_PASSWORD: Optional[str] = os.getenv("DB_PASSWORD")
    DB_DATABASE: Optional[str] = os.getenv("DB_DATABASE")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))

    # Session tokens
    JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET")
    JWT_EXPIRES_DAYS: int = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "")

    # Linux.do OAuth
    LINUX_DO_CLIENT_ID: Optional[str] = os.getenv("LINUX_DO_CLIENT_ID")
    LINUX_DO_CLIENT_SECRET: Optional[str] = os.getenv("LINUX_DO_CLIENT_SECRET")
    LINUX_DO_REDIRECT_URI: Optional[str] = os.getenv("LINUX_DO_REDIRECT_URI")
    LINUX_DO_AUTHORIZE_URL: str = os.getenv("LINUX_DO_AUTHORIZE_URL", "https://connect.linux.do/oauth2/authorize")
    LINUX_DO_TOKEN_URL: str = os.getenv("LINUX_DO_TOKEN_URL", "https://connect.linux.do/oauth2/token")
    LINUX_DO_USER_INFO_URL: str = os.getenv("LINUX_DO_USER_INFO_URL", "https://connect.linux.do/api/user")

    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_REDIRECT_URI: Optional[str] = os.getenv("GOOGLE_REDIRECT_URI")

    # GitHub OAuth
    GITHUB_CLIENT_ID: Optional[str] = os.getenv("GITHUB_CLIENT_ID")
    GITHUB_CLIENT_SECRET: Optional[str] = os.getenv("GITHUB_CLIENT_SECRET")
    GITHUB_REDIRECT_URI: Optional[str] = os.getenv("GITHUB_REDIRECT_URI")

    # ShowAPI (drug and health knowledge lookups)
    SHOWAPI_APPID: Optional[str] = os.getenv("SHOWAPI_APPID")
    SHOWAPI_APPKEY: Optional[str] = os.getenv("SHOWAPI_APPKEY")

    # CORS settings
    CORS_ORIGINS: list = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]


settings = Settings()

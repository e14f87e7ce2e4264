from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(7, alias="REFRESH_TOKEN_EXPIRE_DAYS")
    magic_link_expire_minutes: int = Field(30, alias="MAGIC_LINK_EXPIRE_MINUTES")

    # Public base URL of the web client; used to build invite claim and login links
    site_url: str = Field("http://localhost:3000", alias="SITE_URL")
    # Base URL of the public object storage (avatar paths are resolved against it)
    storage_public_url: Optional[str] = Field(None, alias="STORAGE_PUBLIC_URL")
    avatar_bucket: str = Field("avatars", alias="AVATAR_BUCKET")

    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    admin_email: Optional[str] = Field(None, alias="ADMIN_EMAIL")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

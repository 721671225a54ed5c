"""
Configuration management for the BongoExpress API
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "BongoExpress Logistics API"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_workers: int = 4
    cors_origins: str = "*"  # Comma-separated list

    # Database
    database_url: str = "sqlite:///./bongo_express.db"

    # Tokens
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 90  # 90 days

    # Outbound mail (message replies)
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_from: str = "BongoExpress <info@bongoexpress.com>"
    mail_timeout_seconds: int = 30

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 1_000_000  # 1MB
    allowed_image_extensions: str = ".jpeg,.jpg,.png,.gif"
    allowed_image_mime_types: str = "image/jpeg,image/jpg,image/png,image/gif"

    # Accounts
    initial_admin_email: str = ""
    initial_admin_password: str = ""
    initial_admin_name: str = "Admin"
    agent_default_password: str = "password123"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def image_extensions(self) -> set[str]:
        return {e.strip().lower() for e in self.allowed_image_extensions.split(",") if e.strip()}

    @property
    def image_mime_types(self) -> set[str]:
        return {m.strip().lower() for m in self.allowed_image_mime_types.split(",") if m.strip()}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

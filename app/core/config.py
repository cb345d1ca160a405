"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Sanitation Checklists"
    debug: bool = False
    secret_key: str = "change-me-in-production"

    # Session tokens
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all
    base_url: str = "http://localhost:3000"  # Used to build supervisor links

    # Database
    database_url: str = "sqlite:///./sanitation.db"

    # Storage
    data_dir: str = "./data"  # Submission JSON files
    checklists_dir: str = "./checklists"  # Checklist HTML templates for seeding

    # Outbound mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = ""
    mail_suppress_send: bool = False

    # Password reset
    reset_token_ttl_minutes: int = 15
    reset_token_purge_interval_minutes: int = 30
    reset_max_attempts: int = 5
    reset_lockout_minutes: int = 15

    # Seeding
    initial_admin_username: str = "admin"
    initial_admin_password: str = "password123"


settings = Settings()

"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "InternHub"
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "internhub"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 30

    # File storage: "local" writes under storage_root and serves it at storage_url_prefix
    storage_backend: str = "local"
    storage_root: str = "storage"
    storage_url_prefix: str = "/storage"

    # AWS S3 (storage_backend = "s3")
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "eu-west-1"
    s3_bucket: str = "internhub-files"

    # Firebase (FCM)
    firebase_credentials_path: str = ""

    # SMTP (credential emails)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from_name: str = "InternHub"

    # Weekly logbook sheet header
    company_name: str = ""
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_division: str = ""

    # Interns
    matric_prefix: str = "TT"
    attachment_max_bytes: int = 4 * 1024 * 1024

    # Default admin account created on startup
    admin_email: str = "admin@internhub.io"
    admin_password: str = "ChangeMe123!"
    admin_full_name: str = "InternHub Admin"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
        if self.storage_backend not in ("local", "s3"):
            raise ValueError("STORAGE_BACKEND must be 'local' or 's3'")
        return self


settings = Settings()

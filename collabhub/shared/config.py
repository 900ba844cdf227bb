# collabhub/shared/config.py
from pydantic import BaseModel
import os

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    APP_URL: str = os.getenv("APP_URL", "http://localhost:3000")

    # empty -> sqlite file under ./storage
    DB_URL: str = os.getenv("DB_URL", "")

    # owner_only | owner_or_recipient (applies to delete + share)
    ACCESS_POLICY: str = os.getenv("ACCESS_POLICY", "owner_only")

    # demo auth controls
    AUTH_DEMO: bool = os.getenv("AUTH_DEMO", "true").lower() == "true"
    DEMO_TOKEN: str = os.getenv("DEMO_TOKEN", "demo")
    DEMO_EMAIL: str = os.getenv("DEMO_EMAIL", "demo@collabhub.dev")

    # JWT settings (for real mode)
    JWT_KEY: str = os.getenv("JWT_KEY", "dev-secret")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    JWT_ISS: str | None = os.getenv("JWT_ISS")
    JWT_AUD: str | None = os.getenv("JWT_AUD")
    JWT_EXPIRE_MIN: int = int(os.getenv("JWT_EXPIRE_MIN", "60"))

    # object storage
    S3_BUCKET: str = os.getenv("S3_BUCKET", "collabhub-files")
    S3_REGION: str = os.getenv("S3_REGION", "us-east-1")
    S3_ENDPOINT_URL: str | None = os.getenv("S3_ENDPOINT_URL")
    S3_ACCESS_KEY_ID: str | None = os.getenv("S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY: str | None = os.getenv("S3_SECRET_ACCESS_KEY")
    S3_URL_EXPIRES: int = int(os.getenv("S3_URL_EXPIRES", "3600"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(500 * 1024 * 1024)))

    # mail: dry-run writes drafts to storage/artifacts, smtp actually sends
    MAIL_MODE: str = os.getenv("MAIL_MODE", "dry-run")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "no-reply@collabhub.dev")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

settings = Settings()

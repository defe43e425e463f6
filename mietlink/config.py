from typing import List

from pydantic_settings import BaseSettings
from pydantic import field_validator
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/mietlink"
    DATABASE_SSL: bool = False
    REDIS_URL: str = ""
    USER_MANAGEMENT_URL: str = "http://user-management:8000"
    GEMINI_API_KEY: str = "your_gemini_key"
    GEMINI_MODEL: str = "gemini-2.0-flash"
    EXTERNAL_TIMEOUT_SECONDS: float = 20.0
    EXTERNAL_RETRIES: int = 3
    # "open" records a failed classification as an invalid document, "closed" rejects the upload
    VALIDATION_FAILURE_MODE: str = "open"
    STORAGE_BASE_URL: str = "https://storage.mietlink.ch"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Scoring policy
    REQUIRED_DOCUMENT_TYPES: str = "id,debt_extract,income"
    SCORE_GREEN_THRESHOLD: int = 80
    SCORE_YELLOW_THRESHOLD: int = 60
    SCORE_COMPLETE: int = 85
    SCORE_PARTIAL: int = 60
    SCORE_INCOMPLETE: int = 25
    SCORE_NO_REQUIREMENTS: int = 100

    @field_validator("DATABASE_URL")
    def normalize_database_url(cls, v):
        """
        Plain postgres URLs (as handed out by most hosting providers) are
        rewritten to use the asyncpg driver. Other drivers are left alone.
        """
        if not v:
            return v
        url = make_url(v)
        if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
            url = url.set(drivername="postgresql+asyncpg")
        return url.render_as_string(hide_password=False)

    @field_validator("VALIDATION_FAILURE_MODE")
    def check_failure_mode(cls, v):
        mode = (v or "").strip().lower()
        if mode not in ("open", "closed"):
            raise ValueError("VALIDATION_FAILURE_MODE must be 'open' or 'closed'")
        return mode

    @property
    def required_document_types(self) -> List[str]:
        return [t.strip() for t in self.REQUIRED_DOCUMENT_TYPES.split(",") if t.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

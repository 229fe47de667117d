from pydantic import Field
from pydantic_settings import BaseSettings

from school_admin.core.enums import ResubmissionPolicy


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./school_admin.db", alias="DATABASE_URL")

    jwt_secret_key: str = Field("change-me-in-production", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Wall-clock zone for "now", "today" and the period windows.
    school_timezone: str = Field("UTC", alias="SCHOOL_TIMEZONE")
    # Month (1-12) in which a new academic year starts.
    academic_year_start_month: int = Field(8, ge=1, le=12, alias="ACADEMIC_YEAR_START_MONTH")
    attendance_resubmission_policy: ResubmissionPolicy = Field(
        ResubmissionPolicy.APPEND, alias="ATTENDANCE_RESUBMISSION_POLICY"
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Configuration
    DEBUG: bool = False
    PROJECT_NAME: str = "QCM Question Bank"

    # Security
    ADMIN_PASSWORD: str = ""

    # CORS and Security
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "testserver", "*"]

    # File Upload
    MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20MB
    ALLOWED_EXTENSIONS: List[str] = [".xlsx", ".csv"]

    # Table reading (first sheet only)
    CSV_ENCODING: str = "utf-8"

    # Reporting
    REPORT_SAMPLE_SIZE: int = 10  # Duplicate groups / warnings listed per report

    # Datastore export
    EXAM_TYPE: str = "titre_sejour"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "QCM_BANK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Initialize settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def validate_settings():
    """
    Validate critical settings are properly configured.
    Called during application startup.
    """
    errors = []

    if not settings.ADMIN_PASSWORD or settings.ADMIN_PASSWORD == "your-admin-password":
        errors.append("ADMIN_PASSWORD is not configured")

    if settings.REPORT_SAMPLE_SIZE < 0:
        errors.append("REPORT_SAMPLE_SIZE must be non-negative")

    if errors:
        error_msg = "\n".join([f"  - {error}" for error in errors])
        raise ValueError(f"Configuration errors:\n{error_msg}")

    return True

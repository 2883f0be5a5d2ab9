from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List

from gradebook.engine.grade_scale import GradeBand, GradeScale, DEFAULT_GRADE_BANDS

class Settings(BaseSettings):
    PROJECT_NAME: str = "Gradebook"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./gradebook.db"
    TEST_DATABASE_URL: Optional[str] = None

    # Grading policy
    DEFAULT_PASSING_SCORE: int = 60
    ALLOW_RESUBMISSION_DEFAULT: bool = False
    GRADE_BANDS: List[GradeBand] = DEFAULT_GRADE_BANDS

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    @field_validator("GRADE_BANDS")
    @classmethod
    def validate_grade_bands(cls, v):
        # Fails at startup rather than on the first submission.
        GradeScale(bands=v)
        return v

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()

from datetime import timezone, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_path: str = "./data/quiz.db"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    # Calendar days for the once-per-day rule are counted in this zone
    quiz_timezone: str = "UTC"
    question_bank_path: Optional[str] = None

    # Remote auth service; the local token table is used when unset
    identity_url: Optional[str] = None
    identity_api_key: str = ""
    identity_timeout: float = 10.0

    avatar_base_url: str = "https://api.dicebear.com/7.x/avataaars/svg"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def quiz_tz(self) -> tzinfo:
        if self.quiz_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.quiz_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()

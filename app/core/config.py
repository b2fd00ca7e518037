import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self) -> None:
        self.APP_NAME: str = os.getenv("APP_NAME", "Agenda Shows API")
        self.ENV: str = os.getenv("ENV", "development")
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "app_session_id")
        self.SESSION_EXPIRE_DAYS: int = int(os.getenv("SESSION_EXPIRE_DAYS", "365"))
        self.OWNER_OPEN_ID: str = os.getenv("OWNER_OPEN_ID", "")

        self.LOCAL_STORE: bool = os.getenv("LOCAL_STORE", "0") == "1"
        self.SEARCH_SCAN_LIMIT: int = int(os.getenv("SEARCH_SCAN_LIMIT", "1000"))
        self.NOTIFICATIONS_LIMIT: int = int(os.getenv("NOTIFICATIONS_LIMIT", "50"))
        self.STORE_BATCH_LIMIT: int = int(os.getenv("STORE_BATCH_LIMIT", "500"))
        self.ATTACHMENT_MAX_MB: int = int(os.getenv("ATTACHMENT_MAX_MB", "25"))

        default_cors = [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
        cors_origins = os.getenv("BACKEND_CORS_ORIGINS")
        self.BACKEND_CORS_ORIGINS: List[str] = (
            [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
            if cors_origins
            else default_cors
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

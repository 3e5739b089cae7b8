from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "URL Shortener"

    # Public prefix for short links, e.g. https://sho.rt/ABC123XYZ0
    BASE_URL: str = "https://example.com/"
    # Shared secret checked by the request layer before create/admin calls
    AUTH_TOKEN: Optional[str] = None
    HOME_REDIRECT_URL: Optional[str] = None

    # Storage
    STORAGE_BACKEND: Literal["file", "database"] = "file"
    STORAGE_PATH: str = "urls.json"
    DATABASE_URL: str = "sqlite:///./urls.db"

    # Code generation
    SHORT_CODE_LENGTH: int = 10
    MAX_GENERATION_ATTEMPTS: int = 100

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""
Viewer settings loaded from the environment (and a .env file when present)
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from logpager.log_viewer.keyword_fetcher import DEFAULT_MAX_PAGES
from logpager.log_viewer.log_reader import DEFAULT_BUFFER_SIZE
from logpager.log_viewer.paginator import DEFAULT_LINE_COUNT

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ViewerSettings(BaseModel):
    buffer_size: int = DEFAULT_BUFFER_SIZE
    line_count: int = DEFAULT_LINE_COUNT
    max_pages: int = DEFAULT_MAX_PAGES
    root_path: Optional[str] = None
    log_level: str = "WARNING"

    @field_validator("buffer_size", "line_count", "max_pages")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value


def load_settings() -> ViewerSettings:
    """Build settings from LOGPAGER_* environment variables"""
    load_dotenv()

    values = {
        "buffer_size": os.getenv("LOGPAGER_BUFFER_SIZE"),
        "line_count": os.getenv("LOGPAGER_PAGE_SIZE"),
        "max_pages": os.getenv("LOGPAGER_MAX_PAGES"),
        "root_path": os.getenv("LOGPAGER_ROOT_PATH"),
        "log_level": os.getenv("LOGPAGER_LOG_LEVEL"),
    }
    # Unset variables fall back to the model defaults
    return ViewerSettings(**{key: value for key, value in values.items() if value})

# File: /datatable/core/config.py | Version: 1.0 | Title: Central Engine Settings (Pydantic v2)
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Database (SQL saved-view adapter) ---
    DATABASE_URL: str = "sqlite:///./datatable.db"

    # --- Saved views ---
    SAVED_VIEWS_STORAGE_KEY: str = "data-table-views"

    # --- Views ---
    DEFAULT_VIEW: str = "table"
    ENABLED_VIEWS: List[str] = ["table", "board", "gallery", "list", "feed"]

    # --- Query engine ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_FILTER_DEPTH: int = 3
    UNCATEGORIZED_LABEL: str = "Uncategorized"

    # --- API behavior toggles ---
    ENABLE_STD_ERRORS: bool = (
        False  # set True in .env to enable standardized error responses
    )

    # v2-style config
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()

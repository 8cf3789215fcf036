from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_MENU_SEED = Path(__file__).resolve().parent.parent / "data" / "menu.yaml"

class Settings(BaseSettings):
    PROJECT_NAME: str = "Cloud_Kitchen"

    # --- Remote backends (unset = disabled, file store only) ---
    DATABASE_URL: str | None = None
    REDIS_URL: str | None = None

    # --- Fallback store ---
    DATA_DIR: str = "data"
    MENU_SEED_PATH: str = str(BUNDLED_MENU_SEED)

    # --- Kitchen ---
    KITCHEN_TIMEZONE: str = "UTC"
    DEFAULT_KITCHEN_MESSAGE: str = "We will be back shortly."

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # .env is shared with the deployment scripts
    )

@lru_cache
def get_settings() -> Settings:
    return Settings()

"""Runtime settings for envlab.

Environment selection follows the build-time convention: a custom
``APP_ENV`` wins, otherwise ``MODE`` decides between production and
development.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SERVICE_NAME: str = "envlab"

    # Environment selection (APP_ENV takes precedence over MODE)
    APP_ENV: Optional[str] = None
    MODE: str = "development"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Experiment simulation driver
    SIMULATION_TICK_MS: int = Field(default=100, gt=0)
    SIMULATION_BATCH_SIZE: int = Field(default=5, ge=1)
    # Seed for the default random source; unset means OS entropy
    RANDOM_SEED: Optional[int] = None

    LOG_STREAM_CAPACITY: int = Field(default=50, ge=1)

    model_config = {
        "env_file": ".env.dev",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings_cache() -> None:
    global _settings_cache
    _settings_cache = None

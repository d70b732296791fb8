from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    # Defaults for every run, overridable by SHOT_GRABBER_* env vars or .env
    report_root: Path = Field(Path("screenshots"))
    urls_file: Path = Field(Path("urls.txt"))
    max_tabs: int = Field(5, ge=1)
    max_browsers: int = Field(4, ge=1)
    headless: bool = True
    settle_delay: float = Field(5.0, ge=0)
    navigation_timeout: int = Field(30000, ge=0)

    class Config:
        env_prefix = "SHOT_GRABBER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_config() -> Config:
    """Get cached config instance."""

    return Config()

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    brand_dir: Path = Path(".")
    file_name: str = "appearance.json"
    log_level: str = "INFO"
    write_log_file: bool = False
    font_dirs: list[Path] = Field(default_factory=list)  # empty: scan the standard system font folders

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BRANDKIT_",
        env_file_encoding="utf-8",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("file_name")
    @classmethod
    def file_name_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("file_name must not be empty")
        return v

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @property
    def document_path(self) -> Path:
        return self.brand_dir / self.file_name

    @property
    def log_path(self) -> Path:
        return self.brand_dir / "appearance.log"

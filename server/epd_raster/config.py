from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    font_dir: Path = Field(Path("./fonts"), alias="FONT_DIR")
    default_font: Optional[str] = Field(None, alias="DEFAULT_FONT")
    max_image_bytes: int = Field(16 * 1024 * 1024, alias="MAX_IMAGE_BYTES")
    max_image_pixels: int = Field(40_000_000, alias="MAX_IMAGE_PIXELS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")


settings = Settings()

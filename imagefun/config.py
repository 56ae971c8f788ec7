"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Display bounds used to choose the decode sample factor
    DISPLAY_WIDTH: int = 1080
    DISPLAY_HEIGHT: int = 1920

    # Output
    PICTURES_DIR: Path = Path.home() / "Pictures"
    FILENAME_PREFIX: str = "ImageFun_"

    # Watermark font (Pillow's bundled font if unset)
    FONT_PATH: Path | None = None

    # Keep the current image if opening another one fails
    KEEP_IMAGE_ON_FAILED_LOAD: bool = True

    URL_TIMEOUT: float = 30.0  # Seconds
    LOG_LEVEL: str = "INFO"

    model_config = {"env_prefix": "IMAGEFUN_"}


settings = Settings()

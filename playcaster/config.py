"""Configuration management for Playcaster."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from playcaster import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PLAYCASTER_", extra="ignore"
    )

    # Downloader
    downloader_path: str = "yt-dlp"
    downloader_format: str = (
        "bestvideo[ext=mp4][vcodec^=avc1]+bestaudio[ext=m4a]"
        "/best[ext=mp4][vcodec^=avc1]/best[ext=mp4]/best"
    )
    downloader_timeout_seconds: float | None = Field(default=None, gt=0)

    # Media files
    media_extension: str = "mp4"
    media_mime_type: str = "video/mp4"

    # Feed settings
    default_limit: int = Field(default=30, gt=0)
    generator_name: str = "Playcaster"
    generator_url: str = "https://github.com/ticky/playcaster"

    # Logging
    log_level: str = "INFO"

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")

    @property
    def generator(self) -> str:
        """Generator string written to every feed this tool touches."""
        return f"{self.generator_name} v{__version__} ({self.generator_url})"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings read once from the environment and shared by every component."""
    return Settings()

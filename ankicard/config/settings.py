"""
Application settings, loaded from ``ANKICARD_*`` environment variables.

Settings only provide defaults; command line flags override them.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RESOURCES_DIR = Path(__file__).parent.parent / "resources"


class Settings(BaseSettings):
    """anki-card settings."""

    model_config = SettingsConfigDict(
        env_prefix="ANKICARD_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="WARNING", description="Log level for stderr output")

    # Browser
    chrome_path: str | None = Field(
        default=None,
        description="Chromium or Google Chrome executable; None uses Playwright's bundled Chromium",
    )
    chrome_args: list[str] = Field(default_factory=list, description="Extra browser arguments")
    timeout_ms: int = Field(default=60000, ge=0, description="Launch/navigation/export timeout")

    # Template
    template_path: Path = Field(
        default=RESOURCES_DIR / "index.html",
        description="Flashcard page used when --url is not given",
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install explicit settings (useful for testing)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next call reloads them."""
    global _settings
    _settings = None

"""
Settings for the wahook notification service.

Simple, reliable environment variable configuration focused on webhook delivery.
"""

import os
import tomllib
from pathlib import Path

from dotenv import load_dotenv

# Load .env file for local development - look in current working directory
load_dotenv(".env")

# Call-ended notifications are suppressed for this long after the first one
CALL_DEDUP_TTL_SECONDS = 5 * 60


def _get_version_from_pyproject() -> str:
    """
    Read version from pyproject.toml file.

    Returns:
        Version string from pyproject.toml, or fallback version
    """
    current_path = Path(__file__)
    for parent in [current_path.parent, *current_path.parents]:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.exists():
            try:
                with open(pyproject_path, "rb") as f:
                    pyproject_data = tomllib.load(f)
                    version = pyproject_data.get("project", {}).get("version")
                    if version:
                        return version
            except (OSError, tomllib.TOMLDecodeError):
                continue

    return "0.1.0"


def _split_urls(raw: str | None) -> list[str]:
    """Split a comma separated URL list, dropping blanks."""
    if not raw:
        return []
    return [url.strip() for url in raw.split(",") if url.strip()]


class Settings:
    """Application settings with environment-based configuration."""

    def __init__(self):
        # ================================================================
        # Version & General Configuration
        # ================================================================
        self.version: str = _get_version_from_pyproject()
        self.port: str = os.getenv("PORT", "3000")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: str = os.getenv("LOG_DIR", "./logs")
        self.environment: str = os.getenv("ENVIRONMENT", "DEV")

        # ================================================================
        # Webhook Configuration
        # ================================================================
        self.webhook_urls: list[str] = _split_urls(os.getenv("WHATSAPP_WEBHOOK"))
        self.webhook_secret: str = os.getenv("WHATSAPP_WEBHOOK_SECRET", "secret")
        self.webhook_timeout_seconds: float = float(
            os.getenv("WHATSAPP_WEBHOOK_TIMEOUT", "10")
        )
        self.webhook_max_attempts: int = int(
            os.getenv("WHATSAPP_WEBHOOK_MAX_ATTEMPTS", "5")
        )

        # ================================================================
        # Media Configuration
        # ================================================================
        self.path_media: str = os.getenv("PATH_MEDIA", "statics/media")
        self.max_file_size: int = int(
            os.getenv("WHATSAPP_SETTING_MAX_FILE_SIZE", str(50 * 1024 * 1024))
        )
        self.max_video_size: int = int(
            os.getenv("WHATSAPP_SETTING_MAX_VIDEO_SIZE", str(100 * 1024 * 1024))
        )

        self.call_dedup_ttl_seconds: int = CALL_DEDUP_TTL_SECONDS

        self._validate_settings()

    def _validate_settings(self):
        """Validate settings values."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        self.log_level = self.log_level.upper()

        valid_environments = ["DEV", "PROD"]
        if self.environment.upper() not in valid_environments:
            self.environment = "DEV"  # Default fallback
        self.environment = self.environment.upper()

        if not self.port.isdigit():
            raise ValueError(f"PORT must be numeric, got '{self.port}'")

        if self.webhook_max_attempts < 1:
            raise ValueError("WHATSAPP_WEBHOOK_MAX_ATTEMPTS must be at least 1")

        for url in self.webhook_urls:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"WHATSAPP_WEBHOOK entry is not an HTTP URL: {url}")

    @property
    def has_webhooks(self) -> bool:
        """Check if at least one subscriber URL is configured."""
        return bool(self.webhook_urls)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "DEV"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "PROD"


# Global settings instance
settings = Settings()

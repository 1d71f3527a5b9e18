"""
Configuration

Settings are read once from the environment (and a .env file) at process
start and passed explicitly to the clients that need them.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_VARS = {
    'luis_app_id': 'LUIS_APP_ID',
    'luis_subscription_key': 'LUIS_SUBSCRIPTION_KEY',
    'luis_region': 'LUIS_REGION',
    'anthropic_api_key': 'ANTHROPIC_API_KEY',
    'anthropic_model': 'ANTHROPIC_MODEL',
    'weather_api_key': 'WEATHER_API_KEY',
    'weather_api_url': 'WEATHER_API_URL',
    'turn_timeout': 'TURN_TIMEOUT',
}


class Settings(BaseModel):
    """Runtime configuration for the bot."""
    luis_app_id: Optional[str] = None
    luis_subscription_key: Optional[str] = None
    luis_region: str = "westus"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    weather_api_key: Optional[str] = None
    weather_api_url: str = "https://api.weatherapi.com/v1"
    turn_timeout: Optional[float] = Field(None, description="Seconds allowed per turn stage")

    @property
    def luis_enabled(self) -> bool:
        return bool(self.luis_app_id and self.luis_subscription_key)

    @property
    def claude_enabled(self) -> bool:
        return bool(self.anthropic_api_key)

    def require(self, *fields: str) -> None:
        """
        Ensure the given settings are present.

        Raises:
            RuntimeError: Listing the environment variables that are missing
        """
        missing = [ENV_VARS.get(name, name) for name in fields if not getattr(self, name)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                f"Please copy .env.example to .env and fill in the values."
            )


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional .env path; defaults to python-dotenv's lookup

    Returns:
        Settings instance
    """
    load_dotenv(env_file)

    values = {
        field: os.getenv(env_var)
        for field, env_var in ENV_VARS.items()
        if os.getenv(env_var)
    }
    settings = Settings(**values)

    logger.info(f"Settings loaded (luis={settings.luis_enabled}, "
                f"claude={settings.claude_enabled}, "
                f"weather={'yes' if settings.weather_api_key else 'no'})")
    return settings

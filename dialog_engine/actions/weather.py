"""
Weather Actions

Actions bound to weather intents.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from pydantic import Field

from ..weather.api import WeatherClient
from ..weather.cards import build_forecast_card
from .base import Action, action_binding

logger = logging.getLogger(__name__)


@action_binding("Weather.GetForecast", description="Get the Weather in a location")
class WeatherForecastAction(Action):
    """Fetches the forecast for `Place` and renders it as a card."""

    place: Optional[str] = Field(None, alias="Place")
    days: int = 5
    weather_client: Optional[WeatherClient] = Field(None, exclude=True)

    async def fulfill(self) -> Optional[Dict[str, Any]]:
        if not self.place:
            logger.info("No place given, nothing to look up")
            return None
        if self.weather_client is None:
            raise RuntimeError("WeatherForecastAction has no weather client")

        report = await asyncio.to_thread(self.weather_client.get_forecast, self.place, self.days)
        return build_forecast_card(self.place, report)

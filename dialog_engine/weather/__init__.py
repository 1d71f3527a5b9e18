"""
Weather Module

weatherapi.com client and Adaptive Card rendering for forecasts.
"""

from .api import WeatherClient, WeatherReport
from .cards import CARD_CONTENT_TYPE, build_forecast_card

__all__ = ["WeatherClient", "WeatherReport", "CARD_CONTENT_TYPE", "build_forecast_card"]

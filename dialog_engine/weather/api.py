"""
Weather API Client

Retrieves current conditions and a multi-day forecast from weatherapi.com
(the successor of the APIXU service).
"""

import logging
from typing import List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.weatherapi.com/v1"

# weatherapi.com answers 400 with this code when no location matches
NO_MATCHING_LOCATION = 1006


class Condition(BaseModel):
    """Weather condition summary."""
    text: str = ""
    icon: str = ""


class Location(BaseModel):
    """Resolved location."""
    name: str
    region: str = ""
    country: str = ""


class CurrentWeather(BaseModel):
    """Current conditions."""
    last_updated: str
    temp_f: float
    temp_c: Optional[float] = None
    wind_mph: float = 0.0
    wind_dir: str = ""
    condition: Condition = Field(default_factory=Condition)


class DaySummary(BaseModel):
    """Aggregated values for one forecast day."""
    maxtemp_f: float
    mintemp_f: float
    condition: Condition = Field(default_factory=Condition)


class ForecastDay(BaseModel):
    """One forecast day."""
    date: str
    day: DaySummary


class Forecast(BaseModel):
    forecastday: List[ForecastDay] = Field(default_factory=list)


class WeatherReport(BaseModel):
    """Complete forecast.json response."""
    location: Location
    current: Optional[CurrentWeather] = None
    forecast: Optional[Forecast] = None


class WeatherClient:
    """
    Client for the weatherapi.com forecast endpoint.

    Calls are blocking; async callers should run them in a worker thread.
    """

    def __init__(self, api_key: str, api_url: str = DEFAULT_API_URL, timeout: float = 10.0):
        """
        Initialize the weather client.

        Args:
            api_key: weatherapi.com key
            api_url: Base API URL
            timeout: HTTP timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        logger.info(f"WeatherClient initialized with API URL: {self.api_url}")

    def get_forecast(self, place: str, days: int = 5) -> Optional[WeatherReport]:
        """
        Get current weather and forecast for a place.

        Args:
            place: City name or any query weatherapi.com accepts
            days: Number of forecast days

        Returns:
            WeatherReport, or None if the place is unknown

        Raises:
            requests.RequestException: If the HTTP call fails
            RuntimeError: If the response cannot be parsed
        """
        logger.info(f"Fetching {days}-day forecast for: {place}")

        response = requests.get(
            f"{self.api_url}/forecast.json",
            params={'key': self.api_key, 'q': place, 'days': days},
            timeout=self.timeout
        )

        if response.status_code == 400 and self._error_code(response) == NO_MATCHING_LOCATION:
            logger.info(f"No weather location matches '{place}'")
            return None

        response.raise_for_status()

        try:
            report = WeatherReport(**response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid weather response for '{place}': {e}")
            raise RuntimeError(f"Invalid weather response: {e}") from e

        logger.info(f"Forecast received for {report.location.name}")
        return report

    def _error_code(self, response: requests.Response) -> Optional[int]:
        try:
            return response.json().get('error', {}).get('code')
        except ValueError:
            return None

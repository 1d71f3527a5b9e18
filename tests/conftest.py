"""Shared test fixtures: fake classifiers and conversation context, no network."""

import asyncio
from typing import Any, Callable, List, Optional, Sequence, Union

import pytest

from dialog_engine.dispatcher.context import OutboundMessage
from dialog_engine.nlu.classifier import IntentClassifier
from dialog_engine.nlu.models import Interpretation
from dialog_engine.weather.api import WeatherReport


class FakeClassifier(IntentClassifier):
    """Returns canned interpretations, or raises the given error."""

    def __init__(
        self,
        interpretations: Sequence[Interpretation] = (),
        error: Optional[BaseException] = None,
        delay: float = 0.0,
        name: Optional[str] = None
    ):
        super().__init__(name=name)
        self.interpretations = list(interpretations)
        self.error = error
        self.delay = delay
        self.queries: List[str] = []
        self.cancelled = False

    async def query(self, text: str) -> List[Interpretation]:
        self.queries.append(text)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return [i.model_copy(update={'source': self.name, 'query': text}) for i in self.interpretations]


class FakeContext:
    """Records posted messages and the callback registered for the next turn."""

    def __init__(self, timeout: Optional[float] = None):
        self.cancellation = asyncio.Event()
        self.timeout = timeout
        self.posted: List[Union[str, OutboundMessage]] = []
        self.waiting_on: Optional[Callable] = None

    async def post(self, message: Union[str, OutboundMessage]) -> None:
        self.posted.append(message)

    def wait(self, callback: Callable) -> None:
        self.waiting_on = callback


def make_pending(text: str) -> "asyncio.Future[str]":
    """Already-resolved pending input; must be called inside a running loop."""
    future = asyncio.get_running_loop().create_future()
    future.set_result(text)
    return future


def interp(name: str, confidence: float, **slots: Any) -> Interpretation:
    return Interpretation(name=name, confidence=confidence, slots=slots)


@pytest.fixture
def weather_payload():
    """forecast.json payload as returned by weatherapi.com."""
    return {
        'location': {'name': 'Seattle', 'region': 'Washington', 'country': 'USA'},
        'current': {
            'last_updated': '2024-01-01 10:45',
            'temp_f': 45.9,
            'temp_c': 7.7,
            'wind_mph': 8.1,
            'wind_dir': 'SSW',
            'condition': {'text': 'Light rain', 'icon': '//cdn.weatherapi.com/weather/64x64/day/296.png'}
        },
        'forecast': {
            'forecastday': [
                {'date': '2024-01-01', 'day': {'maxtemp_f': 48.2, 'mintemp_f': 39.0,
                                               'condition': {'text': 'Rain', 'icon': '//cdn/rain.png'}}},
                {'date': '2024-01-02', 'day': {'maxtemp_f': 50.7, 'mintemp_f': 41.5,
                                               'condition': {'text': 'Cloudy', 'icon': 'https://cdn/cloud.png'}}},
                {'date': '2024-01-03', 'day': {'maxtemp_f': 52.0, 'mintemp_f': 43.9,
                                               'condition': {'text': 'Sunny', 'icon': ''}}},
            ]
        }
    }


@pytest.fixture
def weather_report(weather_payload):
    return WeatherReport(**weather_payload)

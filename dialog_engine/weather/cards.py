"""
Forecast Cards

Builds Adaptive Card payloads from weather reports.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .api import ForecastDay, WeatherReport

CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
CARD_VERSION = "1.0"


def build_forecast_card(place: str, report: Optional[WeatherReport]) -> Optional[Dict[str, Any]]:
    """
    Build the forecast card for a place.

    Args:
        place: Place as the user typed it (used for the search link)
        report: Weather report, may be None

    Returns:
        Adaptive Card dictionary, or None when the report has no forecast
    """
    if report is None or report.current is None:
        return None
    if report.forecast is None or not report.forecast.forecastday:
        return None

    current = report.current
    card: Dict[str, Any] = {
        "type": "AdaptiveCard",
        "version": CARD_VERSION,
        "speak": (f"<s>Today the temperature is {current.temp_f}</s>"
                  f"<s>Winds are {current.wind_mph} miles per hour from the {current.wind_dir}</s>"),
        "body": []
    }

    card["body"].append(_current_weather(report))
    card["body"].append(_forecast(place, report))
    return card


def icon_url(url: str) -> str:
    """Normalise weatherapi.com icon URLs, which are protocol-relative."""
    if not url:
        return ""
    if url.startswith("http"):
        return url
    return "https:" + url


def _current_weather(report: WeatherReport) -> Dict[str, Any]:
    current = report.current
    weekday = _parse_date(current.last_updated).strftime("%A")

    details = _column("65", [
        _text_block(f"{report.location.name} ({weekday})", "large", subtle=False),
        _text_block(f"{_whole(current.temp_f)}° F", "large"),
        _text_block(current.condition.text, "medium"),
        _text_block(f"Winds {current.wind_mph} mph {current.wind_dir}", "medium"),
    ])
    image = _column("35", [{"type": "Image", "url": icon_url(current.condition.icon)}])

    return {"type": "ColumnSet", "columns": [image, details]}


def _forecast(place: str, report: WeatherReport) -> Dict[str, Any]:
    today = _parse_date(report.current.last_updated).weekday()
    columns = [
        _forecast_column(place, day)
        for day in report.forecast.forecastday
        if _parse_date(day.date).weekday() != today
    ]
    return {"type": "ColumnSet", "columns": columns}


def _forecast_column(place: str, day: ForecastDay) -> Dict[str, Any]:
    column = _column("20", [
        _text_block(_parse_date(day.date).strftime("%a"), "medium"),
        {"type": "Image", "size": "auto", "url": icon_url(day.day.condition.icon)},
        _text_block(f"{_whole(day.day.mintemp_f)}/{_whole(day.day.maxtemp_f)}", "medium"),
    ])
    column["selectAction"] = {
        "type": "Action.OpenUrl",
        "url": f"https://www.bing.com/search?q={quote(f'forecast in {place}')}"
    }
    return column


def _column(width: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "Column", "width": width, "items": items}


def _text_block(text: str, size: str, subtle: bool = True) -> Dict[str, Any]:
    return {
        "type": "TextBlock",
        "text": text,
        "size": size,
        "horizontalAlignment": "center",
        "isSubtle": subtle,
        "spacing": "none"
    }


def _whole(value: float) -> str:
    # Truncate, don't round
    return str(value).split('.')[0]


def _parse_date(value: str) -> datetime:
    # "2024-01-05" or "2024-01-05 14:30"
    return datetime.fromisoformat(value.strip())

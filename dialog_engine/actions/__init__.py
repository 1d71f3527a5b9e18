"""
Actions Module

Intent-bound actions plus the registry and resolver that map winning
interpretations onto them.
"""

from .base import Action, ActionBinding, action_binding
from .registry import ActionRegistry, ActionResolver
from .weather import WeatherForecastAction

__all__ = [
    "Action",
    "ActionBinding",
    "action_binding",
    "ActionRegistry",
    "ActionResolver",
    "WeatherForecastAction"
]

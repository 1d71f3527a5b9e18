"""
NLU Module

Intent classifiers and winner selection across classifiers.
"""

from .classifier import IntentClassifier
from .models import NONE_INTENT, ClassifierResult, Interpretation
from .pattern import PatternClassifier, weather_patterns
from .selector import WinnerSelector

__all__ = [
    "IntentClassifier",
    "Interpretation",
    "ClassifierResult",
    "NONE_INTENT",
    "PatternClassifier",
    "weather_patterns",
    "WinnerSelector"
]

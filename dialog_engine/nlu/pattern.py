"""
Pattern Classifier

Offline, regex-based classifier. Used as the mock backend when no NLU
service is configured, and in tests.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from .classifier import IntentClassifier
from .models import NONE_INTENT, Interpretation

logger = logging.getLogger(__name__)


class PatternClassifier(IntentClassifier):
    """
    Classifies text by matching regular expressions.

    Named groups in a pattern become slots. Every matching intent scores
    `match_confidence`; a `None` interpretation is always appended so the
    classifier never returns an empty answer.
    """

    def __init__(
        self,
        patterns: Dict[str, List[str]],
        match_confidence: float = 0.8,
        none_confidence: float = 0.1,
        name: Optional[str] = None
    ):
        """
        Initialize the pattern classifier.

        Args:
            patterns: Intent name -> list of regular expressions
            match_confidence: Confidence reported for a match
            none_confidence: Confidence reported for the None interpretation
            name: Optional classifier name
        """
        super().__init__(name=name)
        self.match_confidence = match_confidence
        self.none_confidence = none_confidence
        self._patterns: List[Tuple[str, re.Pattern]] = [
            (intent, re.compile(expression, re.IGNORECASE))
            for intent, expressions in patterns.items()
            for expression in expressions
        ]

    async def query(self, text: str) -> List[Interpretation]:
        interpretations = []
        seen = set()

        for intent, pattern in self._patterns:
            if intent in seen:
                continue
            match = pattern.search(text)
            if not match:
                continue

            slots = {key: value.strip() for key, value in match.groupdict().items() if value}
            interpretations.append(Interpretation(
                name=intent,
                confidence=self.match_confidence,
                slots=slots,
                source=self.name,
                query=text
            ))
            seen.add(intent)

        interpretations.append(Interpretation(
            name=NONE_INTENT,
            confidence=self.none_confidence,
            source=self.name,
            query=text
        ))

        logger.debug(f"{self.name} matched {len(seen)} intent(s) for: {text!r}")
        return interpretations


def weather_patterns() -> Dict[str, List[str]]:
    """Default patterns for the weather bot."""
    return {
        "Weather.GetForecast": [
            r"\b(?:weather|forecast|temperature)\b.*\b(?:in|for|at)\s+(?P<Place>[\w .'-]+?)[?.!]*$",
            r"^(?P<Place>[\w .'-]+?)\s+(?:weather|forecast)[?.!]*$",
            r"\b(?:weather|forecast)\b",
        ],
        "Help": [
            r"^\s*(?:help|\?)\s*[.!]*$",
        ],
    }

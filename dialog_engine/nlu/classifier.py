"""
Intent Classifier Interface

Provider-agnostic base class for NLU backends (LUIS, Claude, offline
patterns). The dispatcher only talks to this interface.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import Interpretation

logger = logging.getLogger(__name__)


class IntentClassifier(ABC):
    """
    Abstract base class for intent classifiers.

    Subclasses return every interpretation they consider for a query, in the
    order the backend declared them. Retries and backoff belong here, never
    in the dispatcher.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        logger.info(f"{self.name} classifier initialized")

    @abstractmethod
    async def query(self, text: str) -> List[Interpretation]:
        """
        Classify a single utterance.

        Args:
            text: Raw user input

        Returns:
            Ordered list of interpretations (may be empty)
        """

    def best_intent(self, interpretations: Sequence[Interpretation]) -> Optional[Interpretation]:
        """
        Pick this classifier's own best interpretation.

        Highest confidence wins; ties go to the one declared first.
        """
        best = None
        for interpretation in interpretations:
            if best is None or interpretation.confidence > best.confidence:
                best = interpretation
        return best

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

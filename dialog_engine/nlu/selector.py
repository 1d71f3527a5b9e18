"""
Winner Selection

Aggregates the answers of several classifiers into a single winning
interpretation.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .classifier import IntentClassifier
from .models import ClassifierResult, Interpretation

logger = logging.getLogger(__name__)


class WinnerSelector:
    """
    Selects the overall best interpretation for a turn.

    Each classifier first picks its local winner with its own comparison.
    Local winners that mean "not understood" are dropped. The remaining ones
    are ordered by confidence, and equal confidence goes to the classifier
    registered first.
    """

    def local_winners(
        self,
        results: Sequence[Tuple[int, IntentClassifier, List[Interpretation]]]
    ) -> List[ClassifierResult]:
        """
        Compute each classifier's local winner.

        Args:
            results: (rank, classifier, interpretations) for every classifier
                that answered

        Returns:
            ClassifierResult for every classifier whose local winner is not a
            none interpretation, in rank order
        """
        winners = []
        for rank, classifier, interpretations in sorted(results, key=lambda item: item[0]):
            local = classifier.best_intent(interpretations)
            if local is None or local.is_none:
                logger.debug(f"{classifier.name}: no usable local winner")
                continue

            winners.append(ClassifierResult(
                classifier=classifier.name,
                rank=rank,
                interpretations=list(interpretations),
                winner=local
            ))
        return winners

    def select(
        self,
        results: Sequence[Tuple[int, IntentClassifier, List[Interpretation]]]
    ) -> Optional[ClassifierResult]:
        """
        Select the winning classifier result.

        Returns:
            The winning ClassifierResult, or None if no classifier produced a
            usable interpretation
        """
        best = None
        for candidate in self.local_winners(results):
            if best is None or candidate.winner.confidence > best.winner.confidence:
                best = candidate

        if best is None:
            logger.info("No winning intent selected")
        else:
            logger.info(f"Winning intent '{best.winner.name}' "
                        f"({best.winner.confidence:.2f}) from {best.classifier}")
        return best

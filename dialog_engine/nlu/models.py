"""
NLU Data Models

Scored interpretations produced by intent classifiers.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Reserved intent name classifiers use for "not understood"
NONE_INTENT = "None"


class Interpretation(BaseModel):
    """One classifier's scored guess at the user's intent."""
    name: str = Field("", description="Intent name; empty or 'None' means not understood")
    confidence: float = Field(0.0, description="Score, comparable within one classifier")
    slots: Dict[str, Any] = Field(default_factory=dict, description="Extracted slot values by name")
    source: Optional[str] = Field(None, description="Name of the classifier that produced it")
    query: Optional[str] = Field(None, description="Text that was classified")

    @property
    def is_none(self) -> bool:
        """True for the empty name and the 'None' sentinel."""
        name = self.name.strip()
        return not name or name.lower() == NONE_INTENT.lower()


class ClassifierResult(BaseModel):
    """Everything one classifier returned for a query, plus its local winner."""
    classifier: str
    rank: int = Field(..., description="Registration order of the classifier (0 = highest priority)")
    interpretations: List[Interpretation] = Field(default_factory=list)
    winner: Optional[Interpretation] = None

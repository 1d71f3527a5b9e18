"""
Conversation Context

Structural types for what the dispatcher needs from the conversation
(transport) layer, plus the per-turn result model.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, Field

# Anything a handler can post; the dispatcher never looks inside
Presentable = Any

# Awaited once at the turn boundary; handlers always receive a settled future
PendingInput = Awaitable[str]


class Attachment(BaseModel):
    """Rich content attached to an outbound message."""
    content_type: str
    content: Presentable = None
    name: Optional[str] = None


class OutboundMessage(BaseModel):
    """Message posted back to the user."""
    text: Optional[str] = None
    speak: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)


class ConversationContext(Protocol):
    """
    The ongoing conversation as seen by the dispatcher.

    `cancellation` and `timeout` bound classification and fulfillment; both
    are optional.
    """

    cancellation: Optional[asyncio.Event]
    timeout: Optional[float]

    async def post(self, message: Union[str, OutboundMessage]) -> None: ...

    def wait(self, callback: Callable[["ConversationContext", PendingInput], Awaitable[Any]]) -> None: ...


class TurnState(str, Enum):
    """Logical states of a turn."""
    RECEIVING = "receiving"
    CLASSIFYING = "classifying"
    SELECTING = "selecting"
    RESOLVING = "resolving"
    FULFILLING = "fulfilling"
    HANDLING = "handling"
    DONE = "done"
    FAULTED = "faulted"


class TurnResult(BaseModel):
    """
    Outcome of one turn.

    Ensures a consistent report whether the turn completed or faulted.
    """
    text: str
    state: TurnState = TurnState.RECEIVING
    success: bool = False
    intent: Optional[str] = None
    confidence: Optional[float] = None
    classifier: Optional[str] = None
    action: Optional[str] = None
    error: Optional[str] = None
    classifier_faults: List[str] = Field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

"""
Dispatcher Module

Turn orchestration and intent handler registration.
"""

from .context import Attachment, ConversationContext, OutboundMessage, TurnResult, TurnState
from .dispatcher import Dispatcher
from .handlers import DEFAULT_INTENT, HandlerBinding, HandlerRegistry, intent

__all__ = [
    "Dispatcher",
    "HandlerBinding",
    "HandlerRegistry",
    "intent",
    "DEFAULT_INTENT",
    "ConversationContext",
    "OutboundMessage",
    "Attachment",
    "TurnResult",
    "TurnState"
]

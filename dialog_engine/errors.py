"""
Dialog Engine Errors

Construction-time binding errors and turn-level faults raised by the
dispatcher.
"""

from typing import Iterable, Optional


class DialogEngineError(Exception):
    """Base class for all dialog engine errors."""


class BindingError(DialogEngineError):
    """
    Invalid action or handler binding.

    Raised while registries are built; fatal for the dispatcher being
    constructed.
    """

    def __init__(self, message: str, member: Optional[str] = None, intents: Iterable[str] = ()):
        super().__init__(message)
        self.member = member
        self.intents = tuple(intents)


class ClassificationFault(DialogEngineError):
    """A single classifier failed to answer a query."""

    def __init__(self, classifier: str, cause: BaseException):
        super().__init__(f"Classifier '{classifier}' failed: {cause!r}")
        self.classifier = classifier
        self.cause = cause


class TurnError(DialogEngineError):
    """Base class for errors that abort a single conversational turn."""


class UnresolvedIntentError(TurnError):
    """No classifier produced a usable interpretation."""

    def __init__(self, message: str, faults: Iterable[ClassificationFault] = ()):
        super().__init__(message)
        self.faults = list(faults)


class ResolutionFault(TurnError):
    """The action for the winning intent could not be created."""

    def __init__(self, intent_name: str, message: str):
        super().__init__(message)
        self.intent_name = intent_name


class FulfillmentFault(TurnError):
    """The resolved action failed while being fulfilled."""

    def __init__(self, intent_name: str, message: str):
        super().__init__(message)
        self.intent_name = intent_name


class HandlerFault(TurnError):
    """The intent handler raised while handling the turn."""

    def __init__(self, intent_name: str, message: str):
        super().__init__(message)
        self.intent_name = intent_name


class DispatchFault(DialogEngineError):
    """
    No handler, not even the default one, was available for an intent.

    Indicates a broken handler registry, so it is not a TurnError and is
    never absorbed by the turn boundary.
    """

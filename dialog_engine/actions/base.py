"""
Action Base Types

An action is the per-turn unit of work behind an intent. Its fields are
filled from the winning interpretation's slots, then it is fulfilled once to
produce the result handed to the dialog handler.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

BINDING_ATTRIBUTE = "__action_binding__"

A = TypeVar("A", bound="Action")


class Action(BaseModel, ABC):
    """
    Abstract base class for intent actions.

    Subclasses declare their slot fields as pydantic fields and are bound to
    an intent with the `action_binding` decorator. Fields declared with
    `exclude=True` hold injected collaborators and are never filled from
    slots.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
        arbitrary_types_allowed=True
    )

    @abstractmethod
    async def fulfill(self) -> Any:
        """
        Perform the action.

        Returns:
            Opaque result passed to the intent handler
        """


class ActionBinding(BaseModel):
    """Static association between an intent name and an action type."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    intent_name: str = Field(..., description="Intent the action fulfills")
    description: str = Field("", description="Human-readable intent description")
    action_type: Type[Action]


def action_binding(intent_name: str, description: str = "") -> Callable[[Type[A]], Type[A]]:
    """
    Class decorator binding an action type to an intent name.

    Example:
        @action_binding("Weather.GetForecast", description="Get the Weather in a location")
        class WeatherForecastAction(Action):
            ...
    """
    def decorate(cls: Type[A]) -> Type[A]:
        setattr(cls, BINDING_ATTRIBUTE, ActionBinding(
            intent_name=intent_name,
            description=description,
            action_type=cls
        ))
        return cls

    return decorate


def get_binding(action_type: type) -> Optional[ActionBinding]:
    """Return the binding declared on the type itself (not inherited)."""
    return vars(action_type).get(BINDING_ATTRIBUTE)

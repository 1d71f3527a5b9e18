"""
Intent Handler Registry

Handlers are declared with the `intent` decorator. Declarations are collected
into a static table of HandlerBindings when the dialog class is created; the
HandlerRegistry consumes that table once per dispatcher instance.
"""

import functools
import inspect
import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..errors import BindingError, DispatchFault

logger = logging.getLogger(__name__)

DEFAULT_INTENT = ""
INTENTS_ATTRIBUTE = "__intent_names__"

# (context, pending input, fulfillment result)
IntentHandler = Callable[[Any, Any, Any], Awaitable[None]]


def intent(*names: Any) -> Any:
    """
    Declare a dialog method as the handler for one or more intents.

    Decorators can be stacked. With no names the method's own name is used.
    `""` declares the default handler.

    Example:
        @intent("")
        @intent("None")
        async def none(self, context, pending, result): ...
    """
    if len(names) == 1 and callable(names[0]):
        return intent()(names[0])

    def decorate(function: Callable) -> Callable:
        declared = getattr(function, INTENTS_ATTRIBUTE, ())
        setattr(function, INTENTS_ATTRIBUTE, tuple(names) + declared)
        return function

    return decorate


def declared_intents(function: Callable) -> Tuple[str, ...]:
    return getattr(function, INTENTS_ATTRIBUTE, None)


def normalize_intent(name: str) -> str:
    return DEFAULT_INTENT if not name or not name.strip() else name


class HandlerBinding(BaseModel):
    """A handler function and the intent names it was declared for."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    member: str = Field(..., description="Name of the declaring method or function")
    function: Callable[..., Any]
    intent_names: Tuple[str, ...] = ()

    def effective_names(self) -> Tuple[str, ...]:
        return self.intent_names or (self.member,)


def collect_bindings(cls: type) -> Tuple[HandlerBinding, ...]:
    """
    Build the handler table for a dialog class.

    Walks the class hierarchy base-first so a subclass redefining a method
    replaces the inherited declaration.
    """
    table: Dict[str, HandlerBinding] = {}
    for klass in reversed(cls.__mro__):
        for attribute, value in vars(klass).items():
            names = declared_intents(value)
            if names is not None:
                table[attribute] = HandlerBinding(member=attribute, function=value, intent_names=names)
            elif attribute in table:
                del table[attribute]
    return tuple(table.values())


class HandlerRegistry:
    """
    Intent name -> handler map with a mandatory default entry.

    Read-only after construction.
    """

    def __init__(self, bindings: Iterable[HandlerBinding]):
        """
        Build the registry.

        Args:
            bindings: Handler bindings whose functions are already bound
                (no `self` parameter left)

        Raises:
            BindingError: On incompatible signatures, duplicate intent names
                or a missing default handler
        """
        handlers: Dict[str, IntentHandler] = {}
        owners: Dict[str, HandlerBinding] = {}

        for binding in bindings:
            handler = self._adapt(binding)

            for raw_name in binding.effective_names():
                name = normalize_intent(raw_name)
                owner = owners.get(name)
                if owner is not None and owner.function != binding.function:
                    raise BindingError(
                        f"Intent '{name}' is claimed by both '{owner.member}' and '{binding.member}'",
                        member=binding.member,
                        intents=[name]
                    )
                handlers[name] = handler
                owners[name] = binding

        if DEFAULT_INTENT not in handlers:
            raise BindingError("No default intent handler found (declare one with @intent(\"\"))")

        self._handlers: Mapping[str, IntentHandler] = MappingProxyType(handlers)
        self._owners: Mapping[str, str] = MappingProxyType({k: v.member for k, v in owners.items()})
        logger.info(f"HandlerRegistry built with intents: "
                    f"{', '.join(repr(name) for name in handlers)}")

    @staticmethod
    def _adapt(binding: HandlerBinding) -> IntentHandler:
        """
        Return a handler with the canonical (context, pending, result) shape.

        Handlers written as (context, result) are wrapped once here. The
        number of required positional parameters decides the shape, so
        `(context, result, extra=None)` is a two-argument handler.
        """
        function = binding.function
        intents = ";".join(binding.effective_names())

        if not inspect.iscoroutinefunction(function):
            raise BindingError(
                f"Handler '{binding.member}' must be a coroutine function "
                f"for the following intent/s: {intents}",
                member=binding.member,
                intents=binding.effective_names()
            )

        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError) as e:
            raise BindingError(f"Handler '{binding.member}' has no inspectable signature: {e}",
                               member=binding.member, intents=binding.effective_names()) from e

        if _required_positional(signature) != 2 and _accepts(signature, 3):
            return function

        if _accepts(signature, 2):
            logger.debug(f"Adapting two-argument handler '{binding.member}'")

            @functools.wraps(function)
            async def adapted(context: Any, pending: Any, result: Any) -> None:
                await function(context, result)

            return adapted

        raise BindingError(
            f"Handler '{binding.member}' signature is not valid for the following intent/s: {intents}",
            member=binding.member,
            intents=binding.effective_names()
        )

    def lookup(self, name: str) -> IntentHandler:
        """
        Find the handler for an intent, falling back to the default handler.

        Raises:
            DispatchFault: If there is no default handler either
        """
        handler = self._handlers.get(normalize_intent(name))
        if handler is None:
            handler = self._handlers.get(DEFAULT_INTENT)
        if handler is None:
            raise DispatchFault(f"No handler for intent '{name}' and no default intent handler")
        return handler

    def member_for(self, name: str) -> str:
        """Name of the method that will handle an intent."""
        return self._owners.get(normalize_intent(name), self._owners.get(DEFAULT_INTENT))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def __contains__(self, name: str) -> bool:
        return normalize_intent(name) in self._handlers


def _accepts(signature: inspect.Signature, count: int) -> bool:
    try:
        signature.bind(*([None] * count))
    except TypeError:
        return False
    return True


def _required_positional(signature: inspect.Signature) -> int:
    return sum(
        1 for parameter in signature.parameters.values()
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is parameter.empty
    )

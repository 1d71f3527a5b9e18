"""
Action Registry and Resolver

Maps intent names to action factories and turns a winning interpretation into
a populated action instance.
"""

import inspect
import logging
from types import MappingProxyType, ModuleType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import ValidationError
from pydantic.fields import FieldInfo

from ..errors import BindingError
from ..nlu.models import Interpretation
from .base import Action, ActionBinding, get_binding

logger = logging.getLogger(__name__)

ActionFactory = Callable[[], Action]


class ActionRegistry:
    """
    Intent name -> (binding, factory) index.

    Built once and read-only afterwards. Factories default to the action type
    itself; pass `factories` to inject clients or configuration.
    """

    def __init__(
        self,
        action_types: Iterable[Type[Action]],
        factories: Optional[Mapping[Type[Action], ActionFactory]] = None
    ):
        """
        Build the registry.

        Args:
            action_types: Action classes decorated with `action_binding`
            factories: Optional action type -> zero-argument factory

        Raises:
            BindingError: If a type has no binding or two types claim the
                same intent name
        """
        factories = dict(factories or {})
        bindings: Dict[str, ActionBinding] = {}
        resolved_factories: Dict[str, ActionFactory] = {}

        for action_type in action_types:
            binding = get_binding(action_type)
            if binding is None:
                raise BindingError(
                    f"Action type '{action_type.__name__}' has no action binding",
                    member=action_type.__name__
                )

            existing = bindings.get(binding.intent_name)
            if existing is not None and existing.action_type is not action_type:
                raise BindingError(
                    f"Intent '{binding.intent_name}' is bound to both "
                    f"'{existing.action_type.__name__}' and '{action_type.__name__}'",
                    member=action_type.__name__,
                    intents=[binding.intent_name]
                )

            bindings[binding.intent_name] = binding
            resolved_factories[binding.intent_name] = factories.pop(action_type, action_type)

        if factories:
            unknown = ", ".join(sorted(t.__name__ for t in factories))
            raise BindingError(f"Factories given for unregistered action types: {unknown}")

        self._bindings = MappingProxyType(bindings)
        self._factories = MappingProxyType(resolved_factories)
        logger.info(f"ActionRegistry built with {len(bindings)} binding(s): "
                    f"{', '.join(bindings) or '-'}")

    @classmethod
    def from_module(
        cls,
        module: ModuleType,
        factories: Optional[Mapping[Type[Action], ActionFactory]] = None
    ) -> "ActionRegistry":
        """Build a registry from every bound action type declared in `module`."""
        action_types = [
            member for _, member in inspect.getmembers(module, inspect.isclass)
            if member.__module__ == module.__name__
            and issubclass(member, Action)
            and get_binding(member) is not None
        ]
        return cls(action_types, factories=factories)

    @property
    def bindings(self) -> Mapping[str, ActionBinding]:
        return self._bindings

    def descriptions(self) -> Dict[str, str]:
        """Intent name -> description, e.g. to prime a classifier."""
        return {name: binding.description for name, binding in self._bindings.items()}

    def get(self, intent_name: str) -> Optional[ActionBinding]:
        return self._bindings.get(intent_name)

    def create(self, intent_name: str) -> Optional[Action]:
        """Instantiate a fresh action for an intent, or None if unbound."""
        factory = self._factories.get(intent_name)
        return factory() if factory is not None else None

    def __contains__(self, intent_name: str) -> bool:
        return intent_name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)


class ActionResolver:
    """Resolves interpretations to populated action instances."""

    def __init__(self, registry: ActionRegistry):
        self.registry = registry

    def resolve(self, interpretation: Interpretation) -> Tuple[Optional[Action], str]:
        """
        Resolve the action for an interpretation.

        Slots are copied onto fields with the same name (field name, alias,
        then case-insensitive name). Unknown slots are ignored and values
        that fail validation are skipped; binding never fails.

        Args:
            interpretation: Winning interpretation

        Returns:
            (action, intent name); action is None when no binding exists
        """
        intent_name = interpretation.name
        action = self.registry.create(intent_name)

        if action is None:
            logger.info(f"No action bound to intent '{intent_name}'")
            return None, intent_name

        self._bind_slots(action, interpretation.slots)
        logger.info(f"Resolved intent '{intent_name}' to {type(action).__name__}")
        return action, intent_name

    def _bind_slots(self, action: Action, slots: Mapping[str, Any]) -> None:
        fields = type(action).model_fields

        for slot_name, value in slots.items():
            field_name = _match_field(fields, slot_name)
            if field_name is None:
                logger.debug(f"Ignoring slot '{slot_name}' for {type(action).__name__}")
                continue

            try:
                setattr(action, field_name, value)
            except ValidationError as e:
                logger.warning(f"Slot '{slot_name}' not bound to {type(action).__name__}."
                               f"{field_name}: {e.errors()[0]['msg']}")


def _match_field(fields: Mapping[str, FieldInfo], slot_name: str) -> Optional[str]:
    bindable: List[Tuple[str, FieldInfo]] = [
        (name, info) for name, info in fields.items() if not info.exclude
    ]

    for name, info in bindable:
        if slot_name == name or slot_name == info.alias:
            return name

    folded = slot_name.casefold()
    for name, _ in bindable:
        if folded == name.casefold():
            return name
    return None

"""
Tests for action bindings, the action registry and slot resolution.
"""

import types
from typing import Optional
from unittest.mock import Mock

import pytest

from dialog_engine.actions import weather as weather_actions
from dialog_engine.actions.base import Action, action_binding
from dialog_engine.actions.registry import ActionRegistry, ActionResolver
from dialog_engine.actions.weather import WeatherForecastAction
from dialog_engine.errors import BindingError
from dialog_engine.weather.api import WeatherClient

from conftest import interp


@action_binding("Alarm.Set", description="Set an alarm")
class SetAlarmAction(Action):
    hour: int = 7
    label: Optional[str] = None

    async def fulfill(self):
        return f"{self.hour}:{self.label}"


@action_binding("Alarm.Set", description="Set an alarm, again")
class OtherAlarmAction(Action):
    async def fulfill(self):
        return None


class UnboundAction(Action):
    async def fulfill(self):
        return None


class TestActionRegistry:

    def test_unique_bindings(self):
        registry = ActionRegistry([SetAlarmAction, WeatherForecastAction])

        assert len(registry) == 2
        assert "Alarm.Set" in registry
        assert registry.get("Weather.GetForecast").action_type is WeatherForecastAction
        assert registry.descriptions()["Weather.GetForecast"] == "Get the Weather in a location"

    def test_duplicate_intent_name_fails(self):
        with pytest.raises(BindingError) as exc_info:
            ActionRegistry([SetAlarmAction, OtherAlarmAction])

        assert "Alarm.Set" in str(exc_info.value)
        assert exc_info.value.intents == ("Alarm.Set",)

    def test_same_type_twice_is_not_a_duplicate(self):
        registry = ActionRegistry([SetAlarmAction, SetAlarmAction])
        assert len(registry) == 1

    def test_type_without_binding_fails(self):
        with pytest.raises(BindingError):
            ActionRegistry([UnboundAction])

    def test_binding_is_not_inherited(self):
        class SubAlarm(SetAlarmAction):
            pass

        with pytest.raises(BindingError):
            ActionRegistry([SubAlarm])

    def test_bindings_are_read_only(self):
        registry = ActionRegistry([SetAlarmAction])
        with pytest.raises(TypeError):
            registry.bindings["Other"] = registry.get("Alarm.Set")

    def test_from_module_finds_declared_actions(self):
        registry = ActionRegistry.from_module(weather_actions)
        assert list(registry.bindings) == ["Weather.GetForecast"]

    def test_from_module_ignores_imported_and_unbound_types(self):
        module = types.ModuleType("fake_actions")
        module.SetAlarmAction = SetAlarmAction
        module.UnboundAction = UnboundAction

        registry = ActionRegistry.from_module(module)

        assert len(registry) == 0

    def test_factory_for_unregistered_type_fails(self):
        with pytest.raises(BindingError):
            ActionRegistry([SetAlarmAction], factories={WeatherForecastAction: WeatherForecastAction})

    def test_create_returns_fresh_instances(self):
        registry = ActionRegistry([SetAlarmAction])

        first, second = registry.create("Alarm.Set"), registry.create("Alarm.Set")

        assert isinstance(first, SetAlarmAction)
        assert first is not second
        assert registry.create("Unknown") is None


class TestActionResolver:

    def test_weather_place_slot(self):
        resolver = ActionResolver(ActionRegistry([WeatherForecastAction]))

        action, name = resolver.resolve(interp("Weather.GetForecast", 0.9, Place="Seattle"))

        assert name == "Weather.GetForecast"
        assert isinstance(action, WeatherForecastAction)
        assert action.place == "Seattle"

    def test_slot_matching_is_case_insensitive_on_field_names(self):
        resolver = ActionResolver(ActionRegistry([SetAlarmAction]))

        action, _ = resolver.resolve(interp("Alarm.Set", 0.9, Label="wake up", HOUR="6"))

        assert action.label == "wake up"
        assert action.hour == 6

    def test_unmatched_and_invalid_slots_are_ignored(self):
        resolver = ActionResolver(ActionRegistry([SetAlarmAction]))

        action, _ = resolver.resolve(interp("Alarm.Set", 0.9, hour="not a number", snooze="5"))

        assert action.hour == 7
        assert action.label is None

    def test_injected_fields_cannot_be_set_from_slots(self):
        client = Mock(spec=WeatherClient)
        registry = ActionRegistry(
            [WeatherForecastAction],
            factories={WeatherForecastAction: lambda: WeatherForecastAction(weather_client=client)}
        )

        action, _ = ActionResolver(registry).resolve(
            interp("Weather.GetForecast", 0.9, weather_client="evil", Place="Oslo")
        )

        assert action.weather_client is client
        assert action.place == "Oslo"

    def test_unbound_intent_resolves_to_no_action(self):
        resolver = ActionResolver(ActionRegistry([WeatherForecastAction]))

        action, name = resolver.resolve(interp("Greeting", 0.8))

        assert action is None
        assert name == "Greeting"

    def test_none_interpretation_resolves_to_no_action(self):
        resolver = ActionResolver(ActionRegistry([WeatherForecastAction]))

        action, name = resolver.resolve(interp("", 1.0))

        assert action is None
        assert name == ""


class TestWeatherForecastAction:

    @pytest.mark.asyncio
    async def test_fulfill_builds_card(self, weather_report):
        client = Mock(spec=WeatherClient)
        client.get_forecast.return_value = weather_report
        action = WeatherForecastAction(Place="Seattle", weather_client=client)

        card = await action.fulfill()

        client.get_forecast.assert_called_once_with("Seattle", 5)
        assert card["type"] == "AdaptiveCard"

    @pytest.mark.asyncio
    async def test_unknown_place_returns_none(self):
        client = Mock(spec=WeatherClient)
        client.get_forecast.return_value = None

        assert await WeatherForecastAction(place="Atlantis", weather_client=client).fulfill() is None

    @pytest.mark.asyncio
    async def test_no_place_skips_lookup(self):
        client = Mock(spec=WeatherClient)

        assert await WeatherForecastAction(weather_client=client).fulfill() is None
        client.get_forecast.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_client_is_an_error(self):
        with pytest.raises(RuntimeError):
            await WeatherForecastAction(place="Seattle").fulfill()

"""
Weather Dialog

The weather bot's root dialog: intent handlers for forecasts, help and
everything the bot did not understand.
"""

import logging
from typing import Any, Dict, Optional

from .actions import weather as weather_actions
from .actions.registry import ActionRegistry
from .config import Settings
from .dispatcher.context import Attachment, ConversationContext, OutboundMessage, PendingInput
from .dispatcher.dispatcher import Dispatcher
from .dispatcher.handlers import intent
from .errors import TurnError
from .nlu.claude_classifier import ClaudeIntentClassifier
from .nlu.luis import LuisClassifier
from .nlu.pattern import PatternClassifier, weather_patterns
from .weather.api import WeatherClient
from .weather.cards import CARD_CONTENT_TYPE

logger = logging.getLogger(__name__)

HELP_TEXT = ("I can tell you the weather. Try 'weather in Seattle' "
             "or 'what is the forecast for Paris?'")


class WeatherDialog(Dispatcher):
    """Root dialog of the weather bot."""

    @intent("")
    @intent("None")
    async def none(self, context: ConversationContext, pending: PendingInput, result: Any) -> None:
        text = await pending
        await context.post(f"Sorry, I did not understand '{text}'. Type 'help' if you need assistance.")
        context.wait(self.message_received)

    @intent("Help")
    async def help(self, context: ConversationContext, result: Any) -> None:
        await context.post(HELP_TEXT)
        context.wait(self.message_received)

    @intent("Weather.GetForecast")
    async def weather_get_forecast(
        self,
        context: ConversationContext,
        pending: PendingInput,
        card: Optional[Dict[str, Any]]
    ) -> None:
        if card is None:
            text = await pending
            message = OutboundMessage(
                text=f"I couldn't find the weather for '{text}'.  Are you sure that's a real city?"
            )
        else:
            message = OutboundMessage(
                speak=card.get("speak"),
                attachments=[Attachment(
                    content_type=CARD_CONTENT_TYPE,
                    content=card,
                    name="Weather Forecast"
                )]
            )

        await context.post(message)
        context.wait(self.message_received)

    async def on_turn_error(self, context: ConversationContext, error: TurnError) -> None:
        await context.post("Sorry, something went wrong while answering. Please try again.")


def build_dialog(settings: Settings) -> WeatherDialog:
    """
    Wire the weather bot from settings.

    LUIS and Claude classifiers are added when configured, in that priority
    order; the offline pattern classifier is used when neither is.

    Raises:
        RuntimeError: If the weather API key is missing
    """
    settings.require('weather_api_key')

    weather_client = WeatherClient(settings.weather_api_key, api_url=settings.weather_api_url)
    registry = ActionRegistry.from_module(
        weather_actions,
        factories={
            weather_actions.WeatherForecastAction:
                lambda: weather_actions.WeatherForecastAction(weather_client=weather_client)
        }
    )

    classifiers = []
    if settings.luis_enabled:
        classifiers.append(LuisClassifier(
            app_id=settings.luis_app_id,
            subscription_key=settings.luis_subscription_key,
            region=settings.luis_region
        ))
    if settings.claude_enabled:
        intents = registry.descriptions()
        intents.setdefault("Help", "Ask the bot what it can do")
        classifiers.append(ClaudeIntentClassifier(
            api_key=settings.anthropic_api_key,
            intents=intents,
            model=settings.anthropic_model
        ))
    if not classifiers:
        logger.warning("No NLU service configured, falling back to pattern matching")
        classifiers.append(PatternClassifier(weather_patterns(), name="patterns"))

    return WeatherDialog(classifiers, registry)

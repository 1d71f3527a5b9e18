"""
Claude Intent Classifier

Uses Anthropic's Claude API with a forced tool call to classify an utterance
into one of the registered intents.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from anthropic import Anthropic
from anthropic.types import Message

from .classifier import IntentClassifier
from .models import NONE_INTENT, Interpretation

logger = logging.getLogger(__name__)

TOOL_NAME = "classify_intent"

SYSTEM_PROMPT = """You are the language understanding component of a chat bot.
Classify the user's message into exactly one of the known intents and extract
slot values mentioned in the message. Use the intent "None" when the message
does not match any known intent."""


class ClaudeIntentClassifier(IntentClassifier):
    """
    Classifier backed by Claude.

    The set of intents (name -> description) is fixed at construction,
    usually taken from the action registry's bindings.
    """

    def __init__(
        self,
        api_key: str,
        intents: Dict[str, str],
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 512,
        name: Optional[str] = None
    ):
        """
        Initialize Claude classifier.

        Args:
            api_key: Anthropic API key
            intents: Intent name -> human-readable description
            model: Claude model identifier
            max_tokens: Maximum tokens for responses
            name: Optional classifier name
        """
        super().__init__(name=name or f"claude:{model}")
        self.client = Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.intents = dict(intents)

    def get_tool_definition(self) -> Dict[str, Any]:
        """
        Build the tool definition Claude is forced to call.

        Returns:
            Tool definition dictionary for the messages API
        """
        described = "\n".join(f"- {name}: {description}" for name, description in self.intents.items())
        return {
            "name": TOOL_NAME,
            "description": f"Report the intent of the user's message. Known intents:\n{described}",
            "input_schema": {
                "type": "object",
                "properties": {
                    "intent": {
                        "type": "string",
                        "enum": list(self.intents) + [NONE_INTENT],
                        "description": "Name of the recognized intent"
                    },
                    "confidence": {
                        "type": "number",
                        "description": "Confidence between 0.0 and 1.0"
                    },
                    "slots": {
                        "type": "object",
                        "description": "Slot name -> value extracted from the message (e.g. Place)",
                        "additionalProperties": {"type": "string"}
                    }
                },
                "required": ["intent", "confidence"]
            }
        }

    async def query(self, text: str) -> List[Interpretation]:
        message = await asyncio.to_thread(self._create_message, text)
        interpretation = self._extract_interpretation(message, text)

        if interpretation is None:
            logger.error("No tool call found in Claude's response")
            raise RuntimeError("Claude did not return a classification")

        logger.info(f"Claude classified {text!r} as '{interpretation.name}' "
                    f"({interpretation.confidence:.2f})")
        return [interpretation]

    def _create_message(self, text: str) -> Message:
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                tools=[self.get_tool_definition()],
                tool_choice={"type": "tool", "name": TOOL_NAME},
                messages=[
                    {
                        "role": "user",
                        "content": text
                    }
                ]
            )
        except Exception as e:
            logger.error(f"Failed to get classification from Claude: {e}")
            raise RuntimeError(f"Claude API call failed: {e}") from e

    def _extract_interpretation(self, message: Message, text: str) -> Optional[Interpretation]:
        """
        Extract the classify_intent tool call from Claude's response.

        Args:
            message: Claude API message response
            text: The classified text

        Returns:
            Interpretation, or None if no tool call was found
        """
        for block in message.content:
            if getattr(block, 'type', None) == 'tool_use' and block.name == TOOL_NAME:
                data = block.input or {}
                intent = data.get('intent') or NONE_INTENT
                if intent not in self.intents and intent != NONE_INTENT:
                    logger.warning(f"Claude returned unknown intent '{intent}'")
                    intent = NONE_INTENT

                return Interpretation(
                    name=intent,
                    confidence=min(max(float(data.get('confidence') or 0.0), 0.0), 1.0),
                    slots=dict(data.get('slots') or {}),
                    source=self.name,
                    query=text
                )

        logger.warning(f"No tool use found. Response content: {message.content}")
        return None

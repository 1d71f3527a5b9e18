"""
LUIS Classifier

Queries a Language Understanding (LUIS) v2 application over HTTP and maps the
response onto Interpretations.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from .classifier import IntentClassifier
from .models import Interpretation

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://{region}.api.cognitive.microsoft.com/luis/v2.0/apps/{app_id}"


class LuisClassifier(IntentClassifier):
    """
    Client for a published LUIS application.

    The HTTP call is blocking (requests) and is pushed to a worker thread so
    several classifiers can be queried concurrently.
    """

    def __init__(
        self,
        app_id: str,
        subscription_key: str,
        region: str = "westus",
        endpoint: Optional[str] = None,
        timeout: float = 10.0,
        name: Optional[str] = None
    ):
        """
        Initialize the LUIS client.

        Args:
            app_id: LUIS application (model) id
            subscription_key: LUIS subscription key
            region: Azure region hosting the endpoint
            endpoint: Full endpoint URL, overrides region/app_id formatting
            timeout: HTTP timeout in seconds
            name: Optional classifier name
        """
        super().__init__(name=name or f"luis:{app_id}")
        self.app_id = app_id
        self.subscription_key = subscription_key
        self.endpoint = endpoint or DEFAULT_ENDPOINT.format(region=region, app_id=app_id)
        self.timeout = timeout

    async def query(self, text: str) -> List[Interpretation]:
        payload = await asyncio.to_thread(self._request, text)
        return self.parse_response(payload, text)

    def _request(self, text: str) -> Dict[str, Any]:
        """
        Call the LUIS endpoint.

        Raises:
            requests.RequestException: If the HTTP call fails
        """
        logger.debug(f"Querying LUIS app {self.app_id}: {text!r}")

        response = requests.get(
            self.endpoint,
            params={
                'subscription-key': self.subscription_key,
                'q': text,
                'verbose': 'true'
            },
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    def parse_response(self, payload: Dict[str, Any], text: str) -> List[Interpretation]:
        """
        Convert a LUIS JSON response into Interpretations.

        Entities are query-level in LUIS, so every interpretation carries the
        same slots. Slot names are the entity role when present, otherwise the
        entity type. Values are sliced from the original text to keep casing.
        """
        query = payload.get('query') or text
        slots = self._entities_to_slots(payload.get('entities', []), query)

        intents = payload.get('intents')
        if not intents:
            top = payload.get('topScoringIntent')
            intents = [top] if top else []

        interpretations = [
            Interpretation(
                name=intent.get('intent') or "",
                confidence=float(intent.get('score') or 0.0),
                slots=dict(slots),
                source=self.name,
                query=query
            )
            for intent in intents
        ]

        logger.info(f"LUIS returned {len(interpretations)} intents, {len(slots)} entities")
        return interpretations

    def _entities_to_slots(self, entities: List[Dict[str, Any]], query: str) -> Dict[str, Any]:
        slots: Dict[str, Any] = {}
        for entity in entities:
            slot_name = entity.get('role') or entity.get('type')
            if not slot_name or slot_name in slots:
                continue

            start, end = entity.get('startIndex'), entity.get('endIndex')
            if isinstance(start, int) and isinstance(end, int) and 0 <= start <= end < len(query):
                value = query[start:end + 1]
            else:
                value = entity.get('entity')
            slots[slot_name] = value
        return slots

"""
Test Classifier Integrations

Tests for the LUIS, Claude and pattern classifiers, including response
mapping and slot extraction. No network access: HTTP and SDK calls are
patched.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from dialog_engine.nlu.claude_classifier import TOOL_NAME, ClaudeIntentClassifier
from dialog_engine.nlu.luis import LuisClassifier
from dialog_engine.nlu.pattern import PatternClassifier, weather_patterns


class TestLuisClassifier:
    """Test LUIS response-to-interpretation mapping."""

    def test_parse_verbose_response(self):
        client = LuisClassifier(app_id="app-1", subscription_key="key")

        payload = {
            'query': 'Weather in Seattle',
            'topScoringIntent': {'intent': 'Weather.GetForecast', 'score': 0.93},
            'intents': [
                {'intent': 'Weather.GetForecast', 'score': 0.93},
                {'intent': 'None', 'score': 0.05},
            ],
            'entities': [
                {'entity': 'seattle', 'type': 'Place', 'startIndex': 11, 'endIndex': 17, 'score': 0.9},
            ]
        }

        interpretations = client.parse_response(payload, 'Weather in Seattle')

        assert [i.name for i in interpretations] == ['Weather.GetForecast', 'None']
        assert interpretations[0].confidence == 0.93
        # Original casing is kept by slicing the query
        assert interpretations[0].slots == {'Place': 'Seattle'}
        assert interpretations[0].source == 'luis:app-1'
        assert interpretations[1].slots == {'Place': 'Seattle'}

    def test_parse_top_scoring_only(self):
        client = LuisClassifier(app_id="app-1", subscription_key="key")

        payload = {
            'query': 'hi',
            'topScoringIntent': {'intent': 'None', 'score': 0.7},
            'entities': []
        }

        interpretations = client.parse_response(payload, 'hi')

        assert len(interpretations) == 1
        assert interpretations[0].is_none

    def test_entity_role_and_bad_indices(self):
        client = LuisClassifier(app_id="app-1", subscription_key="key")

        payload = {
            'query': 'forecast for paris',
            'intents': [{'intent': 'Weather.GetForecast', 'score': 0.8}],
            'entities': [
                {'entity': 'paris', 'type': 'builtin.geographyV2.city', 'role': 'Place',
                 'startIndex': 13, 'endIndex': 99},
                {'entity': 'ignored', 'type': 'Place'},
            ]
        }

        interpretations = client.parse_response(payload, 'forecast for paris')

        assert interpretations[0].slots == {'Place': 'paris'}

    def test_endpoint_from_region(self):
        client = LuisClassifier(app_id="abc", subscription_key="key", region="westeurope")
        assert client.endpoint == "https://westeurope.api.cognitive.microsoft.com/luis/v2.0/apps/abc"

    @pytest.mark.asyncio
    async def test_query_calls_endpoint(self):
        client = LuisClassifier(app_id="abc", subscription_key="secret", timeout=3)
        response = Mock()
        response.json.return_value = {
            'query': 'weather',
            'intents': [{'intent': 'Weather.GetForecast', 'score': 0.6}],
            'entities': []
        }

        with patch('dialog_engine.nlu.luis.requests.get', return_value=response) as get:
            interpretations = await client.query('weather')

        get.assert_called_once()
        assert get.call_args.kwargs['params']['q'] == 'weather'
        assert get.call_args.kwargs['params']['subscription-key'] == 'secret'
        assert get.call_args.kwargs['timeout'] == 3
        assert interpretations[0].name == 'Weather.GetForecast'

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        client = LuisClassifier(app_id="abc", subscription_key="bad")
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")

        with patch('dialog_engine.nlu.luis.requests.get', return_value=response):
            with pytest.raises(requests.HTTPError):
                await client.query('weather')


def tool_message(name=TOOL_NAME, **tool_input):
    block = SimpleNamespace(type='tool_use', name=name, input=tool_input)
    return SimpleNamespace(content=[SimpleNamespace(type='text', text='ok'), block])


class TestClaudeIntentClassifier:
    """Test Claude tool-call classification."""

    @pytest.fixture
    def classifier(self):
        with patch('dialog_engine.nlu.claude_classifier.Anthropic') as anthropic:
            classifier = ClaudeIntentClassifier(
                api_key='test-key',
                intents={'Weather.GetForecast': 'Get the Weather in a location'}
            )
        classifier.client = MagicMock()
        anthropic.assert_called_once_with(api_key='test-key')
        return classifier

    def test_tool_definition_lists_intents(self, classifier):
        tool = classifier.get_tool_definition()

        assert tool['name'] == TOOL_NAME
        assert tool['input_schema']['properties']['intent']['enum'] == ['Weather.GetForecast', 'None']
        assert 'Get the Weather in a location' in tool['description']

    @pytest.mark.asyncio
    async def test_query_returns_interpretation(self, classifier):
        classifier.client.messages.create.return_value = tool_message(
            intent='Weather.GetForecast', confidence=0.87, slots={'Place': 'Lisbon'}
        )

        [interpretation] = await classifier.query('is it sunny in Lisbon?')

        assert interpretation.name == 'Weather.GetForecast'
        assert interpretation.confidence == 0.87
        assert interpretation.slots == {'Place': 'Lisbon'}
        kwargs = classifier.client.messages.create.call_args.kwargs
        assert kwargs['tool_choice'] == {'type': 'tool', 'name': TOOL_NAME}

    @pytest.mark.asyncio
    async def test_unknown_intent_becomes_none(self, classifier):
        classifier.client.messages.create.return_value = tool_message(intent='Music.Play', confidence=3)

        [interpretation] = await classifier.query('play jazz')

        assert interpretation.is_none
        assert interpretation.confidence == 1.0

    @pytest.mark.asyncio
    async def test_missing_tool_call_raises(self, classifier):
        classifier.client.messages.create.return_value = SimpleNamespace(content=[])

        with pytest.raises(RuntimeError):
            await classifier.query('hello')

    @pytest.mark.asyncio
    async def test_api_failure_raises(self, classifier):
        classifier.client.messages.create.side_effect = ConnectionError('boom')

        with pytest.raises(RuntimeError, match='Claude API call failed'):
            await classifier.query('hello')


class TestPatternClassifier:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text, place", [
        ("What's the weather in Seattle?", "Seattle"),
        ("forecast for San Francisco", "San Francisco"),
        ("Paris weather", "Paris"),
    ])
    async def test_weather_place(self, text, place):
        classifier = PatternClassifier(weather_patterns())

        interpretations = await classifier.query(text)
        best = classifier.best_intent(interpretations)

        assert best.name == "Weather.GetForecast"
        assert best.slots == {"Place": place}

    @pytest.mark.asyncio
    async def test_weather_without_place(self):
        classifier = PatternClassifier(weather_patterns())

        best = classifier.best_intent(await classifier.query("weather please"))

        assert best.name == "Weather.GetForecast"
        assert best.slots == {}

    @pytest.mark.asyncio
    async def test_no_match_returns_none_interpretation(self):
        classifier = PatternClassifier(weather_patterns(), name="patterns")

        interpretations = await classifier.query("tell me a joke")

        assert len(interpretations) == 1
        assert interpretations[0].is_none
        assert interpretations[0].source == "patterns"

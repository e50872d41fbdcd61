"""
Bedrock enhancement tests with a mocked bedrock-runtime client.

Run with: pytest tests/unit/test_enhancement.py -v
"""

import io
import json
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, ReadTimeoutError

from config.settings import Settings
from models.chat import ChartDataPoint, ChatMessage, QueryContext, Visualization, VisualizationType
from services.enhancement_service import ANTHROPIC_VERSION, EnhancementService, build_prompt


def _body(payload) -> dict:
    return {"body": io.BytesIO(json.dumps(payload).encode())}


def _message() -> ChatMessage:
    return ChatMessage(
        content="Caribbean is your top performer.",
        visualization=Visualization(
            type=VisualizationType.BAR,
            data=[ChartDataPoint(label="Caribbean", value=4.2)],
        ),
    )


@pytest.fixture
def enabled_settings():
    return Settings(llm_enhancement_enabled=True, llm_timeout_seconds=2.0)


class TestBuildPrompt:
    """Test prompt construction."""

    def test_includes_query_data_and_history(self):
        prompt = build_prompt("Exclude Alaska", _message(), QueryContext(last_query="ROAS by itinerary"))
        assert 'User asked: "Exclude Alaska"' in prompt
        assert 'Previous question was: "ROAS by itinerary"' in prompt
        assert '"label": "Caribbean"' in prompt

    def test_without_visualization_or_history(self):
        prompt = build_prompt("hi", ChatMessage(content="x"), QueryContext())
        assert "Data to present" not in prompt
        assert "Previous question" not in prompt


class TestEnhancementService:
    """Test the additive rewrite path."""

    def test_disabled_never_calls_client(self):
        client = MagicMock()
        service = EnhancementService(Settings(llm_enhancement_enabled=False), client=client)
        assert service.enhance("q", _message(), QueryContext()) is None
        client.invoke_model.assert_not_called()

    def test_success_and_cache(self, enabled_settings):
        client = MagicMock()
        client.invoke_model.side_effect = lambda **kwargs: _body({"content": [{"type": "text", "text": " Rewritten "}]})
        service = EnhancementService(enabled_settings, client=client)

        assert service.enhance("q", _message(), QueryContext()) == "Rewritten"
        assert service.enhance("q", _message(), QueryContext()) == "Rewritten"
        assert client.invoke_model.call_count == 1
        assert service.cache.stats()["hits"] == 1

    @patch("services.enhancement_service.logger")
    def test_cache_counters_are_logged(self, mock_logger, enabled_settings):
        client = MagicMock()
        client.invoke_model.side_effect = lambda **kwargs: _body({"content": [{"text": "ok"}]})
        service = EnhancementService(enabled_settings, client=client)

        service.enhance("q", _message(), QueryContext())
        complete = mock_logger.info.call_args.kwargs["extra"]
        assert (complete["cache_hits"], complete["cache_misses"], complete["cache_size"]) == (0, 1, 1)

        service.enhance("q", _message(), QueryContext())
        hit = mock_logger.info.call_args.kwargs["extra"]
        assert mock_logger.info.call_args.args[0] == "Enhancement cache hit"
        assert (hit["cache_hits"], hit["cache_misses"]) == (1, 1)

    def test_request_body(self, enabled_settings):
        client = MagicMock()
        client.invoke_model.return_value = _body({"content": [{"text": "ok"}]})
        EnhancementService(enabled_settings, client=client).enhance("q", _message(), QueryContext())

        kwargs = client.invoke_model.call_args.kwargs
        body = json.loads(kwargs["body"])
        assert kwargs["modelId"] == enabled_settings.model_id
        assert body["anthropic_version"] == ANTHROPIC_VERSION
        assert body["max_tokens"] == 300
        assert body["temperature"] == 0.7
        assert "analytics assistant" in body["system"]

    @pytest.mark.parametrize("error", [
        ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "InvokeModel"),
        ReadTimeoutError(endpoint_url="https://bedrock-runtime.eu-west-2.amazonaws.com"),
    ])
    def test_client_failures_return_none(self, enabled_settings, error):
        client = MagicMock()
        client.invoke_model.side_effect = error
        assert EnhancementService(enabled_settings, client=client).enhance("q", _message(), QueryContext()) is None

    @pytest.mark.parametrize("payload", [{}, {"content": []}, {"content": [{"text": "   "}]}])
    def test_unusable_body_returns_none(self, enabled_settings, payload):
        client = MagicMock()
        client.invoke_model.return_value = _body(payload)
        service = EnhancementService(enabled_settings, client=client)
        assert service.enhance("q", _message(), QueryContext()) is None
        assert service.cache.stats()["size"] == 0

    def test_non_json_body_returns_none(self, enabled_settings):
        client = MagicMock()
        client.invoke_model.return_value = {"body": io.BytesIO(b"not json")}
        assert EnhancementService(enabled_settings, client=client).enhance("q", _message(), QueryContext()) is None

    @patch("services.enhancement_service.boto3")
    def test_client_is_timeout_bounded(self, mock_boto3, enabled_settings):
        service = EnhancementService(enabled_settings)
        _ = service.client

        args, kwargs = mock_boto3.client.call_args
        assert args == ("bedrock-runtime",)
        config = kwargs["config"]
        assert config.connect_timeout == 2.0
        assert config.read_timeout == 2.0
        assert config.retries == {"max_attempts": 0}

"""
Unit tests for the LLM client and Annotation Extractor.
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from pr_reviewer.review.extractor import (
    AnnotationExtractor,
    LLMClient,
    parse_line_number,
    parse_reply,
    supports_json_mode,
)
from pr_reviewer.utils.metrics import MetricsCollector


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def openai_client():
    """Mock AsyncOpenAI client."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


class TestParseLineNumber:
    """Tests for parse_line_number()."""

    @pytest.mark.parametrize("value, expected", [
        (42, 42),
        ("42", 42),
        (" 42 ", 42),
        (42.0, 42),
        ("42.0", 42),
    ])
    def test_accepts_positive_integers(self, value, expected):
        assert parse_line_number(value) == expected

    @pytest.mark.parametrize("value", [
        "forty-two", "", "  ", "4.5", 4.5, 0, -3, "-3", None, True, [42], {"line": 1}, "nan", "1e3",
    ])
    def test_rejects_everything_else(self, value):
        assert parse_line_number(value) is None


class TestParseReply:
    """Tests for parse_reply()."""

    def test_valid_reply(self):
        text = json.dumps({
            "reviews": [{"lineNumber": "42", "reviewComment": "Remove debug statement", "quickSummary": "debug leftover"}],
            "summary": "",
        })
        result = parse_reply(text)

        assert result.ok
        entry = result.reply.reviews[0]
        assert entry.line_number == "42"
        assert entry.review_comment == "Remove debug statement"
        assert entry.quick_summary == "debug leftover"
        assert result.reply.summary == ""

    def test_empty_reviews(self):
        result = parse_reply('{"reviews": [], "summary": "| ok |"}')

        assert result.ok
        assert result.reply.reviews == []
        assert result.reply.summary == "| ok |"

    def test_missing_summary_defaults_to_empty(self):
        result = parse_reply('{"reviews": []}')

        assert result.ok
        assert result.reply.summary == ""

    def test_code_fenced_reply(self):
        result = parse_reply('```json\n{"reviews": [], "summary": "s"}\n```')

        assert result.ok
        assert result.reply.summary == "s"

    @pytest.mark.parametrize("text", [
        "Looks good to me!",
        "{}",
        '{"reviews": "none"}',
        '{"reviews": [{"lineNumber": 3}]}',
        "[]",
        '{"reviews": [], "summary": ',
    ])
    def test_unusable_replies_fail(self, text):
        result = parse_reply(text)

        assert not result.ok
        assert result.reply is None
        assert result.reason.startswith("Malformed LLM reply")


class TestLLMClient:
    """Tests for LLMClient."""

    def test_init_openai(self, make_settings):
        """Plain OpenAI client uses the configured model."""
        with patch('pr_reviewer.review.extractor.AsyncOpenAI') as mock_openai:
            client = LLMClient(make_settings(openai_api_model="gpt-4o-mini", llm_timeout_seconds=12))

        assert not client.is_azure
        assert client.model == "gpt-4o-mini"
        mock_openai.assert_called_once_with(api_key="sk-test", timeout=12, max_retries=0)

    def test_init_azure_openai(self, make_settings):
        settings = make_settings(
            azure_openai_endpoint="https://test.openai.azure.com/",
            azure_openai_api_key="azure-key",
            azure_openai_deployment="review-deployment",
        )
        with patch('pr_reviewer.review.extractor.AsyncAzureOpenAI'):
            client = LLMClient(settings)

        assert client.is_azure
        assert client.model == "review-deployment"

    def test_query_config_is_low_variance(self, make_settings, openai_client):
        config = LLMClient(make_settings(openai_api_model="gpt-4"), client=openai_client).query_config()

        assert config == {
            "model": "gpt-4",
            "temperature": 0.2,
            "max_tokens": 700,
            "top_p": 1.0,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }

    def test_json_mode_for_supporting_models(self, make_settings, openai_client):
        config = LLMClient(make_settings(openai_api_model="gpt-4-1106-preview"), client=openai_client).query_config()

        assert config["response_format"] == {"type": "json_object"}

    @pytest.mark.parametrize("model, expected", [
        ("gpt-4-1106-preview", True),
        ("gpt-4o", True),
        ("gpt-4o-mini", True),
        ("gpt-4-turbo-2024-04-09", True),
        ("gpt-4", False),
        ("gpt-3.5-turbo", False),
    ])
    def test_supports_json_mode(self, model, expected):
        assert supports_json_mode(model) is expected

    @pytest.mark.asyncio
    async def test_complete_sends_prompt_as_system_message(self, make_settings, openai_client):
        openai_client.chat.completions.create.return_value = _completion('  {"reviews": []}  ')
        client = LLMClient(make_settings(), client=openai_client)

        text = await client.complete("review this")

        assert text == '{"reviews": []}'
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "system", "content": "review this"}]
        assert kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_complete_with_empty_content(self, make_settings, openai_client):
        openai_client.chat.completions.create.return_value = _completion(None)
        client = LLMClient(make_settings(), client=openai_client)

        assert await client.complete("prompt") == "{}"


class TestAnnotationExtractor:
    """Tests for AnnotationExtractor."""

    @pytest.mark.asyncio
    async def test_successful_extraction(self):
        llm_client = AsyncMock(spec=LLMClient)
        llm_client.complete.return_value = json.dumps({
            "reviews": [{"lineNumber": 3, "reviewComment": "Use a logger", "quickSummary": "logging"}],
            "summary": "One issue.",
        })
        metrics = MetricsCollector()

        result = await AnnotationExtractor(llm_client, metrics).extract("prompt")

        assert result.ok
        assert result.reply.reviews[0].review_comment == "Use a logger"
        assert result.reply.summary == "One issue."
        llm_client.complete.assert_awaited_once_with("prompt")
        assert metrics.llm_calls == 1
        assert metrics.llm_failures == 0

    @pytest.mark.asyncio
    async def test_transport_error_becomes_failure(self):
        """Errors from the LLM call are returned, never raised."""
        llm_client = AsyncMock(spec=LLMClient)
        llm_client.complete.side_effect = ConnectionError("connection reset")
        metrics = MetricsCollector()

        result = await AnnotationExtractor(llm_client, metrics).extract("prompt")

        assert not result.ok
        assert "ConnectionError" in result.reason
        assert metrics.llm_failures == 1

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self):
        llm_client = AsyncMock(spec=LLMClient)
        llm_client.complete.side_effect = asyncio.TimeoutError()

        result = await AnnotationExtractor(llm_client).extract("prompt")

        assert not result.ok
        assert "TimeoutError" in result.reason

    @pytest.mark.asyncio
    async def test_unparsable_reply_becomes_failure(self):
        llm_client = AsyncMock(spec=LLMClient)
        llm_client.complete.return_value = "I could not review this."
        metrics = MetricsCollector()

        result = await AnnotationExtractor(llm_client, metrics).extract("prompt")

        assert not result.ok
        assert result.reply is None
        assert metrics.llm_calls == 1
        assert metrics.llm_failures == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

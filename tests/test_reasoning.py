#!/usr/bin/env python3
"""Tests for the external reasoning adapter."""

import json

import httpx
import pytest

from motomaint import Provider, ReasoningAdapter, ReasoningConfig, build_adapter
from motomaint.reasoning import (
    AnthropicProvider,
    GoogleProvider,
    GrokProvider,
    OpenAIProvider,
    extract_json,
)


class TestReasoningConfig:
    def test_default_is_unconfigured(self):
        assert not ReasoningConfig().is_configured

    def test_provider_none_is_unconfigured(self):
        assert not ReasoningConfig(Provider.NONE, "key").is_configured

    def test_blank_key_is_unconfigured(self):
        assert not ReasoningConfig(Provider.OPENAI, "   ").is_configured

    def test_configured(self):
        assert ReasoningConfig("openai", "sk-test").is_configured


class TestBuildAdapter:
    def test_none_when_unconfigured(self):
        assert build_adapter(None) is None
        assert build_adapter(ReasoningConfig()) is None

    @pytest.mark.parametrize(
        "provider,cls",
        [
            (Provider.OPENAI, OpenAIProvider),
            (Provider.ANTHROPIC, AnthropicProvider),
            (Provider.GOOGLE, GoogleProvider),
            (Provider.GROK, GrokProvider),
        ],
    )
    def test_selects_provider_strategy(self, provider, cls):
        adapter = build_adapter(ReasoningConfig(provider, "key", timeout=5))
        assert isinstance(adapter.provider, cls)
        assert adapter.timeout == 5

    def test_custom_model(self):
        adapter = build_adapter(ReasoningConfig(Provider.OPENAI, "key", "gpt-4.1"))
        assert adapter.provider.model == "gpt-4.1"


class TestProviderRequests:
    """Each provider sends its own request shape and reads its own reply."""

    def test_openai(self, mock_client):
        client = mock_client(
            lambda r: httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})
        )
        adapter = build_adapter(ReasoningConfig(Provider.OPENAI, "sk-test"), client=client)

        assert adapter.query("prompt") == "hello"
        request = client.requests[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["messages"] == [{"role": "user", "content": "prompt"}]

    def test_grok_uses_xai_endpoint(self, mock_client):
        client = mock_client(
            lambda r: httpx.Response(200, json={"choices": [{"message": {"content": "hi"}}]})
        )
        adapter = build_adapter(ReasoningConfig(Provider.GROK, "xai-key"), client=client)

        assert adapter.query("prompt") == "hi"
        assert client.requests[0].url.host == "api.x.ai"

    def test_anthropic(self, mock_client):
        client = mock_client(
            lambda r: httpx.Response(200, json={"content": [{"type": "text", "text": "ok"}]})
        )
        adapter = build_adapter(ReasoningConfig(Provider.ANTHROPIC, "ak"), client=client)

        assert adapter.query("prompt") == "ok"
        request = client.requests[0]
        assert request.headers["x-api-key"] == "ak"
        assert "anthropic-version" in request.headers
        assert json.loads(request.content)["max_tokens"] > 0

    def test_google(self, mock_client):
        reply = {"candidates": [{"content": {"parts": [{"text": "yes"}]}}]}
        client = mock_client(lambda r: httpx.Response(200, json=reply))
        adapter = build_adapter(
            ReasoningConfig(Provider.GOOGLE, "gk", "gemini-test"), client=client
        )

        assert adapter.query("prompt") == "yes"
        request = client.requests[0]
        assert request.url.path.endswith("/models/gemini-test:generateContent")
        assert request.headers["x-goog-api-key"] == "gk"


class TestQueryFailures:
    """query() never raises; every failure becomes None."""

    @pytest.fixture
    def config(self):
        return ReasoningConfig(Provider.OPENAI, "sk-test")

    def test_http_500(self, mock_client, config):
        client = mock_client(lambda r: httpx.Response(500, text="boom"))
        assert build_adapter(config, client=client).query("p") is None

    def test_http_401(self, mock_client, config):
        client = mock_client(lambda r: httpx.Response(401, json={"error": "bad key"}))
        assert build_adapter(config, client=client).query("p") is None

    def test_network_error(self, mock_client, config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(handler)
        assert build_adapter(config, client=client).query("p") is None

    def test_timeout(self, mock_client, config):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = mock_client(handler)
        assert build_adapter(config, client=client).query("p") is None

    def test_unexpected_shape(self, mock_client, config):
        client = mock_client(lambda r: httpx.Response(200, json={"unexpected": True}))
        assert build_adapter(config, client=client).query("p") is None

    def test_non_json_body(self, mock_client, config):
        client = mock_client(lambda r: httpx.Response(200, text="<html>"))
        assert build_adapter(config, client=client).query("p") is None

    def test_empty_completion(self, mock_client, config):
        client = mock_client(
            lambda r: httpx.Response(200, json={"choices": [{"message": {"content": "  "}}]})
        )
        assert build_adapter(config, client=client).query("p") is None

    @pytest.mark.parametrize(
        "provider,reply",
        [
            (Provider.OPENAI, {"choices": [{"message": {"content": 42}}]}),
            (Provider.GROK, {"choices": [{"message": {"content": ["a", "b"]}}]}),
            (Provider.ANTHROPIC, {"content": [{"type": "text", "text": 7}]}),
            (Provider.ANTHROPIC, {"content": ["not a block"]}),
            (Provider.GOOGLE, {"candidates": [{"content": {"parts": [{"text": None}]}}]}),
            (Provider.GOOGLE, {"candidates": [{"content": {"parts": [{"text": {"x": 1}}]}}]}),
        ],
    )
    def test_non_text_completion(self, mock_client, provider, reply):
        client = mock_client(lambda r: httpx.Response(200, json=reply))
        adapter = build_adapter(ReasoningConfig(provider, "key"), client=client)
        assert adapter.query("p") is None

    def test_non_text_completion_falls_back_to_scoring(self, mock_client, honda, today):
        from motomaint import RiskAnalyzer, RiskAnalyzerConfig

        client = mock_client(
            lambda r: httpx.Response(200, json={"choices": [{"message": {"content": 42}}]})
        )
        adapter = build_adapter(ReasoningConfig(Provider.OPENAI, "sk-test"), client=client)

        result = RiskAnalyzer(RiskAnalyzerConfig(reasoning=adapter)).assess_risk(
            honda, [], 1000, today=today
        )

        assert result.source == "deterministic"
        assert result.score == 50

    def test_failure_is_logged(self, mock_client, config, caplog):
        client = mock_client(lambda r: httpx.Response(503))
        with caplog.at_level("WARNING", logger="motomaint.reasoning"):
            build_adapter(config, client=client).query("p")
        assert "OpenAIProvider" in caplog.text

    def test_single_attempt(self, mock_client, config):
        client = mock_client(lambda r: httpx.Response(500))
        build_adapter(config, client=client).query("p")
        assert len(client.requests) == 1


class TestExtractJson:
    def test_bare_json(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"score": 70}\n```\nThanks'
        assert extract_json(text) == {"score": 70}

    def test_surrounded_by_prose(self):
        assert extract_json('Result: {"score": 70} done') == {"score": 70}

    def test_nothing_parses(self):
        with pytest.raises(ValueError):
            extract_json("no json here")

"""
Optional external reasoning providers (LLM APIs).

Each provider knows its own request and response shape and only returns the
raw text completion. Turning that text into domain objects is left to the
risk analyzer and alert generator, which fall back to their deterministic
paths whenever this module returns None.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0


class Provider(Enum):
    NONE = "none"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROK = "grok"


class ReasoningConfig:
    """Provider selection and credentials for the reasoning service."""

    def __init__(
            self,
            provider: Provider = Provider.NONE,
            api_key: str = "",
            model: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT,
    ):
        self.provider = Provider(provider)
        self.api_key = api_key or ""
        self.model = model
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return self.provider is not Provider.NONE and bool(self.api_key.strip())


class ReasoningProvider:
    """Base class: build one HTTP request and pull the text out of the reply."""

    default_model = ""

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model or self.default_model

    def build_request(self, prompt: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return (url, headers, json body)."""
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError


class OpenAIProvider(ReasoningProvider):
    url = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-4o-mini"

    def build_request(self, prompt):
        headers = {"Authorization": f"Bearer {self.api_key}"}
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.2,
        }
        return self.url, headers, body

    def extract_text(self, data):
        return data["choices"][0]["message"]["content"]


class GrokProvider(OpenAIProvider):
    """xAI exposes an OpenAI-compatible chat completions endpoint."""

    url = "https://api.x.ai/v1/chat/completions"
    default_model = "grok-3-mini"


class AnthropicProvider(ReasoningProvider):
    url = "https://api.anthropic.com/v1/messages"
    default_model = "claude-3-5-haiku-latest"
    api_version = "2023-06-01"

    def build_request(self, prompt):
        headers = {"x-api-key": self.api_key, "anthropic-version": self.api_version}
        body = {
            "model": self.model,
            "max_tokens": 1500,
            "messages": [{"role": "user", "content": prompt}],
        }
        return self.url, headers, body

    def extract_text(self, data):
        return "".join(
            block["text"] for block in data["content"] if block.get("type") == "text"
        )


class GoogleProvider(ReasoningProvider):
    base_url = "https://generativelanguage.googleapis.com/v1beta/models"
    default_model = "gemini-1.5-flash"

    def build_request(self, prompt):
        url = f"{self.base_url}/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        return url, headers, body

    def extract_text(self, data):
        return data["candidates"][0]["content"]["parts"][0]["text"]


PROVIDERS = {
    Provider.OPENAI: OpenAIProvider,
    Provider.ANTHROPIC: AnthropicProvider,
    Provider.GOOGLE: GoogleProvider,
    Provider.GROK: GrokProvider,
}


class ReasoningAdapter:
    """Sends a prompt to the configured provider. Never raises."""

    def __init__(
        self,
        provider: ReasoningProvider,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self._client = client

    def query(self, prompt: str) -> Optional[str]:
        """Single attempt; any failure is logged and returned as None."""
        url, headers, body = self.provider.build_request(prompt)
        provider_name = type(self.provider).__name__
        try:
            if self._client is not None:
                response = self._client.post(url, headers=headers, json=body, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(url, headers=headers, json=body)
            response.raise_for_status()
            text = self.provider.extract_text(response.json())
        except httpx.HTTPError as e:
            logger.warning("Reasoning request to %s failed: %s", provider_name, e)
            return None
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Unexpected response shape from %s: %r", provider_name, e)
            return None
        if not isinstance(text, str) or not text.strip():
            logger.warning("Empty or non-text completion from %s", provider_name)
            return None
        return text


def build_adapter(
    config: Optional[ReasoningConfig], client: Optional[httpx.Client] = None
) -> Optional[ReasoningAdapter]:
    """Adapter for a configured provider, or None when reasoning is not set up."""
    if config is None or not config.is_configured:
        return None
    provider_cls = PROVIDERS[config.provider]
    return ReasoningAdapter(
        provider_cls(config.api_key, config.model), timeout=config.timeout, client=client
    )


_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json(text: str) -> Any:
    """
    Parse the JSON object in a completion.

    Accepts bare JSON, JSON inside a markdown code fence, or JSON surrounded
    by prose. Raises ValueError when nothing parses.
    """
    candidates = [m.strip() for m in _FENCE_RE.findall(text)]
    candidates.append(text.strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    raise ValueError("No JSON object found in completion")

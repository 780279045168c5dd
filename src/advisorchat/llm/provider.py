"""Completion endpoints the exchange controller can talk to."""

from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence

import httpx

from ..config import OPENAI_CHAT_URL, ChatConfig
from ..errors import ConfigurationError, TransportError
from ..memory.simple import Message
from ..prompts import NO_RESPONSE_TEXT
from .payload import serialize


class Endpoint(Protocol):
    """Interface for completion endpoints."""

    name: str

    def headers(self) -> Dict[str, str]:  # pragma: no cover - interface
        """Return the request headers."""

    def body(self, messages: Sequence[Message]) -> Dict[str, Any]:  # pragma: no cover - interface
        """Return the JSON body for the given messages."""

    async def send(self, client: httpx.AsyncClient, messages: Sequence[Message]) -> httpx.Response:  # pragma: no cover - interface
        """Post the messages and return the raw response."""


class _HttpEndpoint:
    name = "http"
    url: str

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def body(self, messages: Sequence[Message]) -> Dict[str, Any]:
        return {"messages": serialize(messages)}

    async def send(self, client: httpx.AsyncClient, messages: Sequence[Message]) -> httpx.Response:
        try:
            return await client.post(self.url, json=self.body(messages), headers=self.headers())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc


class ProxyEndpoint(_HttpEndpoint):
    """Server-side proxy that holds the provider credential."""

    name = "proxy"

    def __init__(self, url: str) -> None:
        self.url = url


class OpenAIEndpoint(_HttpEndpoint):
    """Direct call to the provider's chat completions API."""

    name = "direct"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o",
        max_tokens: int = 800,
        temperature: float = 0.7,
        url: str = OPENAI_CHAT_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.url = url

    def headers(self) -> Dict[str, str]:
        headers = super().headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def body(self, messages: Sequence[Message]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": serialize(messages),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


def select_endpoint(config: ChatConfig) -> Endpoint:
    """Pick the proxy when configured, else the direct provider, else fail."""

    if config.proxy_url:
        return ProxyEndpoint(config.proxy_url)
    if config.api_key:
        spec = config.provider
        return OpenAIEndpoint(
            config.api_key,
            model=spec.model,
            max_tokens=spec.max_tokens,
            temperature=spec.temperature,
            url=spec.url,
        )
    raise ConfigurationError()


def _first_choice(data: Dict[str, Any]) -> Dict[str, Any]:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return {}


def extract_reply(data: Any) -> str:
    """Pull the assistant text out of an OpenAI-shaped or proxy-shaped body."""

    if not isinstance(data, dict):
        return NO_RESPONSE_TEXT
    choice = _first_choice(data)
    message = choice.get("message")
    candidates = (
        message.get("content") if isinstance(message, dict) else None,
        choice.get("text"),
        data.get("response"),
        data.get("text"),
    )
    for candidate in candidates:
        if candidate:
            return candidate if isinstance(candidate, str) else str(candidate)
    return NO_RESPONSE_TEXT

"""Configuration helpers for the chat client."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, MutableMapping, Optional

import yaml
from dotenv import load_dotenv

from .prompts import DEFAULT_GREETING, DEFAULT_SYSTEM_PROMPT

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

PROXY_URL_VARS = ("ADVISORCHAT_PROXY_URL", "CF_WORKER_URL", "CLOUDWORKER_URL")
API_KEY_VAR = "OPENAI_API_KEY"
LOG_LEVEL_VAR = "ADVISORCHAT_LOG_LEVEL"


class ConfigError(RuntimeError):
    """Raised when configuration files are invalid."""


def _number(data: Mapping[str, Any], key: str, default: Any, kind: type) -> Any:
    value = data.get(key, default)
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be a {kind.__name__}, got {value!r}") from exc


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string, got {value!r}")
    return value


@dataclass
class ProviderSpec:
    """Generation parameters for the direct provider fallback."""

    url: str = OPENAI_CHAT_URL
    model: str = "gpt-4o"
    max_tokens: int = 800
    temperature: float = 0.7

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ProviderSpec":
        if not data:
            return cls()
        return cls(
            url=str(data.get("url", OPENAI_CHAT_URL)),
            model=str(data.get("model", "gpt-4o")),
            max_tokens=_number(data, "max_tokens", 800, int),
            temperature=_number(data, "temperature", 0.7, float),
        )


@dataclass
class MemorySpec:
    """Bounds of the per-session memory."""

    max_questions: int = 20
    summary_window: int = 5

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "MemorySpec":
        if not data:
            return cls()
        spec = cls(
            max_questions=_number(data, "max_questions", 20, int),
            summary_window=_number(data, "summary_window", 5, int),
        )
        if spec.max_questions < 1 or spec.summary_window < 1:
            raise ConfigError("Memory bounds must be positive")
        return spec


@dataclass
class LoggingSpec:
    level: str = "WARNING"
    file: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LoggingSpec":
        if not data:
            return cls()
        return cls(level=str(data.get("level", "WARNING")).upper(), file=data.get("file"))


@dataclass
class ChatConfig:
    """Representation of the chat client configuration."""

    name: str = "advisorchat"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    greeting: str = DEFAULT_GREETING
    proxy_url: Optional[str] = None
    api_key: Optional[str] = None
    provider: ProviderSpec = field(default_factory=ProviderSpec)
    memory: MemorySpec = field(default_factory=MemorySpec)
    logging: LoggingSpec = field(default_factory=LoggingSpec)
    timeout: float = 60.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], name: str = "advisorchat") -> "ChatConfig":
        return cls(
            name=str(data.get("name", name)),
            system_prompt=str(data.get("system_prompt") or DEFAULT_SYSTEM_PROMPT),
            greeting=str(data.get("greeting") or DEFAULT_GREETING),
            proxy_url=_optional_str(data, "proxy_url"),
            api_key=_optional_str(data, "api_key"),
            provider=ProviderSpec.from_mapping(data.get("provider")),
            memory=MemorySpec.from_mapping(data.get("memory")),
            logging=LoggingSpec.from_mapping(data.get("logging")),
            timeout=_number(data, "timeout", 60.0, float),
        )

    @classmethod
    def from_file(cls, path: str | pathlib.Path) -> "ChatConfig":
        data = yaml.safe_load(pathlib.Path(path).read_text())
        if data is None:
            data = {}
        if not isinstance(data, MutableMapping):
            raise ConfigError("Configuration root must be a mapping")
        return cls.from_mapping(data, name=pathlib.Path(path).stem)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "ChatConfig":
        """Overlay endpoint settings found in the environment."""

        env = os.environ if environ is None else environ
        for var in PROXY_URL_VARS:
            if env.get(var):
                self.proxy_url = env[var]
                break
        if env.get(API_KEY_VAR):
            self.api_key = env[API_KEY_VAR]
        if env.get(LOG_LEVEL_VAR):
            self.logging.level = env[LOG_LEVEL_VAR].upper()
        return self

    def describe(self) -> Dict[str, str]:
        """Effective settings for display, with the credential masked."""

        if self.proxy_url:
            route = f"proxy {self.proxy_url}"
        elif self.api_key:
            route = f"direct {self.provider.url}"
        else:
            route = "not configured"
        return {
            "name": self.name,
            "endpoint": route,
            "api_key": _mask(self.api_key),
            "model": self.provider.model,
            "max_tokens": str(self.provider.max_tokens),
            "temperature": str(self.provider.temperature),
            "max_questions": str(self.memory.max_questions),
            "summary_window": str(self.memory.summary_window),
            "timeout": f"{self.timeout:g}s",
            "log_level": self.logging.level,
        }


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return "-"
    if len(secret) <= 8:
        return "****"
    return f"{secret[:3]}...{secret[-4:]}"


def load_config(
    path: str | pathlib.Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ChatConfig:
    """Build the effective configuration from an optional YAML file and the environment."""

    if environ is None:
        load_dotenv()
    config = ChatConfig.from_file(path) if path else ChatConfig()
    return config.with_env(environ)

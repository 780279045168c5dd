"""Request building and completion endpoints."""

from .payload import RequestBuilder, memory_summary, serialize
from .provider import (
    Endpoint,
    OpenAIEndpoint,
    ProxyEndpoint,
    extract_reply,
    select_endpoint,
)

__all__ = [
    "Endpoint",
    "RequestBuilder",
    "ProxyEndpoint",
    "OpenAIEndpoint",
    "extract_reply",
    "memory_summary",
    "select_endpoint",
    "serialize",
]

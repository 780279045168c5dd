"""Failures of a single request/response exchange."""

from __future__ import annotations

from .prompts import MISSING_ENDPOINT_TEXT


class ExchangeError(RuntimeError):
    """Base class for failures rendered inline in the conversation."""

    @property
    def user_message(self) -> str:
        return str(self)


class ConfigurationError(ExchangeError):
    """Neither a proxy URL nor a provider credential is configured."""

    def __init__(self, message: str = MISSING_ENDPOINT_TEXT) -> None:
        super().__init__(message)


class HttpError(ExchangeError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"API error: {status_code} {reason} - {body}")


class TransportError(ExchangeError):
    """The call failed before a usable response was obtained."""

    def __init__(self, fault: str) -> None:
        self.fault = fault
        super().__init__(f"Request failed: {fault}")

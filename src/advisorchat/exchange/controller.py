"""Drives one request/response cycle per user submission."""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import Callable, Optional, Set

import httpx

from ..config import ChatConfig
from ..errors import ExchangeError, HttpError, TransportError
from ..llm.payload import RequestBuilder
from ..llm.provider import extract_reply, select_endpoint
from ..logging_setup import get_logger
from ..memory.simple import ConversationStore, detect_name
from ..prompts import CLEAR_CONFIRMATION, LATEST_QUESTION_TEMPLATE, PLACEHOLDER_TEXT
from ..render import (
    ClearWindow,
    RecordingRenderer,
    Renderer,
    ReplacePlaceholder,
    SetSubmitEnabled,
    ShowLatestQuestion,
    ShowMessage,
    ShowPlaceholder,
)

logger = get_logger(__name__)


class ExchangeState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    LOCAL_ACK = "local_ack"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class ExchangeOutcome:
    """Terminal state of a single submission."""

    state: ExchangeState
    reply: Optional[str] = None
    error: Optional[ExchangeError] = None

    @property
    def ok(self) -> bool:
        return self.state in (ExchangeState.RESOLVED, ExchangeState.LOCAL_ACK)


class ExchangeController:
    """Owns a conversation store and reconciles it with the renderer on every exchange."""

    def __init__(
        self,
        config: ChatConfig,
        *,
        store: ConversationStore | None = None,
        renderer: Renderer | None = None,
        client: httpx.AsyncClient | None = None,
        builder: RequestBuilder | None = None,
    ) -> None:
        self.config = config
        self.store = store or ConversationStore(
            config.system_prompt, max_questions=config.memory.max_questions
        )
        self.renderer = renderer or RecordingRenderer()
        self.builder = builder or RequestBuilder(summary_window=config.memory.summary_window)
        self._client = client
        self._owns_client = client is None
        self._placeholder_ids = itertools.count(1)
        self._live_placeholders: Set[int] = set()
        self.state = ExchangeState.IDLE
        self.submit_enabled = True

    async def __aenter__(self) -> "ExchangeController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    def start(self) -> None:
        """Show an empty window with the greeting."""

        self.renderer.render(ClearWindow())
        self.renderer.render(ShowMessage(sender="ai", text=self.config.greeting))

    def clear(self, confirm: Callable[[str], bool] | None = None) -> bool:
        """Reset the conversation after the user confirms.

        Requests already in flight keep running; their results are folded
        into the fresh store but no longer rendered.
        """

        if confirm is not None and not confirm(CLEAR_CONFIRMATION):
            return False
        self.store.reset()
        self._live_placeholders.clear()
        self.start()
        logger.info("Conversation cleared")
        return True

    async def submit(self, text: str) -> ExchangeOutcome:
        self.state = ExchangeState.VALIDATING
        text = (text or "").strip()
        if not text:
            self.state = ExchangeState.IDLE
            return ExchangeOutcome(state=ExchangeState.IDLE)

        self.renderer.render(ShowMessage(sender="user", text=text))
        name = detect_name(text)
        if name is not None:
            return self._acknowledge(name)

        self._enter_pending(text)
        placeholder = next(self._placeholder_ids)
        self._live_placeholders.add(placeholder)
        self.renderer.render(ShowPlaceholder(placeholder_id=placeholder, text=PLACEHOLDER_TEXT))
        self._set_submit(False)
        try:
            try:
                reply = await self._exchange()
            except ExchangeError as exc:
                self.state = ExchangeState.FAILED
                logger.warning("Exchange failed: {}", exc)
                self._show_result(placeholder, exc.user_message)
                return ExchangeOutcome(state=ExchangeState.FAILED, error=exc)

            self.state = ExchangeState.RESOLVED
            self.store.append_assistant(reply)
            self._show_result(placeholder, reply)
            logger.info("Exchange resolved with {} chars", len(reply))
            return ExchangeOutcome(state=ExchangeState.RESOLVED, reply=reply)
        finally:
            self._set_submit(True)
            self.state = ExchangeState.IDLE

    def _acknowledge(self, name: str) -> ExchangeOutcome:
        self.state = ExchangeState.LOCAL_ACK
        ack = self.store.record_name(name)
        self.renderer.render(ShowMessage(sender="ai", text=ack))
        self.state = ExchangeState.IDLE
        return ExchangeOutcome(state=ExchangeState.LOCAL_ACK, reply=ack)

    def _enter_pending(self, text: str) -> None:
        self.state = ExchangeState.PENDING
        self.store.append_user(text)
        self.store.record_question(text)
        self.renderer.render(ShowLatestQuestion(text=LATEST_QUESTION_TEMPLATE.format(text=text)))

    async def _exchange(self) -> str:
        endpoint = select_endpoint(self.config)
        messages = self.builder.build(self.store)
        logger.debug("Sending {} messages via {} endpoint", len(messages), endpoint.name)
        response = await endpoint.send(self.client, messages)
        if not response.is_success:
            raise HttpError(response.status_code, response.reason_phrase, response.text)
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(f"invalid JSON in response body ({exc})") from exc
        return extract_reply(data)

    def _show_result(self, placeholder: int, text: str) -> None:
        if placeholder not in self._live_placeholders:
            logger.warning("Placeholder {} was detached before the reply arrived", placeholder)
            return
        self._live_placeholders.discard(placeholder)
        self.renderer.render(ReplacePlaceholder(placeholder_id=placeholder, text=text))

    def _set_submit(self, enabled: bool) -> None:
        self.submit_enabled = enabled
        self.renderer.render(SetSubmitEnabled(enabled=enabled))

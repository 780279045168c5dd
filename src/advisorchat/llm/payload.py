"""Assembles the message list sent to the completion endpoint."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..memory.simple import ConversationStore, Message, SessionMemory

MEMORY_PREFIX = "Conversation memory: "


def memory_summary(memory: SessionMemory, window: int = 5) -> Optional[str]:
    """Return the memory line for the outbound payload, or None when nothing is known."""

    parts: List[str] = []
    if memory.user_name:
        parts.append(f"user_name: {memory.user_name}")
    recent = memory.recent(window)
    if recent:
        parts.append(f"recent_user_questions: {' | '.join(recent)}")
    if not parts:
        return None
    return MEMORY_PREFIX + "; ".join(parts)


def serialize(messages: Iterable[Message]) -> List[Dict[str, str]]:
    return [message.to_dict() for message in messages]


class RequestBuilder:
    """Builds the outbound messages without touching the stored history.

    The memory summary is synthesized fresh on every call and is never
    written back into the store.
    """

    def __init__(self, summary_window: int = 5) -> None:
        self.summary_window = summary_window

    def build(self, store: ConversationStore) -> List[Message]:
        history = store.history
        messages = [history[0]]
        summary = memory_summary(store.memory, self.summary_window)
        if summary:
            messages.append(Message(role="system", content=summary))
        messages.extend(history[1:])
        return messages

"""Conversation history and per-session memory."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..prompts import NAME_ACK_TEMPLATE

ROLES = ("system", "user", "assistant")

NAME_PATTERN = re.compile(r"(?:my name is|i am|i'm|this is)\s+(.+)", re.IGNORECASE)


def detect_name(text: str) -> Optional[str]:
    """Return the declared name if ``text`` is a name statement.

    Anything following the lead-in is taken as the name, so "I am hungry"
    declares the name "hungry".
    """

    match = NAME_PATTERN.fullmatch(text.strip())
    if not match:
        return None
    return match.group(1).strip()


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role '{self.role}'")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class SessionMemory:
    """Known user name plus a bounded list of recent questions."""

    max_questions: int = 20
    user_name: Optional[str] = None
    past_questions: List[str] = field(default_factory=list)

    def remember(self, question: str) -> None:
        self.past_questions.append(question)
        if len(self.past_questions) > self.max_questions:
            self.past_questions = self.past_questions[-self.max_questions :]

    def recent(self, count: int) -> List[str]:
        if count <= 0:
            return []
        return list(self.past_questions[-count:])

    def clear(self) -> None:
        self.user_name = None
        self.past_questions = []


class ConversationStore:
    """Ordered message history that always starts with the system prompt."""

    def __init__(self, system_prompt: str, max_questions: int = 20) -> None:
        self._system = Message(role="system", content=system_prompt)
        self._messages: List[Message] = [self._system]
        self.memory = SessionMemory(max_questions=max_questions)

    @property
    def system_prompt(self) -> Message:
        return self._system

    @property
    def history(self) -> List[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append_user(self, text: str) -> None:
        if not text or not text.strip():
            return
        self._messages.append(Message(role="user", content=text))

    def append_assistant(self, text: str) -> None:
        self._messages.append(Message(role="assistant", content=text))

    def record_name(self, name: str) -> str:
        """Remember the user's name and store the local acknowledgement."""

        self.memory.user_name = name
        ack = NAME_ACK_TEMPLATE.format(name=name)
        self.append_assistant(ack)
        return ack

    def record_question(self, text: str) -> None:
        self.memory.remember(text)

    def reset(self) -> None:
        self._messages = [self._system]
        self.memory.clear()

"""Render instructions emitted by the exchange controller.

The controller never touches a UI directly. Each state transition produces
one of the small values below, and a renderer (terminal, websocket, or the
in-memory recorder used in tests) decides how to show it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, List, Protocol, Set, Union


@dataclass(frozen=True)
class ShowMessage:
    """Append a chat bubble; ``sender`` is "user" or "ai"."""

    kind: ClassVar[str] = "message"

    sender: str
    text: str


@dataclass(frozen=True)
class ShowLatestQuestion:
    """Show (or move) the single "You asked: ..." line."""

    kind: ClassVar[str] = "latest_question"

    text: str


@dataclass(frozen=True)
class ShowPlaceholder:
    kind: ClassVar[str] = "placeholder"

    placeholder_id: int
    text: str


@dataclass(frozen=True)
class ReplacePlaceholder:
    kind: ClassVar[str] = "replace"

    placeholder_id: int
    text: str


@dataclass(frozen=True)
class SetSubmitEnabled:
    kind: ClassVar[str] = "submit"

    enabled: bool


@dataclass(frozen=True)
class ClearWindow:
    kind: ClassVar[str] = "clear"


RenderInstruction = Union[
    ShowMessage,
    ShowLatestQuestion,
    ShowPlaceholder,
    ReplacePlaceholder,
    SetSubmitEnabled,
    ClearWindow,
]


def to_dict(instruction: RenderInstruction) -> Dict[str, Any]:
    """Wire representation used by the websocket widget."""

    payload: Dict[str, Any] = {"type": instruction.kind}
    payload.update(asdict(instruction))
    return payload


class Renderer(Protocol):
    """Anything that can display render instructions."""

    def render(self, instruction: RenderInstruction) -> None:  # pragma: no cover - interface
        """Apply a single instruction."""


@dataclass
class RecordingRenderer:
    """Keeps every instruction in order and tracks attached placeholders."""

    instructions: List[RenderInstruction] = field(default_factory=list)
    attached: Set[int] = field(default_factory=set)
    submit_enabled: bool = True

    def render(self, instruction: RenderInstruction) -> None:
        self.instructions.append(instruction)
        if isinstance(instruction, ShowPlaceholder):
            self.attached.add(instruction.placeholder_id)
        elif isinstance(instruction, ReplacePlaceholder):
            self.attached.discard(instruction.placeholder_id)
        elif isinstance(instruction, ClearWindow):
            self.attached.clear()
        elif isinstance(instruction, SetSubmitEnabled):
            self.submit_enabled = instruction.enabled

    def of_type(self, kind: type) -> List[RenderInstruction]:
        return [item for item in self.instructions if isinstance(item, kind)]


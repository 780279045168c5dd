"""Product advisor chat client."""

from importlib import metadata

from .config import ChatConfig, load_config
from .exchange.controller import ExchangeController, ExchangeOutcome, ExchangeState
from .memory.simple import ConversationStore, Message

try:
    __version__ = metadata.version("advisorchat")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for dev
    __version__ = "0.0.0"

__all__ = [
    "ChatConfig",
    "ConversationStore",
    "ExchangeController",
    "ExchangeOutcome",
    "ExchangeState",
    "Message",
    "load_config",
    "__version__",
]

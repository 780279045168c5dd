"""Conversation state."""

from .simple import ConversationStore, Message, SessionMemory, detect_name

__all__ = ["ConversationStore", "Message", "SessionMemory", "detect_name"]

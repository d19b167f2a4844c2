"""LLM module."""

from .llm_provider import (
    SYSTEM_PROMPT,
    ChatResponder,
    IChatResponder,
    ILLMProvider,
    LLMProvider,
    UnavailableResponder,
)

__all__ = [
    "ILLMProvider",
    "IChatResponder",
    "LLMProvider",
    "ChatResponder",
    "UnavailableResponder",
    "SYSTEM_PROMPT",
]

"""LLM Provider implementation using Anthropic Claude API."""

import os
from typing import Protocol

import anthropic

from ..config import DEFAULT_MODEL
from ..logging_config import get_logger
from ..models import ChatTurn

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "あなたは親切で知識豊富なアシスタントです。日本語で回答してください。"
    "住宅や不動産に関する質問には特に詳しく答えてください。\n\n"
    "重要な注意事項：\n"
    "- マークダウン記法（**太字**、*斜体*、`コード`、#見出し、リストの- や1.など）は一切使用しないでください\n"
    "- 代わりに絵文字を積極的に使用して、読みやすく親しみやすい回答にしてください\n"
    "- 改行と適切な絵文字で情報を整理してください\n"
    "- 箇条書きが必要な場合は絵文字を使って視覚的に分かりやすくしてください"
    "（例：🏠 住宅情報、💰 費用について、など）"
)


class ILLMProvider(Protocol):
    """Abstraction for LLM access."""

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float | None = None,
    ) -> str:
        """Generate completion."""
        ...


class IChatResponder(Protocol):
    """Produces one assistant turn for a chat transcript."""

    async def respond(self, history: list[ChatTurn]) -> str:
        """Return the assistant reply. Raises on failure."""
        ...


class LLMProvider:
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float | None = None,
    ) -> str:
        """Generate completion using Claude API."""
        params: dict = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if system is not None:
            params["system"] = system
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = await self._client.messages.create(**params)
        except Exception as e:
            # Re-raise for handling by caller
            raise RuntimeError(f"LLM API error: {e}") from e

        text = response.content[0].text if response.content else ""
        if not text:
            raise RuntimeError("No content received from LLM API")
        return text

    async def close(self) -> None:
        await self._client.close()


class ChatResponder:
    """Answers chat turns with the PairSpace assistant persona."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        system_prompt: str = SYSTEM_PROMPT,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ):
        self._llm = llm_provider
        self._system_prompt = system_prompt
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def respond(self, history: list[ChatTurn]) -> str:
        messages = [turn.to_dict() for turn in history]
        # The API expects the conversation to open with a user turn; the
        # truncation window can leave an assistant turn first.
        while messages and messages[0]["role"] != "user":
            messages.pop(0)

        logger.info(
            "Calling LLM API",
            extra={"context": {"turns": len(messages)}},
        )
        response = await self._llm.complete(
            messages=messages,
            system=self._system_prompt,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        logger.info("LLM API response received")
        return response


class UnavailableResponder:
    """Stand-in used when no API key is configured; every call fails."""

    def __init__(self, reason: str):
        self._reason = reason

    async def respond(self, history: list[ChatTurn]) -> str:
        raise RuntimeError(self._reason)

"""Conversation state data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

MAX_HISTORY_TURNS = 10
COMPLETED_STEP = 99


class Mode(str, Enum):
    """Which engine handles the next inbound message."""

    DIAGNOSTIC = "diagnostic"
    CHAT = "chat"


@dataclass
class ChatTurn:
    """A single turn in the AI chat transcript."""

    role: Literal["user", "assistant"]
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class DiagnosticAnswers:
    """Answers collected so far by the diagnostic flow."""

    subsidy: bool | None = None
    subsidy_amount: int | None = None  # yen
    rent: str | None = None  # rent band tag, e.g. "rent_high"

    def to_dict(self) -> dict:
        data: dict[str, Any] = {}
        if self.subsidy is not None:
            data["subsidy"] = self.subsidy
        if self.subsidy_amount is not None:
            data["subsidyAmount"] = self.subsidy_amount
        if self.rent is not None:
            data["rent"] = self.rent
        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> "DiagnosticAnswers":
        data = data or {}
        return cls(
            subsidy=data.get("subsidy"),
            subsidy_amount=data.get("subsidyAmount"),
            rent=data.get("rent"),
        )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConversationState:
    """Persistent per-user record of flow mode, diagnostic progress and transcript."""

    mode: Mode = Mode.DIAGNOSTIC
    diagnostic_step: int = 0  # 0..2 active question, 99 completed
    diagnostic_answers: DiagnosticAnswers = field(default_factory=DiagnosticAnswers)
    chat_history: list[ChatTurn] = field(default_factory=list)
    last_activity: str = field(default_factory=_now_iso)

    def reset_diagnostic(self) -> None:
        """Restart the questionnaire from the first question."""
        self.mode = Mode.DIAGNOSTIC
        self.diagnostic_step = 0
        self.diagnostic_answers = DiagnosticAnswers()

    def touch(self) -> None:
        """Stamp last_activity with the current time."""
        self.last_activity = _now_iso()

    def to_dict(self) -> dict:
        """Serialize to the stored JSON shape (camelCase keys)."""
        return {
            "mode": self.mode.value,
            "diagnosticStep": self.diagnostic_step,
            "diagnosticAnswers": self.diagnostic_answers.to_dict(),
            "chatHistory": [turn.to_dict() for turn in self.chat_history],
            "lastActivity": self.last_activity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationState":
        """Deserialize a stored record, filling defaults for missing fields."""
        try:
            mode = Mode(data.get("mode", Mode.DIAGNOSTIC.value))
        except ValueError:
            mode = Mode.DIAGNOSTIC

        history = [
            ChatTurn(role=turn["role"], content=turn["content"])
            for turn in data.get("chatHistory") or []
            if turn.get("role") in ("user", "assistant") and "content" in turn
        ]

        return cls(
            mode=mode,
            diagnostic_step=data.get("diagnosticStep") or 0,
            diagnostic_answers=DiagnosticAnswers.from_dict(data.get("diagnosticAnswers")),
            chat_history=history,
            last_activity=data.get("lastActivity") or _now_iso(),
        )

"""Core data models for the PairSpace bot."""

from .events import (
    EventSource,
    FollowEvent,
    InboundEvent,
    MessageContent,
    MessageEvent,
    PostbackEvent,
    decode_event,
    decode_events,
)
from .replies import ReplyIntent
from .state import (
    COMPLETED_STEP,
    MAX_HISTORY_TURNS,
    ChatTurn,
    ConversationState,
    DiagnosticAnswers,
    Mode,
)
from .tracing import TraceEvent

__all__ = [
    # State
    "Mode",
    "ChatTurn",
    "DiagnosticAnswers",
    "ConversationState",
    "COMPLETED_STEP",
    "MAX_HISTORY_TURNS",
    # Events
    "EventSource",
    "FollowEvent",
    "PostbackEvent",
    "MessageContent",
    "MessageEvent",
    "InboundEvent",
    "decode_event",
    "decode_events",
    # Replies
    "ReplyIntent",
    # Tracing
    "TraceEvent",
]

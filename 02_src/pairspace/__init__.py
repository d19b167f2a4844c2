"""PairSpace LINE bot: housing-subsidy diagnostic with AI chat fallback."""

from .app import Application, IApplication
from .chat import ResponderUnavailableError, append_and_respond, truncate_history
from .config import Settings
from .diagnostic import StepOutcome, advance
from .dispatcher import EventDispatcher
from .llm import ChatResponder, IChatResponder, ILLMProvider, LLMProvider
from .messaging import ILineClient, LineClient, validate_signature
from .models import (
    ChatTurn,
    ConversationState,
    DiagnosticAnswers,
    Mode,
    ReplyIntent,
    TraceEvent,
)
from .storage import IStateStore, IStorage, StateStore, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "Mode",
    "ChatTurn",
    "DiagnosticAnswers",
    "ConversationState",
    "ReplyIntent",
    "TraceEvent",
    # Components
    "IStorage",
    "Storage",
    "IStateStore",
    "StateStore",
    "ITracker",
    "Tracker",
    "ILLMProvider",
    "LLMProvider",
    "IChatResponder",
    "ChatResponder",
    "ILineClient",
    "LineClient",
    "validate_signature",
    "StepOutcome",
    "advance",
    "ResponderUnavailableError",
    "append_and_respond",
    "truncate_history",
    "EventDispatcher",
]

"""Conversation state persistence on top of the key-value storage."""

import json
from typing import Protocol

from ..logging_config import get_logger
from ..models import MAX_HISTORY_TURNS, ConversationState
from .storage import IStorage

logger = get_logger(__name__)

KEY_PREFIX = "user:"


def state_key(user_id: str) -> str:
    """Storage key for a user's conversation state."""
    return f"{KEY_PREFIX}{user_id}"


class IStateStore(Protocol):
    """Typed get/put of ConversationState by user ID."""

    async def get(self, user_id: str) -> ConversationState | None:
        """Return the stored state, or None if the user has never been seen."""
        ...

    async def put(self, user_id: str, state: ConversationState) -> None:
        """Persist the state. Errors propagate to the caller."""
        ...


class StateStore:
    """Stores ConversationState as JSON under "user:<id>" keys."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def get(self, user_id: str) -> ConversationState | None:
        raw = await self._storage.get(state_key(user_id))
        if raw is None:
            return None
        return ConversationState.from_dict(json.loads(raw))

    async def put(self, user_id: str, state: ConversationState) -> None:
        state.touch()
        if len(state.chat_history) > MAX_HISTORY_TURNS:
            state.chat_history = state.chat_history[-MAX_HISTORY_TURNS:]

        logger.debug(
            "Saving user state",
            extra={
                "context": {
                    "user_id": user_id,
                    "mode": state.mode.value,
                    "chat_history": len(state.chat_history),
                }
            },
        )
        await self._storage.put(
            state_key(user_id), json.dumps(state.to_dict(), ensure_ascii=False)
        )


async def load_state(store: IStateStore, user_id: str) -> ConversationState:
    """Load a user's state, synthesizing the default when missing or unreadable."""
    try:
        state = await store.get(user_id)
    except Exception as e:
        logger.error(
            f"Error loading user state for {user_id}: {e}",
            exc_info=True,
        )
        return ConversationState()

    if state is None:
        return ConversationState()

    logger.debug(
        "User state loaded",
        extra={
            "context": {
                "user_id": user_id,
                "mode": state.mode.value,
                "step": state.diagnostic_step,
                "chat_history": len(state.chat_history),
            }
        },
    )
    return state

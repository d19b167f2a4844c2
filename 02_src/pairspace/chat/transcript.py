"""Chat transcript management for the AI chat mode."""

from ..llm import IChatResponder
from ..logging_config import get_logger
from ..models import MAX_HISTORY_TURNS, ChatTurn

logger = get_logger(__name__)


class ResponderUnavailableError(Exception):
    """The AI responder failed; history holds the unanswered user turn."""

    def __init__(self, history: list[ChatTurn], cause: Exception):
        self.history = history
        self.cause = cause
        super().__init__(f"AI responder unavailable: {cause}")


def truncate_history(history: list[ChatTurn], limit: int = MAX_HISTORY_TURNS) -> list[ChatTurn]:
    """Keep only the most recent `limit` turns. Not pair-aware."""
    if len(history) <= limit:
        return list(history)
    logger.debug(f"Trimmed chat history from {len(history)} to {limit} turns")
    return history[-limit:]


async def append_and_respond(
    history: list[ChatTurn],
    user_text: str,
    responder: IChatResponder,
) -> tuple[list[ChatTurn], str]:
    """
    Append the user turn, ask the responder, append its answer.

    Raises:
        ResponderUnavailableError: if the responder call fails. The error
            carries the history with the user turn appended and no
            assistant turn, so the caller can still persist it.
    """
    new_history = [*history, ChatTurn(role="user", content=user_text)]

    try:
        assistant_text = await responder.respond(new_history)
    except Exception as e:
        raise ResponderUnavailableError(truncate_history(new_history), e) from e

    answered = [*new_history, ChatTurn(role="assistant", content=assistant_text)]
    return truncate_history(answered), assistant_text

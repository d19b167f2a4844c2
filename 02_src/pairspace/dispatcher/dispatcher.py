"""Event dispatcher: drives the per-user conversation state machine."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from ..chat import ResponderUnavailableError, append_and_respond
from ..config import DEFAULT_CONSULTATION_URL
from ..diagnostic import (
    advance,
    apply_outcome,
    get_diagnostic_message,
    is_recognized_payload,
    text_message,
)
from ..llm import IChatResponder
from ..logging_config import get_logger
from ..messaging import ILineClient
from ..models import (
    ConversationState,
    FollowEvent,
    MessageEvent,
    Mode,
    PostbackEvent,
    ReplyIntent,
    decode_events,
)
from ..storage import IStateStore, load_state
from ..tracker import EVENT_PROCESSED, FALLBACK_SENT, REPLY_FAILED, ITracker

logger = get_logger(__name__)

RESTART_COMMANDS = frozenset({"診断", "診断開始", "/diagnostic"})

PROCESSING_ERROR_TEXT = "申し訳ありません。処理中にエラーが発生しました。もう一度お試しください。"
SERVICE_UNAVAILABLE_TEXT = (
    "申し訳ありません。一時的にサービスが利用できません。"
    "しばらく時間をおいてから再度お試しください。"
)
CHAT_MODE_GUIDANCE_TEXT = (
    "🤖 診断が完了していません。AIチャットモードに移行しました！\n\n"
    "住宅や不動産について何でもお聞きください。\n\n"
    "診断をやり直したい場合は「診断」と入力してください。"
)

Event = FollowEvent | PostbackEvent | MessageEvent


class _FallbackReply(Exception):
    """A handled failure. State is already persisted; reply with a fixed text."""

    def __init__(self, text: str, cause: Exception):
        self.text = text
        self.cause = cause
        super().__init__(str(cause))


class EventDispatcher:
    """Routes webhook events to the diagnostic engine or the AI chat.

    Events in one batch are processed one at a time; each event does a
    read-modify-write of its user's state before the next event starts.
    """

    def __init__(
        self,
        state_store: IStateStore,
        responder: IChatResponder,
        tracker: ITracker | None = None,
        serialize_users: bool = False,
        consultation_url: str = DEFAULT_CONSULTATION_URL,
    ):
        self._store = state_store
        self._responder = responder
        self._tracker = tracker
        self._serialize_users = serialize_users
        self._consultation_url = consultation_url
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    async def handle_batch(self, raw_events: list[Any], client: ILineClient) -> list[ReplyIntent]:
        """Process a webhook batch, then send every reply concurrently.

        A failed send is logged and does not affect the other replies.
        """
        replies = await self.dispatch(raw_events)
        if not replies:
            return replies

        logger.info(f"Sending {len(replies)} replies")
        results = await asyncio.gather(
            *[client.reply_message(reply.reply_token, reply.messages) for reply in replies],
            return_exceptions=True,
        )

        for reply, result in zip(replies, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to send reply to {reply.user_id}: {result}",
                    exc_info=result,
                )
                await self._track(
                    REPLY_FAILED,
                    {"user_id": reply.user_id, "error": str(result)},
                )

        return replies

    async def dispatch(self, raw_events: list[Any]) -> list[ReplyIntent]:
        """Process events sequentially and collect reply intents. Never raises."""
        replies: list[ReplyIntent] = []

        for event in decode_events(raw_events):
            user_id = event.source.user_id
            if not user_id:
                logger.info(f"Skipping {event.type} event without a user ID")
                continue

            logger.info(f"Processing event: {event.type} for user: {user_id}")

            if self._serialize_users:
                async with self._serialized(user_id):
                    reply = await self._handle_event(event, user_id)
            else:
                reply = await self._handle_event(event, user_id)

            if reply is not None:
                replies.append(reply)

        return replies

    @asynccontextmanager
    async def _serialized(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; drop it once nobody holds or waits for it."""
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._user_locks[user_id]

    async def _handle_event(self, event: Event, user_id: str) -> ReplyIntent | None:
        try:
            if isinstance(event, FollowEvent):
                messages = await self._handle_follow(user_id)
            elif isinstance(event, PostbackEvent):
                messages = await self._handle_postback(user_id, event.postback.data)
            else:
                messages = await self._handle_message(user_id, event.text)
        except _FallbackReply as e:
            return await self._fallback(event, user_id, e.text, e.cause)
        except Exception as e:
            logger.error(
                f"Error processing {event.type} event for {user_id}: {e}",
                exc_info=True,
            )
            fallback = (
                SERVICE_UNAVAILABLE_TEXT if isinstance(event, MessageEvent) else PROCESSING_ERROR_TEXT
            )
            return await self._fallback(event, user_id, fallback, e)

        if messages is None:
            return None

        await self._track(EVENT_PROCESSED, {"user_id": user_id, "event_type": event.type})
        return ReplyIntent(event.reply_token, messages, user_id)

    async def _fallback(
        self, event: Event, user_id: str, text: str, cause: Exception
    ) -> ReplyIntent:
        await self._track(
            FALLBACK_SENT,
            {"user_id": user_id, "event_type": event.type, "error": str(cause)},
        )
        return ReplyIntent(event.reply_token, [text_message(text)], user_id)

    async def _restart(self, user_id: str, state: ConversationState) -> list[dict]:
        state.reset_diagnostic()
        await self._store.put(user_id, state)
        return [get_diagnostic_message(0)]

    async def _handle_follow(self, user_id: str) -> list[dict]:
        logger.info(f"User {user_id} followed, starting diagnostic flow")
        state = await load_state(self._store, user_id)
        return await self._restart(user_id, state)

    async def _handle_postback(self, user_id: str, data: str) -> list[dict]:
        state = await load_state(self._store, user_id)
        logger.info(f"Postback received: {data}")

        failure: Exception | None = None
        try:
            if not is_recognized_payload(state.diagnostic_step or 0, data):
                logger.warning(
                    "Unrecognized postback data, no answer recorded",
                    extra={"context": {"user_id": user_id, "step": state.diagnostic_step, "data": data}},
                )
            outcome = advance(
                state.diagnostic_step,
                state.diagnostic_answers,
                data or None,
                consultation_url=self._consultation_url,
            )
            apply_outcome(state, outcome)
            messages = [outcome.message]
        except Exception as e:
            logger.error(f"Error processing diagnostic flow for {user_id}: {e}", exc_info=True)
            failure = e

        # Persist whatever changed before the failure.
        await self._store.put(user_id, state)
        if failure is not None:
            raise _FallbackReply(PROCESSING_ERROR_TEXT, failure) from failure
        return messages

    async def _handle_message(self, user_id: str, text: str | None) -> list[dict] | None:
        if not text:
            logger.info("Received empty or non-text message, skipping")
            return None

        state = await load_state(self._store, user_id)

        if text.strip() in RESTART_COMMANDS:
            logger.info(f"Restarting diagnostic flow by command for {user_id}")
            return await self._restart(user_id, state)

        if state.mode == Mode.DIAGNOSTIC:
            state.mode = Mode.CHAT
            await self._store.put(user_id, state)
            return [text_message(CHAT_MODE_GUIDANCE_TEXT)]

        try:
            history, answer = await append_and_respond(state.chat_history, text, self._responder)
        except ResponderUnavailableError as e:
            logger.error(f"AI chat failed for {user_id}: {e.cause}", exc_info=e.cause)
            state.chat_history = e.history
            await self._store.put(user_id, state)
            raise _FallbackReply(SERVICE_UNAVAILABLE_TEXT, e.cause) from e

        state.chat_history = history
        await self._store.put(user_id, state)
        logger.info(f"Response generated: {answer[:100]}")
        return [text_message(answer)]

    async def _track(self, event_type: str, data: dict) -> None:
        if self._tracker is not None:
            await self._tracker.track(event_type=event_type, actor="dispatcher", data=data)

"""Inbound LINE webhook event models."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..logging_config import get_logger

logger = get_logger(__name__)


class EventSource(BaseModel):
    """Where an event came from. Group and room sources may omit userId."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = "user"
    user_id: str | None = Field(default=None, alias="userId")


class _BaseEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    reply_token: str = Field(alias="replyToken")
    source: EventSource
    timestamp: int | None = None


class FollowEvent(_BaseEvent):
    """User added the bot as a friend (or unblocked it)."""

    type: Literal["follow"]


class PostbackData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: str = ""


class PostbackEvent(_BaseEvent):
    """User tapped a button or quick reply carrying a data tag."""

    type: Literal["postback"]
    postback: PostbackData


class MessageContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str
    text: str | None = None


class MessageEvent(_BaseEvent):
    """User sent a message. Only text messages are handled."""

    type: Literal["message"]
    message: MessageContent

    @property
    def text(self) -> str | None:
        if self.message.type != "text":
            return None
        return self.message.text


InboundEvent = Annotated[
    Union[FollowEvent, PostbackEvent, MessageEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(InboundEvent)


def decode_event(raw: Any) -> FollowEvent | PostbackEvent | MessageEvent | None:
    """Decode one raw webhook event. Unknown or malformed events yield None."""
    try:
        return _event_adapter.validate_python(raw)
    except ValidationError as e:
        event_type = raw.get("type") if isinstance(raw, dict) else None
        logger.info(
            "Ignoring unsupported webhook event",
            extra={"context": {"event_type": event_type, "errors": e.error_count()}},
        )
        return None


def decode_events(raw_events: list[Any]) -> list[FollowEvent | PostbackEvent | MessageEvent]:
    """Decode a batch, dropping anything that is not a supported event."""
    decoded = []
    for raw in raw_events:
        event = decode_event(raw)
        if event is not None:
            decoded.append(event)
    return decoded

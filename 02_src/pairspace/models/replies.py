"""Outbound reply data models."""

from dataclasses import dataclass, field


@dataclass
class ReplyIntent:
    """One reply to send back through the messaging platform."""

    reply_token: str
    messages: list[dict] = field(default_factory=list)  # LINE message objects
    user_id: str | None = None

"""LINE Messaging API client and webhook signature validation."""

import base64
import hashlib
import hmac
from typing import Protocol

import httpx

from ..config import LINE_API_BASE_URL
from ..logging_config import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "x-line-signature"


class LineAPIError(Exception):
    """Non-success response from the LINE Messaging API."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"LINE API error {status_code}: {body[:200]}")


def compute_signature(body: bytes, channel_secret: str) -> str:
    """base64(HMAC-SHA256(channel_secret, body)), as sent in x-line-signature."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def validate_signature(body: bytes, channel_secret: str | None, signature: str | None) -> bool:
    """Check x-line-signature against the raw request body."""
    if not signature or not channel_secret:
        return False
    expected = compute_signature(body, channel_secret).encode("ascii")
    # Header values may carry arbitrary bytes; compare as bytes.
    return hmac.compare_digest(expected, signature.encode("utf-8", "surrogateescape"))


class ILineClient(Protocol):
    """Delivers replies to the messaging platform."""

    async def reply_message(self, reply_token: str, messages: list[dict]) -> None:
        """Send messages in reply to the event that issued reply_token."""
        ...


class LineClient:
    """Async LINE Messaging API client (reply endpoint only)."""

    def __init__(
        self,
        channel_access_token: str | None,
        base_url: str = LINE_API_BASE_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._token = channel_access_token
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def reply_message(self, reply_token: str, messages: list[dict]) -> None:
        response = await self._client.post(
            "/v2/bot/message/reply",
            json={"replyToken": reply_token, "messages": messages},
            headers={"Authorization": f"Bearer {self._token or ''}"},
        )
        if response.status_code >= 400:
            raise LineAPIError(response.status_code, response.text)

    async def aclose(self) -> None:
        await self._client.aclose()

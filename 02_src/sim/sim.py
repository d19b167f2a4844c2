"""SIM - replays a scripted LINE conversation against a running webhook."""

import asyncio
import json
import os
import time
import uuid
from typing import Protocol

import httpx

from pairspace.logging_config import get_logger
from pairspace.messaging import SIGNATURE_HEADER, compute_signature

logger = get_logger(__name__)

# (kind, value) steps walked by every virtual user
DEFAULT_SCENARIO: list[tuple[str, str]] = [
    ("follow", ""),
    ("postback", "subsidy_yes"),
    ("postback", "amount_medium"),
    ("postback", "rent_high"),
    ("text", "初期費用はどれくらいかかりますか？"),
    ("text", "診断"),
]


class ISim(Protocol):
    """Generate webhook traffic for manual testing."""

    async def run(self) -> int:
        """Send the scenario, return the number of accepted deliveries."""
        ...


def build_event(kind: str, value: str, user_id: str) -> dict:
    """Build a single LINE webhook event for a user."""
    event: dict = {
        "type": "message" if kind == "text" else kind,
        "replyToken": uuid.uuid4().hex,
        "source": {"type": "user", "userId": user_id},
        "timestamp": int(time.time() * 1000),
    }
    if kind == "postback":
        event["postback"] = {"data": value}
    elif kind == "text":
        event["message"] = {"id": uuid.uuid4().hex[:12], "type": "text", "text": value}
    return event


class Sim:
    """Posts signed webhook deliveries that walk the diagnostic and chat."""

    def __init__(
        self,
        channel_secret: str,
        api_url: str = "http://localhost:8000",
        user_ids: list[str] | None = None,
        scenario: list[tuple[str, str]] | None = None,
        delay: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ):
        self._channel_secret = channel_secret
        self._api_url = api_url
        self._user_ids = user_ids or ["Usim0001", "Usim0002"]
        self._scenario = scenario or DEFAULT_SCENARIO
        self._delay = delay
        self._client = client

    async def run(self) -> int:
        """Send the scenario for every virtual user."""
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(base_url=self._api_url, timeout=10.0)
        accepted = 0

        try:
            for kind, value in self._scenario:
                events = [build_event(kind, value, user_id) for user_id in self._user_ids]
                if await self._send(client, events):
                    accepted += 1
                if self._delay:
                    await asyncio.sleep(self._delay)
        finally:
            if owns_client:
                await client.aclose()

        logger.info(f"SIM: {accepted}/{len(self._scenario)} deliveries accepted")
        return accepted

    async def _send(self, client: httpx.AsyncClient, events: list[dict]) -> bool:
        body = json.dumps({"destination": "Usim", "events": events}, ensure_ascii=False).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: compute_signature(body, self._channel_secret),
        }

        try:
            response = await client.post("/webhook", content=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"SIM: Failed to send delivery: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"SIM: Webhook returned {response.status_code}: {response.text}")
            return False

        logger.info(f"SIM: Delivered {events[0]['type']} for {len(events)} users")
        return True


def main() -> None:
    """Run the default scenario against a local server."""
    from dotenv import load_dotenv

    from pairspace.config import PROJECT_ROOT
    from pairspace.logging_config import setup_logging

    load_dotenv(PROJECT_ROOT / ".env")
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    secret = os.getenv("LINE_CHANNEL_SECRET")
    if not secret:
        raise SystemExit("LINE_CHANNEL_SECRET is required to sign deliveries")

    port = os.getenv("API_PORT", "8000")
    host = os.getenv("API_HOST", "localhost")
    asyncio.run(Sim(secret, api_url=f"http://{host}:{port}").run())


if __name__ == "__main__":
    main()

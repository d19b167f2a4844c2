"""LINE webhook route."""

import json

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from ...app import IApplication
from ...logging_config import get_logger
from ...messaging import SIGNATURE_HEADER, validate_signature

logger = get_logger(__name__)


class StatusResponse(BaseModel):
    """Response model for an acknowledged webhook delivery."""

    status: str


def create_webhook_router(app: IApplication) -> APIRouter:
    """Create webhook router."""
    router = APIRouter(tags=["webhook"])

    @router.post(
        "/webhook",
        response_model=StatusResponse,
        responses={400: {"description": "Missing or invalid signature"}},
    )
    async def webhook(request: Request):
        """Receive a batch of LINE events. Always 200 once the signature is valid."""
        body = await request.body()
        signature = request.headers.get(SIGNATURE_HEADER)

        if not validate_signature(body, app.settings.line_channel_secret, signature):
            logger.error("Invalid signature")
            return PlainTextResponse("Bad signature", status_code=400)

        try:
            payload = json.loads(body)
        except ValueError:
            logger.error("Webhook body is not valid JSON")
            return PlainTextResponse("Bad request", status_code=400)

        events = payload.get("events") if isinstance(payload, dict) else None
        if events is None:
            events = []
        if not isinstance(events, list):
            return PlainTextResponse("Bad request", status_code=400)

        logger.info(f"Webhook received and validated: {len(events)} events")
        await app.dispatcher.handle_batch(events, app.line_client)

        return {"status": "ok"}

    return router

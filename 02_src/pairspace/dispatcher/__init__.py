"""Dispatcher module."""

from .dispatcher import (
    CHAT_MODE_GUIDANCE_TEXT,
    PROCESSING_ERROR_TEXT,
    RESTART_COMMANDS,
    SERVICE_UNAVAILABLE_TEXT,
    EventDispatcher,
)

__all__ = [
    "EventDispatcher",
    "RESTART_COMMANDS",
    "PROCESSING_ERROR_TEXT",
    "SERVICE_UNAVAILABLE_TEXT",
    "CHAT_MODE_GUIDANCE_TEXT",
]

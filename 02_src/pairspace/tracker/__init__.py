"""Tracker module."""

from .tracker import EVENT_PROCESSED, FALLBACK_SENT, REPLY_FAILED, ITracker, Tracker

__all__ = ["ITracker", "Tracker", "EVENT_PROCESSED", "FALLBACK_SENT", "REPLY_FAILED"]

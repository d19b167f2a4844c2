"""Webhook traffic simulator."""

from .sim import DEFAULT_SCENARIO, Sim, build_event

__all__ = ["DEFAULT_SCENARIO", "Sim", "build_event"]

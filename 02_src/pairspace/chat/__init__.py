"""Chat module."""

from .transcript import ResponderUnavailableError, append_and_respond, truncate_history

__all__ = ["ResponderUnavailableError", "append_and_respond", "truncate_history"]

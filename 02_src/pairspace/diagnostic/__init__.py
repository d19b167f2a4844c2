"""Diagnostic questionnaire module."""

from .flow import (
    RENT_LABELS,
    SUBSIDY_AMOUNTS,
    StepOutcome,
    advance,
    apply_outcome,
    calculate_subsidy,
    get_rent_label,
    is_recognized_payload,
)
from .messages import (
    RESTART_PAYLOAD,
    create_quick_reply,
    create_result_flex,
    get_diagnostic_message,
    text_message,
)

__all__ = [
    "StepOutcome",
    "advance",
    "apply_outcome",
    "calculate_subsidy",
    "get_rent_label",
    "is_recognized_payload",
    "RENT_LABELS",
    "SUBSIDY_AMOUNTS",
    "RESTART_PAYLOAD",
    "create_quick_reply",
    "create_result_flex",
    "get_diagnostic_message",
    "text_message",
]

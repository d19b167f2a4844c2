"""Diagnostic step engine.

A pure function over (step, answers, payload). It performs no I/O; the
dispatcher applies the outcome to the stored conversation state.
"""

from dataclasses import dataclass, replace

from ..config import DEFAULT_CONSULTATION_URL
from ..models import COMPLETED_STEP, ConversationState, DiagnosticAnswers, Mode
from .messages import (
    RESTART_PAYLOAD,
    SUBSIDY_YES,
    create_result_flex,
    get_diagnostic_message,
)

LAST_QUESTION_STEP = 2

SUBSIDY_AMOUNTS = {
    "amount_high": 50000,
    "amount_medium": 30000,
    "amount_low": 10000,
}

RENT_LABELS = {
    "rent_low": "10-13万円",
    "rent_medium": "13-16万円",
    "rent_high": "16万円以上",
}
RENT_UNSET_LABEL = "未設定"

KNOWN_PAYLOADS = {
    0: {SUBSIDY_YES, "subsidy_no"},
    1: set(SUBSIDY_AMOUNTS),
    2: set(RENT_LABELS),
}


@dataclass
class StepOutcome:
    """Result of advancing the diagnostic flow by one answer."""

    message: dict  # LINE message to reply with
    answers: DiagnosticAnswers
    step: int
    mode: Mode | None = None  # None leaves the current mode untouched

    @property
    def completed(self) -> bool:
        return self.step == COMPLETED_STEP


def calculate_subsidy(answers: DiagnosticAnswers) -> int:
    """Displayed subsidy: the chosen amount if the company has a subsidy, else 0."""
    if not answers.subsidy:
        return 0
    return answers.subsidy_amount or 0


def get_rent_label(rent: str | None) -> str:
    return RENT_LABELS.get(rent or "", RENT_UNSET_LABEL)


def is_recognized_payload(step: int, payload: str | None) -> bool:
    """Whether payload is one of the tags offered at this step."""
    if payload == RESTART_PAYLOAD:
        return True
    return payload in KNOWN_PAYLOADS.get(step, set())


def _record_answer(step: int, answers: DiagnosticAnswers, payload: str) -> DiagnosticAnswers:
    if step == 0:
        return replace(answers, subsidy=payload == SUBSIDY_YES)
    if step == 1:
        return replace(answers, subsidy_amount=SUBSIDY_AMOUNTS.get(payload, 0))
    if step == 2:
        return replace(answers, rent=payload)
    return answers


def advance(
    current_step: int | None,
    current_answers: DiagnosticAnswers | None,
    payload: str | None,
    consultation_url: str = DEFAULT_CONSULTATION_URL,
) -> StepOutcome:
    """
    Record the answer for the current step and move to the next one.

    Args:
        current_step: Step the user is on. None is treated as 0.
        current_answers: Answers collected so far.
        payload: Postback data tag, or None when there is no answer.
        consultation_url: Booking link shown on the result card.

    Returns:
        StepOutcome with the next prompt (or the result card once the last
        question is answered), the updated answers and the next step.
    """
    if payload == RESTART_PAYLOAD:
        return StepOutcome(
            message=get_diagnostic_message(0),
            answers=DiagnosticAnswers(),
            step=0,
            mode=Mode.DIAGNOSTIC,
        )

    step = current_step or 0
    answers = replace(current_answers) if current_answers else DiagnosticAnswers()

    if payload:
        answers = _record_answer(step, answers, payload)

    next_step = step + 1
    if next_step <= LAST_QUESTION_STEP:
        return StepOutcome(
            message=get_diagnostic_message(next_step),
            answers=answers,
            step=next_step,
        )

    return StepOutcome(
        message=create_result_flex(
            calculate_subsidy(answers),
            get_rent_label(answers.rent),
            consultation_url=consultation_url,
        ),
        answers=answers,
        step=COMPLETED_STEP,
        mode=Mode.CHAT,
    )


def apply_outcome(state: ConversationState, outcome: StepOutcome) -> None:
    """Write a StepOutcome back onto a conversation state."""
    state.diagnostic_step = outcome.step
    state.diagnostic_answers = outcome.answers
    if outcome.mode is not None:
        state.mode = outcome.mode

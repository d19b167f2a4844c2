"""Tests for the diagnostic step engine."""

import pytest

from pairspace.diagnostic import (
    RESTART_PAYLOAD,
    advance,
    apply_outcome,
    calculate_subsidy,
    create_result_flex,
    get_diagnostic_message,
    get_rent_label,
    is_recognized_payload,
)
from pairspace.models import ConversationState, DiagnosticAnswers, Mode


def _body_texts(flex: dict) -> list[str]:
    return [c.get("text") for c in flex["contents"]["body"]["contents"] if c["type"] == "text"]


class TestAdvanceSteps:
    """Tests for advance() step by step."""

    def test_step0_subsidy_yes(self):
        outcome = advance(0, DiagnosticAnswers(), "subsidy_yes")
        assert outcome.step == 1
        assert outcome.answers.subsidy is True
        assert outcome.message == get_diagnostic_message(1)
        assert outcome.mode is None

    def test_step0_subsidy_no(self):
        outcome = advance(0, DiagnosticAnswers(), "subsidy_no")
        assert outcome.answers.subsidy is False

    def test_none_step_treated_as_zero(self):
        outcome = advance(None, None, "subsidy_yes")
        assert outcome.step == 1
        assert outcome.answers.subsidy is True

    @pytest.mark.parametrize(
        "payload,amount",
        [("amount_high", 50000), ("amount_medium", 30000), ("amount_low", 10000), ("bogus", 0)],
    )
    def test_step1_amounts(self, payload, amount):
        outcome = advance(1, DiagnosticAnswers(subsidy=True), payload)
        assert outcome.step == 2
        assert outcome.answers.subsidy_amount == amount
        assert outcome.message == get_diagnostic_message(2)

    def test_step2_completes_flow(self):
        answers = DiagnosticAnswers(subsidy=True, subsidy_amount=30000)
        outcome = advance(2, answers, "rent_high")

        assert outcome.step == 99
        assert outcome.completed
        assert outcome.mode == Mode.CHAT
        assert outcome.answers.rent == "rent_high"
        assert outcome.message["type"] == "flex"
        texts = _body_texts(outcome.message)
        assert "💰 家賃補助：最大 ¥30,000" in texts
        assert "🏘️ 希望家賃帯：16万円以上" in texts

    def test_completion_without_subsidy_shows_zero(self):
        answers = DiagnosticAnswers(subsidy=False, subsidy_amount=50000)
        outcome = advance(2, answers, "rent_low")
        assert "💰 家賃補助：最大 ¥0" in _body_texts(outcome.message)

    def test_completion_with_unknown_rent_shows_unset(self):
        outcome = advance(2, DiagnosticAnswers(subsidy=True, subsidy_amount=10000), "rent_weird")
        assert outcome.answers.rent == "rent_weird"
        assert "🏘️ 希望家賃帯：未設定" in _body_texts(outcome.message)

    def test_no_payload_still_advances(self):
        outcome = advance(0, DiagnosticAnswers(), None)
        assert outcome.step == 1
        assert outcome.answers == DiagnosticAnswers()

    def test_advance_does_not_mutate_input(self):
        answers = DiagnosticAnswers()
        advance(0, answers, "subsidy_yes")
        assert answers.subsidy is None

    def test_completed_step_reemits_result(self):
        answers = DiagnosticAnswers(subsidy=True, subsidy_amount=50000, rent="rent_low")
        outcome = advance(99, answers, "subsidy_yes")
        assert outcome.step == 99
        assert outcome.mode == Mode.CHAT
        assert outcome.answers == answers

    def test_full_walkthrough(self):
        state = ConversationState()
        for payload in ["subsidy_yes", "amount_high", "rent_medium"]:
            apply_outcome(state, advance(state.diagnostic_step, state.diagnostic_answers, payload))

        assert state.mode == Mode.CHAT
        assert state.diagnostic_step == 99
        assert state.diagnostic_answers == DiagnosticAnswers(
            subsidy=True, subsidy_amount=50000, rent="rent_medium"
        )


class TestRestart:
    """Tests for the restart payload."""

    @pytest.mark.parametrize("step", [0, 1, 2, 99])
    def test_restart_resets_from_any_step(self, step):
        answers = DiagnosticAnswers(subsidy=True, subsidy_amount=50000, rent="rent_high")
        outcome = advance(step, answers, RESTART_PAYLOAD)

        assert outcome.step == 0
        assert outcome.answers == DiagnosticAnswers()
        assert outcome.mode == Mode.DIAGNOSTIC
        assert outcome.message == get_diagnostic_message(0)

    def test_apply_restart_switches_mode_back(self):
        state = ConversationState(mode=Mode.CHAT, diagnostic_step=99)
        apply_outcome(state, advance(99, state.diagnostic_answers, RESTART_PAYLOAD))
        assert state.mode == Mode.DIAGNOSTIC
        assert state.diagnostic_step == 0


class TestHelpers:
    """Tests for result helpers and message builders."""

    def test_calculate_subsidy(self):
        assert calculate_subsidy(DiagnosticAnswers(subsidy=True, subsidy_amount=30000)) == 30000
        assert calculate_subsidy(DiagnosticAnswers(subsidy=True)) == 0
        assert calculate_subsidy(DiagnosticAnswers(subsidy_amount=30000)) == 0

    def test_rent_labels(self):
        assert get_rent_label("rent_low") == "10-13万円"
        assert get_rent_label("rent_medium") == "13-16万円"
        assert get_rent_label("rent_high") == "16万円以上"
        assert get_rent_label(None) == "未設定"

    def test_is_recognized_payload(self):
        assert is_recognized_payload(0, "subsidy_no")
        assert is_recognized_payload(1, "amount_low")
        assert is_recognized_payload(2, "rent_high")
        assert is_recognized_payload(2, RESTART_PAYLOAD)
        assert not is_recognized_payload(0, "amount_low")
        assert not is_recognized_payload(99, "rent_high")

    def test_step_prompts_are_quick_replies(self):
        message = get_diagnostic_message(0)
        items = message["quickReply"]["items"]
        assert [i["action"]["data"] for i in items] == ["subsidy_yes", "subsidy_no"]
        assert [i["action"]["label"] for i in items] == ["はい", "いいえ"]
        assert len(get_diagnostic_message(1)["quickReply"]["items"]) == 3
        assert len(get_diagnostic_message(2)["quickReply"]["items"]) == 3

    def test_message_for_other_steps_is_plain_text(self):
        assert get_diagnostic_message(99) == {"type": "text", "text": "診断が完了しました！🎉"}

    def test_result_flex_footer(self):
        flex = create_result_flex(50000, "16万円以上", consultation_url="https://example.com/book")
        buttons = flex["contents"]["footer"]["contents"]
        assert buttons[0]["action"] == {
            "type": "uri",
            "label": "📞 Zoom無料相談を予約",
            "uri": "https://example.com/book",
        }
        assert buttons[1]["action"]["data"] == RESTART_PAYLOAD
        assert flex["altText"] == "診断結果"

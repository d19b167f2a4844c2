"""LINE message builders for the diagnostic flow."""

from ..config import DEFAULT_CONSULTATION_URL

RESTART_PAYLOAD = "restart_diagnostic"

SUBSIDY_YES = "subsidy_yes"
SUBSIDY_NO = "subsidy_no"

STEP_PROMPTS: dict[int, tuple[str, list[str], list[str]]] = {
    0: (
        "🏠 PairSpace診断にようこそ！\n\nまず、現在の会社で家賃補助制度はありますか？",
        ["はい", "いいえ"],
        [SUBSIDY_YES, SUBSIDY_NO],
    ),
    1: (
        "💰 家賃補助の金額はどのくらいですか？",
        ["5万円以上", "3万円程度", "1万円以下"],
        ["amount_high", "amount_medium", "amount_low"],
    ),
    2: (
        "🏘️ 希望する家賃帯を教えてください",
        ["10-13万円", "13-16万円", "16万円以上"],
        ["rent_low", "rent_medium", "rent_high"],
    ),
}

COMPLETED_TEXT = "診断が完了しました！🎉"


def text_message(text: str) -> dict:
    """Plain LINE text message."""
    return {"type": "text", "text": text}


def create_quick_reply(text: str, labels: list[str], datas: list[str]) -> dict:
    """Text message with postback quick-reply buttons, one per label."""
    return {
        "type": "text",
        "text": text,
        "quickReply": {
            "items": [
                {
                    "type": "action",
                    "action": {"type": "postback", "label": label, "data": data},
                }
                for label, data in zip(labels, datas)
            ]
        },
    }


def get_diagnostic_message(step: int) -> dict:
    """Prompt for an active step, or the completion notice for any other step."""
    if step in STEP_PROMPTS:
        text, labels, datas = STEP_PROMPTS[step]
        return create_quick_reply(text, labels, datas)
    return text_message(COMPLETED_TEXT)


def create_result_flex(
    subsidy: int,
    rent_label: str,
    consultation_url: str = DEFAULT_CONSULTATION_URL,
) -> dict:
    """Flex bubble summarizing the diagnostic result."""
    return {
        "type": "flex",
        "altText": "診断結果",
        "contents": {
            "type": "bubble",
            "header": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "text",
                        "text": "🏠 PairSpace 診断結果",
                        "weight": "bold",
                        "size": "lg",
                        "color": "#1DB446",
                    }
                ],
            },
            "body": {
                "type": "box",
                "layout": "vertical",
                "spacing": "md",
                "contents": [
                    {
                        "type": "text",
                        "text": f"💰 家賃補助：最大 ¥{subsidy:,}",
                        "size": "lg",
                        "weight": "bold",
                    },
                    {
                        "type": "text",
                        "text": f"🏘️ 希望家賃帯：{rent_label}",
                        "size": "md",
                    },
                    {
                        "type": "text",
                        "text": "✨ 実質負担を大幅カットできます！",
                        "size": "md",
                        "color": "#1DB446",
                    },
                    {"type": "separator", "margin": "md"},
                    {
                        "type": "text",
                        "text": "🤖 この後はAIチャットで何でもご質問いただけます！",
                        "size": "sm",
                        "color": "#666666",
                        "wrap": True,
                    },
                ],
            },
            "footer": {
                "type": "box",
                "layout": "vertical",
                "spacing": "sm",
                "contents": [
                    {
                        "type": "button",
                        "style": "primary",
                        "height": "sm",
                        "action": {
                            "type": "uri",
                            "label": "📞 Zoom無料相談を予約",
                            "uri": consultation_url,
                        },
                    },
                    {
                        "type": "button",
                        "style": "secondary",
                        "height": "sm",
                        "action": {
                            "type": "postback",
                            "label": "🔄 診断をやり直す",
                            "data": RESTART_PAYLOAD,
                        },
                    },
                ],
            },
        },
    }

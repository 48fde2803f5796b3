"""Block Kit payloads for standup prompts, forms and thread posts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List

from .models import DailyUpdate

SUBMIT_ACTION_ID = "submit_update"
MODAL_CALLBACK_ID = "standup_modal"

PROMPT_TEXT = "👋 Good morning! Time for your daily standup update."
ACK_TEXT = "✅ Your daily update has been submitted and posted to the notifications channel!"

# (block_id, action_id, label, placeholder, optional)
FORM_FIELDS = (
    ("yesterday_block", "yesterday_input", "📅 What did you accomplish yesterday?",
     "What did you work on yesterday?", False),
    ("today_block", "today_input", "🎯 What will you work on today?",
     "What are you working on today?", False),
    ("blockers_block", "blockers_input", "🚧 Any blockers or challenges?",
     'Any blockers or issues? (type "None" if no blockers)', True),
)


def _plain(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_prompt_blocks() -> List[Dict[str, Any]]:
    return [
        _section("👋 *Good morning!* Time for your daily standup update."),
        _section("Click the button below to submit your update:"),
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": _plain("📝 Submit Daily Update"),
                    "style": "primary",
                    "action_id": SUBMIT_ACTION_ID,
                }
            ],
        },
    ]


def build_update_modal() -> Dict[str, Any]:
    blocks = []
    for block_id, action_id, label, placeholder, optional in FORM_FIELDS:
        blocks.append(
            {
                "type": "input",
                "block_id": block_id,
                "optional": optional,
                "element": {
                    "type": "plain_text_input",
                    "action_id": action_id,
                    "multiline": True,
                    "placeholder": {"type": "plain_text", "text": placeholder},
                },
                "label": {"type": "plain_text", "text": label},
            }
        )
    return {
        "type": "modal",
        "callback_id": MODAL_CALLBACK_ID,
        "title": {"type": "plain_text", "text": "Daily Standup"},
        "submit": {"type": "plain_text", "text": "Submit"},
        "close": {"type": "plain_text", "text": "Cancel"},
        "blocks": blocks,
    }


def extract_form_answers(state_values: Dict[str, Any]) -> Dict[str, str]:
    """Pull the raw (possibly blank) answers out of a modal's ``state.values``."""

    answers: Dict[str, str] = {}
    for block_id, action_id, *_ in FORM_FIELDS:
        value = state_values.get(block_id, {}).get(action_id, {}).get("value")
        answers[block_id.removesuffix("_block")] = value or ""
    return answers


def root_text(date_key: str) -> str:
    return f"Daily Standup Updates - {date_key}"


def build_root_blocks(date_key: str) -> List[Dict[str, Any]]:
    day = date.fromisoformat(date_key)
    return [
        {"type": "header", "text": _plain(f"Update, {day:%b} {day.day}")},
        _section(f"Find all reports for *Update, {day:%b} {day.day}, {day.year}* in the thread. :thread:"),
    ]


def build_update_blocks(update: DailyUpdate, display_name: str) -> List[Dict[str, Any]]:
    submitted: datetime = update.submitted_at
    return [
        {"type": "header", "text": _plain(display_name)},
        _section(f"*Yesterday:*\n{update.yesterday}"),
        _section(f"*Today:*\n{update.today}"),
        _section(f"*Blockers:*\n{update.blockers}"),
        {
            "type": "context",
            "elements": [
                {"type": "mrkdwn", "text": f"_Submitted at {submitted:%b %d, %Y, %H:%M %Z}_"}
            ],
        },
    ]


__all__ = [
    "SUBMIT_ACTION_ID",
    "MODAL_CALLBACK_ID",
    "PROMPT_TEXT",
    "ACK_TEXT",
    "build_prompt_blocks",
    "build_update_modal",
    "extract_form_answers",
    "root_text",
    "build_root_blocks",
    "build_update_blocks",
]

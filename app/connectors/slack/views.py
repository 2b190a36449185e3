"""Analytics Bot — Slack Block Kit views for the setup modal."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from app.models.channel_models import Client

SETUP_CALLBACK_ID = "analytics_setup"
LOADING_CALLBACK_ID = "analytics_setup_loading"

DAY_OPTIONS = ("monday", "tuesday", "wednesday", "thursday", "friday")
TIME_OPTIONS = (
    "08:00", "09:00", "10:00", "11:00", "12:00",
    "14:00", "15:00", "16:00", "17:00",
)

COMMANDS_HELP = (
    "*Available commands:*\n\n"
    "`/analytics report` - send a report now\n"
    "`/analytics <question>` - ask anything about the data\n"
    "`/analytics setup` - change settings"
)


@dataclass
class SetupDefaults:
    """Current selections for a channel that is already configured."""

    client_id: Optional[str] = None
    schedule_day: Optional[str] = None
    schedule_time: Optional[str] = None


@dataclass
class SetupSubmission:
    """Values pulled from a submitted setup modal."""

    channel_id: str
    user_id: str
    client_id: str
    schedule_day: str
    schedule_time: str


def _plain(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text}


def _option(label: str, value: str) -> Dict[str, Any]:
    return {"text": _plain(label), "value": value}


def _select(
    block_id: str,
    action_id: str,
    label: str,
    placeholder: str,
    options: List[Dict[str, Any]],
    initial_value: Optional[str] = None,
) -> Dict[str, Any]:
    element: Dict[str, Any] = {
        "type": "static_select",
        "action_id": action_id,
        "placeholder": _plain(placeholder),
        "options": options,
    }
    if initial_value is not None:
        initial = next((o for o in options if o["value"] == initial_value), None)
        if initial is not None:
            element["initial_option"] = initial
    return {
        "type": "input",
        "block_id": block_id,
        "label": _plain(label),
        "element": element,
    }


def loading_view() -> Dict[str, Any]:
    """Placeholder modal opened while the tenant list loads."""
    return {
        "type": "modal",
        "callback_id": LOADING_CALLBACK_ID,
        "title": _plain("Analytics Setup"),
        "close": _plain("Cancel"),
        "blocks": [
            {"type": "section", "text": {"type": "mrkdwn", "text": "Loading clients..."}}
        ],
    }


def setup_view(
    clients: Sequence[Client],
    channel_id: str,
    user_id: str,
    defaults: Optional[SetupDefaults] = None,
) -> Dict[str, Any]:
    """Full setup form. `defaults` marks the form as an update."""
    is_update = defaults is not None
    current = defaults or SetupDefaults()

    client_options = [_option(c.name, c.id) for c in clients]
    day_options = [_option(d.capitalize(), d) for d in DAY_OPTIONS]
    time_options = [_option(t, t) for t in TIME_OPTIONS]

    intro = (
        "_Update the configuration for this channel._"
        if is_update
        else "_Configure analytics reports for this channel._"
    )

    return {
        "type": "modal",
        "callback_id": SETUP_CALLBACK_ID,
        "title": _plain("Analytics Setup"),
        "submit": _plain("Update" if is_update else "Save"),
        "close": _plain("Cancel"),
        "private_metadata": json.dumps({"channelId": channel_id, "userId": user_id}),
        "blocks": [
            {"type": "section", "text": {"type": "mrkdwn", "text": intro}},
            _select(
                "client_block", "client_select", "Select Client",
                "Choose a client", client_options, current.client_id,
            ),
            _select(
                "day_block", "day_select", "Weekly Report Day",
                "Choose day of week", day_options, current.schedule_day,
            ),
            _select(
                "time_block", "time_select", "Report Time (UK)",
                "Choose time", time_options, current.schedule_time,
            ),
        ],
    }


def parse_setup_submission(view: Dict[str, Any]) -> SetupSubmission:
    """Extract channel, user and selections from a view_submission view.

    Raises KeyError / TypeError / ValueError on a malformed view.
    """
    meta = json.loads(view["private_metadata"])
    values = view["state"]["values"]
    return SetupSubmission(
        channel_id=meta["channelId"],
        user_id=meta.get("userId", ""),
        client_id=values["client_block"]["client_select"]["selected_option"]["value"],
        schedule_day=values["day_block"]["day_select"]["selected_option"]["value"],
        schedule_time=values["time_block"]["time_select"]["selected_option"]["value"],
    )


def confirmation_view(client_name: str, schedule_day: str, schedule_time: str) -> Dict[str, Any]:
    return {
        "type": "modal",
        "title": _plain("Setup Complete"),
        "close": _plain("Done"),
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"*Analytics configured for {client_name}*\n\n"
                        f"Weekly reports will be sent to this channel every "
                        f"{schedule_day.capitalize()} at {schedule_time} UK time."
                    ),
                },
            },
            {"type": "divider"},
            {"type": "section", "text": {"type": "mrkdwn", "text": COMMANDS_HELP}},
        ],
    }


def failure_view(message: str) -> Dict[str, Any]:
    return {
        "type": "modal",
        "title": _plain("Setup Failed"),
        "close": _plain("Close"),
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        "Something went wrong saving the setup. Please try again."
                        f"\n\n_{message}_"
                    ),
                },
            }
        ],
    }

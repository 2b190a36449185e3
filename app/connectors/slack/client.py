"""Analytics Bot — Slack Web API Client.

Covers the four outbound operations the bot needs: open a modal, update a
modal, post a message to a channel, and post to a slash command's
response_url. Web API failures surface as slack_sdk's SlackApiError.
"""

from typing import Any, Callable, Dict, List, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.webhook.async_client import AsyncWebhookClient

from app.config import Settings
from app.core.logging import get_logger

logger = get_logger("slack.client")


class SlackClient:
    """Async wrapper over slack_sdk's web and webhook clients."""

    def __init__(
        self,
        settings: Settings,
        web_client: Optional[AsyncWebClient] = None,
        webhook_factory: Optional[Callable[[str], AsyncWebhookClient]] = None,
    ):
        self.timeout = int(settings.http_timeout_seconds)
        self.web = web_client or AsyncWebClient(
            token=settings.slack_bot_token,
            base_url=f"{settings.slack_api_base.rstrip('/')}/",
            timeout=self.timeout,
        )
        self._webhook_factory = webhook_factory or (
            lambda url: AsyncWebhookClient(url, timeout=self.timeout)
        )

    # ── Views ──

    async def open_view(self, trigger_id: str, view: Dict[str, Any]) -> str:
        """Open a modal and return its view id."""
        try:
            response = await self.web.views_open(trigger_id=trigger_id, view=view)
        except SlackApiError as e:
            logger.error(f"Slack views.open error: {e.response.get('error')}")
            raise
        return response["view"]["id"]

    async def update_view(self, view_id: str, view: Dict[str, Any]) -> None:
        try:
            await self.web.views_update(view_id=view_id, view=view)
        except SlackApiError as e:
            logger.error(f"Slack views.update error: {e.response.get('error')}")
            raise

    # ── Messages ──

    async def post_message(
        self, channel: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None
    ) -> None:
        try:
            await self.web.chat_postMessage(channel=channel, text=text, blocks=blocks or None)
        except SlackApiError as e:
            logger.error(
                f"Slack chat.postMessage error: {e.response.get('error')}",
                extra={"channel_id": channel},
            )
            raise

    async def respond(
        self,
        response_url: str,
        text: str,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        """Post an in-channel reply to a slash command's response_url."""
        webhook = self._webhook_factory(response_url)
        resp = await webhook.send(
            text=text, blocks=blocks or None, response_type="in_channel"
        )
        if resp.status_code != 200:
            logger.error(
                f"response_url post failed ({resp.status_code}): {resp.body}",
                extra={"status_code": resp.status_code},
            )
            raise SlackApiError(f"response_url post failed ({resp.status_code})", resp)

"""Analytics Bot — Channel Setup Flow.

The slash command's trigger_id expires within a few seconds, so a loading
modal is opened first and then replaced with the full form once the tenant
list has been fetched.
"""

import asyncio
import json
import time
from typing import Any, Dict, List, Optional, Tuple

from app.connectors.slack.client import SlackClient
from app.connectors.slack.views import (
    SETUP_CALLBACK_ID,
    SetupDefaults,
    SetupSubmission,
    confirmation_view,
    failure_view,
    loading_view,
    parse_setup_submission,
    setup_view,
)
from app.connectors.supabase.repository import ReportRepository
from app.models.channel_models import Client
from app.reporting.pipeline import elapsed_ms
from app.core.logging import get_logger

logger = get_logger("reporting.setup")

# Slack drops a view_submission reply that takes longer than 3s
SUBMIT_TIMEOUT = 2.5


class SetupFlow:
    """Lookup + commit for channel configuration, plus the modal plumbing."""

    def __init__(
        self,
        repository: ReportRepository,
        slack: SlackClient,
        submit_timeout: float = SUBMIT_TIMEOUT,
    ):
        self.repository = repository
        self.slack = slack
        self.submit_timeout = submit_timeout

    # ── Lookup / Commit ──

    async def lookup(self, channel_id: str) -> Tuple[List[Client], Optional[SetupDefaults]]:
        """Active tenants, plus current selections when the channel is configured."""
        clients, existing = await asyncio.gather(
            self.repository.list_active_clients(),
            self.repository.get_binding(channel_id),
        )
        defaults = None
        if existing is not None:
            defaults = SetupDefaults(
                client_id=existing.client_id,
                schedule_day=existing.schedule_day,
                schedule_time=existing.schedule_time,
            )
        return clients, defaults

    async def commit(self, submission: SetupSubmission) -> Optional[Client]:
        """Upsert the binding and return the selected tenant."""
        _, client = await asyncio.gather(
            self.repository.save_binding(
                channel_id=submission.channel_id,
                client_id=submission.client_id,
                schedule_day=submission.schedule_day,
                schedule_time=submission.schedule_time,
                created_by=submission.user_id,
            ),
            self.repository.get_client(submission.client_id),
        )
        return client

    # ── Slack Surfaces ──

    async def open(self, trigger_id: str, channel_id: str, user_id: str) -> None:
        """Open the loading modal, then fill it in. Errors are logged only."""
        t0 = time.monotonic()
        try:
            view_id = await self.slack.open_view(trigger_id, loading_view())
            logger.info(
                f"[setup] views.open: {elapsed_ms(t0)}ms", extra={"channel_id": channel_id}
            )

            clients, defaults = await self.lookup(channel_id)
            logger.info(f"[setup] supabase fetch: {elapsed_ms(t0)}ms ({len(clients)} clients)")

            if not clients:
                logger.error("No active clients found")
                return

            await self.slack.update_view(
                view_id, setup_view(clients, channel_id, user_id, defaults)
            )
            logger.info(f"[setup] TOTAL: {elapsed_ms(t0)}ms", extra={"duration_ms": elapsed_ms(t0)})
        except Exception as e:
            logger.exception(
                f"Error opening setup modal: {e}", extra={"channel_id": channel_id}
            )

    async def handle_interaction(self, raw_payload: str) -> Optional[Dict[str, Any]]:
        """Handle an interactivity payload.

        Returns the response body for a setup submission, or None when the
        payload should just be acknowledged with an empty body.
        """
        try:
            payload = json.loads(raw_payload)
        except (TypeError, ValueError) as e:
            logger.error(f"[interactivity] Invalid payload JSON: {e}")
            return None
        if not isinstance(payload, dict):
            logger.error("[interactivity] Payload is not a JSON object")
            return None

        view = payload.get("view") or {}
        logger.info(
            f"[interactivity] type={payload.get('type')} callback_id={view.get('callback_id')}"
        )
        if payload.get("type") != "view_submission" or view.get("callback_id") != SETUP_CALLBACK_ID:
            logger.info("[interactivity] ignoring, not an analytics_setup submission")
            return None

        try:
            submission = parse_setup_submission(view)
            logger.info(
                f"[interactivity] saving: channel={submission.channel_id} "
                f"client={submission.client_id} day={submission.schedule_day} "
                f"time={submission.schedule_time}"
            )
            client = await asyncio.wait_for(
                self.commit(submission), timeout=self.submit_timeout
            )
            client_name = client.name if client else submission.client_id
            return {
                "response_action": "update",
                "view": confirmation_view(
                    client_name, submission.schedule_day, submission.schedule_time
                ),
            }
        except asyncio.TimeoutError:
            logger.error(
                f"[interactivity] Save timed out after {self.submit_timeout}s",
                extra={"channel_id": submission.channel_id},
            )
            return {
                "response_action": "update",
                "view": failure_view("Timed out waiting for the database"),
            }
        except Exception as e:
            logger.exception(f"[interactivity] Error saving setup: {e}")
            return {"response_action": "update", "view": failure_view(str(e))}

"""Analytics Bot — Slash Command Router.

`/analytics setup`      → setup modal
`/analytics report`     → report with the default question
`/analytics <anything>` → report answering that question

Slack expects an acknowledgment within three seconds, so `acknowledge`
returns the immediate reply and `execute` does the slow work afterwards,
delivering results through the command's response_url.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from app.connectors.slack.client import SlackClient
from app.connectors.supabase.repository import ReportRepository
from app.models.report_models import SlashCommand
from app.reporting.pipeline import ChannelNotConfiguredError, ReportPipeline, elapsed_ms
from app.reporting.setup_flow import SetupFlow
from app.core.logging import get_logger

logger = get_logger("reporting.commands")


class CommandKind(str, Enum):
    SETUP = "setup"
    REPORT = "report"
    QUESTION = "query"


@dataclass(frozen=True)
class RoutedCommand:
    kind: CommandKind
    question: Optional[str] = None


ACK_TEXT = {
    CommandKind.REPORT: "📊 Generating report...",
    CommandKind.QUESTION: "🔍 Pulling your data...",
}

NOT_CONFIGURED_TEXT = {
    CommandKind.REPORT: "This channel is not configured. Run `/analytics setup` first.",
    CommandKind.QUESTION: "❌ This channel is not configured. Run `/analytics setup` to get started.",
}

FAILURE_TEXT = {
    CommandKind.REPORT: "Something went wrong generating the report.",
    CommandKind.QUESTION: "❌ Something went wrong.",
}


def classify(text: str, default_question: str) -> RoutedCommand:
    """Route raw command text. Empty text asks the default question."""
    stripped = (text or "").strip()
    keyword = stripped.lower()
    if keyword == "setup":
        return RoutedCommand(CommandKind.SETUP)
    if keyword == "report":
        return RoutedCommand(CommandKind.REPORT, default_question)
    return RoutedCommand(CommandKind.QUESTION, stripped or default_question)


class CommandRouter:
    """Acknowledges slash commands and runs the follow-up work."""

    def __init__(
        self,
        pipeline: ReportPipeline,
        setup_flow: SetupFlow,
        slack: SlackClient,
        repository: ReportRepository,
        default_question: str,
    ):
        self.pipeline = pipeline
        self.setup_flow = setup_flow
        self.slack = slack
        self.repository = repository
        self.default_question = default_question

    def acknowledge(self, command: SlashCommand) -> tuple[RoutedCommand, Optional[Dict[str, Any]]]:
        """Classify the command and build the synchronous reply.

        A None reply means an empty 200 body (setup opens its own modal).
        """
        routed = classify(command.text, self.default_question)
        if routed.kind is CommandKind.SETUP:
            return routed, None
        return routed, {"response_type": "in_channel", "text": ACK_TEXT[routed.kind]}

    async def execute(self, routed: RoutedCommand, command: SlashCommand) -> None:
        """Run the work behind an acknowledged command. Never raises."""
        if routed.kind is CommandKind.SETUP:
            await self.setup_flow.open(
                command.trigger_id, command.channel_id, command.user_id
            )
            return
        await self.run_report(routed, command)

    async def run_report(self, routed: RoutedCommand, command: SlashCommand) -> None:
        t0 = time.monotonic()
        tag = routed.kind.value
        question = routed.question or self.default_question

        try:
            binding = await self.pipeline.resolve_binding(command.channel_id)
            logger.info(
                f"[{tag}] client: {binding.client_name} ({elapsed_ms(t0)}ms)",
                extra={"channel_id": command.channel_id},
            )

            report = await self.pipeline.build_report(binding, question, tag=tag)
            await self.slack.respond(command.response_url, report.fallback_text, report.blocks)

            if routed.kind is CommandKind.REPORT:
                await self.repository.mark_report_sent(command.channel_id)

            logger.info(
                f"[{tag}] TOTAL: {elapsed_ms(t0)}ms",
                extra={"channel_id": command.channel_id, "duration_ms": elapsed_ms(t0)},
            )

        except ChannelNotConfiguredError:
            logger.info(
                f"[{tag}] channel not configured",
                extra={"channel_id": command.channel_id},
            )
            await self._notify(command.response_url, NOT_CONFIGURED_TEXT[routed.kind])

        except Exception as e:
            logger.exception(
                f"[{tag}] Error: {e}", extra={"channel_id": command.channel_id}
            )
            await self._notify(
                command.response_url,
                f"{FAILURE_TEXT[routed.kind]}\n\n*Error:* {str(e) or type(e).__name__}",
            )

    async def _notify(self, response_url: str, text: str) -> None:
        """Best-effort message to the response_url."""
        try:
            await self.slack.respond(response_url, text)
        except Exception as e:
            logger.error(f"Failed to post to Slack: {e}")

"""Analytics Bot — Service Wiring.

Everything is built once from a Settings instance at startup and stored on
app.state; routes receive it through `get_services`.
"""

from dataclasses import dataclass

from fastapi import Request

from app.ai.base_provider import AIProvider
from app.ai.claude_provider import ClaudeProvider
from app.charts.quickchart import ChartRenderer
from app.config import Settings
from app.connectors.slack.client import SlackClient
from app.connectors.supabase.client import SupabaseClient
from app.connectors.supabase.repository import ReportRepository
from app.reporting.commands import CommandRouter
from app.reporting.dispatcher import ScheduledDispatcher
from app.reporting.pipeline import ReportPipeline
from app.reporting.setup_flow import SetupFlow


@dataclass
class Services:
    settings: Settings
    store: SupabaseClient
    slack: SlackClient
    repository: ReportRepository
    ai: AIProvider
    pipeline: ReportPipeline
    setup_flow: SetupFlow
    commands: CommandRouter
    dispatcher: ScheduledDispatcher

    async def close(self) -> None:
        await self.store.close()


def build_services(settings: Settings) -> Services:
    store = SupabaseClient(settings)
    slack = SlackClient(settings)
    repository = ReportRepository(store)
    ai = ClaudeProvider(settings)
    pipeline = ReportPipeline(repository, ai, ChartRenderer(settings))
    setup_flow = SetupFlow(repository, slack, settings.interaction_timeout_seconds)
    commands = CommandRouter(
        pipeline, setup_flow, slack, repository, settings.default_question
    )
    dispatcher = ScheduledDispatcher(
        repository, pipeline, slack, settings.report_timezone, settings.default_question
    )
    return Services(
        settings=settings,
        store=store,
        slack=slack,
        repository=repository,
        ai=ai,
        pipeline=pipeline,
        setup_flow=setup_flow,
        commands=commands,
        dispatcher=dispatcher,
    )


def get_services(request: Request) -> Services:
    """Dependency — the services built at startup."""
    return request.app.state.services

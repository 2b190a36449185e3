"""Analytics Bot — Report Pipeline.

Runs the shared flow behind every report:
  fetch metrics (concurrently) → analyze → render chart → compose blocks
"""

import asyncio
import time
from typing import Any, Awaitable, List

from app.ai.base_provider import AIProvider
from app.charts.quickchart import ChartRenderer, chart_series
from app.connectors.supabase.repository import ReportRepository
from app.models.channel_models import RecipientBinding
from app.models.report_models import Report, ReportDatasets
from app.reporting.composer import build_report_blocks
from app.core.logging import get_logger

logger = get_logger("reporting.pipeline")


class ChannelNotConfiguredError(Exception):
    """The channel has no active recipient binding."""

    def __init__(self, channel_id: str):
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} is not configured")


async def join_all(*aws: Awaitable[Any]) -> List[Any]:
    """Await every awaitable concurrently.

    The first failure is re-raised and the remaining tasks are cancelled;
    there are no partial results.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class ReportPipeline:
    """fetch → analyze → render → compose for a single recipient binding."""

    def __init__(
        self,
        repository: ReportRepository,
        ai: AIProvider,
        chart: ChartRenderer,
    ):
        self.repository = repository
        self.ai = ai
        self.chart = chart

    async def resolve_binding(self, channel_id: str) -> RecipientBinding:
        binding = await self.repository.get_active_binding(channel_id)
        if binding is None:
            raise ChannelNotConfiguredError(channel_id)
        return binding

    async def fetch_datasets(self, client_id: str) -> ReportDatasets:
        gsc, ga4, attribution = await join_all(
            self.repository.fetch_gsc(client_id),
            self.repository.fetch_ga4(client_id),
            self.repository.fetch_attribution(client_id),
        )
        return ReportDatasets(gsc=gsc, ga4=ga4, attribution=attribution)

    async def build_report(
        self, binding: RecipientBinding, question: str, tag: str = "report"
    ) -> Report:
        t0 = time.monotonic()
        client_name = binding.client_name
        log_extra = {"channel_id": binding.channel_id, "client": client_name}

        datasets = await self.fetch_datasets(binding.client_id)
        logger.info(
            f"[{tag}] data: {elapsed_ms(t0)}ms ({datasets.counts()})", extra=log_extra
        )

        analysis = await self.ai.analyze(
            client_name,
            datasets.gsc,
            datasets.ga4,
            datasets.attribution,
            question,
        )
        logger.info(f"[{tag}] claude: {elapsed_ms(t0)}ms", extra=log_extra)

        chart_url = self.chart.render(chart_series(datasets.ga4))
        blocks = build_report_blocks(client_name, analysis, chart_url)
        return Report(
            client_name=client_name,
            analysis=analysis,
            chart_url=chart_url,
            blocks=blocks,
        )


def elapsed_ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)

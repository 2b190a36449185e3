"""Analytics Bot — Scheduled Report Dispatcher.

Invoked once a minute. Sends the weekly report to every active channel
whose schedule matches the current day and HH:MM in the report timezone.

A failed send is not retried within the same run. With weekly schedules
the next attempt is therefore a week later.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from app.connectors.slack.client import SlackClient
from app.connectors.supabase.repository import ReportRepository
from app.models.channel_models import WEEKDAYS, RecipientBinding
from app.reporting.pipeline import ReportPipeline
from app.core.logging import get_logger

logger = get_logger("reporting.dispatcher")


@dataclass(frozen=True)
class ScheduleSlot:
    """Weekday name and HH:MM at minute resolution."""

    day: str
    time: str


def current_slot(tz_name: str, now: Optional[datetime] = None) -> ScheduleSlot:
    """The schedule slot `now` falls in, evaluated in `tz_name`.

    Naive datetimes are taken as UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz_name))
    return ScheduleSlot(day=WEEKDAYS[local.weekday()], time=local.strftime("%H:%M"))


def is_due(binding: RecipientBinding, slot: ScheduleSlot) -> bool:
    return (
        binding.is_active
        and (binding.schedule_day or "").lower() == slot.day
        and binding.schedule_time == slot.time
    )


class ScheduledDispatcher:
    """Runs the report pipeline for every binding due in the current slot."""

    def __init__(
        self,
        repository: ReportRepository,
        pipeline: ReportPipeline,
        slack: SlackClient,
        tz_name: str,
        question: str,
    ):
        self.repository = repository
        self.pipeline = pipeline
        self.slack = slack
        self.tz_name = tz_name
        self.question = question

    async def due_bindings(self, slot: ScheduleSlot) -> List[RecipientBinding]:
        bindings = await self.repository.due_bindings(slot.day, slot.time)
        return [b for b in bindings if is_due(b, slot)]

    async def run(self, now: Optional[datetime] = None) -> int:
        """Send every due report. Returns the number of channels attempted."""
        slot = current_slot(self.tz_name, now)
        logger.info(f"Checking for reports due: {slot.day} {slot.time}")

        bindings = await self.due_bindings(slot)
        logger.info(f"Found {len(bindings)} channels to report to")

        delivered = 0
        for binding in bindings:
            if await self._send(binding):
                delivered += 1
        if delivered < len(bindings):
            logger.warning(f"{len(bindings) - delivered} of {len(bindings)} scheduled reports failed")
        return len(bindings)

    async def _send(self, binding: RecipientBinding) -> bool:
        log_extra = {"channel_id": binding.channel_id, "client": binding.client_name}
        try:
            report = await self.pipeline.build_report(binding, self.question, tag="scheduled")
            await self.slack.post_message(
                binding.channel_id,
                f"Weekly Analytics Report for {report.client_name}",
                report.blocks,
            )
            await self.repository.mark_report_sent(binding.channel_id)
        except Exception as e:
            logger.exception(
                f"Error sending report to {binding.channel_id}: {e}", extra=log_extra
            )
            return False
        logger.info(
            f"Report sent to {binding.channel_id} ({binding.client_name})", extra=log_extra
        )
        return True

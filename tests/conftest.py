"""
Pytest Configuration and Shared Fixtures

In-memory stand-ins for the store, Claude, QuickChart and Slack so the
report flows can be exercised without network access.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from app.ai.base_provider import AIProvider
from app.models.channel_models import Client, RecipientBinding
from app.reporting.commands import CommandRouter
from app.reporting.dispatcher import ScheduledDispatcher
from app.reporting.pipeline import ReportPipeline
from app.reporting.setup_flow import SetupFlow

DEFAULT_QUESTION = "Give me a weekly performance report"
CHART_URL = "https://quickchart.test/chart?c=x"


# ============================================================================
# Fakes
# ============================================================================

class FakeRepository:
    """Records every call; `fail` maps a method name to the exception it raises."""

    def __init__(self):
        self.bindings: Dict[str, RecipientBinding] = {}
        self.clients: List[Client] = []
        self.gsc: List[dict] = []
        self.ga4: List[dict] = []
        self.attribution: List[dict] = []
        self.fail: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.sent: Dict[str, bool] = {}
        self.saved: List[dict] = []
        self.upserts: Dict[str, List[dict]] = {}
        self.fetch_delay = 0.0

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise self.fail[name]

    def called(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)

    async def get_active_binding(self, channel_id):
        self._record("get_active_binding", channel_id)
        b = self.bindings.get(channel_id)
        return b if b and b.is_active else None

    async def get_binding(self, channel_id):
        self._record("get_binding", channel_id)
        return self.bindings.get(channel_id)

    async def due_bindings(self, day, time):
        self._record("due_bindings", day, time)
        return list(self.bindings.values())

    async def save_binding(self, channel_id, client_id, schedule_day, schedule_time, created_by=None):
        self._record("save_binding", channel_id)
        self.saved.append(
            {
                "channel_id": channel_id,
                "client_id": client_id,
                "schedule_day": schedule_day,
                "schedule_time": schedule_time,
                "created_by": created_by,
            }
        )

    async def mark_report_sent(self, channel_id, sent_at=None):
        self._record("mark_report_sent", channel_id)
        self.sent[channel_id] = True

    async def deactivate_binding(self, channel_id):
        self._record("deactivate_binding", channel_id)

    async def list_active_clients(self):
        self._record("list_active_clients")
        return list(self.clients)

    async def get_client(self, client_id):
        self._record("get_client", client_id)
        return next((c for c in self.clients if c.id == client_id), None)

    async def client_slug_map(self):
        self._record("client_slug_map")
        return {c.slug: c.id for c in self.clients}

    async def fetch_gsc(self, client_id):
        await asyncio.sleep(self.fetch_delay)
        self._record("fetch_gsc", client_id)
        return list(self.gsc)

    async def fetch_ga4(self, client_id):
        await asyncio.sleep(self.fetch_delay)
        self._record("fetch_ga4", client_id)
        return list(self.ga4)

    async def fetch_attribution(self, client_id):
        await asyncio.sleep(self.fetch_delay)
        self._record("fetch_attribution", client_id)
        return list(self.attribution)

    async def upsert_metrics(self, table, rows):
        self._record("upsert_metrics", table)
        self.upserts[table] = list(rows)
        return len(rows)


class FakeAI(AIProvider):
    def __init__(self, text: str = "*SEO*\n- *Clicks:* 800"):
        self.text = text
        self.calls: List[dict] = []
        self.error: Optional[Exception] = None
        self.fail_for: Optional[str] = None

    def is_available(self) -> bool:
        return True

    async def analyze(self, client_name, gsc_data, ga_data, attribution_data, question):
        self.calls.append(
            {
                "client_name": client_name,
                "gsc": gsc_data,
                "ga4": ga_data,
                "attribution": attribution_data,
                "question": question,
            }
        )
        if self.error is not None and self.fail_for in (None, client_name):
            raise self.error
        return self.text


class FakeChart:
    def __init__(self, url: Optional[str] = CHART_URL):
        self.url = url
        self.calls: List[list] = []

    def render(self, series):
        self.calls.append(list(series))
        return self.url


class FakeSlack:
    def __init__(self):
        self.responses: List[dict] = []
        self.messages: List[dict] = []
        self.opened: List[dict] = []
        self.updated: List[dict] = []
        self.respond_error: Optional[Exception] = None
        self.open_error: Optional[Exception] = None

    async def respond(self, response_url, text, blocks=None):
        if self.respond_error is not None:
            raise self.respond_error
        self.responses.append({"url": response_url, "text": text, "blocks": blocks})

    async def post_message(self, channel, text, blocks=None):
        self.messages.append({"channel": channel, "text": text, "blocks": blocks})

    async def open_view(self, trigger_id, view):
        if self.open_error is not None:
            raise self.open_error
        self.opened.append({"trigger_id": trigger_id, "view": view})
        return "V123"

    async def update_view(self, view_id, view):
        self.updated.append({"view_id": view_id, "view": view})


# ============================================================================
# Data Fixtures
# ============================================================================

def make_binding(
    channel_id: str = "C001",
    name: str = "acme",
    client_id: str = "uuid-acme",
    day: Optional[str] = "wednesday",
    time: Optional[str] = "09:00",
    is_active: bool = True,
) -> RecipientBinding:
    return RecipientBinding(
        channel_id=channel_id,
        client_id=client_id,
        is_active=is_active,
        schedule_day=day,
        schedule_time=time,
        client=Client(id=client_id, name=name, slug=name.lower()),
    )


def ga4_rows(days: int) -> List[dict]:
    """Newest-first GA4 rows whose sessions grow over time."""
    rows = []
    for i in range(days):
        day = days - i
        rows.append(
            {
                "event_date": f"2026-10-{day:02d}",
                "sessions": 100 + day * 10,
                "active_users": 50 + day * 5,
                "new_users": 20,
                "engaged_sessions": 60,
                "engagement_rate": 0.6,
            }
        )
    return rows


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def ai():
    return FakeAI()


@pytest.fixture
def chart():
    return FakeChart()


@pytest.fixture
def slack():
    return FakeSlack()


@pytest.fixture
def pipeline(repository, ai, chart):
    return ReportPipeline(repository, ai, chart)


@pytest.fixture
def setup_flow(repository, slack):
    return SetupFlow(repository, slack)


@pytest.fixture
def router(pipeline, setup_flow, slack, repository):
    return CommandRouter(pipeline, setup_flow, slack, repository, DEFAULT_QUESTION)


@pytest.fixture
def dispatcher(repository, pipeline, slack):
    return ScheduledDispatcher(repository, pipeline, slack, "Europe/London", DEFAULT_QUESTION)

"""
Tests for the QuickChart renderer and the Claude provider.
"""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import pytest

from app.ai.base_provider import LLMError
from app.ai.claude_provider import ClaudeProvider, build_user_prompt
from app.charts.quickchart import ChartRenderer, build_chart_config, chart_series
from app.config import Settings

from conftest import ga4_rows


class TestChartSeries:
    def test_keeps_newest_14_in_chronological_order(self):
        rows = ga4_rows(20)
        series = chart_series(rows)
        assert series == list(reversed(rows[:14]))

    def test_drops_undated_rows(self):
        rows = [{"event_date": "2026-10-02", "sessions": 2}, {"event_date": None}, {"event_date": "2026-10-01", "sessions": 1}]
        assert [r["sessions"] for r in chart_series(rows)] == [1, 2]


class TestChartRenderer:
    def test_fewer_than_two_points_renders_nothing(self):
        renderer = ChartRenderer(Settings())
        assert renderer.render([]) is None
        assert renderer.render(ga4_rows(1)) is None

    def test_url_encodes_config(self):
        renderer = ChartRenderer(Settings())
        series = chart_series(ga4_rows(3))

        url = renderer.render(series)

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://quickchart.io/chart"
        query = parse_qs(parsed.query)
        assert query["w"] == ["600"]
        assert query["h"] == ["300"]
        assert query["bkg"] == ["white"]
        config = json.loads(query["c"][0])
        assert config["data"]["labels"] == ["1/10", "2/10", "3/10"]
        assert config["data"]["datasets"][0]["data"] == [110, 120, 130]

    def test_render_is_deterministic(self):
        renderer = ChartRenderer(Settings())
        series = chart_series(ga4_rows(7))
        assert renderer.render(series) == renderer.render(series)

    def test_unparseable_date_keeps_raw_label(self):
        config = build_chart_config([{"event_date": "Oct 1", "sessions": 4}, {"event_date": "2026-10-02", "sessions": 5}])
        assert config["data"]["labels"] == ["Oct 1", "2/10"]
        assert config["data"]["datasets"][0]["data"] == [4, 5]

    def test_missing_counts_plot_as_zero(self):
        config = build_chart_config([{"event_date": "2026-10-01"}, {"event_date": "2026-10-02", "sessions": None}])
        assert config["data"]["datasets"][0]["data"] == [0, 0]
        assert config["data"]["datasets"][1]["data"] == [0, 0]


def _anthropic(text=None, error=None):
    client = MagicMock()
    if error is not None:
        client.messages.create = AsyncMock(side_effect=error)
    else:
        content = [SimpleNamespace(text=text)] if text is not None else []
        client.messages.create = AsyncMock(return_value=SimpleNamespace(content=content))
    return client


class TestClaudeProvider:
    @pytest.mark.asyncio
    async def test_sends_datasets_and_question(self):
        client = _anthropic("*SEO*\n- *Clicks:* 800")
        provider = ClaudeProvider(Settings(claude_model="test-model", claude_max_tokens=123), client=client)

        text = await provider.analyze("Acme", [{"clicks": 1}], [{"sessions": 2}], [{"users": 3}], "How are we doing?")

        assert text == "*SEO*\n- *Clicks:* 800"
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 123
        assert "Acme" in kwargs["system"]
        prompt = kwargs["messages"][0]["content"]
        assert '[{"clicks": 1}]' in prompt
        assert '[{"sessions": 2}]' in prompt
        assert '[{"users": 3}]' in prompt
        assert prompt.endswith("Question: How are we doing?")

    @pytest.mark.asyncio
    async def test_system_prompt_stamped_with_utc_date(self):
        client = _anthropic("ok")
        provider = ClaudeProvider(Settings(), client=client)

        await provider.analyze("Acme", [], [], [], "q")

        system = client.messages.create.call_args.kwargs["system"]
        assert datetime.now(timezone.utc).date().isoformat() in system

    @pytest.mark.asyncio
    async def test_api_error_becomes_llm_error(self):
        provider = ClaudeProvider(Settings(), client=_anthropic(error=RuntimeError("overloaded")))
        with pytest.raises(LLMError, match="overloaded"):
            await provider.analyze("Acme", [], [], [], "q")

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self):
        provider = ClaudeProvider(Settings(), client=_anthropic(text=None))
        with pytest.raises(LLMError):
            await provider.analyze("Acme", [], [], [], "q")

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self):
        provider = ClaudeProvider(Settings(anthropic_api_key=None))
        assert provider.is_available() is False
        with pytest.raises(LLMError, match="not configured"):
            await provider.analyze("Acme", [], [], [], "q")

    def test_user_prompt_sections(self):
        prompt = build_user_prompt("Acme", [], [], [], "Where is traffic from?")
        assert prompt.startswith("Client: Acme")
        assert "Search Console daily data" in prompt
        assert "GA4 daily data" in prompt
        assert "Attribution data" in prompt

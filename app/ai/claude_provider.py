"""Analytics Bot — Anthropic Claude Provider."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from anthropic import AsyncAnthropic

from app.ai.base_provider import AIProvider, LLMError
from app.config import Settings
from app.core.logging import get_logger

logger = get_logger("ai.claude")

SYSTEM_PROMPT = """You are a senior analytics consultant for {client_name}. You have access to their daily Google Analytics (GA4), Google Search Console (GSC), and session attribution data.

Today's date: {today}

COMPARISON RULES
- By default compare this week (Monday to today) with the previous full Monday-Sunday week
- If the user names a period (this month, this quarter), compare with the equivalent previous period
- If a period is incomplete, say so and compare like-for-like days where possible
- Always give exact numbers for both periods and the % change

WHAT TO REPORT
- SEO questions: Search Console metrics only (impressions, clicks, CTR, average position)
- Traffic questions: GA4 metrics only (sessions, active users, new users, engagement rate)
- Channel or source questions: the top sources from the attribution data
- General performance questions: all three sections

FORMATTING
This response is displayed in Slack. Use Slack markup only:
- Bold: *text*, italic: _text_
- No markdown headings. Use a *bold line* as a section header
- Hyphens for bullet points

RESPONSE FORMAT
Section 1 - Data. One metric per bullet: name, raw total, % change, traffic light.
- *Sessions:* 3,000 - Down 15% from last week 🔴
Traffic lights: 🟢 improving, 🟡 flat or mixed, 🔴 declining.
Use *SEO*, *Website Traffic* and *Traffic Attribution* headers when reporting several sections.
Attribution lines use: Source | Medium | Users | % of total (top 5-8 sources, sorted by users).

Section 2 - *Analysis & Recommendations*. One actionable recommendation per bullet with a one-sentence justification drawn from the data.

TONE
- Direct and honest about the numbers; pair bad news with a next step
- No hedging, no filler, no emdashes
- Express changes with the % symbol, never "percentage points"
- If the data does not cover the question, say so directly"""


def build_user_prompt(
    client_name: str,
    gsc_data: List[Dict[str, Any]],
    ga_data: List[Dict[str, Any]],
    attribution_data: List[Dict[str, Any]],
    question: str,
) -> str:
    return (
        f"Client: {client_name}\n\n"
        f"Search Console daily data (most recent first):\n{json.dumps(gsc_data)}\n\n"
        f"GA4 daily data (most recent first):\n{json.dumps(ga_data)}\n\n"
        "Attribution data - sessions by source/medium/campaign (most recent first):\n"
        f"{json.dumps(attribution_data)}\n\n"
        f"Question: {question}"
    )


class ClaudeProvider(AIProvider):
    """Anthropic Claude provider for report analysis."""

    def __init__(self, settings: Settings, client: Optional[AsyncAnthropic] = None):
        self.model = settings.claude_model
        self.max_tokens = settings.claude_max_tokens
        if client is not None:
            self.client = client
        elif settings.anthropic_api_key:
            self.client = AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.llm_timeout_seconds,
            )
        else:
            self.client = None

    def is_available(self) -> bool:
        return self.client is not None

    async def analyze(
        self,
        client_name: str,
        gsc_data: List[Dict[str, Any]],
        ga_data: List[Dict[str, Any]],
        attribution_data: List[Dict[str, Any]],
        question: str,
    ) -> str:
        if not self.is_available():
            raise LLMError("Claude provider not configured")

        system = SYSTEM_PROMPT.format(
            client_name=client_name, today=datetime.now(timezone.utc).date().isoformat()
        )
        user_prompt = build_user_prompt(
            client_name, gsc_data, ga_data, attribution_data, question
        )

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as e:
            logger.error(f"Claude API error: {e}")
            raise LLMError(f"Claude API error: {e}") from e

        if not response.content:
            raise LLMError("Claude API returned no content")
        return response.content[0].text

"""Analytics Bot — Report Pipeline Models."""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel


class SlashCommand(BaseModel):
    """Fields of an inbound Slack slash-command webhook."""

    text: str = ""
    channel_id: str
    user_id: str = ""
    trigger_id: str = ""
    response_url: str = ""


@dataclass
class ReportDatasets:
    """The three metric series fetched for a single report (newest first)."""

    gsc: List[dict] = field(default_factory=list)
    ga4: List[dict] = field(default_factory=list)
    attribution: List[dict] = field(default_factory=list)

    def counts(self) -> str:
        return f"gsc:{len(self.gsc)} ga4:{len(self.ga4)} attr:{len(self.attribution)}"


@dataclass
class Report:
    """A composed report ready for delivery."""

    client_name: str
    analysis: str
    chart_url: Optional[str]
    blocks: List[dict]

    @property
    def fallback_text(self) -> str:
        return f"Analytics report for {self.client_name}"

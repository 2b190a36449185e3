"""Analytics Bot — Tenant & Recipient Binding Models.

Rows read from the `clients` and `slack_channels` tables.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Client(BaseModel):
    """A tenant reports are generated for."""

    id: str
    name: str
    slug: str = ""


class RecipientBinding(BaseModel):
    """Association between a Slack channel and a tenant plus weekly schedule."""

    channel_id: str
    client_id: str
    is_active: bool = True
    schedule_day: Optional[str] = None  # lower-case weekday name
    schedule_time: Optional[str] = None  # "HH:MM" in the report timezone
    last_report_sent: Optional[datetime] = None
    created_by: Optional[str] = None
    client: Optional[Client] = None

    @classmethod
    def from_row(cls, row: dict) -> "RecipientBinding":
        """Build from a PostgREST row with the embedded `clients` resource."""
        data = dict(row)
        embedded = data.pop("clients", None)
        if embedded:
            data["client"] = Client(**embedded)
        return cls(**data)

    @property
    def client_name(self) -> str:
        return self.client.name if self.client else self.client_id

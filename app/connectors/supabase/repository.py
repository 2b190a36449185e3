"""Analytics Bot — Supabase Queries.

Typed reads and writes for recipient bindings, tenants and the three
daily metric tables.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.connectors.supabase.client import SupabaseClient
from app.models.channel_models import Client, RecipientBinding
from app.core.logging import get_logger

logger = get_logger("supabase.repository")

DAILY_LIMIT = 90
ATTRIBUTION_LIMIT = 500

BINDING_SELECT = "channel_id,client_id,is_active,schedule_day,schedule_time,last_report_sent,clients(id,name,slug)"
GSC_FIELDS = "data_date,impressions,clicks,ctr,avg_position"
GA4_FIELDS = "event_date,sessions,active_users,new_users,engaged_sessions,engagement_rate"
ATTRIBUTION_FIELDS = "event_date,event_name,source,medium,campaign,sessions,users"


class ReportRepository:
    """All store access used by the report flows."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    # ── Recipient Bindings ──

    async def get_active_binding(self, channel_id: str) -> Optional[RecipientBinding]:
        rows = await self.client.get(
            "slack_channels",
            {
                "select": BINDING_SELECT,
                "channel_id": f"eq.{channel_id}",
                "is_active": "eq.true",
            },
        )
        return RecipientBinding.from_row(rows[0]) if rows else None

    async def get_binding(self, channel_id: str) -> Optional[RecipientBinding]:
        """Existing binding regardless of activation (used to prefill setup)."""
        rows = await self.client.get(
            "slack_channels",
            {
                "select": "channel_id,client_id,is_active,schedule_day,schedule_time",
                "channel_id": f"eq.{channel_id}",
            },
        )
        return RecipientBinding.from_row(rows[0]) if rows else None

    async def due_bindings(self, day: str, time: str) -> List[RecipientBinding]:
        rows = await self.client.get(
            "slack_channels",
            {
                "select": BINDING_SELECT,
                "schedule_day": f"eq.{day}",
                "schedule_time": f"eq.{time}",
                "is_active": "eq.true",
            },
        )
        return [RecipientBinding.from_row(r) for r in rows]

    async def save_binding(
        self,
        channel_id: str,
        client_id: str,
        schedule_day: str,
        schedule_time: str,
        created_by: Optional[str] = None,
    ) -> None:
        """Idempotent upsert keyed by channel_id. Last write wins."""
        await self.client.upsert(
            "slack_channels",
            {
                "channel_id": channel_id,
                "client_id": client_id,
                "schedule_day": schedule_day,
                "schedule_time": schedule_time,
                "is_active": True,
                "created_by": created_by,
            },
        )

    async def mark_report_sent(
        self, channel_id: str, sent_at: Optional[datetime] = None
    ) -> None:
        sent_at = sent_at or datetime.now(timezone.utc)
        await self.client.patch(
            "slack_channels",
            {"channel_id": f"eq.{channel_id}"},
            {"last_report_sent": sent_at.isoformat()},
        )

    async def deactivate_binding(self, channel_id: str) -> None:
        await self.client.patch(
            "slack_channels",
            {"channel_id": f"eq.{channel_id}"},
            {"is_active": False},
        )
        logger.info(f"Channel {channel_id} deactivated", extra={"channel_id": channel_id})

    # ── Tenants ──

    async def list_active_clients(self) -> List[Client]:
        rows = await self.client.get(
            "clients",
            {"select": "id,name,slug", "status": "eq.active", "order": "name"},
        )
        return [Client(**r) for r in rows]

    async def get_client(self, client_id: str) -> Optional[Client]:
        rows = await self.client.get(
            "clients", {"select": "id,name,slug", "id": f"eq.{client_id}"}
        )
        return Client(**rows[0]) if rows else None

    async def client_slug_map(self) -> Dict[str, str]:
        """slug -> tenant UUID for every tenant."""
        rows = await self.client.get("clients", {"select": "id,slug"})
        return {r["slug"]: r["id"] for r in rows if r.get("slug")}

    # ── Metric Series (newest first) ──

    async def fetch_gsc(self, client_id: str) -> List[Dict[str, Any]]:
        return await self.client.get(
            "analytics_gsc_daily",
            {
                "select": GSC_FIELDS,
                "client_id": f"eq.{client_id}",
                "order": "data_date.desc",
                "limit": str(DAILY_LIMIT),
            },
        )

    async def fetch_ga4(self, client_id: str) -> List[Dict[str, Any]]:
        return await self.client.get(
            "analytics_ga4_daily",
            {
                "select": GA4_FIELDS,
                "client_id": f"eq.{client_id}",
                "order": "event_date.desc",
                "limit": str(DAILY_LIMIT),
            },
        )

    async def fetch_attribution(self, client_id: str) -> List[Dict[str, Any]]:
        return await self.client.get(
            "analytics_attribution_daily",
            {
                "select": ATTRIBUTION_FIELDS,
                "client_id": f"eq.{client_id}",
                "order": "event_date.desc,sessions.desc",
                "limit": str(ATTRIBUTION_LIMIT),
            },
        )

    # ── Metric Upserts ──

    async def upsert_metrics(self, table: str, rows: List[Dict[str, Any]]) -> int:
        return await self.client.upsert_batch(table, rows)

"""Analytics Bot — Metric Sync.

Loads the daily warehouse rollups into the store. Rows arrive keyed by
tenant slug; they are mapped to tenant UUIDs, rows for unknown tenants are
dropped, and each table is upserted in 500-row batches.
"""

from typing import Any, Dict, List

from pydantic import BaseModel

from app.connectors.supabase.repository import ReportRepository
from app.reporting.pipeline import join_all
from app.core.logging import get_logger

logger = get_logger("reporting.sync")

GSC_TABLE = "analytics_gsc_daily"
GA4_TABLE = "analytics_ga4_daily"
ATTRIBUTION_TABLE = "analytics_attribution_daily"

TABLE_COLUMNS = {
    GSC_TABLE: ("data_date", ["impressions", "clicks", "ctr", "avg_position"]),
    GA4_TABLE: (
        "event_date",
        ["sessions", "active_users", "new_users", "engaged_sessions", "engagement_rate"],
    ),
    ATTRIBUTION_TABLE: (
        "event_date",
        ["event_name", "source", "medium", "campaign", "sessions", "users"],
    ),
}


class MetricSyncRequest(BaseModel):
    """Rollup rows exported from the warehouse. `client_id` holds the tenant slug."""

    gsc: List[Dict[str, Any]] = []
    ga4: List[Dict[str, Any]] = []
    attribution: List[Dict[str, Any]] = []


class MetricSyncResult(BaseModel):
    success: bool = True
    gsc: int = 0
    ga4: int = 0
    attribution: int = 0


def _date_value(value: Any) -> Any:
    """Warehouse DATE values may arrive wrapped as {"value": "YYYY-MM-DD"}."""
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


def transform_rows(
    table: str, rows: List[Dict[str, Any]], slug_to_uuid: Dict[str, str]
) -> List[Dict[str, Any]]:
    """Map slug rows onto store rows for `table`."""
    date_column, columns = TABLE_COLUMNS[table]
    out = []
    for row in rows:
        client_uuid = slug_to_uuid.get(row.get("client_id"))
        if not client_uuid:
            continue
        record = {"client_id": client_uuid, date_column: _date_value(row.get(date_column))}
        for column in columns:
            record[column] = row.get(column)
        out.append(record)
    return out


async def sync_metrics(
    repository: ReportRepository, request: MetricSyncRequest
) -> MetricSyncResult:
    slug_to_uuid = await repository.client_slug_map()
    logger.info(f"Loaded {len(slug_to_uuid)} client mappings")

    gsc = transform_rows(GSC_TABLE, request.gsc, slug_to_uuid)
    ga4 = transform_rows(GA4_TABLE, request.ga4, slug_to_uuid)
    attribution = transform_rows(ATTRIBUTION_TABLE, request.attribution, slug_to_uuid)

    await join_all(
        repository.upsert_metrics(GSC_TABLE, gsc),
        repository.upsert_metrics(GA4_TABLE, ga4),
        repository.upsert_metrics(ATTRIBUTION_TABLE, attribution),
    )

    logger.info(
        f"Synced: {len(gsc)} GSC, {len(ga4)} GA4, {len(attribution)} attribution rows"
    )
    return MetricSyncResult(gsc=len(gsc), ga4=len(ga4), attribution=len(attribution))

"""Analytics Bot — Supabase REST Client.

Thin async wrapper over PostgREST: get, upsert (merge on conflict keys),
batched upsert and patch. Retries rate limits and server errors.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings
from app.core.logging import get_logger

logger = get_logger("supabase.client")

RETRY_BASE_DELAY = 2  # seconds
UPSERT_CHUNK_SIZE = 500

CONFLICT_KEYS = {
    "slack_channels": "channel_id",
    "analytics_gsc_daily": "client_id,data_date",
    "analytics_ga4_daily": "client_id,event_date",
    "analytics_attribution_daily": "client_id,event_date,event_name,source,medium,campaign",
}


class SupabaseError(Exception):
    """Raised when the Supabase REST API returns a non-success status."""

    def __init__(self, message: str, status_code: int = 0, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class SupabaseClient:
    """Async HTTP client for the Supabase REST API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ):
        self.base_url = f"{settings.supabase_url.rstrip('/')}/rest/v1"
        self.api_key = settings.supabase_service_key
        self.timeout = settings.http_timeout_seconds
        self.max_retries = max(settings.store_max_retries, 1)
        self.retry_base_delay = retry_base_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Core Request Method ──

    async def _request(
        self,
        method: str,
        table: str,
        params: Dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        """Make a request with retry on 429 / 5xx / transport errors."""
        client = self._get_client()
        headers = {"Prefer": prefer} if prefer else None
        label = f"Supabase {method} {table}"

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = await client.request(
                    method, f"/{table}", params=params, json=json, headers=headers
                )
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(f"{label} request error: {e}. Retrying in {wait}s")
                    await asyncio.sleep(wait)
                    continue
                raise SupabaseError(
                    f"{label} failed after {self.max_retries} attempts: {e}"
                ) from e

            if resp.is_success:
                return resp

            retryable = resp.status_code == 429 or resp.status_code >= 500
            if retryable and attempt < self.max_retries:
                wait = self.retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"{label} returned {resp.status_code}. Retrying in {wait}s "
                    f"(attempt {attempt}/{self.max_retries})",
                    extra={"status_code": resp.status_code},
                )
                await asyncio.sleep(wait)
                continue

            logger.error(
                f"{label} failed ({resp.status_code}): {resp.text}",
                extra={"status_code": resp.status_code},
            )
            raise SupabaseError(
                f"{label} failed ({resp.status_code}): {resp.text}",
                resp.status_code,
                resp.text,
            )

        raise SupabaseError(f"{label}: max retries exhausted")

    # ── Operations ──

    async def get(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """Fetch rows matching PostgREST filter params."""
        resp = await self._request("GET", table, params=params)
        return resp.json()

    async def upsert(self, table: str, rows: Any) -> None:
        """Insert rows, merging on the table's natural key."""
        params = {"on_conflict": CONFLICT_KEYS.get(table, "")}
        await self._request(
            "POST",
            table,
            params=params,
            json=rows,
            prefer="return=minimal,resolution=merge-duplicates",
        )

    async def upsert_batch(
        self, table: str, rows: List[Dict[str, Any]], chunk_size: int = UPSERT_CHUNK_SIZE
    ) -> int:
        """Upsert in fixed-size chunks. Returns the number of rows sent."""
        for i in range(0, len(rows), chunk_size):
            await self.upsert(table, rows[i : i + chunk_size])
        if rows:
            logger.info(f"Upserted {len(rows)} rows into {table}")
        return len(rows)

    async def patch(
        self, table: str, filters: Dict[str, str], fields: Dict[str, Any]
    ) -> None:
        """Update fields on every row matching filters."""
        await self._request(
            "PATCH", table, params=filters, json=fields, prefer="return=minimal"
        )

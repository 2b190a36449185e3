"""Analytics Bot — Scheduler, Sync & Channel Admin Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from app.dependencies import Services, get_services
from app.reporting.metrics_sync import MetricSyncRequest, MetricSyncResult, sync_metrics
from app.core.logging import get_logger

logger = get_logger("api.reports")

router = APIRouter(tags=["Reports"])


def require_token(
    authorization: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> None:
    """Bearer check for internal endpoints; open when no sync_token is set."""
    expected = services.settings.sync_token
    if expected and authorization != f"Bearer {expected}":
        raise HTTPException(status_code=401, detail="Invalid or missing token")


@router.post("/scheduled-reports", dependencies=[Depends(require_token)])
async def scheduled_reports(services: Services = Depends(get_services)):
    """Entry point for the external per-minute scheduler."""
    try:
        sent = await services.dispatcher.run()
        return {"success": True, "sent": sent}
    except Exception as e:
        logger.exception(f"Scheduled reports error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.post(
    "/sync/metrics",
    response_model=MetricSyncResult,
    dependencies=[Depends(require_token)],
)
async def sync_metrics_route(
    request: MetricSyncRequest,
    services: Services = Depends(get_services),
):
    """Upsert daily rollup rows exported from the warehouse."""
    try:
        return await sync_metrics(services.repository, request)
    except Exception as e:
        logger.exception(f"Sync error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "/channels/{channel_id}/deactivate",
    dependencies=[Depends(require_token)],
)
async def deactivate_channel(channel_id: str, services: Services = Depends(get_services)):
    """Stop reports for a channel. The binding is kept, only deactivated."""
    try:
        await services.repository.deactivate_binding(channel_id)
    except Exception as e:
        logger.exception(f"Deactivate failed for {channel_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "channel_id": channel_id}

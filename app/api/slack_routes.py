"""Analytics Bot — Slack Webhook Routes.

Both webhooks always answer 200; failures are reported to the user through
follow-up messages instead of the HTTP status.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Response
from fastapi.responses import JSONResponse

from app.dependencies import Services, get_services
from app.models.report_models import SlashCommand
from app.core.logging import get_logger

logger = get_logger("api.slack")

router = APIRouter(prefix="/slack", tags=["Slack"])


@router.post("/commands")
async def slash_command(
    background_tasks: BackgroundTasks,
    channel_id: str = Form(...),
    text: str = Form(""),
    user_id: str = Form(""),
    trigger_id: str = Form(""),
    response_url: str = Form(""),
    services: Services = Depends(get_services),
):
    """`/analytics` slash command. Acknowledges now, works in the background."""
    command = SlashCommand(
        text=text,
        channel_id=channel_id,
        user_id=user_id,
        trigger_id=trigger_id,
        response_url=response_url,
    )
    routed, ack = services.commands.acknowledge(command)
    logger.info(f"[{routed.kind.value}] ack", extra={"channel_id": channel_id})
    background_tasks.add_task(services.commands.execute, routed, command)

    if ack is None:
        return Response(status_code=200)
    return JSONResponse(ack)


@router.post("/interactivity")
async def interactivity(
    payload: str = Form(""),
    services: Services = Depends(get_services),
):
    """Modal submissions. Anything that is not a setup submission gets an empty 200."""
    logger.info("[interactivity] hit")
    body = await services.setup_flow.handle_interaction(payload)
    if body is None:
        return Response(status_code=200)
    return JSONResponse(body)

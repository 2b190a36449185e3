"""Analytics Bot — FastAPI Application Entry Point.

Slack slash-command bot that reports on Search Console, GA4 and
attribution data with Claude-written analysis.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.dependencies import build_services
from app.scheduler.jobs import start_scheduler, stop_scheduler
from app.api.slack_routes import router as slack_router
from app.api.report_routes import router as report_router
from app.core.logging import get_logger

logger = get_logger("main")


IS_SERVERLESS = bool(
    os.environ.get("K_SERVICE")
    or os.environ.get("VERCEL")
    or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 Analytics Bot starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    services = build_services(settings)
    app.state.services = services
    if not services.ai.is_available():
        logger.error("❌ ANTHROPIC_API_KEY not set, reports will fail")
    if not IS_SERVERLESS:
        start_scheduler(settings, services.dispatcher)
    yield
    if not IS_SERVERLESS:
        stop_scheduler()
    await services.close()
    logger.info("Analytics Bot shut down")


app = FastAPI(
    title="Analytics Bot",
    description="Slack analytics reports: on demand, on a weekly schedule, or as answers to free-text questions.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(slack_router)
app.include_router(report_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "analytics-bot",
        "version": "1.0.0",
    }


# For running with uvicorn directly (development only)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000)

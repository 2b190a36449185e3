"""Analytics Bot — Central Configuration via Pydantic Settings."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Supabase (structured store) ──
    supabase_url: str = ""
    supabase_service_key: str = ""
    store_max_retries: int = 3

    # ── Slack ──
    slack_bot_token: str = ""
    slack_api_base: str = "https://slack.com/api"

    # ── Claude ──
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-haiku-4-5-20251001"
    claude_max_tokens: int = 2000

    # ── QuickChart ──
    quickchart_base_url: str = "https://quickchart.io/chart"
    chart_width: int = 600
    chart_height: int = 300

    # ── Reports ──
    report_timezone: str = "Europe/London"
    default_question: str = "Give me a weekly performance report"

    # ── Timeouts (seconds) ──
    http_timeout_seconds: float = 10.0
    llm_timeout_seconds: float = 60.0
    interaction_timeout_seconds: float = 2.5

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    sync_token: Optional[str] = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

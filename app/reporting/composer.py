"""Analytics Bot — Report Message Composer.

Builds the Block Kit message for a report: header, divider, optional chart
image, then the analysis split into section blocks that respect Slack's
per-block text limit.
"""

from typing import Any, Dict, List, Optional

MAX_BLOCK_TEXT = 3000


def paginate(text: str, limit: int = MAX_BLOCK_TEXT) -> List[str]:
    """Split text into chunks of at most `limit` characters.

    While more than `limit` characters remain, each chunk is cut at the
    last newline in its window if that newline falls past the window's
    midpoint, otherwise hard-cut at `limit`. The newline itself starts the
    next chunk, so joining the chunks gives back `text` exactly.
    """
    if len(text) <= limit:
        return [text]

    chunks = []
    remaining = text
    while remaining:
        chunk = remaining[:limit]
        if len(remaining) > limit:
            last_newline = chunk.rfind("\n")
            if last_newline > limit * 0.5:
                chunk = chunk[:last_newline]
        chunks.append(chunk)
        remaining = remaining[len(chunk):]
    return chunks


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_report_blocks(
    client_name: str,
    analysis: str,
    chart_url: Optional[str] = None,
    limit: int = MAX_BLOCK_TEXT,
) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": f"📊 {client_name} Analytics", "emoji": True},
        },
        {"type": "divider"},
    ]
    if chart_url:
        blocks.append(
            {
                "type": "image",
                "image_url": chart_url,
                "alt_text": f"Daily sessions and users trend for {client_name}",
            }
        )
    blocks.extend(_section(chunk) for chunk in paginate(analysis, limit))
    return blocks

"""Analytics Bot — Abstract AI Provider."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class LLMError(Exception):
    """Raised when the text-generation service fails or returns no text."""


class AIProvider(ABC):
    """Abstract base for report analysis.

    Providers receive the raw metric datasets plus a natural-language
    question and return Slack-formatted prose.
    """

    @abstractmethod
    async def analyze(
        self,
        client_name: str,
        gsc_data: List[Dict[str, Any]],
        ga_data: List[Dict[str, Any]],
        attribution_data: List[Dict[str, Any]],
        question: str,
    ) -> str:
        """Answer `question` about the tenant's data.

        Args:
            client_name: Display name of the tenant.
            gsc_data: Search Console daily rows, newest first.
            ga_data: GA4 daily rows, newest first.
            attribution_data: Attribution rows, newest first.
            question: The user's question or the default report request.

        Returns:
            Analysis text formatted for Slack mrkdwn.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is configured and ready."""
        ...

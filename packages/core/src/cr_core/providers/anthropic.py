from __future__ import annotations

import logging

from cr_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)


class AnthropicReviewer(BaseReviewer):
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3
    TIMEOUT = 120.0

    def __init__(self, api_key: str | None = None, model: str | None = None):
        super().__init__(api_key, model)
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for Claude models. "
                "Install it with: pip install 'cr-review[anthropic]'"
            )
        # Retries happen in _call_with_retry only.
        self.client = anthropic.Anthropic(api_key=api_key, max_retries=0, timeout=self.TIMEOUT) if api_key else None

    def close(self) -> None:
        if self.client is not None:
            self.client.close()

    def _call_api(self, instruction: str) -> str:
        response = self.client.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": instruction}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        if response.stop_reason == "max_tokens":
            logger.warning("%s stopped at %d tokens; the review may be cut short.", self.model, self.MAX_TOKENS)
        return "".join(block.text for block in response.content if block.type == "text")
